# backend/korean_barista/services/sentence_service.py
import json
import logging
import os
import random

from ..core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_GENRE = "daily"
DEFAULT_DIFFICULTY = "sugar-50"

# --- Sentence Bank Loading ---
# Loaded once when the module is first imported.
sentence_bank = {"genres": [], "difficulties": [], "sentences": {}}

if not os.path.exists(settings.SENTENCES_PATH):
    logger.warning(f"Sentence bank not found at {settings.SENTENCES_PATH}. Practice sentences will be unavailable.")
else:
    try:
        with open(settings.SENTENCES_PATH, encoding="utf-8") as f:
            sentence_bank = json.load(f)
        logger.info(f"Loaded sentence bank from {settings.SENTENCES_PATH}")
    except (OSError, ValueError) as e:
        logger.error(f"Error loading sentence bank from {settings.SENTENCES_PATH}: {e}. "
                     "Practice sentences will be unavailable.")

GENRES = sentence_bank.get("genres", [])
DIFFICULTIES = sentence_bank.get("difficulties", [])


def is_valid_menu(genre: str, difficulty: str) -> bool:
    """True when both ids exist in the menu."""
    return (any(g["id"] == genre for g in GENRES)
            and any(d["id"] == difficulty for d in DIFFICULTIES))


def pick_sentence(genre: str, difficulty: str, rng: random.Random = None) -> dict:
    """
    Picks a random practice sentence.

    Unknown genres fall back to 'daily' and unknown difficulties to 'sugar-50',
    so the drill never starts without a sentence.

    Returns:
        dict: {"genre", "difficulty", "sentence": {"kr", "cn", "en"}}
    """
    rng = rng or random
    sentences = sentence_bank.get("sentences", {})

    if genre not in sentences:
        logger.debug(f"Unknown genre '{genre}', falling back to '{DEFAULT_GENRE}'")
        genre = DEFAULT_GENRE
    levels = sentences.get(genre, {})
    if not levels.get(difficulty):
        logger.debug(f"Unknown difficulty '{difficulty}', falling back to '{DEFAULT_DIFFICULTY}'")
        difficulty = DEFAULT_DIFFICULTY

    candidates = levels.get(difficulty, [])
    if not candidates:
        raise RuntimeError("Sentence bank is empty. Check the assets directory.")

    return {"genre": genre, "difficulty": difficulty, "sentence": rng.choice(candidates)}
