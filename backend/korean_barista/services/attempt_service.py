# backend/korean_barista/services/attempt_service.py
from Levenshtein import distance as levenshtein_distance
import logging
import time

from ..models_api import schemas
from . import barista_service
from .store_service import UserStore

logger = logging.getLogger(__name__)

CHARS_PER_WORD = 5.0


def calculate_stats(typed: str, target: str) -> dict:
    """
    Live typing stats: compares the typed text with the target position by position.
    Accuracy is measured over what has been typed so far (100 before the first key).
    """
    correct = 0
    mistakes = 0
    for i, ch in enumerate(typed):
        if i < len(target) and ch == target[i]:
            correct += 1
        else:
            mistakes += 1
    accuracy = round(correct / len(typed) * 100) if typed else 100
    return {"accuracy": accuracy, "mistakes": mistakes}


def calculate_wpm(char_count: int, elapsed_seconds: float) -> int:
    # WPM = (chars / 5) / minutes
    if elapsed_seconds <= 0:
        return 0
    return round((char_count / CHARS_PER_WORD) / (elapsed_seconds / 60.0))


def points_earned(accuracy: float, wpm: float) -> int:
    return round(accuracy / 10) + (5 if wpm > 40 else 0)


def edit_distance(typed: str, target: str) -> int:
    return levenshtein_distance(typed or "", target or "")


def submit_attempt(store: UserStore, attempt: schemas.AttemptRequest) -> schemas.AttemptResponse:
    """
    Finishes one typing attempt: runs the barista analysis, awards points and
    records the history entry plus one mistake record per correction, all in one
    store write.
    """
    if not attempt.input:
        raise ValueError("Nothing was typed. Type the sentence before submitting.")
    if not attempt.target:
        raise ValueError("The target sentence is empty.")

    wpm = calculate_wpm(len(attempt.input), attempt.elapsed_seconds)
    stats = calculate_stats(attempt.input, attempt.target)
    analysis = barista_service.analyze_input(attempt.input, attempt.target, wpm)

    earned = points_earned(stats["accuracy"], wpm)

    now = int(time.time() * 1000)
    history = {
        "date": now,
        "wpm": wpm,
        "accuracy": stats["accuracy"],
        "genre": attempt.genre or "unknown",
        "difficulty": attempt.difficulty or "unknown",
        "mistakes": stats["mistakes"],
    }
    mistakes = [
        {
            "original": attempt.target,
            "input": attempt.input,
            "target": correction.expected,
            "type": correction.type,
            "timestamp": now,
        }
        for correction in analysis.corrections
    ]
    state = store.record_attempt(earned, history, mistakes)

    logger.info(f"Recorded attempt: wpm={wpm}, accuracy={stats['accuracy']}, "
                f"score={analysis.score}, corrections={len(analysis.corrections)}, points=+{earned}")

    return schemas.AttemptResponse(
        analysis=analysis,
        summary=schemas.AttemptSummary(
            wpm=wpm,
            accuracy=stats["accuracy"],
            mistakes=stats["mistakes"],
            edit_distance=edit_distance(attempt.input, attempt.target),
            points_earned=earned,
            total_points=state.points,
            level=state.level,
        ),
    )
