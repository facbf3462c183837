# backend/korean_barista/services/barista_service.py
"""
The "AI Barista": compares a typed Korean sentence against its target sentence
and turns the differences into learner feedback.

Two stages:
  1. Alignment  - character diff of target (before) vs input (after) with
                  semantic cleanup, so one mistyped syllable is one edit.
  2. Analysis   - every edit span is classified (particle, spacing, spelling,
                  missing, extra), counted once, scored and summarised by a
                  feedback tier.
"""
from enum import Enum
from typing import List, Tuple
import logging
import math

from diff_match_patch import diff_match_patch

from ..models_api import schemas

logger = logging.getLogger(__name__)

DIFF_DELETE = diff_match_patch.DIFF_DELETE # In target, absent from input
DIFF_INSERT = diff_match_patch.DIFF_INSERT # In input, absent from target
DIFF_EQUAL = diff_match_patch.DIFF_EQUAL

# Topic, subject, object, location, direction, possessive, additive,
# exclusive and conjunctive markers.
PARTICLES = frozenset({
    "은", "는", "이", "가", "을", "를", "에", "에서", "로", "으로", "의", "도", "만", "과", "와"
})

SPACE_MARKER = "[space]"


class FeedbackTier(Enum):
    EXCEPTIONAL = "⚡️ Incredible! Your speed and accuracy are at native-speaker level. A flawless performance!"
    PERFECT_FAST = "🌟 Flawless! Full marks for accuracy. Keep this rhythm and try pushing your speed a little more!"
    PERFECT = "✨ Perfect accuracy! You are very careful. Now you can focus on building up your typing speed."
    EXCELLENT = "👍 Excellent! Only one or two tiny slips, almost perfect. Check the corrections below."
    GOOD = "👌 Very good! You have the overall structure down. Mind the details of spelling and particles."
    DECENT = "📝 Not bad, but there are some noticeable errors. Korean particles and endings are rich, keep practising them."
    ROUGH = "💪 Every beginning is hard. The sentence structure still feels unfamiliar, slow down and read each syllable before typing."
    ENCOURAGE = "🌱 Don't give up, this one really is difficult. Try the full sugar (easy) mode first to build confidence!"

    @property
    def message(self) -> str:
        return self.value


def align(target: str, typed: str) -> List[Tuple[int, str]]:
    """Diffs target -> typed and merges trivial equalities into the surrounding edits."""
    dmp = diff_match_patch()
    # No time limit: the result must not depend on machine speed
    dmp.Diff_Timeout = 0
    diffs = dmp.diff_main(target, typed)
    dmp.diff_cleanupSemantic(diffs)
    return diffs


def _is_blank(text: str) -> bool:
    return bool(text) and not text.strip()


def _substitution(position: int, expected: str, actual: str) -> schemas.Correction:
    if expected in PARTICLES or actual in PARTICLES:
        return schemas.Correction(
            type="particle", position=position, expected=expected, actual=actual,
            explanation=f'Particle mix-up: "{expected}" belongs here, but you used "{actual}".',
        )
    if expected == " " and actual != " ":
        return schemas.Correction(
            type="spacing", position=position, expected=SPACE_MARKER, actual=actual,
            explanation="Spacing error: a space belongs here. Word spacing changes the meaning in Korean.",
        )
    return schemas.Correction(
        type="spelling", position=position, expected=expected, actual=actual,
        explanation=f'Spelling error: the standard form is "{expected}". Watch the final consonant (batchim).',
    )


def _missing(position: int, expected: str, spacing: bool = False) -> schemas.Correction:
    if spacing and _is_blank(expected):
        return schemas.Correction(
            type="spacing", position=position, expected=SPACE_MARKER, actual="",
            explanation="Spacing error: a space belongs here. Word spacing changes the meaning in Korean.",
        )
    return schemas.Correction(
        type="missing", position=position, expected=expected, actual="",
        explanation=f'Missing: you left out "{expected}". Look at (or listen to) the sentence again.',
    )


def _extra(position: int, actual: str) -> schemas.Correction:
    return schemas.Correction(
        type="extra", position=position, expected="", actual=actual,
        explanation=f'Extra: you typed "{actual}" that is not in the sentence. Keep it concise.',
    )


def classify_diffs(diffs: List[Tuple[int, str]]) -> List[schemas.Correction]:
    """
    Walks the aligned spans left to right and emits one correction per discrepancy.

    A deletion immediately followed by an insertion is treated as a single
    substitution. The position cursor only advances over equal spans, so it is
    measured in target characters that were typed correctly.
    """
    corrections: List[schemas.Correction] = []
    position = 0
    i = 0
    while i < len(diffs):
        op, text = diffs[i]
        if op == DIFF_EQUAL:
            position += len(text)
        elif op == DIFF_DELETE:
            if i + 1 < len(diffs) and diffs[i + 1][0] == DIFF_INSERT:
                corrections.append(_substitution(position, text, diffs[i + 1][1]))
                i += 1 # The insert was consumed by the substitution
            else:
                # A dropped space between two words; at either end it is just missing text
                inside = position > 0 and i + 1 < len(diffs)
                corrections.append(_missing(position, text, spacing=inside))
        elif op == DIFF_INSERT:
            corrections.append(_extra(position, text))
        i += 1
    return corrections


def compute_score(typed_length: int, target_length: int, mistakes: int) -> int:
    total_length = max(typed_length, target_length)
    if total_length == 0:
        return 100
    ratio = max(0.0, (total_length - mistakes) / total_length)
    # Half-up rounding, Python's round() would round 86.5 down
    return min(100, max(0, math.floor(ratio * 100 + 0.5)))


def select_feedback(score: int, mistakes: int, speed: float) -> FeedbackTier:
    if score == 100:
        if speed > 60:
            return FeedbackTier.EXCEPTIONAL
        if speed > 40:
            return FeedbackTier.PERFECT_FAST
        return FeedbackTier.PERFECT
    if score >= 90:
        return FeedbackTier.EXCELLENT if mistakes <= 2 else FeedbackTier.GOOD
    if score >= 80:
        return FeedbackTier.DECENT
    if score >= 60:
        return FeedbackTier.ROUGH
    return FeedbackTier.ENCOURAGE


def analyze_input(typed: str, target: str, speed: float = 0.0) -> schemas.AnalysisResult:
    """
    Analyzes one typed sentence against its target sentence.

    Args:
        typed (str): What the learner typed.
        target (str): The sentence they were asked to type.
        speed (float): Words per minute. Only affects which perfect-score message is chosen.

    Returns:
        schemas.AnalysisResult: score 0-100, a feedback message and the ordered corrections.
    """
    typed = typed or ""
    target = target or ""
    speed = speed or 0.0

    if not typed and not target:
        corrections = []
    elif not typed:
        corrections = [_missing(0, target)]
    elif not target:
        corrections = [_extra(0, typed)]
    else:
        corrections = classify_diffs(align(target, typed))

    mistakes = len(corrections)
    if bool(typed) != bool(target):
        # Nothing lines up, so nothing can be counted as correct
        score = 0
    else:
        score = compute_score(len(typed), len(target), mistakes)
    tier = select_feedback(score, mistakes, speed)

    logger.debug(f"Analyzed input (len={len(typed)}) against target (len={len(target)}): "
                 f"score={score}, mistakes={mistakes}, tier={tier.name}")
    return schemas.AnalysisResult(
        score=score,
        feedback=tier.message,
        corrections=corrections,
        mistakes=mistakes,
    )
