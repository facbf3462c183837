"""
Tests for the typing barista: alignment, correction classification, scoring
and feedback tier selection.
"""
import string

import pytest

from korean_barista.services import barista_service
from korean_barista.services.barista_service import (
    DIFF_DELETE,
    DIFF_EQUAL,
    DIFF_INSERT,
    SPACE_MARKER,
    FeedbackTier,
    analyze_input,
)

# 30 distinct characters, so substitutions never realign elsewhere
THIRTY = string.ascii_lowercase + "0123"


def _replace(text: str, replacements: dict) -> str:
    chars = list(text)
    for index, ch in replacements.items():
        chars[index] = ch
    return "".join(chars)


class TestAlign:
    @pytest.mark.parametrize("target, typed", [
        ("나는 학생이다", "나은 학생이다"),
        ("나는 학생이다", "나는학생이다"),
        ("감사합니다", "감사해요"),
        ("", "안녕"),
        ("안녕", ""),
    ])
    def test_spans_rebuild_both_texts(self, target, typed):
        diffs = barista_service.align(target, typed)

        assert "".join(t for op, t in diffs if op != DIFF_INSERT) == target
        assert "".join(t for op, t in diffs if op != DIFF_DELETE) == typed

    def test_single_syllable_is_one_replacement(self):
        diffs = barista_service.align("나는 학생이다", "나은 학생이다")

        assert diffs == [(DIFF_EQUAL, "나"), (DIFF_DELETE, "는"), (DIFF_INSERT, "은"), (DIFF_EQUAL, " 학생이다")]


class TestClassifyDiffs:
    def test_delete_then_insert_is_one_substitution(self):
        corrections = barista_service.classify_diffs(
            [(DIFF_EQUAL, "감사"), (DIFF_DELETE, "합"), (DIFF_INSERT, "함"), (DIFF_EQUAL, "니다")]
        )

        assert len(corrections) == 1
        assert corrections[0].type == "spelling"
        assert corrections[0].position == 2
        assert (corrections[0].expected, corrections[0].actual) == ("합", "함")

    def test_delete_and_insert_separated_by_equal_are_not_paired(self):
        corrections = barista_service.classify_diffs(
            [(DIFF_DELETE, "가"), (DIFF_EQUAL, "나다"), (DIFF_INSERT, "라")]
        )

        assert [c.type for c in corrections] == ["missing", "extra"]
        assert [c.position for c in corrections] == [0, 2]

    def test_particle_detected_on_either_side(self):
        corrections = barista_service.classify_diffs(
            [(DIFF_EQUAL, "책"), (DIFF_DELETE, "을"), (DIFF_INSERT, "XY")]
        )

        assert corrections[0].type == "particle"

    def test_cursor_only_advances_over_equal_spans(self):
        corrections = barista_service.classify_diffs([
            (DIFF_EQUAL, "ab"), (DIFF_DELETE, "cd"), (DIFF_EQUAL, "ef"), (DIFF_INSERT, "g"), (DIFF_EQUAL, "h"),
        ])

        assert [c.position for c in corrections] == [2, 4]


class TestAnalyzeInput:
    def test_identical_sentence_is_perfect(self):
        result = analyze_input("나는 학생이다", "나는 학생이다", 30)

        assert result.score == 100
        assert result.corrections == []
        assert result.mistakes == 0

    def test_both_empty(self):
        result = analyze_input("", "", 0)

        assert result.score == 100
        assert result.corrections == []

    def test_particle_substitution(self):
        result = analyze_input("나은 학생이다", "나는 학생이다", 0)

        assert len(result.corrections) == 1
        correction = result.corrections[0]
        assert correction.type == "particle"
        assert correction.expected == "는"
        assert correction.actual == "은"
        assert correction.position == 1
        assert "는" in correction.explanation and "은" in correction.explanation
        assert result.mistakes == 1
        assert result.score == 86
        assert 80 <= result.score <= 99

    def test_missing_space(self):
        result = analyze_input("나는학생이다", "나는 학생이다", 0)

        assert len(result.corrections) == 1
        correction = result.corrections[0]
        assert correction.type == "spacing"
        assert correction.expected == SPACE_MARKER
        assert correction.actual == ""
        assert correction.position == 2
        assert result.score == 86

    def test_space_replaced_by_other_character(self):
        result = analyze_input("axb", "a b", 0)

        assert [c.type for c in result.corrections] == ["spacing"]
        assert result.corrections[0].expected == SPACE_MARKER
        assert result.corrections[0].actual == "x"

    def test_extra_space_inside_word(self):
        result = analyze_input("학생 이다", "학생이다", 0)

        assert len(result.corrections) == 1
        correction = result.corrections[0]
        assert correction.type == "extra"
        assert correction.expected == ""
        assert correction.actual == " "
        assert correction.position == 2
        assert result.score == 80

    def test_extra_space_between_syllables_of_a_word(self):
        result = analyze_input("나는 학 생이다", "나는 학생이다", 0)

        assert [c.type for c in result.corrections] == ["extra"]
        assert (result.corrections[0].position, result.corrections[0].actual) == (4, " ")

    @pytest.mark.parametrize("target, position", [("나는 ", 2), (" 나는", 0)])
    def test_dropped_space_at_either_end_is_missing(self, target, position):
        result = analyze_input("나는", target, 0)

        assert len(result.corrections) == 1
        correction = result.corrections[0]
        assert correction.type == "missing"
        assert correction.expected == " "
        assert correction.actual == ""
        assert correction.position == position

    def test_spelling_error(self):
        result = analyze_input("감사함니다", "감사합니다", 0)

        assert [c.type for c in result.corrections] == ["spelling"]
        assert (result.corrections[0].expected, result.corrections[0].actual) == ("합", "함")
        assert result.score == 80

    def test_missing_syllable(self):
        result = analyze_input("나 학생이다", "나는 학생이다", 0)

        assert len(result.corrections) == 1
        correction = result.corrections[0]
        assert correction.type == "missing"
        assert correction.expected == "는"
        assert correction.actual == ""
        assert correction.position == 1

    def test_extra_syllable(self):
        result = analyze_input("나는 대학생이다", "나는 학생이다", 0)

        assert len(result.corrections) == 1
        correction = result.corrections[0]
        assert correction.type == "extra"
        assert correction.expected == ""
        assert correction.actual == "대"
        assert correction.position == 3
        assert result.score == 88

    def test_trailing_extra_text(self):
        result = analyze_input("가나다", "가나", 0)

        assert [(c.type, c.position, c.actual) for c in result.corrections] == [("extra", 2, "다")]

    @pytest.mark.parametrize("target", ["가", "나는 학생이다", " "])
    def test_empty_input_is_one_missing_correction(self, target):
        result = analyze_input("", target, 0)

        assert len(result.corrections) == 1
        assert result.corrections[0].type == "missing"
        assert result.corrections[0].expected == target
        assert result.corrections[0].actual == ""
        assert result.score == 0

    @pytest.mark.parametrize("typed", ["가", "나는 학생이다"])
    def test_empty_target_is_one_extra_correction(self, typed):
        result = analyze_input(typed, "", 0)

        assert len(result.corrections) == 1
        assert result.corrections[0].type == "extra"
        assert result.corrections[0].actual == typed
        assert result.corrections[0].expected == ""
        assert result.score == 0

    def test_none_inputs_degrade_to_empty_strings(self):
        result = analyze_input(None, None, None)

        assert result.score == 100
        assert result.corrections == []

    def test_deterministic(self):
        first = analyze_input("저는 아침마다 커피을 마셔요", "저는 아침마다 커피를 마셔요", 35)
        second = analyze_input("저는 아침마다 커피을 마셔요", "저는 아침마다 커피를 마셔요", 35)

        assert first == second

    def test_score_does_not_increase_with_more_edits(self):
        target = "abcdefghij"
        inputs = [
            target,
            _replace(target, {4: "X"}),
            _replace(target, {2: "X", 7: "Y"}),
            _replace(target, {1: "X", 5: "Y", 8: "Z"}),
        ]

        scores = [analyze_input(typed, target, 0).score for typed in inputs]

        assert scores == [100, 90, 80, 70]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.parametrize("typed, target", [
        ("나은 학생이다", "나는 학생이다"),
        ("나 학생이다", "나는 학생이다"),
        ("나는학생 이다", "나는 학생이다"),
        ("저는 커피을 마셔요 매일", "저는 매일 커피를 마셔요"),
        ("", "안녕하세요"),
        ("안녕하세요", ""),
    ])
    def test_one_correction_per_mistake(self, typed, target):
        result = analyze_input(typed, target, 0)

        assert len(result.corrections) == result.mistakes
        positions = [c.position for c in result.corrections]
        assert positions == sorted(positions)
        for c in result.corrections:
            if c.type == "missing":
                assert c.actual == ""
            if c.type == "extra":
                assert c.expected == ""


class TestFeedbackTiers:
    @pytest.mark.parametrize("speed, tier", [
        (75, FeedbackTier.EXCEPTIONAL),
        (61, FeedbackTier.EXCEPTIONAL),
        (60, FeedbackTier.PERFECT_FAST),
        (41, FeedbackTier.PERFECT_FAST),
        (40, FeedbackTier.PERFECT),
        (0, FeedbackTier.PERFECT),
        (-10, FeedbackTier.PERFECT),
    ])
    def test_perfect_score_tiers_depend_on_speed(self, speed, tier):
        result = analyze_input("시작이 반이다", "시작이 반이다", speed)

        assert result.feedback == tier.message

    def test_excellent_with_few_mistakes(self):
        result = analyze_input(_replace(THIRTY, {15: "Y"}), THIRTY, 100)

        assert result.score == 97
        assert result.feedback == FeedbackTier.EXCELLENT.message

    def test_good_with_many_mistakes(self):
        result = analyze_input(_replace(THIRTY, {5: "X", 15: "Y", 25: "Z"}), THIRTY, 100)

        assert result.mistakes == 3
        assert result.score == 90
        assert result.feedback == FeedbackTier.GOOD.message

    def test_decent(self):
        target = "abcdefghij"
        result = analyze_input(_replace(target, {2: "X", 7: "Y"}), target, 100)

        assert result.score == 80
        assert result.feedback == FeedbackTier.DECENT.message

    def test_rough_start(self):
        target = "abcdefghij"
        result = analyze_input(_replace(target, {1: "X", 5: "Y", 8: "Z"}), target, 100)

        assert result.score == 70
        assert result.feedback == FeedbackTier.ROUGH.message

    def test_encouragement(self):
        result = analyze_input("", "시작이 반이다", 100)

        assert result.score == 0
        assert result.feedback == FeedbackTier.ENCOURAGE.message

    @pytest.mark.parametrize("score, mistakes, speed, tier", [
        (100, 0, 61, FeedbackTier.EXCEPTIONAL),
        (100, 0, 41, FeedbackTier.PERFECT_FAST),
        (100, 0, 40, FeedbackTier.PERFECT),
        (90, 2, 0, FeedbackTier.EXCELLENT),
        (90, 3, 99, FeedbackTier.GOOD),
        (89, 1, 99, FeedbackTier.DECENT),
        (80, 9, 0, FeedbackTier.DECENT),
        (79, 1, 0, FeedbackTier.ROUGH),
        (60, 1, 0, FeedbackTier.ROUGH),
        (59, 1, 99, FeedbackTier.ENCOURAGE),
    ])
    def test_select_feedback_boundaries(self, score, mistakes, speed, tier):
        assert barista_service.select_feedback(score, mistakes, speed) is tier


class TestComputeScore:
    def test_empty_texts_score_full_marks(self):
        assert barista_service.compute_score(0, 0, 0) == 100

    def test_rounds_half_up(self):
        # 7/8 = 87.5%
        assert barista_service.compute_score(8, 7, 1) == 88
        # 1/8 = 12.5%
        assert barista_service.compute_score(8, 8, 7) == 13

    def test_never_negative(self):
        assert barista_service.compute_score(2, 2, 5) == 0
