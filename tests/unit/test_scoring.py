"""Unit tests for quiz scoring rules."""

from __future__ import annotations

import pytest

from lms.assessment.scoring import (
    RESULT_FAILED,
    RESULT_IN_PROGRESS,
    RESULT_PASSED,
    Answer,
    classify_percentage,
    compute_percentage,
    enrollment_status_for,
    max_marks,
    score_answers,
)

QUESTION_MARKS = {1: 5, 2: 5}
OPTIONS = {10: True, 11: False, 20: True, 21: False}


class TestScoreAnswers:
    def test_correct_answers_earn_question_marks(self):
        scored = score_answers([Answer(1, 10), Answer(2, 21)], QUESTION_MARKS, OPTIONS)
        assert [(s.question_id, s.is_correct, s.marks_obtained) for s in scored] == [
            (1, True, 5),
            (2, False, 0),
        ]

    def test_unknown_question_is_skipped(self):
        scored = score_answers([Answer(99, 10), Answer(1, 10)], QUESTION_MARKS, OPTIONS)
        assert [s.question_id for s in scored] == [1]

    def test_unknown_option_is_skipped(self):
        scored = score_answers([Answer(1, 999)], QUESTION_MARKS, OPTIONS)
        assert scored == []

    def test_repeated_question_marked_once(self):
        """Only the first answer to a question counts, even when a later one is correct."""
        answers = [Answer(1, 11), Answer(1, 10), Answer(1, 10), Answer(2, 20)]
        scored = score_answers(answers, QUESTION_MARKS, OPTIONS)
        assert [(s.question_id, s.option_id, s.marks_obtained) for s in scored] == [(1, 11, 0), (2, 20, 5)]

    def test_repeats_after_stale_answer_still_count_once(self):
        scored = score_answers([Answer(1, 999), Answer(1, 10), Answer(1, 10)], QUESTION_MARKS, OPTIONS)
        assert [(s.option_id, s.marks_obtained) for s in scored] == [(10, 5)]

    def test_null_marks_count_as_zero(self):
        scored = score_answers([Answer(3, 10)], {3: None}, OPTIONS)
        assert scored[0].is_correct is True
        assert scored[0].marks_obtained == 0


class TestPercentage:
    """Two questions worth 5 marks each."""

    @pytest.mark.parametrize(
        ("obtained", "expected_pct", "expected_label"),
        [(10, 100.0, RESULT_PASSED), (5, 50.0, RESULT_IN_PROGRESS), (0, 0.0, RESULT_FAILED)],
    )
    def test_two_by_five_scenario(self, obtained, expected_pct, expected_label):
        pct = compute_percentage(obtained, max_marks(QUESTION_MARKS.values()))
        assert pct == expected_pct
        assert f"{pct:.2f}" == f"{expected_pct:.2f}"
        assert classify_percentage(pct) == expected_label

    def test_zero_weight_quiz_floors_denominator(self):
        assert max_marks([0, None]) == 1
        assert compute_percentage(0, max_marks([])) == 0.0

    def test_rounded_to_two_decimals(self):
        assert compute_percentage(1, 3) == 33.33


class TestClassification:
    @pytest.mark.parametrize(
        ("pct", "label"),
        [(70, "passed"), (69.99, "inProgress"), (40, "inProgress"), (39.99, "failed")],
    )
    def test_boundaries(self, pct, label):
        assert classify_percentage(pct) == label

    def test_custom_cutoffs(self):
        assert classify_percentage(55, pass_at=50, progress_at=20) == "passed"

    def test_label_maps_to_enrollment_status(self):
        assert enrollment_status_for(RESULT_PASSED) == "completed"
        assert enrollment_status_for(RESULT_IN_PROGRESS) == "inProgress"
        assert enrollment_status_for(RESULT_FAILED) == "inProgress"
