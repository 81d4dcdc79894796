"""Pure scoring rules for quiz attempts."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from lms.db.models import STATUS_COMPLETED, STATUS_IN_PROGRESS

# Attempt labels
RESULT_PASSED = "passed"
RESULT_IN_PROGRESS = "inProgress"
RESULT_FAILED = "failed"


@dataclass(frozen=True)
class Answer:
    question_id: int
    selected_option_id: int


@dataclass(frozen=True)
class ScoredAnswer:
    question_id: int
    option_id: int
    is_correct: bool
    marks_obtained: float


def score_answers(
    answers: Iterable[Answer],
    question_marks: Mapping[int, int | None],
    option_correctness: Mapping[int, bool],
) -> list[ScoredAnswer]:
    """Mark every answer whose question and option both resolve.

    Unresolvable answers are skipped: they neither fail the attempt nor earn marks.
    Only the first resolved answer to a question is marked; repeats are skipped.
    """
    scored = []
    seen: set[int] = set()
    for answer in answers:
        if answer.question_id not in question_marks or answer.selected_option_id not in option_correctness:
            continue
        if answer.question_id in seen:
            continue
        seen.add(answer.question_id)
        is_correct = bool(option_correctness[answer.selected_option_id])
        marks = question_marks[answer.question_id] or 0
        scored.append(
            ScoredAnswer(
                question_id=answer.question_id,
                option_id=answer.selected_option_id,
                is_correct=is_correct,
                marks_obtained=marks if is_correct else 0,
            )
        )
    return scored


def max_marks(question_marks: Iterable[int | None]) -> int:
    """Total weight of a quiz, floored at 1 so a zero-weight quiz scores 0%."""
    return sum(m or 0 for m in question_marks) or 1


def compute_percentage(obtained: float, maximum: float) -> float:
    return round(obtained / maximum * 100, 2)


def classify_percentage(percentage: float, pass_at: float = 70.0, progress_at: float = 40.0) -> str:
    """Three-tier attempt label: passed / inProgress / failed."""
    if percentage >= pass_at:
        return RESULT_PASSED
    if percentage >= progress_at:
        return RESULT_IN_PROGRESS
    return RESULT_FAILED


def enrollment_status_for(result: str) -> str:
    """Enrollment status an attempt label moves the enrollment to."""
    return STATUS_COMPLETED if result == RESULT_PASSED else STATUS_IN_PROGRESS
