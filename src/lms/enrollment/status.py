"""Enrollment status derivation.

todo -> inProgress -> completed, and completed -> inProgress when a later
score falls below the threshold. A score only ever derives inProgress or
completed, so score-driven updates never return to todo; an administrative
status override may set any of the three states.

``completed_on`` is set if and only if status is completed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from lms.db.models import STATUS_COMPLETED, STATUS_IN_PROGRESS, STATUS_TODO, UserModule
from lms.errors import InvalidStateError

STATUSES = (STATUS_TODO, STATUS_IN_PROGRESS, STATUS_COMPLETED)


@dataclass
class EnrollmentPatch:
    """Field updates for an enrollment. ``None`` means "leave unchanged"."""

    questions_answered: int | None = None
    score: float | None = None
    threshold_score: float | None = None
    status: str | None = None
    completed_on: datetime | None = None
    reason: str | None = None


def validate_status(status: str) -> None:
    if status not in STATUSES:
        raise InvalidStateError(f"Unknown status '{status}'. Expected one of: {', '.join(STATUSES)}")


def _validate_percentage(name: str, value: float | None) -> None:
    if value is not None and not 0 <= value <= 100:
        raise InvalidStateError(f"{name} must be between 0 and 100, got {value}")


def derive_status_from_score(score: float, threshold: float) -> str:
    """Passing the threshold completes the module, anything below keeps it open."""
    return STATUS_COMPLETED if score >= threshold else STATUS_IN_PROGRESS


def apply_enrollment_patch(enrollment: UserModule, patch: EnrollmentPatch, now: datetime) -> None:
    """Apply ``patch`` to ``enrollment`` and re-derive status/completed_on.

    Priority: a new score decides the status against the effective threshold;
    otherwise an explicit status is applied as an override. All checks run
    before any field is written.
    """
    _validate_percentage("score", patch.score)
    _validate_percentage("threshold_score", patch.threshold_score)
    if patch.questions_answered is not None and patch.questions_answered < 0:
        raise InvalidStateError("questions_answered cannot be negative")

    if patch.score is not None:
        threshold = patch.threshold_score if patch.threshold_score is not None else enrollment.threshold_score
        new_status = derive_status_from_score(patch.score, threshold)
    elif patch.status is not None:
        validate_status(patch.status)
        new_status = patch.status
    else:
        new_status = enrollment.status

    if patch.completed_on is not None and new_status != STATUS_COMPLETED:
        raise InvalidStateError("completed_on can only be set when status is completed")

    if patch.questions_answered is not None:
        enrollment.questions_answered = patch.questions_answered
    if patch.score is not None:
        enrollment.score = patch.score
    if patch.threshold_score is not None:
        enrollment.threshold_score = patch.threshold_score

    if patch.score is not None:
        enrollment.status = new_status
        if new_status == STATUS_COMPLETED:
            enrollment.completed_on = patch.completed_on or now
        else:
            enrollment.completed_on = None
    elif patch.status is not None:
        enrollment.status = new_status
        if new_status == STATUS_COMPLETED:
            if patch.completed_on is not None:
                enrollment.completed_on = patch.completed_on
            elif enrollment.completed_on is None:
                enrollment.completed_on = now
        else:
            enrollment.completed_on = None
    elif patch.completed_on is not None:
        enrollment.completed_on = patch.completed_on
