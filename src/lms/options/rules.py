"""Option-count rules for quiz questions.

Rules:
- A fully assigned question has exactly ``options_per_question`` options
- Correct options per question stay within [min_correct, max_correct]
"""

from __future__ import annotations

from lms.errors import InvalidStateError


def check_correct_bounds(
    existing_correct: int,
    incoming_correct: int,
    min_correct: int = 1,
    max_correct: int = 4,
) -> int:
    """Return the resulting correct count or raise InvalidStateError."""
    total = existing_correct + incoming_correct
    if total < min_correct:
        raise InvalidStateError("Every question needs at least one correct option")
    if total > max_correct:
        raise InvalidStateError(
            f"A question can have at most {max_correct} correct options "
            f"(would have {total})"
        )
    return total


def check_option_total(existing_count: int, incoming_count: int, required: int = 4) -> int:
    """Return the resulting option count or raise unless it is exactly ``required``."""
    total = existing_count + incoming_count
    if total != required:
        raise InvalidStateError(
            f"A question must have exactly {required} options "
            f"(has {existing_count}, assigning {incoming_count})"
        )
    return total
