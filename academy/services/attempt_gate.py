from __future__ import annotations

from dataclasses import dataclass

from academy.models.assessment import Assessment
from academy.repos.result_repo import ResultRepo


@dataclass(frozen=True, slots=True)
class AttemptStatus:
    previous_attempts: int
    current_attempt: int
    max_attempts: int
    can_attempt: bool


def evaluate(previous_attempts: int, max_attempts: int) -> AttemptStatus:
    """Strict comparison: equal counts block the next attempt."""
    return AttemptStatus(
        previous_attempts=previous_attempts,
        current_attempt=previous_attempts + 1,
        max_attempts=max_attempts,
        can_attempt=previous_attempts < max_attempts,
    )


async def check(
    results: ResultRepo, student_id: str, assessment: Assessment
) -> AttemptStatus:
    previous = await results.count(student_id, assessment.id)
    return evaluate(previous, assessment.max_attempts)
