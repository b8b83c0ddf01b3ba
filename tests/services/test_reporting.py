from __future__ import annotations

import asyncio
from uuid import uuid4

from academy.models.assessment import Assessment
from academy.models.purchase import Purchase
from academy.models.result import Result
from academy.repos.registry import new_in_memory_repos
from academy.services import reporting

_ASSESSMENT_ID = uuid4()


def _result(attempt: int, percentage: float, submitted_at: int | None = None) -> Result:
    return Result.new(
        student_id="s1",
        assessment_id=_ASSESSMENT_ID,
        score=int(percentage),
        total_points=100,
        percentage=percentage,
        attempt_number=attempt,
        submitted_at=submitted_at if submitted_at is not None else attempt * 10,
        answers=(),
    )


def test_best_of_picks_highest_percentage() -> None:
    results = [_result(1, 40.0), _result(2, 90.0), _result(3, 70.0)]
    assert reporting.best_of(results).attempt_number == 2  # type: ignore[union-attr]


def test_best_of_tie_keeps_earliest_attempt() -> None:
    results = [_result(3, 80.0), _result(1, 80.0), _result(2, 50.0)]
    assert reporting.best_of(results).attempt_number == 1  # type: ignore[union-attr]


def test_best_of_empty_is_none() -> None:
    assert reporting.best_of([]) is None


def test_most_recent_first() -> None:
    results = [_result(1, 0.0, 100), _result(3, 0.0, 300), _result(2, 0.0, 200)]
    assert [r.attempt_number for r in reporting.most_recent_first(results)] == [3, 2, 1]


def test_student_summary_lists_attempted_then_untried() -> None:
    repos = new_in_memory_repos()
    course_id = uuid4()

    def _assessment(title: str, position: int, kind: str = "quiz", published: bool = True) -> Assessment:
        a = Assessment.new(
            course_id=course_id,
            kind=kind,  # type: ignore[arg-type]
            title=title,
            position=position,
            created_at=0,
            max_attempts=3,
        )
        asyncio.run(repos.assessments.add(a, []))
        if published:
            asyncio.run(repos.assessments.set_published(a.id, True))
        return a

    tried = _assessment("tried", 1)
    untried = _assessment("untried", 2)
    _assessment("draft", 3, published=False)
    _assessment("homework", 4, kind="homework")

    asyncio.run(repos.purchases.add_purchase(Purchase(user_id="s1", course_id=course_id, created_at=0)))
    for attempt, pct in ((1, 20.0), (2, 60.0)):
        asyncio.run(
            repos.results.add(
                Result.new(
                    student_id="s1",
                    assessment_id=tried.id,
                    score=int(pct),
                    total_points=100,
                    percentage=pct,
                    attempt_number=attempt,
                    submitted_at=attempt,
                    answers=(),
                )
            )
        )

    rows = asyncio.run(reporting.student_summary(repos, "s1", "quiz"))

    assert [r.assessment.id for r in rows] == [tried.id, untried.id]
    assert rows[0].total_attempts == 2
    assert rows[0].best_result.percentage == 60.0  # type: ignore[union-attr]
    assert rows[1].total_attempts == 0
    assert rows[1].best_result is None
