from __future__ import annotations

import asyncio
import weakref
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import replace
from typing import Protocol
from uuid import UUID

from academy.db.options_codec import decode_options, encode_options
from academy.models.result import Result


class ResultRepo(Protocol):
    def attempt_lock(
        self, student_id: str, assessment_id: UUID
    ) -> AbstractAsyncContextManager[None]: ...
    async def count(self, student_id: str, assessment_id: UUID) -> int: ...
    async def add(self, result: Result) -> None: ...
    async def get(self, result_id: UUID) -> Result | None: ...
    async def for_student(
        self, student_id: str, *, assessment_id: UUID | None = None
    ) -> list[Result]: ...
    async def find(self, *, assessment_id: UUID | None = None) -> list[Result]: ...
    async def delete_for_assessment(self, assessment_id: UUID) -> int: ...


class InMemoryResultRepo:
    """Dict-backed result store.

    ``attempt_lock`` hands out one asyncio.Lock per (student, assessment),
    which serializes count-then-insert within a single process.  Locks are
    held weakly and vanish once no coroutine holds or awaits them.
    """

    def __init__(self) -> None:
        self._results: dict[UUID, Result] = {}
        self._locks: weakref.WeakValueDictionary[tuple[str, UUID], asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @asynccontextmanager
    async def attempt_lock(
        self, student_id: str, assessment_id: UUID
    ) -> AsyncIterator[None]:
        key = (student_id, assessment_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        async with lock:
            yield

    async def count(self, student_id: str, assessment_id: UUID) -> int:
        return sum(
            1
            for r in self._results.values()
            if r.student_id == student_id and r.assessment_id == assessment_id
        )

    async def add(self, result: Result) -> None:
        for r in self._results.values():
            if (
                r.student_id == result.student_id
                and r.assessment_id == result.assessment_id
                and r.attempt_number == result.attempt_number
            ):
                raise ValueError("attempt number already recorded")
        self._results[result.id] = _through_codec(result)

    async def get(self, result_id: UUID) -> Result | None:
        return self._results.get(result_id)

    async def for_student(
        self, student_id: str, *, assessment_id: UUID | None = None
    ) -> list[Result]:
        items = [
            r
            for r in self._results.values()
            if r.student_id == student_id
            and (assessment_id is None or r.assessment_id == assessment_id)
        ]
        return sorted(items, key=lambda r: (r.submitted_at, r.attempt_number))

    async def find(self, *, assessment_id: UUID | None = None) -> list[Result]:
        items = [
            r
            for r in self._results.values()
            if assessment_id is None or r.assessment_id == assessment_id
        ]
        return sorted(items, key=lambda r: (r.submitted_at, r.attempt_number))

    async def delete_for_assessment(self, assessment_id: UUID) -> int:
        doomed = [
            rid for rid, r in self._results.items() if r.assessment_id == assessment_id
        ]
        for rid in doomed:
            del self._results[rid]
        return len(doomed)


def _through_codec(result: Result) -> Result:
    # snapshot options are stored encoded, exactly like the SQL column
    answers = tuple(
        replace(
            a,
            question=replace(
                a.question,
                options=tuple(decode_options(encode_options(a.question.options))),
            ),
        )
        for a in result.answers
    )
    return replace(result, answers=answers)
