from __future__ import annotations

from collections.abc import Collection
from dataclasses import replace
from typing import Protocol
from uuid import UUID

from academy.db.options_codec import decode_options, encode_options
from academy.models.assessment import Assessment, AssessmentKind, Question


class AssessmentRepo(Protocol):
    async def get(self, assessment_id: UUID) -> Assessment | None: ...
    async def find(
        self,
        *,
        course_ids: Collection[UUID] | None = None,
        kind: AssessmentKind | None = None,
        published_only: bool = False,
    ) -> list[Assessment]: ...
    async def questions(self, assessment_id: UUID) -> list[Question]: ...
    async def add(self, assessment: Assessment, questions: list[Question]) -> None: ...
    async def replace(
        self, assessment: Assessment, questions: list[Question]
    ) -> None: ...
    async def set_published(
        self, assessment_id: UUID, is_published: bool
    ) -> Assessment | None: ...
    async def delete(self, assessment_id: UUID) -> bool: ...


class InMemoryAssessmentRepo:
    """Dict-backed store.

    Question options pass through the same codec as the SQL columns, so
    both backends hand back identical ``options`` tuples.
    """

    def __init__(self) -> None:
        self._assessments: dict[UUID, Assessment] = {}
        self._questions: dict[UUID, list[tuple[Question, str | None]]] = {}

    async def get(self, assessment_id: UUID) -> Assessment | None:
        return self._assessments.get(assessment_id)

    async def find(
        self,
        *,
        course_ids: Collection[UUID] | None = None,
        kind: AssessmentKind | None = None,
        published_only: bool = False,
    ) -> list[Assessment]:
        items = [
            a
            for a in self._assessments.values()
            if (course_ids is None or a.course_id in course_ids)
            and (kind is None or a.kind == kind)
            and (a.is_published or not published_only)
        ]
        return sorted(items, key=lambda a: (str(a.course_id), a.position))

    async def questions(self, assessment_id: UUID) -> list[Question]:
        stored = self._questions.get(assessment_id, [])
        return [
            replace(q, options=tuple(decode_options(raw)))
            for q, raw in sorted(stored, key=lambda item: item[0].position)
        ]

    async def add(self, assessment: Assessment, questions: list[Question]) -> None:
        if assessment.id in self._assessments:
            raise ValueError("assessment already exists")
        self._assessments[assessment.id] = assessment
        self._store_questions(assessment.id, questions)

    async def replace(self, assessment: Assessment, questions: list[Question]) -> None:
        if assessment.id not in self._assessments:
            raise KeyError("assessment not found")
        self._assessments[assessment.id] = assessment
        self._store_questions(assessment.id, questions)

    async def set_published(
        self, assessment_id: UUID, is_published: bool
    ) -> Assessment | None:
        a = self._assessments.get(assessment_id)
        if a is None:
            return None
        updated = replace(a, is_published=is_published)
        self._assessments[assessment_id] = updated
        return updated

    async def delete(self, assessment_id: UUID) -> bool:
        self._questions.pop(assessment_id, None)
        return self._assessments.pop(assessment_id, None) is not None

    def _store_questions(self, assessment_id: UUID, questions: list[Question]) -> None:
        positions = [q.position for q in questions]
        if len(positions) != len(set(positions)):
            raise ValueError("duplicate question position")
        self._questions[assessment_id] = [
            (replace(q, options=()), encode_options(q.options)) for q in questions
        ]
