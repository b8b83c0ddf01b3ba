from __future__ import annotations

from uuid import uuid4

import pytest

from academy.models.assessment import Question
from academy.services.grading import grade, is_correct

_ASSESSMENT_ID = uuid4()


def _q(
    type: str,
    correct: str,
    points: int = 1,
    position: int = 1,
    options: tuple[str, ...] = (),
) -> Question:
    return Question.new(
        assessment_id=_ASSESSMENT_ID,
        type=type,  # type: ignore[arg-type]
        correct_answer=correct,
        points=points,
        position=position,
        text=f"q{position}",
        options=options,
    )


# ---- per-type matching ----


@pytest.mark.parametrize(
    ("submitted", "expected"),
    [
        ("Cairo", True),
        ("  Cairo ", True),
        ("cairo", False),
        ("Giza", False),
        ("", False),
    ],
)
def test_multiple_choice_is_exact_after_trim(submitted: str, expected: bool) -> None:
    q = _q("MULTIPLE_CHOICE", "Cairo", options=("Giza", "Cairo", "Aswan"))
    assert is_correct(q, submitted) is expected


def test_multiple_choice_answer_missing_from_options_never_scores() -> None:
    q = _q("MULTIPLE_CHOICE", "Luxor", options=("Giza", "Cairo"))
    assert is_correct(q, "Luxor") is False


@pytest.mark.parametrize(
    ("submitted", "expected"),
    [("true", True), ("TRUE", True), ("True", True), ("false", False), ("yes", False)],
)
def test_true_false_is_case_insensitive(submitted: str, expected: bool) -> None:
    assert is_correct(_q("TRUE_FALSE", "true"), submitted) is expected


@pytest.mark.parametrize(
    ("submitted", "expected"),
    [
        ("kutub", True),
        ("  KUTUB  ", True),
        ("Kutub", True),
        ("kutb", False),
        ("", False),
    ],
)
def test_short_answer_ignores_case_and_outer_whitespace(
    submitted: str, expected: bool
) -> None:
    assert is_correct(_q("SHORT_ANSWER", "Kutub "), submitted) is expected


# ---- whole submissions ----


def test_grade_full_submission() -> None:
    mc = _q("MULTIPLE_CHOICE", "Cairo", points=2, position=1, options=("Giza", "Cairo"))
    tf = _q("TRUE_FALSE", "true", points=1, position=2)
    sa = _q("SHORT_ANSWER", "Kutub", points=2, position=3)

    graded = grade([mc, tf, sa], {mc.id: "Cairo", tf.id: "false", sa.id: " kutub"})

    assert graded.score == 4
    assert graded.total_points == 5
    assert graded.percentage == pytest.approx(80.0)
    assert [a.is_correct for a in graded.answers] == [True, False, True]
    assert [a.points_earned for a in graded.answers] == [2, 0, 2]


def test_grade_treats_missing_answers_as_empty() -> None:
    tf = _q("TRUE_FALSE", "false", points=3, position=1)
    sa = _q("SHORT_ANSWER", "kitab", points=1, position=2)

    graded = grade([tf, sa], {})

    assert graded.score == 0
    assert graded.total_points == 4
    assert graded.percentage == 0.0
    assert all(a.student_answer == "" for a in graded.answers)


def test_grade_ignores_answers_to_unknown_questions() -> None:
    tf = _q("TRUE_FALSE", "true", points=1)
    graded = grade([tf], {tf.id: "true", uuid4(): "true"})
    assert len(graded.answers) == 1
    assert graded.score == 1


def test_grade_with_no_points_yields_zero_percentage() -> None:
    graded = grade([], {})
    assert graded.score == 0
    assert graded.total_points == 0
    assert graded.percentage == 0.0


def test_grade_orders_answers_by_position_and_snapshots_questions() -> None:
    second = _q("TRUE_FALSE", "true", position=2)
    first = _q("MULTIPLE_CHOICE", "A", position=1, options=("A", "B"))

    graded = grade([second, first], {first.id: "A", second.id: "true"})

    assert [a.question_id for a in graded.answers] == [first.id, second.id]
    snap = graded.answers[0].question
    assert snap.text == "q1"
    assert snap.options == ("A", "B")
    assert graded.answers[0].correct_answer == "A"


def test_grade_is_deterministic() -> None:
    qs = [
        _q("TRUE_FALSE", "true", points=2, position=1),
        _q("SHORT_ANSWER", "x", points=3, position=2),
    ]
    answers = {qs[0].id: "TRUE", qs[1].id: "y"}
    a, b = grade(qs, answers), grade(qs, answers)
    assert (a.score, a.total_points, a.percentage) == (b.score, b.total_points, b.percentage)
    assert 0 <= a.score <= a.total_points
