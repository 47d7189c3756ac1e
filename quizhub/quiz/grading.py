"""
Grading of submitted quiz answers.

``grade()`` is a pure function: it reads the questions and the submitted
answers, never mutates them, performs no I/O and raises nothing for bad
answer input. Anything it cannot interpret counts as "no answer", which is
graded as incorrect.

A submitted answer is either the text of the chosen answer::

    {"12": "Paris"}

or a reference to an option, optionally carrying its text::

    {"12": {"option_id": 40}}
    {"12": {"option_id": 40, "text": "Paris"}}

Option references are compared by id. Plain text is compared against the
correct option's text with exact string equality, so casing and surrounding
whitespace matter.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping, Optional, Tuple

from quizhub.quiz.models import QuestionType


@dataclass(frozen=True)
class GradedAnswer:
    """Outcome for one question of an attempt."""

    question_id: int
    selected_text: str
    option_id: Optional[int]
    is_correct: bool
    points_awarded: int


@dataclass(frozen=True)
class GradingResult:
    """Outcome for a whole attempt."""

    answers: Tuple[GradedAnswer, ...]
    score: int
    total_points: int

    @property
    def percentage(self) -> int:
        return percentage(self.score, self.total_points)


def percentage(score: int, total_points: int) -> int:
    """
    Score as a whole-number percentage of the available points.

    Halves round up (50.5 becomes 51). A quiz worth no points scores 0.
    """
    if not total_points or total_points <= 0:
        return 0
    ratio = Decimal(score) * 100 / Decimal(total_points)
    return int(ratio.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def _parse_option_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _read_submission(value: Any) -> Tuple[str, Optional[int]]:
    """Split a raw submitted value into (text, option_id)."""
    if isinstance(value, str):
        return value, None
    if isinstance(value, Mapping):
        text = value.get('text')
        return (text if isinstance(text, str) else ''), _parse_option_id(value.get('option_id'))
    return '', None


def _grade_option_question(question, text: str, option_id: Optional[int]) -> Tuple[str, Optional[int], bool]:
    options = list(question.options or [])
    correct = next((opt for opt in options if opt.is_correct), None)

    if option_id is not None:
        chosen = next((opt for opt in options if opt.id == option_id), None)
        if chosen is None:
            # Stale or foreign reference; keep whatever text came along
            return text, None, False
        is_correct = correct is not None and chosen.id == correct.id
        return chosen.option_text, chosen.id, is_correct

    chosen = next((opt for opt in options if opt.option_text == text), None)
    is_correct = correct is not None and text == correct.option_text
    return text, (chosen.id if chosen is not None else None), is_correct


def grade(questions: Iterable, answers: Mapping) -> GradingResult:
    """
    Grade a submission against the questions' answer keys.

    Args:
        questions: Ordered questions; each exposes ``id``, ``question_type``,
            ``points`` and ``options`` (each option exposes ``id``,
            ``option_text`` and ``is_correct``)
        answers: Question id to submitted answer. Keys are matched as
            strings, so ``1`` and ``"1"`` name the same question.

    Returns:
        GradingResult with one GradedAnswer per question, in question order
    """
    if not isinstance(answers, Mapping):
        answers = {}
    submitted = {str(key): value for key, value in answers.items()}

    graded = []
    score = 0
    total_points = 0

    for question in questions:
        points = int(question.points or 0)
        total_points += points

        text, option_id = _read_submission(submitted.get(str(question.id)))
        is_correct = False

        if question.question_type in QuestionType.OPTION_BASED:
            text, option_id, is_correct = _grade_option_question(question, text, option_id)
        else:
            # SHORT_ANSWER is left for manual grading
            option_id = None

        awarded = points if is_correct else 0
        score += awarded

        graded.append(GradedAnswer(
            question_id=question.id,
            selected_text=text,
            option_id=option_id,
            is_correct=is_correct,
            points_awarded=awarded,
        ))

    return GradingResult(answers=tuple(graded), score=score, total_points=total_points)
