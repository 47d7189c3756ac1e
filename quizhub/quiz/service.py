"""
Quiz authoring and attempt recording.

Every method validates its input before touching the session, and every
write that creates related rows is committed as one transaction.
"""
from datetime import datetime
from typing import Mapping, Optional

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from quizhub import db
from quizhub.auth.models import User
from quizhub.errors import NotFoundError, PersistenceError, ValidationError
from quizhub.quiz.grading import GradingResult, grade
from quizhub.quiz.models import (
    Answer, AttemptStatus, Question, QuestionOption, QuestionType, Quiz, QuizAttempt
)

TRUE_FALSE_VALUES = ('true', 'false')


def _commit(action: str) -> None:
    """Commit the session, rolling back and raising PersistenceError on failure."""
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception(f"Failed to {action}")
        raise PersistenceError(f"Failed to {action}") from e


def _require_text(payload: Mapping, field: str, label: str) -> str:
    value = payload.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required")
    return value.strip()


def _parse_positive_int(value, label: str, default: Optional[int]) -> Optional[int]:
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a positive integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a positive integer")
    if number != value and str(number) != str(value).strip():
        raise ValidationError(f"{label} must be a positive integer")
    if number <= 0:
        raise ValidationError(f"{label} must be a positive integer")
    return number


def _parse_question_type(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Question type is required")
    question_type = value.strip().upper()
    if question_type not in QuestionType.ALL:
        raise ValidationError(
            f"Invalid question type '{value}'. Must be one of: {', '.join(QuestionType.ALL)}"
        )
    return question_type


def _correct_values(payload: Mapping) -> list:
    """Collect the answer texts a payload marks as correct."""
    values = []
    correct_answers = payload.get('correct_answers')
    if isinstance(correct_answers, (list, tuple)):
        values.extend(correct_answers)
    correct_answer = payload.get('correct_answer')
    if correct_answer is not None and correct_answer != '':
        values.append(correct_answer)
    for option in payload.get('options') or []:
        if isinstance(option, Mapping) and option.get('is_correct'):
            values.append(option.get('option_text', option.get('text')))
    # JSON booleans name the true/false options too
    return [str(v).lower() if isinstance(v, bool) else v for v in values]


def _build_multiple_choice_options(payload: Mapping) -> list:
    raw_options = payload.get('options') or []
    if not isinstance(raw_options, (list, tuple)):
        raise ValidationError("options must be a list")
    correct_answers = payload.get('correct_answers') or []
    if not isinstance(correct_answers, (list, tuple)):
        raise ValidationError("correct_answers must be a list")

    options = []
    for raw in raw_options:
        if isinstance(raw, str):
            text, flagged = raw, False
        elif isinstance(raw, Mapping):
            text = raw.get('option_text', raw.get('text'))
            flagged = bool(raw.get('is_correct', False))
            if not isinstance(text, str):
                raise ValidationError("Each option needs text")
        else:
            raise ValidationError("Each option must be a string or an object with text")
        if not text.strip():
            continue
        options.append(QuestionOption(
            option_text=text,
            is_correct=flagged or text in correct_answers,
            order_index=len(options) + 1,
        ))
    return options


def _build_true_false_options(payload: Mapping) -> list:
    correct = {str(v).strip().lower() for v in _correct_values(payload) if v is not None}
    return [
        QuestionOption(option_text=value, is_correct=value in correct, order_index=idx)
        for idx, value in enumerate(TRUE_FALSE_VALUES, start=1)
    ]


def build_question(payload: Mapping, order_index: int) -> Question:
    """
    Build an unsaved Question with its options from request data.

    Raises:
        ValidationError: if text or type is missing, points are not a positive
            integer, or more than one option is marked correct
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Each question must be an object")

    question_text = _require_text(payload, 'text', "Question text")
    question_type = _parse_question_type(payload.get('type'))
    points = _parse_positive_int(payload.get('points'), "points", default=1)

    if question_type == QuestionType.MULTIPLE_CHOICE:
        options = _build_multiple_choice_options(payload)
    elif question_type == QuestionType.TRUE_FALSE:
        options = _build_true_false_options(payload)
    else:
        options = []

    correct_count = sum(1 for opt in options if opt.is_correct)
    if correct_count > 1:
        raise ValidationError(
            f"{question_type} questions can have at most one correct option (got {correct_count})"
        )

    return Question(
        question_text=question_text,
        question_type=question_type,
        points=points,
        order_index=order_index,
        options=options,
    )


class QuizService:
    """Service class for quiz authoring, grading and attempt history."""

    @staticmethod
    def get_quiz(quiz_id: int) -> Quiz:
        quiz = db.session.get(Quiz, quiz_id)
        if quiz is None:
            raise NotFoundError(f"Quiz {quiz_id} not found")
        return quiz

    @staticmethod
    def list_quizzes() -> list:
        """All quizzes, newest first, with creator summary and counts."""
        quizzes = Quiz.query.order_by(Quiz.created_at.desc(), Quiz.id.desc()).all()
        result = []
        for quiz in quizzes:
            data = quiz.to_dict()
            data['attempt_count'] = quiz.get_attempt_count()
            result.append(data)
        return result

    @staticmethod
    def create_quiz(payload: Mapping, creator_id: int) -> Quiz:
        """
        Create a quiz and its questions in one transaction.

        Args:
            payload: Request data with ``title`` (required), ``description``,
                ``time_limit`` (minutes) and ``questions``
            creator_id: User creating the quiz

        Returns:
            The saved Quiz
        """
        if not isinstance(payload, Mapping):
            raise ValidationError("Request body must be a JSON object")

        title = _require_text(payload, 'title', "Title")
        description = payload.get('description')
        description = description.strip() or None if isinstance(description, str) else None
        time_limit = _parse_positive_int(payload.get('time_limit'), "time_limit", default=None)

        raw_questions = payload.get('questions') or []
        if not isinstance(raw_questions, (list, tuple)):
            raise ValidationError("questions must be a list")
        questions = [build_question(q, order_index=idx) for idx, q in enumerate(raw_questions, start=1)]

        quiz = Quiz(
            title=title,
            description=description,
            time_limit=time_limit,
            created_by=creator_id,
            questions=questions,
        )
        db.session.add(quiz)
        _commit("create quiz")

        current_app.logger.info(
            f"Quiz created: ID={quiz.id}, Title={quiz.title}, Questions={len(questions)}, Creator={creator_id}"
        )
        return quiz

    @staticmethod
    def update_quiz(quiz_id: int, payload: Mapping) -> Quiz:
        """Update title, description, time limit or published flag."""
        quiz = QuizService.get_quiz(quiz_id)
        if not isinstance(payload, Mapping):
            raise ValidationError("Request body must be a JSON object")

        if 'title' in payload:
            quiz.title = _require_text(payload, 'title', "Title")
        if 'description' in payload:
            description = payload.get('description')
            quiz.description = description.strip() or None if isinstance(description, str) else None
        if 'time_limit' in payload:
            quiz.time_limit = _parse_positive_int(payload.get('time_limit'), "time_limit", default=None)
        if 'is_published' in payload:
            quiz.is_published = bool(payload['is_published'])

        _commit("update quiz")
        current_app.logger.info(f"Quiz updated: ID={quiz.id}, Published={quiz.is_published}")
        return quiz

    @staticmethod
    def delete_quiz(quiz_id: int) -> None:
        quiz = QuizService.get_quiz(quiz_id)
        db.session.delete(quiz)
        _commit("delete quiz")
        current_app.logger.info(f"Quiz deleted: ID={quiz_id}")

    @staticmethod
    def list_questions(quiz_id: int) -> list:
        return list(QuizService.get_quiz(quiz_id).questions)

    @staticmethod
    def add_question(quiz_id: int, payload: Mapping) -> Question:
        """Append a question after the quiz's last one."""
        quiz = QuizService.get_quiz(quiz_id)

        last_order = db.session.query(func.max(Question.order_index)).filter(
            Question.quiz_id == quiz.id
        ).scalar()
        question = build_question(payload, order_index=(last_order or 0) + 1)
        question.quiz_id = quiz.id

        db.session.add(question)
        _commit("create question")

        current_app.logger.info(
            f"Question added: ID={question.id}, Quiz={quiz.id}, Type={question.question_type}, Order={question.order_index}"
        )
        return question

    @staticmethod
    def record_attempt(quiz_id: int, user_id: int, result: GradingResult,
                       started_at: datetime = None) -> QuizAttempt:
        """
        Persist a graded submission as a new attempt with all its answers.

        Raises:
            NotFoundError: if the quiz or the user does not exist
            PersistenceError: if the write fails; nothing is saved
        """
        QuizService.get_quiz(quiz_id)
        if db.session.get(User, user_id) is None:
            raise NotFoundError(f"User {user_id} not found")

        completed_at = datetime.utcnow()
        attempt = QuizAttempt(
            quiz_id=quiz_id,
            user_id=user_id,
            score=result.score,
            total_points=result.total_points,
            status=AttemptStatus.COMPLETED,
            started_at=started_at or completed_at,
            completed_at=completed_at,
            answers=[
                Answer(
                    question_id=graded.question_id,
                    selected_text=graded.selected_text,
                    option_id=graded.option_id,
                    is_correct=graded.is_correct,
                    points_awarded=graded.points_awarded,
                )
                for graded in result.answers
            ],
        )
        db.session.add(attempt)
        _commit("record attempt")
        return attempt

    @staticmethod
    def submit_attempt(quiz_id: int, user_id: int, answers, started_at: datetime = None):
        """
        Grade a submission and record it.

        Returns:
            Tuple of (QuizAttempt, GradingResult)
        """
        quiz = QuizService.get_quiz(quiz_id)
        if not isinstance(answers, Mapping):
            current_app.logger.warning(
                f"Quiz {quiz_id}: answers were {type(answers).__name__}, grading as unanswered"
            )
            answers = {}

        result = grade(quiz.questions, answers)
        attempt = QuizService.record_attempt(quiz.id, user_id, result, started_at=started_at)

        current_app.logger.info(
            f"Attempt recorded: ID={attempt.id}, Quiz={quiz.id}, User={user_id}, "
            f"Score={result.score}/{result.total_points} ({result.percentage}%)"
        )
        return attempt, result

    @staticmethod
    def list_attempts(quiz_id: int) -> list:
        quiz = QuizService.get_quiz(quiz_id)
        return quiz.attempts.order_by(QuizAttempt.started_at.desc(), QuizAttempt.id.desc()).all()

    @staticmethod
    def debug_snapshot(quiz_id: int) -> dict:
        """Quiz, its full attempt history and summary statistics."""
        quiz = QuizService.get_quiz(quiz_id)
        attempts = QuizService.list_attempts(quiz_id)

        return {
            'quiz': quiz.to_dict(include_questions=True),
            'attempts': [attempt.to_dict(include_user=True) for attempt in attempts],
            'summary': {
                'total_questions': quiz.get_question_count(),
                'total_points': quiz.get_total_points(),
                'total_attempts': len(attempts),
                'average_score': (
                    sum(a.score for a in attempts) / len(attempts) if attempts else 0
                ),
            },
        }
