"""
Database models for quiz functionality.

Supports multiple question types:
- MULTIPLE_CHOICE: Questions with options, at most one marked correct
- TRUE_FALSE: Two fixed options, "true" and "false"
- SHORT_ANSWER: Free text, kept for manual grading and never auto-scored
"""
from datetime import datetime
from quizhub import db


class QuestionType:
    """Question type identifiers as stored in ``Question.question_type``."""

    MULTIPLE_CHOICE = 'MULTIPLE_CHOICE'
    TRUE_FALSE = 'TRUE_FALSE'
    SHORT_ANSWER = 'SHORT_ANSWER'

    ALL = (MULTIPLE_CHOICE, TRUE_FALSE, SHORT_ANSWER)
    # Types graded by comparing against the single correct option
    OPTION_BASED = (MULTIPLE_CHOICE, TRUE_FALSE)


class AttemptStatus:
    COMPLETED = 'COMPLETED'


class Quiz(db.Model):
    """
    Model for quizzes.

    A quiz is created as a draft and only becomes takeable once published.
    """
    __tablename__ = "quizzes"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    time_limit = db.Column(db.Integer, nullable=True)  # Minutes, optional
    is_published = db.Column(db.Boolean, default=False, nullable=False, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete='SET NULL'), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    creator = db.relationship("User", foreign_keys=[created_by])
    questions = db.relationship(
        "Question", backref="quiz", cascade="all, delete-orphan",
        order_by="Question.order_index"
    )
    attempts = db.relationship("QuizAttempt", backref="quiz", lazy="dynamic", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Quiz {self.id}: {self.title}>"

    def get_total_points(self) -> int:
        """Calculate total points for all questions."""
        return sum(q.points for q in self.questions)

    def get_question_count(self) -> int:
        return len(self.questions)

    def get_attempt_count(self) -> int:
        return self.attempts.count()

    def to_dict(self, include_questions: bool = False) -> dict:
        data = {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'time_limit': self.time_limit,
            'is_published': self.is_published,
            'created_by': self.created_by,
            'creator': self.creator.to_summary() if self.creator else None,
            'question_count': self.get_question_count(),
            'total_points': self.get_total_points(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_questions:
            data['questions'] = [q.to_dict() for q in self.questions]
        return data


class Question(db.Model):
    """
    Model for quiz questions.

    ``order_index`` is 1-based and unique within a quiz.
    """
    __tablename__ = "quiz_questions"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id", ondelete='CASCADE'), nullable=False, index=True)
    question_type = db.Column(db.String(50), nullable=False)
    question_text = db.Column(db.Text, nullable=False)
    points = db.Column(db.Integer, nullable=False, default=1)
    order_index = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    options = db.relationship(
        "QuestionOption", backref="question", cascade="all, delete-orphan",
        order_by="QuestionOption.order_index"
    )
    answers = db.relationship("Answer", backref="question", lazy="dynamic", cascade="all, delete-orphan")

    __table_args__ = (
        db.UniqueConstraint('quiz_id', 'order_index', name='uq_question_quiz_order'),
    )

    def __repr__(self) -> str:
        return f"<Question {self.id}: {self.question_type}>"

    def get_correct_option(self):
        """First option flagged correct, or None."""
        return next((opt for opt in self.options if opt.is_correct), None)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'quiz_id': self.quiz_id,
            'question_type': self.question_type,
            'question_text': self.question_text,
            'points': self.points,
            'order_index': self.order_index,
            'options': [opt.to_dict() for opt in self.options],
        }


class QuestionOption(db.Model):
    """
    Model for the selectable answers of MULTIPLE_CHOICE and TRUE_FALSE questions.
    """
    __tablename__ = "quiz_question_options"

    id = db.Column(db.Integer, primary_key=True)
    question_id = db.Column(db.Integer, db.ForeignKey("quiz_questions.id", ondelete='CASCADE'), nullable=False, index=True)
    option_text = db.Column(db.Text, nullable=False)
    is_correct = db.Column(db.Boolean, default=False, nullable=False)
    order_index = db.Column(db.Integer, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('question_id', 'order_index', name='uq_option_question_order'),
    )

    def __repr__(self) -> str:
        return f"<QuestionOption {self.id}: {self.option_text[:50]}>"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'option_text': self.option_text,
            'is_correct': self.is_correct,
            'order_index': self.order_index,
        }


class QuizAttempt(db.Model):
    """
    A graded submission. Rows are written once and never updated.
    """
    __tablename__ = "quiz_attempts"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id", ondelete='CASCADE'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete='CASCADE'), nullable=False, index=True)
    score = db.Column(db.Integer, nullable=False, default=0)  # Points earned
    total_points = db.Column(db.Integer, nullable=False, default=0)  # Points available
    status = db.Column(db.String(20), nullable=False, default=AttemptStatus.COMPLETED)
    started_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    completed_at = db.Column(db.DateTime, nullable=True)

    # Relationships
    user = db.relationship("User", foreign_keys=[user_id])
    answers = db.relationship("Answer", backref="attempt", cascade="all, delete-orphan", order_by="Answer.id")

    __table_args__ = (
        db.Index('ix_quiz_attempts_quiz_user', 'quiz_id', 'user_id'),
    )

    def __repr__(self) -> str:
        return f"<QuizAttempt {self.id}: User {self.user_id}, Quiz {self.quiz_id}>"

    def to_dict(self, include_user: bool = False) -> dict:
        data = {
            'id': self.id,
            'quiz_id': self.quiz_id,
            'user_id': self.user_id,
            'score': self.score,
            'total_points': self.total_points,
            'status': self.status,
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'answers': [answer.to_dict() for answer in self.answers],
        }
        if include_user:
            data['user'] = self.user.to_summary() if self.user else None
        return data


class Answer(db.Model):
    """
    Model for a taker's answer to one question within an attempt.
    """
    __tablename__ = "quiz_answers"

    id = db.Column(db.Integer, primary_key=True)
    attempt_id = db.Column(db.Integer, db.ForeignKey("quiz_attempts.id", ondelete='CASCADE'), nullable=False, index=True)
    question_id = db.Column(db.Integer, db.ForeignKey("quiz_questions.id", ondelete='CASCADE'), nullable=False, index=True)
    selected_text = db.Column(db.Text, nullable=False, default='')  # Empty when unanswered
    option_id = db.Column(db.Integer, db.ForeignKey("quiz_question_options.id", ondelete='SET NULL'), nullable=True)
    is_correct = db.Column(db.Boolean, nullable=False, default=False)
    points_awarded = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.UniqueConstraint('attempt_id', 'question_id', name='uq_attempt_question'),
    )

    def __repr__(self) -> str:
        return f"<Answer {self.id}: Question {self.question_id}>"

    def to_dict(self) -> dict:
        return {
            'question_id': self.question_id,
            'selected_text': self.selected_text,
            'option_id': self.option_id,
            'is_correct': self.is_correct,
            'points_awarded': self.points_awarded,
        }
