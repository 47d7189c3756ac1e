"""
Pytest configuration and fixtures for testing.
Every test gets a fresh application backed by an in-memory SQLite database.
"""
import os

import pytest

# Set test environment variables BEFORE importing the app
os.environ['FLASK_ENV'] = 'testing'
os.environ['SECRET_KEY'] = 'sfndsfojoriwew09rjfjndsknfkj'
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['API_PREFIX'] = '/api'
os.environ['DEFAULT_USER_EMAIL'] = 'admin@quiz.com'
os.environ['DEFAULT_USER_NAME'] = 'Admin User'

from quizhub import create_app, db  # noqa: E402
from quizhub.auth.identity import ensure_default_user  # noqa: E402
from quizhub.quiz.service import QuizService  # noqa: E402


@pytest.fixture
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def default_user(app):
    return ensure_default_user()


@pytest.fixture
def capitals_quiz(default_user):
    """Published quiz with one multiple-choice question worth 1 point."""
    quiz = QuizService.create_quiz({
        'title': 'Capitals',
        'questions': [
            {
                'text': 'Capital of France?',
                'type': 'MULTIPLE_CHOICE',
                'options': ['Paris', 'Lyon', 'Nice'],
                'correct_answers': ['Paris'],
            },
        ],
    }, creator_id=default_user.id)
    return QuizService.update_quiz(quiz.id, {'is_published': True})


@pytest.fixture
def mixed_quiz(default_user):
    """Published quiz with a short-answer and a multiple-choice question, 5 points each."""
    quiz = QuizService.create_quiz({
        'title': 'Biology',
        'description': 'Cells and plants',
        'time_limit': 10,
        'questions': [
            {'text': 'Explain photosynthesis.', 'type': 'SHORT_ANSWER', 'points': 5},
            {
                'text': 'Powerhouse of the cell?',
                'type': 'MULTIPLE_CHOICE',
                'points': 5,
                'options': [
                    {'text': 'Nucleus', 'is_correct': False},
                    {'text': 'Mitochondria', 'is_correct': True},
                ],
            },
        ],
    }, creator_id=default_user.id)
    return QuizService.update_quiz(quiz.id, {'is_published': True})
