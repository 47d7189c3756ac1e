"""
Quiz module for creating quizzes and grading attempts.

Administrators author quizzes through the JSON API; takers submit answers
and receive a score computed by ``quizhub.quiz.grading``.
"""
from flask import Blueprint
from quizhub.config import config

quiz_bp = Blueprint('quiz', __name__, url_prefix=config.API_PREFIX)

from quizhub.quiz import routes  # noqa: E402,F401
