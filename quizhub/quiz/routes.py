"""
JSON routes for quiz authoring and taking.

Errors raised by the service layer (ValidationError, NotFoundError,
PersistenceError) are rendered by the handlers registered in create_app.
"""
from datetime import datetime

from flask import current_app, jsonify, request

from quizhub.auth.identity import resolve_user_id
from quizhub.errors import ValidationError
from quizhub.quiz import quiz_bp
from quizhub.quiz.service import QuizService


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _parse_started_at(value):
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00')).replace(tzinfo=None)
    except ValueError:
        current_app.logger.warning(f"Ignoring unparseable started_at: {value!r}")
        return None


@quiz_bp.route('/quizzes', methods=['GET'])
def list_quizzes():
    """List all quizzes, newest first."""
    quizzes = QuizService.list_quizzes()
    return jsonify({'success': True, 'quizzes': quizzes}), 200


@quiz_bp.route('/quizzes', methods=['POST'])
def create_quiz():
    """
    Create a quiz with its questions.

    Request body:
    {
        "title": "Capitals",
        "description": "Optional description",
        "time_limit": 10,  // Optional, minutes
        "questions": [
            {
                "text": "Capital of France?",
                "type": "MULTIPLE_CHOICE",
                "points": 1,
                "options": ["Paris", "Lyon", "Nice"],
                "correct_answers": ["Paris"]
            },
            {"text": "The earth is round.", "type": "TRUE_FALSE", "correct_answer": "true"},
            {"text": "Explain photosynthesis.", "type": "SHORT_ANSWER", "points": 5}
        ]
    }
    """
    data = _json_body()
    creator_id = resolve_user_id()
    quiz = QuizService.create_quiz(data, creator_id=creator_id)

    return jsonify({
        'success': True,
        'message': 'Quiz created successfully',
        'quiz': quiz.to_dict(include_questions=True)
    }), 201


@quiz_bp.route('/quizzes/<int:quiz_id>', methods=['GET'])
def get_quiz(quiz_id):
    """Get quiz details including all questions and options."""
    quiz = QuizService.get_quiz(quiz_id)
    return jsonify({'success': True, 'quiz': quiz.to_dict(include_questions=True)}), 200


@quiz_bp.route('/quizzes/<int:quiz_id>', methods=['PUT', 'PATCH'])
def update_quiz(quiz_id):
    """Update quiz details, including publishing or unpublishing it."""
    quiz = QuizService.update_quiz(quiz_id, _json_body())
    return jsonify({
        'success': True,
        'message': 'Quiz updated successfully',
        'quiz': quiz.to_dict()
    }), 200


@quiz_bp.route('/quizzes/<int:quiz_id>', methods=['DELETE'])
def delete_quiz(quiz_id):
    QuizService.delete_quiz(quiz_id)
    return jsonify({'success': True, 'message': 'Quiz deleted successfully'}), 200


@quiz_bp.route('/quizzes/<int:quiz_id>/questions', methods=['GET'])
def list_questions(quiz_id):
    questions = QuizService.list_questions(quiz_id)
    return jsonify({
        'success': True,
        'quiz_id': quiz_id,
        'questions': [q.to_dict() for q in questions]
    }), 200


@quiz_bp.route('/quizzes/<int:quiz_id>/questions', methods=['POST'])
def add_question(quiz_id):
    """
    Add a question at the end of a quiz.

    Request body:
    {
        "text": "What is 2+2?",
        "type": "MULTIPLE_CHOICE",
        "points": 1,
        "options": [
            {"text": "3", "is_correct": false},
            {"text": "4", "is_correct": true}
        ]
    }
    """
    question = QuizService.add_question(quiz_id, _json_body())
    return jsonify({
        'success': True,
        'message': 'Question added successfully',
        'question': question.to_dict()
    }), 201


@quiz_bp.route('/quizzes/<int:quiz_id>/submit', methods=['POST'])
def submit_quiz(quiz_id):
    """
    Grade and record an attempt.

    Request body:
    {
        "answers": {"12": "Paris", "13": {"option_id": 41}},
        "started_at": "2026-10-18T09:30:00Z"  // Optional
    }

    A missing or malformed answer counts as unanswered; submission always
    produces a score.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    user_id = resolve_user_id()
    attempt, result = QuizService.submit_attempt(
        quiz_id,
        user_id,
        data.get('answers') or {},
        started_at=_parse_started_at(data.get('started_at')),
    )

    return jsonify({
        'success': True,
        'attempt': attempt.to_dict(),
        'score': result.score,
        'total_points': result.total_points,
        'percentage': result.percentage,
    }), 200


@quiz_bp.route('/quizzes/<int:quiz_id>/attempts', methods=['GET'])
def list_attempts(quiz_id):
    """List every recorded attempt for a quiz, newest first."""
    quiz = QuizService.get_quiz(quiz_id)
    attempts = QuizService.list_attempts(quiz_id)
    return jsonify({
        'success': True,
        'quiz_id': quiz.id,
        'quiz_title': quiz.title,
        'attempts': [attempt.to_dict(include_user=True) for attempt in attempts]
    }), 200


@quiz_bp.route('/quizzes/<int:quiz_id>/debug', methods=['GET'])
def debug_quiz(quiz_id):
    """Diagnostic snapshot: quiz, attempt history and summary statistics."""
    snapshot = QuizService.debug_snapshot(quiz_id)
    snapshot['success'] = True
    return jsonify(snapshot), 200
