"""
``flask quiz ...`` commands: database setup and a terminal quiz taker.
"""
import click
from flask import current_app
from flask.cli import AppGroup

from quizhub import db
from quizhub.auth.identity import ensure_default_user
from quizhub.errors import QuizHubError
from quizhub.quiz.models import QuestionType
from quizhub.quiz.service import QuizService
from quizhub.quiz.taking import SessionState, TakingSession

quiz_cli = AppGroup('quiz', help="Manage and take quizzes.")


@quiz_cli.command('init-db')
def init_db():
    """Create all tables and the default user."""
    db.create_all()
    user = ensure_default_user()
    click.echo(f"Database ready. Default user: {user.email} (id={user.id})")


@quiz_cli.command('list')
def list_quizzes():
    """List quizzes, newest first."""
    quizzes = QuizService.list_quizzes()
    if not quizzes:
        click.echo("No quizzes yet.")
        return
    for quiz in quizzes:
        status = 'published' if quiz['is_published'] else 'draft'
        click.echo(
            f"[{quiz['id']}] {quiz['title']} ({status}, "
            f"{quiz['question_count']} questions, {quiz['attempt_count']} attempts)"
        )


def _prompt_for_answer(question):
    """Ask for one answer; returns the value to submit or a navigation command."""
    if question.question_type == QuestionType.MULTIPLE_CHOICE:
        for idx, option in enumerate(question.options, start=1):
            click.echo(f"  {idx}. {option.option_text}")
    elif question.question_type == QuestionType.TRUE_FALSE:
        click.echo("  true / false")

    raw = click.prompt("Answer (n=next, p=previous, s=submit)", default='', show_default=False)
    command = raw.strip().lower()
    if command in ('n', 'p', 's'):
        return command, None

    if question.question_type == QuestionType.MULTIPLE_CHOICE and command.isdigit():
        position = int(command)
        if 1 <= position <= len(question.options):
            return 'answer', {'option_id': question.options[position - 1].id}
    return 'answer', raw


@quiz_cli.command('take')
@click.argument('quiz_id', type=int)
@click.option('--user-id', type=int, default=None, help="Take the quiz as this user instead of the default user.")
def take_quiz(quiz_id, user_id):
    """Take QUIZ_ID interactively in the terminal."""
    app = current_app._get_current_object()
    taker_id = user_id or ensure_default_user().id

    def submit(answers, auto):
        # The timer fires on its own thread, which needs its own app context
        with app.app_context():
            attempt, result = QuizService.submit_attempt(quiz_id, taker_id, answers)
        if auto:
            click.echo("\nTime is up, your answers were submitted.")
        return result

    session = TakingSession(submit)
    session.load(lambda: QuizService.get_quiz(quiz_id))
    if session.state == SessionState.ERROR:
        raise click.ClickException(session.error)

    click.echo(f"{session.quiz.title}")
    if session.quiz.description:
        click.echo(session.quiz.description)

    try:
        while session.state == SessionState.READY:
            question = session.current_question
            if question is None:
                session.submit()
                break

            position, total = session.progress
            remaining = session.seconds_remaining
            timer = f" | {remaining // 60:02d}:{remaining % 60:02d} left" if remaining is not None else ""
            click.echo(f"\nQuestion {position} of {total} ({question.points} pts){timer}")
            click.echo(question.question_text)

            action, value = _prompt_for_answer(question)
            if session.state != SessionState.READY:
                break
            if action == 'n':
                session.next()
            elif action == 'p':
                session.previous()
            elif action == 's':
                session.submit()
            else:
                session.answer(question.id, value)
                if not session.is_last:
                    session.next()
    except QuizHubError as e:
        raise click.ClickException(e.message)
    finally:
        session.close()

    if session.result is None:
        raise click.ClickException(session.error or "The quiz was not submitted")

    result = session.result
    click.echo(f"\nScore: {result.score}/{result.total_points} ({result.percentage}%)")
