"""
State machine for a taker working through a quiz.

    LOADING -> ERROR
    LOADING -> READY -> RESULTS

While READY the taker moves a cursor over the questions and records answers.
A quiz with a time limit arms a single-shot timer that submits once when it
expires. Submission happens at most once per session; RESULTS is terminal.
"""
import math
import threading
import time
from typing import Callable, Optional

from quizhub.errors import QuizHubError, ValidationError


class SessionState:
    LOADING = 'LOADING'
    ERROR = 'ERROR'
    READY = 'READY'
    RESULTS = 'RESULTS'


class SessionStateError(QuizHubError):
    """The session is not in a state that allows the operation."""

    status_code = 409


class SessionClosedError(SessionStateError):
    """The session has been submitted and accepts no further changes."""


class TakingSession:
    """
    One taker's pass through one quiz.

    Args:
        submit_callback: Called as ``submit_callback(answers, auto)`` with a
            copy of the recorded answers; its return value becomes ``result``
        clock: Monotonic clock in seconds
        timer_factory: ``threading.Timer`` compatible constructor
    """

    def __init__(self, submit_callback: Callable, clock: Callable[[], float] = time.monotonic,
                 timer_factory=threading.Timer):
        self.state = SessionState.LOADING
        self.error: Optional[str] = None
        self.quiz = None
        self.questions = []
        self.answers = {}
        self.cursor = 0
        self.result = None
        self.auto_submitted = False

        self._submit_callback = submit_callback
        self._clock = clock
        self._timer_factory = timer_factory
        self._timer = None
        self._deadline: Optional[float] = None
        self._lock = threading.Lock()
        self._submitting = False

    # Loading

    def load(self, fetch_quiz: Callable) -> str:
        """
        Fetch the quiz and move to READY, or to ERROR if it cannot be taken.

        Args:
            fetch_quiz: Zero-argument callable returning the quiz

        Returns:
            The new state
        """
        if self.state != SessionState.LOADING:
            raise SessionStateError(f"Cannot load a session in state {self.state}")

        try:
            quiz = fetch_quiz()
        except QuizHubError as e:
            return self._fail(e.message)

        if not quiz.is_published:
            return self._fail("This quiz is not published yet.")

        self.quiz = quiz
        self.questions = list(quiz.questions)
        self.cursor = 0
        self.state = SessionState.READY

        if quiz.time_limit:
            self._arm_timer(quiz.time_limit * 60)
        return self.state

    def _fail(self, message: str) -> str:
        self.error = message
        self.state = SessionState.ERROR
        return self.state

    # Navigation and answers

    def _ensure_ready(self) -> None:
        if self.state == SessionState.RESULTS:
            raise SessionClosedError("This quiz has already been submitted")
        if self.state != SessionState.READY:
            raise SessionStateError(f"Session is {self.state}, not READY")

    @property
    def current_question(self):
        if not self.questions:
            return None
        return self.questions[self.cursor]

    @property
    def progress(self) -> tuple:
        """(1-based position, question count)."""
        return (self.cursor + 1 if self.questions else 0), len(self.questions)

    @property
    def is_last(self) -> bool:
        return self.cursor >= len(self.questions) - 1

    def next(self) -> int:
        self._ensure_ready()
        if self.cursor < len(self.questions) - 1:
            self.cursor += 1
        return self.cursor

    def previous(self) -> int:
        self._ensure_ready()
        if self.cursor > 0:
            self.cursor -= 1
        return self.cursor

    def answer(self, question_id, value) -> None:
        self._ensure_ready()
        if not any(str(q.id) == str(question_id) for q in self.questions):
            raise ValidationError(f"Question {question_id} is not part of this quiz")
        self.answers[str(question_id)] = value

    # Timer

    def _arm_timer(self, seconds: int) -> None:
        self._deadline = self._clock() + seconds
        self._timer = self._timer_factory(seconds, self._on_time_up)
        self._timer.daemon = True
        self._timer.start()

    def _on_time_up(self) -> None:
        try:
            self.submit(auto=True)
        except SessionStateError:
            # Already submitted or closed while the timer was firing
            pass
        except QuizHubError as e:
            self.error = e.message

    def cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    @property
    def seconds_remaining(self) -> Optional[int]:
        """Whole seconds left, or None for an untimed quiz."""
        if self._deadline is None:
            return None
        if self.state == SessionState.RESULTS:
            return 0
        return max(0, math.ceil(self._deadline - self._clock()))

    # Submission

    def submit(self, auto: bool = False):
        """
        Submit the recorded answers.

        Runs the submit callback at most once, whether triggered by the taker
        or by the timer. If the callback raises, the session stays READY and
        can be submitted again.

        Returns:
            The callback's result
        """
        with self._lock:
            self._ensure_ready()
            if self._submitting:
                raise SessionStateError("A submission is already in progress")
            self._submitting = True
            answers = dict(self.answers)

        if not auto:
            self.cancel_timer()

        try:
            result = self._submit_callback(answers, auto)
        except Exception:
            with self._lock:
                self._submitting = False
            raise

        with self._lock:
            self.result = result
            self.auto_submitted = auto
            self.state = SessionState.RESULTS
            self._submitting = False
            self._timer = None
        return result

    def close(self) -> None:
        """Abandon the session without submitting."""
        self.cancel_timer()
