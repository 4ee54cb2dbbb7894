"""Quiz lifecycle state machine.

Drives one quiz attempt through its phases:

    UPLOAD -> GENERATING -> QUIZ -> GRADING -> RESULTS

with the failure edges GENERATING -> UPLOAD and GRADING -> QUIZ, and the reset
edge RESULTS -> UPLOAD. The current state is a single tagged variant carrying
only the data that phase needs, so combinations such as "results without a
result" cannot be represented.
"""

import asyncio
import functools
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, ClassVar, Mapping, Optional, Sequence, Union

from quizgenius.errors import GenerationFailure, GradingFailure, InvalidTransitionError
from quizgenius.models.quiz import PublicQuestion, Question, QuizConfiguration, QuizResult
from quizgenius.orchestrators.generation import GenerationOrchestrator
from quizgenius.orchestrators.grading import GradingOrchestrator
from quizgenius.session import AdministrationSession

logger = logging.getLogger(__name__)

GENERATING_MESSAGE = "Analyzing your lesson and crafting questions..."
GRADING_MESSAGE = "Grading your answers and generating feedback..."


class Phase(str, Enum):
    """Lifecycle phases."""

    UPLOAD = "UPLOAD"
    GENERATING = "GENERATING"
    QUIZ = "QUIZ"
    GRADING = "GRADING"
    RESULTS = "RESULTS"


@dataclass(frozen=True)
class AwaitingUpload:
    """Waiting for a configuration; ``notice`` explains a failed generation."""

    notice: Optional[str] = None
    phase: ClassVar[Phase] = Phase.UPLOAD


@dataclass(frozen=True)
class Generating:
    config: QuizConfiguration
    loading_message: str = GENERATING_MESSAGE
    phase: ClassVar[Phase] = Phase.GENERATING


@dataclass(frozen=True)
class InQuiz:
    """The quiz is being answered; ``notice`` explains a failed grading."""

    session: AdministrationSession
    notice: Optional[str] = None
    phase: ClassVar[Phase] = Phase.QUIZ


@dataclass(frozen=True)
class Grading:
    session: AdministrationSession
    loading_message: str = GRADING_MESSAGE
    phase: ClassVar[Phase] = Phase.GRADING


@dataclass(frozen=True)
class ShowingResults:
    result: QuizResult
    phase: ClassVar[Phase] = Phase.RESULTS


LifecycleState = Union[AwaitingUpload, Generating, InQuiz, Grading, ShowingResults]
Listener = Callable[[LifecycleState], None]


@dataclass(frozen=True)
class LifecycleView:
    """What the presentation layer may see of the current state."""

    phase: Phase
    questions: list[PublicQuestion] = field(default_factory=list)
    answers: dict[int, str] = field(default_factory=dict)
    loading_message: Optional[str] = None
    result: Optional[QuizResult] = None
    notice: Optional[str] = None
    time_limit: int = 0
    remaining_seconds: Optional[float] = None
    expired: bool = False


class QuizLifecycle:
    """Top-level controller composing generation, administration and grading.

    Only one attempt is in flight at a time. Calling an operation that the
    current phase does not allow raises ``InvalidTransitionError``.
    """

    def __init__(
        self,
        generation: GenerationOrchestrator,
        grading: GradingOrchestrator,
        *,
        rng: Optional[random.Random] = None,
    ):
        self._generation = generation
        self._grading = grading
        self._rng = rng
        self._state: LifecycleState = AwaitingUpload()
        self._time_limit = 0
        self._listeners: list[Listener] = []
        self._pending_submission: Optional[asyncio.Task] = None

    # Inspection

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def time_limit(self) -> int:
        """Time limit of the current attempt in seconds, 0 when none is active."""
        return self._time_limit

    @property
    def questions(self) -> list[Question]:
        """Full question set of the current attempt, including answers."""
        if isinstance(self._state, (InQuiz, Grading)):
            return list(self._state.session.questions)
        return []

    @property
    def result(self) -> Optional[QuizResult]:
        if isinstance(self._state, ShowingResults):
            return self._state.result
        return None

    @property
    def session(self) -> Optional[AdministrationSession]:
        if isinstance(self._state, (InQuiz, Grading)):
            return self._state.session
        return None

    def view(self) -> LifecycleView:
        """
        Build the presentation view of the current state.

        Questions are exposed without their answer-bearing fields.
        """
        state = self._state

        if isinstance(state, InQuiz):
            return LifecycleView(
                phase=state.phase,
                questions=state.session.public_questions(),
                answers=state.session.answers,
                notice=state.notice,
                time_limit=self._time_limit,
                remaining_seconds=state.session.remaining_seconds(),
                expired=state.session.expired,
            )
        if isinstance(state, (Generating, Grading)):
            return LifecycleView(
                phase=state.phase,
                loading_message=state.loading_message,
                time_limit=self._time_limit,
            )
        if isinstance(state, ShowingResults):
            return LifecycleView(
                phase=state.phase, result=state.result, time_limit=self._time_limit
            )
        return LifecycleView(phase=state.phase, notice=state.notice)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call ``listener`` with the new state after every transition.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Transitions

    def _require(self, phase: Phase) -> LifecycleState:
        if self._state.phase != phase:
            raise InvalidTransitionError(
                f"Operation requires phase {phase.value}, current phase is "
                f"{self._state.phase.value}"
            )
        return self._state

    def _set_state(self, new_state: LifecycleState) -> None:
        logger.info("Quiz lifecycle: %s -> %s", self._state.phase.value, new_state.phase.value)
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)

    async def submit_configuration(self, config: QuizConfiguration) -> LifecycleState:
        """
        Generate a quiz from a configuration and start administering it.

        Args:
            config: Configuration from the upload step

        Returns:
            The resulting state: InQuiz on success, AwaitingUpload with a
            notice on failure
        """
        self._require(Phase.UPLOAD)
        self._set_state(Generating(config))

        outcome = await self._generation.generate(config)

        if isinstance(outcome, GenerationFailure):
            logger.warning("Generation failed: %s", outcome.reason)
            self._time_limit = 0
            self._set_state(AwaitingUpload(notice=GenerationFailure.user_message))
            return self._state

        self._time_limit = config.time_limit
        session = AdministrationSession(outcome, config.time_limit, rng=self._rng)
        self._enter_quiz(session)
        return self._state

    def _enter_quiz(self, session: AdministrationSession, notice: Optional[str] = None) -> None:
        self._set_state(InQuiz(session, notice))
        session.start_countdown(functools.partial(self._on_time_expired, session))

    def record_answer(self, question_id: int, answer: str) -> None:
        self._require(Phase.QUIZ).session.record_answer(question_id, answer)

    def record_matching(self, question_id: int, mapping: Mapping[str, str]) -> str:
        return self._require(Phase.QUIZ).session.record_matching(question_id, mapping)

    def record_sequence(self, question_id: int, items: Sequence[str]) -> str:
        return self._require(Phase.QUIZ).session.record_sequence(question_id, items)

    async def submit_quiz(self) -> LifecycleState:
        """
        Submit the collected answers for grading.

        Returns:
            ShowingResults on success, InQuiz with a notice on failure
        """
        state = self._require(Phase.QUIZ)
        return await self._submit(state.session)

    async def _submit(self, session: AdministrationSession) -> LifecycleState:
        state = self._state
        if not isinstance(state, InQuiz) or state.session is not session:
            # A forced submission lost the race against a manual one
            logger.debug("Skipping submission for a quiz that is no longer active")
            return state

        session.cancel_countdown()
        answers = session.finalize()
        self._set_state(Grading(session))

        outcome = await self._grading.grade(session.questions, answers)

        if isinstance(outcome, GradingFailure):
            logger.warning("Grading failed: %s", outcome.reason)
            self._enter_quiz(session, notice=GradingFailure.user_message)
        else:
            self._set_state(ShowingResults(outcome))
        return self._state

    def _on_time_expired(self, session: AdministrationSession) -> None:
        state = self._state
        if not isinstance(state, InQuiz) or state.session is not session:
            logger.debug("Ignoring countdown expiry for an inactive quiz")
            return
        logger.info("Time limit reached, submitting answers")
        task = asyncio.ensure_future(self._submit(session))
        task.add_done_callback(self._log_submission_error)
        self._pending_submission = task

    @staticmethod
    def _log_submission_error(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Forced submission failed", exc_info=error)

    async def wait_for_submission(self) -> Optional[LifecycleState]:
        """
        Wait for a timer-forced submission to finish.

        Returns:
            The state after the forced submission, or None if none is pending
        """
        task = self._pending_submission
        if task is None:
            return None
        try:
            return await task
        finally:
            if self._pending_submission is task:
                self._pending_submission = None

    def restart(self) -> LifecycleState:
        """Discard the finished attempt and wait for a new configuration."""
        self._require(Phase.RESULTS)
        self._time_limit = 0
        self._set_state(AwaitingUpload())
        return self._state
