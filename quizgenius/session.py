"""Administration session for one quiz attempt.

The session owns the question set while it is being answered: it keeps the
respondent's answers, serializes structured answers (matching, sequencing)
into the single string the grader expects, and runs the optional countdown.
The countdown is an asyncio timer that pauses when cancelled, so an attempt
that returns to the quiz after a failed grading resumes with the time it had
left.
"""

import asyncio
import logging
import random
from typing import Callable, Mapping, Optional, Sequence

from quizgenius.errors import QuizExpiredError, UnknownQuestionError
from quizgenius.models.quiz import PublicQuestion, Question, QuestionType, UserAnswer

logger = logging.getLogger(__name__)

PAIR_SEPARATOR = "; "
MATCH_SEPARATOR = " => "
SEQUENCE_SEPARATOR = " -> "


def serialize_matching(left_items: Sequence[str], mapping: Mapping[str, str]) -> str:
    """
    Serialize a matching answer in the question's left-item order.

    Args:
        left_items: Left items in question order
        mapping: Respondent's choice of right item per left item

    Returns:
        String like "left => right; left => right"; unmatched items are skipped
    """
    return PAIR_SEPARATOR.join(
        f"{left}{MATCH_SEPARATOR}{mapping[left]}"
        for left in left_items
        if mapping.get(left)
    )


def serialize_sequence(items: Sequence[str]) -> str:
    """Serialize an ordering as "first -> second -> third"."""
    return SEQUENCE_SEPARATOR.join(items)


class AdministrationSession:
    """Answers and countdown for one attempt at a generated question set."""

    def __init__(
        self,
        questions: Sequence[Question],
        time_limit: float = 0,
        *,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            questions: Question set in presentation order
            time_limit: Seconds allowed, 0 for no limit
            rng: Random source for shuffling matching and sequencing items
        """
        if not questions:
            raise ValueError("A quiz session needs at least one question")
        if time_limit < 0:
            raise ValueError("time_limit cannot be negative")

        self.questions: tuple[Question, ...] = tuple(questions)
        self.time_limit = time_limit
        self.expired = False

        rng = rng or random.Random()
        # Shuffled once so the layout is stable for the whole attempt
        self._public = [q.public_view(rng) for q in self.questions]
        self._by_id = {q.id: q for q in self.questions}
        self._answers: dict[int, str] = {}

        self._remaining: Optional[float] = float(time_limit) if time_limit > 0 else None
        self._deadline: Optional[float] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    # Answers

    @property
    def answers(self) -> dict[int, str]:
        """Copy of the answers recorded so far, keyed by question id."""
        return dict(self._answers)

    @property
    def answered_count(self) -> int:
        return sum(1 for answer in self._answers.values() if answer.strip())

    def public_questions(self) -> list[PublicQuestion]:
        """Questions as they may be shown before submission."""
        return list(self._public)

    def _question(self, question_id: int) -> Question:
        try:
            return self._by_id[question_id]
        except KeyError:
            raise UnknownQuestionError(f"Question {question_id} is not part of this quiz") from None

    def _editable(self, question_id: int) -> Question:
        question = self._question(question_id)
        if self.expired:
            raise QuizExpiredError("Time is up, answers can no longer be changed")
        return question

    def record_answer(self, question_id: int, answer: str) -> None:
        """Store an answer; a later answer for the same question replaces it."""
        self._editable(question_id)
        self._answers[question_id] = answer

    def record_matching(self, question_id: int, mapping: Mapping[str, str]) -> str:
        """
        Store a matching answer.

        Args:
            question_id: Id of a matching question
            mapping: Chosen right item for each left item

        Returns:
            The serialized answer
        """
        question = self._editable(question_id)
        if question.question_type != QuestionType.MATCHING:
            raise ValueError(f"Question {question_id} is not a matching question")

        answer = serialize_matching([pair.left for pair in question.matching_pairs], mapping)
        self._answers[question_id] = answer
        return answer

    def record_sequence(self, question_id: int, items: Sequence[str]) -> str:
        """
        Store a sequencing answer.

        Args:
            question_id: Id of a sequencing question
            items: Items in the order chosen by the respondent

        Returns:
            The serialized answer
        """
        question = self._editable(question_id)
        if question.question_type != QuestionType.SEQUENCING:
            raise ValueError(f"Question {question_id} is not a sequencing question")

        answer = serialize_sequence(items)
        self._answers[question_id] = answer
        return answer

    def answer_for(self, question_id: int) -> str:
        self._question(question_id)
        return self._answers.get(question_id, "")

    def finalize(self) -> list[UserAnswer]:
        """One answer per question in question order, "" when unanswered."""
        return [
            UserAnswer(question_id=q.id, answer=self._answers.get(q.id, ""))
            for q in self.questions
        ]

    # Countdown

    @property
    def has_time_limit(self) -> bool:
        return self._remaining is not None

    @property
    def countdown_active(self) -> bool:
        return self._timer is not None

    def remaining_seconds(self) -> Optional[float]:
        """Seconds left, or None when the quiz is untimed."""
        if self._remaining is None:
            return None
        if self._timer is not None:
            return max(0.0, self._deadline - self._loop.time())
        return self._remaining

    def start_countdown(self, on_expire: Callable[[], None]) -> bool:
        """
        Schedule ``on_expire`` for when the remaining time runs out.

        Must be called from inside a running event loop.

        Args:
            on_expire: Called once when time is up

        Returns:
            True if a countdown was scheduled; False for untimed, expired or
            already running sessions
        """
        if self._remaining is None or self.expired or self._timer is not None:
            return False

        self._loop = asyncio.get_running_loop()
        self._deadline = self._loop.time() + self._remaining
        self._timer = self._loop.call_later(self._remaining, self._expire, on_expire)
        logger.debug("Countdown started with %.1fs remaining", self._remaining)
        return True

    def cancel_countdown(self) -> None:
        """Stop the countdown, keeping the time that was left."""
        if self._timer is None:
            return

        self._timer.cancel()
        self._remaining = max(0.0, self._deadline - self._loop.time())
        self._timer = None
        self._deadline = None
        if self._remaining <= 0:
            self.expired = True
        logger.debug("Countdown paused with %.1fs remaining", self._remaining)

    def _expire(self, on_expire: Callable[[], None]) -> None:
        self._timer = None
        self._deadline = None
        self._remaining = 0.0
        self.expired = True
        logger.info(
            "Time limit reached with %d of %d questions answered",
            self.answered_count,
            len(self.questions),
        )
        on_expire()
