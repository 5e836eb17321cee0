"""
One taker's attempt at one assessment.

The session holds the answers keyed by question index, the question the taker
is looking at, and the countdown. The countdown is an asyncio task owned by
the session: it is started with the session and cancelled when the session is
closed or a submission completes. When the time runs out the answers are
handed in automatically. Only one submit request is ever in flight, so a
manual hand-in racing the expiry results in a single submission. Answers are
frozen while that request is out.
"""

import asyncio
import contextlib
import enum
import logging
from types import TracebackType

from app.client.api import AssessmentClient, AssessmentClientError
from app.models import AssessmentTake, QuestionTakerPublic, QuestionType, SubmissionResult
from app.models.submission import AnswerValue

logger = logging.getLogger(__name__)


class SessionStatus(str, enum.Enum):
    ACTIVE = "active"
    SUBMITTED = "submitted"
    EXPIRED = "expired"
    ABANDONED = "abandoned"


class SessionClosedError(Exception):
    """Raised when answering or submitting after the session has ended."""


class InvalidAnswerError(ValueError):
    pass


class AssessmentSession:
    def __init__(
        self,
        client: AssessmentClient,
        assessment: AssessmentTake,
        *,
        tick_interval: float = 1.0,
    ) -> None:
        self.client = client
        self.assessment = assessment
        self.tick_interval = tick_interval
        self.current_index = 0
        self.answers: dict[int, AnswerValue] = {}
        self.time_remaining = assessment.duration * 60
        self.status = SessionStatus.ACTIVE
        self.result: SubmissionResult | None = None
        self.submitting = False
        self._timer: asyncio.Task[None] | None = None
        self._submit_lock = asyncio.Lock()

    @classmethod
    async def open(
        cls,
        client: AssessmentClient,
        assessment_id: int,
        *,
        tick_interval: float = 1.0,
    ) -> "AssessmentSession":
        """Fetch the assessment definition and build a session for it."""
        assessment = await client.get_assessment(assessment_id)
        return cls(client, assessment, tick_interval=tick_interval)

    async def __aenter__(self) -> "AssessmentSession":
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def is_active(self) -> bool:
        return self.status is SessionStatus.ACTIVE

    @property
    def question_count(self) -> int:
        return len(self.assessment.questions)

    @property
    def current_question(self) -> QuestionTakerPublic | None:
        if not self.assessment.questions:
            return None
        return self.assessment.questions[self.current_index]

    @property
    def current_answer(self) -> AnswerValue:
        return self.answers.get(self.current_index)

    @property
    def progress(self) -> float:
        """Share of the questions reached so far, counting the current one."""
        if not self.question_count:
            return 0.0
        return (self.current_index + 1) / self.question_count

    def format_time(self) -> str:
        minutes, seconds = divmod(max(self.time_remaining, 0), 60)
        return f"{minutes}:{seconds:02d}"

    # Navigation

    def next(self) -> bool:
        if self.current_index < self.question_count - 1:
            self.current_index += 1
            return True
        return False

    def previous(self) -> bool:
        if self.current_index > 0:
            self.current_index -= 1
            return True
        return False

    def go_to(self, index: int) -> None:
        if not 0 <= index < self.question_count:
            raise IndexError(f"Question index {index} out of range")
        self.current_index = index

    # Answers

    def answer(self, value: AnswerValue) -> None:
        """Answer the current question. The current question does not change."""
        self.answer_question(self.current_index, value)

    def answer_question(self, index: int, value: AnswerValue) -> None:
        if not self.is_active:
            raise SessionClosedError(f"Session is {self.status.value}")
        if self.submitting:
            raise SessionClosedError("Session is being handed in")
        if not 0 <= index < self.question_count:
            raise IndexError(f"Question index {index} out of range")

        question = self.assessment.questions[index]
        if question.question_type == QuestionType.multiple_choice:
            option_count = len(question.options or [])
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidAnswerError("Multiple-choice answers are option indexes")
            if not 0 <= value < option_count:
                raise InvalidAnswerError(f"Option {value} does not exist")
        elif not isinstance(value, str):
            raise InvalidAnswerError("Short answers are text")

        self.answers[index] = value

    # Countdown

    def start(self) -> None:
        if not self.is_active:
            raise SessionClosedError(f"Session is {self.status.value}")
        if self._timer is None or self._timer.done():
            self._timer = asyncio.create_task(self._run_timer())

    async def _run_timer(self) -> None:
        while self.is_active and self.time_remaining > 0:
            await asyncio.sleep(self.tick_interval)
            await self.tick()

    async def tick(self) -> None:
        """Advance the countdown by one second, handing in when it reaches zero."""
        if not self.is_active or self.time_remaining <= 0:
            return
        self.time_remaining -= 1
        if self.time_remaining > 0:
            return

        logger.info("Time is up for assessment %s", self.assessment.id)
        try:
            await self._submit(expired=True)
        except AssessmentClientError as exc:
            # the taker can still hand in by hand
            logger.warning("Automatic submission failed: %s", exc.message)

    def _cancel_timer(self) -> asyncio.Task[None] | None:
        timer, self._timer = self._timer, None
        if timer is None or timer.done() or timer is asyncio.current_task():
            return None
        timer.cancel()
        return timer

    # Hand-in

    async def submit(self) -> SubmissionResult:
        return await self._submit(expired=False)

    async def _submit(self, *, expired: bool) -> SubmissionResult:
        async with self._submit_lock:
            if self.result is not None:
                return self.result
            if not self.is_active:
                raise SessionClosedError(f"Session is {self.status.value}")

            self.submitting = True
            try:
                result = await self.client.submit(
                    self.assessment.id, dict(self.answers)
                )
            finally:
                self.submitting = False

            self.result = result
            self.status = SessionStatus.EXPIRED if expired else SessionStatus.SUBMITTED
            self._cancel_timer()
            logger.info(
                "Assessment %s handed in (%s): %d/%d",
                self.assessment.id,
                self.status.value,
                result.score,
                result.total_questions,
            )
            return result

    async def close(self) -> None:
        """
        End the session. An attempt that was never handed in is dropped.

        A hand-in already in flight is awaited first, so the session ends in
        the state the server recorded.
        """
        if self.submitting:
            async with self._submit_lock:
                pass
        timer = self._cancel_timer()
        if timer is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await timer
        if self.is_active:
            self.status = SessionStatus.ABANDONED
            logger.info(
                "Assessment %s abandoned with %d answers",
                self.assessment.id,
                len(self.answers),
            )
