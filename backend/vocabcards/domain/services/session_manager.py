"""Session manager service for quiz session lifecycle management."""

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from vocabcards.domain.constants import DEFAULT_SESSION_SIZE
from vocabcards.domain.entities.session import Judgment, QuizSession, Reveal
from vocabcards.domain.services.selector import EmptyPoolError, RandomSource, select_session
from vocabcards.domain.value_objects.audio_cue import AudioCue, VoiceSettings
from vocabcards.domain.value_objects.card_filter import CardFilter
from vocabcards.domain.value_objects.quiz_mode import QuizMode
from vocabcards.domain.value_objects.session_summary import SessionSummary
from vocabcards.infrastructure.recovery_store import RecoveryStore, RecoveryStoreError
from vocabcards.ports.card_store import CardNotFoundError, CardStore, CardStoreError

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class SessionNotFoundError(Exception):
    """Raised when no active session matches the given id."""

    pass


@dataclass
class StartSessionResult:
    """Result of starting a session."""

    session: QuizSession
    cues: tuple[AudioCue, ...] = ()
    recovered_updates: int = 0


@dataclass
class JudgeResult:
    """Result of judging a card.

    persisted is False when the card store rejected the write; the
    session still advanced and the write was queued for recovery.
    """

    judgment: Judgment
    persisted: bool = True
    error: str | None = None


@dataclass
class _SessionBook:
    """Bookkeeping kept beside the session for history records."""

    writes_failed: int = 0
    closed: bool = False


class SessionManager:
    """Manages quiz session lifecycle.

    Responsibilities:
    - Drawing session queues from the card store
    - Persisting each judgment before the caller sees the advance
    - Queuing failed writes in the RecoveryStore and replaying them
    - Single active session per manager

    Persistence is optimistic: a failed write does not roll back the
    in-memory advance. It is logged, queued and reported to the caller.
    """

    def __init__(
        self,
        card_store: CardStore,
        recovery_store: RecoveryStore | None = None,
        rng: RandomSource | None = None,
        clock: Callable[[], datetime] = utc_now,
        default_size: int = DEFAULT_SESSION_SIZE,
        voice: VoiceSettings | None = None,
    ):
        """Initialize session manager.

        Args:
            card_store: Port for card persistence
            recovery_store: Persistence for failed writes and history
            rng: Random source for selection (random module if None)
            clock: Timestamp source for last_answered
            default_size: Session size when the caller gives none
            voice: Speech settings for audio cues
        """
        self._card_store = card_store
        self._recovery_store = recovery_store
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock
        self._default_size = default_size
        self._voice = voice or VoiceSettings()
        self._active_session: QuizSession | None = None
        self._book = _SessionBook()

    @property
    def has_active_session(self) -> bool:
        """Check if there's a session still in the review loop."""
        return self._active_session is not None and self._active_session.state.is_active()

    @property
    def current_session(self) -> QuizSession | None:
        """The session held by this manager (active or just finished)."""
        return self._active_session

    def get_session(self, session_id: str) -> QuizSession:
        """Get the held session.

        Raises:
            SessionNotFoundError: If session_id does not match
        """
        if self._active_session is None:
            raise SessionNotFoundError("No active session")
        if self._active_session.id != session_id:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return self._active_session

    async def start_session(
        self,
        card_filter: CardFilter | None = None,
        mode: QuizMode = QuizMode.NATIVE_TO_TARGET,
        size: int | None = None,
    ) -> StartSessionResult:
        """Start a new quiz session.

        An unfinished session held by this manager is abandoned first.

        Args:
            card_filter: Pool to draw from (all cards if None)
            mode: Prompt/answer direction
            size: Queue length (default size if None)

        Returns:
            StartSessionResult with the session and first-card cues

        Raises:
            EmptyPoolError: If no card matches the filter
        """
        card_filter = card_filter or CardFilter.all()
        recovered = await self._recover_pending_updates()

        pool = card_filter.apply(await self._card_store.get_all())
        if not pool:
            raise EmptyPoolError(f"No cards match filter '{card_filter}'")

        queue = select_session(pool, size or self._default_size, self._rng)

        if self._active_session is not None:
            await self._close_session(self._active_session)

        session = QuizSession.start(queue, mode=mode, card_filter=card_filter, voice=self._voice)
        self._active_session = session
        self._book = _SessionBook()

        if self._recovery_store is not None:
            try:
                await self._recovery_store.save_session(
                    session_id=session.id,
                    filter_key=card_filter.to_key(),
                    mode=session.mode.value,
                    state=session.state.value,
                    started_at=session.started_at,
                    total=session.total,
                )
            except RecoveryStoreError as e:
                logger.error(f"Could not record start of session {session.id}: {e}")

        logger.info(
            f"Started session {session.id}: {session.total} of {len(pool)} cards "
            f"(filter={card_filter}, mode={session.mode})"
        )
        return StartSessionResult(
            session=session,
            cues=session.presentation_cues(),
            recovered_updates=recovered,
        )

    async def replay_session(self, session_id: str, size: int | None = None) -> StartSessionResult:
        """Start a fresh session with the same filter and mode."""
        session = self.get_session(session_id)
        return await self.start_session(session.card_filter, session.mode, size)

    def hint(self, session_id: str) -> str | None:
        """Show the current card's hint."""
        return self.get_session(session_id).hint()

    def reveal(self, session_id: str) -> Reveal:
        """Reveal the current card's answer."""
        return self.get_session(session_id).reveal()

    async def judge(self, session_id: str, is_correct: bool) -> JudgeResult:
        """Judge the current card and persist the outcome.

        The write is awaited before returning, so reloading the collection
        after the session completes reflects every judgment.

        Raises:
            SessionNotFoundError: If no matching session
            InvalidTransitionError: If the card is not revealed or the
                session is over
        """
        session = self.get_session(session_id)
        judgment = session.judge(is_correct, answered_at=self._clock())
        logger.debug(
            f"Session {session.id}: card {judgment.card.id} "
            f"{'correct' if is_correct else 'wrong'}, wrong_count "
            f"{judgment.previous_wrong_count} -> {judgment.new_wrong_count}"
        )

        result = JudgeResult(judgment=judgment)
        try:
            await self._card_store.update_by_id(judgment.card.id, judgment.updates)
        except CardNotFoundError as e:
            # Card was deleted mid-session; nothing left to update
            logger.warning(f"Outcome for card {judgment.card.id} not saved: {e}")
            result = JudgeResult(judgment=judgment, persisted=False, error=str(e))
            self._book.writes_failed += 1
        except CardStoreError as e:
            logger.warning(f"Outcome for card {judgment.card.id} not saved, queued: {e}")
            result = JudgeResult(judgment=judgment, persisted=False, error=str(e))
            self._book.writes_failed += 1
            await self._queue_update(judgment, session.id)
        else:
            await self._retire_pending_updates(judgment.card.id)

        if judgment.is_complete:
            await self._close_session(session)
        return result

    def summary(self, session_id: str) -> SessionSummary:
        """Get the summary of a completed session.

        Raises:
            SessionNotFoundError: If no matching session
            InvalidTransitionError: If the session has not completed
        """
        return self.get_session(session_id).summary()

    async def end_session(self, session_id: str) -> QuizSession:
        """Release the session, abandoning it if still unfinished.

        Judgments already made stay persisted.

        Raises:
            SessionNotFoundError: If no matching session
        """
        session = self.get_session(session_id)
        await self._close_session(session)
        self._active_session = None
        return session

    async def force_end_all_sessions(self) -> int:
        """Close the held session (for graceful shutdown).

        Returns:
            Number of sessions closed
        """
        if self._active_session is None:
            return 0
        await self.end_session(self._active_session.id)
        return 1

    async def _close_session(self, session: QuizSession) -> None:
        """Abandon an unfinished session and record its end once."""
        if session.state.is_active():
            session.abandon()
            logger.info(
                f"Session {session.id} abandoned after {session.current_index}/{session.total} cards"
            )
        if self._book.closed:
            return
        self._book.closed = True

        if self._book.writes_failed:
            logger.warning(
                f"Session {session.id} ended with {self._book.writes_failed} unsaved outcomes"
            )
        if self._recovery_store is None:
            return
        try:
            await self._recovery_store.end_session(
                session_id=session.id,
                state=session.state.value,
                correct=session.correct,
                judged=session.current_index,
                writes_failed=self._book.writes_failed,
            )
        except RecoveryStoreError as e:
            logger.error(f"Could not record end of session {session.id}: {e}")

    async def _retire_pending_updates(self, card_id: str) -> None:
        """Drop queued writes for a card whose newer value was just saved."""
        if self._recovery_store is None:
            return
        try:
            dropped = await self._recovery_store.discard_for_card(card_id)
        except RecoveryStoreError as e:
            logger.error(f"Could not retire queued outcomes for card {card_id}: {e}")
            return
        if dropped:
            logger.info(f"Retired {dropped} stale queued outcomes for card {card_id}")

    async def _queue_update(self, judgment: Judgment, session_id: str) -> None:
        if self._recovery_store is None:
            return
        try:
            await self._recovery_store.save_update(
                card_id=judgment.card.id,
                wrong_count=judgment.new_wrong_count,
                last_answered=judgment.answered_at,
                session_id=session_id,
            )
        except RecoveryStoreError as e:
            logger.error(f"Outcome for card {judgment.card.id} lost, queueing failed: {e}")

    async def _recover_pending_updates(self) -> int:
        """Replay outcome writes that failed in earlier sessions.

        Returns:
            Number of writes applied
        """
        if self._recovery_store is None:
            return 0

        recovered = 0
        try:
            for update in await self._recovery_store.get_pending_updates():
                try:
                    await self._card_store.update_by_id(update.card_id, update.fields)
                    await self._recovery_store.mark_synced(update.id)
                    recovered += 1
                except CardNotFoundError:
                    logger.info(f"Dropping queued outcome for deleted card {update.card_id}")
                    await self._recovery_store.discard(update.id)
                except CardStoreError as e:
                    logger.warning(f"Queued outcome for card {update.card_id} still failing: {e}")
                    await self._recovery_store.increment_retry(update.id)
        except RecoveryStoreError as e:
            logger.error(f"Replay of queued outcomes stopped: {e}")

        if recovered:
            logger.info(f"Recovered {recovered} queued outcome writes")
        return recovered
