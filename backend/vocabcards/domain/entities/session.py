"""Quiz session entity for the reveal/judge review loop."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Self
from uuid import uuid4

from vocabcards.domain.entities.card import Card
from vocabcards.domain.services.outcome import apply_outcome
from vocabcards.domain.services.selector import EmptyPoolError
from vocabcards.domain.value_objects.audio_cue import AudioCue, VoiceSettings
from vocabcards.domain.value_objects.card_filter import CardFilter
from vocabcards.domain.value_objects.quiz_mode import QuizMode
from vocabcards.domain.value_objects.session_state import CardPhase, SessionState
from vocabcards.domain.value_objects.session_summary import SessionSummary


class InvalidTransitionError(Exception):
    """Raised when an operation is not valid in the session's current state.

    This is a caller bug, not a runtime condition: the session is left
    exactly as it was before the call.
    """

    def __init__(self, operation: str, state: SessionState, phase: CardPhase | None = None):
        self.operation = operation
        self.state = state
        self.phase = phase
        where = f"{state}" if phase is None else f"{state}/{phase}"
        super().__init__(f"Cannot {operation} in state {where}")


@dataclass(frozen=True)
class Reveal:
    """What the user sees once the answer is shown.

    Attributes:
        card: Card being reviewed
        prompt: Text that was shown as the question
        answer: Text shown as the answer
        pronunciation: Reading of the target text ("" if none)
        memo: Card note ("" if none)
        cues: Audio to play; empty on repeated reveals
    """

    card: Card
    prompt: str
    answer: str
    pronunciation: str
    memo: str
    cues: tuple[AudioCue, ...] = ()


@dataclass(frozen=True)
class Judgment:
    """Result of judging the current card.

    Attributes:
        card: Card that was judged (as drawn, before the update)
        is_correct: The judgment
        previous_wrong_count: wrong_count before the judgment
        new_wrong_count: wrong_count to persist
        answered_at: Timestamp to persist as last_answered
        next_card: Card now current, or None if the session completed
        cues: Audio for presenting next_card
    """

    card: Card
    is_correct: bool
    previous_wrong_count: int
    new_wrong_count: int
    answered_at: datetime
    next_card: Card | None
    cues: tuple[AudioCue, ...] = ()

    @property
    def is_complete(self) -> bool:
        """Whether this judgment finished the session."""
        return self.next_card is None

    @property
    def updates(self) -> dict:
        """Partial card fields to hand to the card store."""
        return {"wrong_count": self.new_wrong_count, "last_answered": self.answered_at}


@dataclass
class QuizSession:
    """Quiz session entity.

    Owns one bounded study run: a fixed queue of cards drawn at start,
    a progress pointer, the running score and the list of misses.
    Pure in-memory state machine; persistence is the caller's job.

    Attributes:
        cards: Queue drawn at start (never changes afterwards)
        mode: Prompt/answer direction
        card_filter: Pool the queue was drawn from
        voice: Speech settings for emitted audio cues
        id: Unique session identifier (UUID v4)
        state: Lifecycle state
        current_index: Position in cards (len(cards) once complete)
        correct: Cards judged correct so far
        wrong_cards: Cards judged incorrect so far, in order
        phase: Micro-state of the current card
        hint_shown: Whether the current card's hint was requested
        started_at: When the queue was drawn
        ended_at: When the session completed or was abandoned
    """

    cards: tuple[Card, ...] = ()
    mode: QuizMode = QuizMode.NATIVE_TO_TARGET
    card_filter: CardFilter = field(default_factory=CardFilter.all)
    voice: VoiceSettings = field(default_factory=VoiceSettings)
    id: str = field(default_factory=lambda: str(uuid4()))
    state: SessionState = SessionState.SETUP
    current_index: int = 0
    correct: int = 0
    wrong_cards: list[Card] = field(default_factory=list)
    phase: CardPhase = CardPhase.UNREVEALED
    hint_shown: bool = False
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    ended_at: datetime | None = None
    _reveal: Reveal | None = field(default=None, repr=False)

    @classmethod
    def start(
        cls,
        cards: list[Card],
        mode: QuizMode = QuizMode.NATIVE_TO_TARGET,
        card_filter: CardFilter | None = None,
        voice: VoiceSettings | None = None,
    ) -> Self:
        """Create a new active session over an already drawn queue.

        Args:
            cards: Queue from the selector
            mode: Prompt/answer direction
            card_filter: Pool the queue came from
            voice: Speech settings for cues

        Returns:
            New session in ACTIVE state on its first card

        Raises:
            EmptyPoolError: If cards is empty
            ValueError: If cards contains duplicate ids
        """
        if not cards:
            raise EmptyPoolError("Cannot start a session without cards")
        ids = [c.id for c in cards]
        if len(set(ids)) != len(ids):
            raise ValueError("Session queue contains duplicate card ids")

        return cls(
            cards=tuple(cards),
            mode=QuizMode(mode),
            card_filter=card_filter or CardFilter.all(),
            voice=voice or VoiceSettings(),
            state=SessionState.ACTIVE,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def total(self) -> int:
        return len(self.cards)

    @property
    def is_complete(self) -> bool:
        """Check if every card has been judged."""
        return self.state is SessionState.COMPLETE

    @property
    def remaining(self) -> int:
        """Cards not yet judged, including the current one."""
        return max(0, len(self.cards) - self.current_index)

    @property
    def progress(self) -> tuple[int, int]:
        """(judged so far, total)."""
        return self.current_index, len(self.cards)

    def current_card(self) -> Card:
        """Get the card under review.

        Raises:
            InvalidTransitionError: If the session is not active
        """
        self._require_active("read the current card")
        return self.cards[self.current_index]

    def current_prompt(self) -> str:
        """Prompt text of the current card in this session's mode."""
        return self.mode.prompt_for(self.current_card())

    def presentation_cues(self) -> tuple[AudioCue, ...]:
        """Audio to play when the current card is first shown."""
        card = self.current_card()
        if self.mode.speaks_prompt:
            return (self.voice.cue(card.target_text),)
        return ()

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def hint(self) -> str | None:
        """Show the pronunciation before revealing the answer.

        Returns:
            The current card's pronunciation, or None if it has none

        Raises:
            InvalidTransitionError: If the answer is already revealed
                or the session is not active
        """
        self._require_active("show a hint")
        if self.phase is not CardPhase.UNREVEALED:
            raise InvalidTransitionError("show a hint", self.state, self.phase)
        self.hint_shown = True
        return self.cards[self.current_index].pronunciation or None

    def reveal(self) -> Reveal:
        """Show the answer for the current card.

        Idempotent: only the first call per card carries the audio cue.

        Raises:
            InvalidTransitionError: If the session is not active
        """
        self._require_active("reveal")
        if self._reveal is not None:
            return replace(self._reveal, cues=())

        card = self.cards[self.current_index]
        reveal = Reveal(
            card=card,
            prompt=self.mode.prompt_for(card),
            answer=self.mode.answer_for(card),
            pronunciation=card.pronunciation,
            memo=card.memo,
            cues=(self.voice.cue(card.target_text),),
        )
        self._reveal = reveal
        self.phase = CardPhase.REVEALED
        return reveal

    def judge(self, is_correct: bool, answered_at: datetime | None = None) -> Judgment:
        """Record the judgment for the current card and advance.

        Args:
            is_correct: Whether the user knew the answer
            answered_at: Judgment timestamp (defaults to now, UTC)

        Returns:
            Judgment with the wrong count to persist and the next card

        Raises:
            InvalidTransitionError: If the answer was not revealed yet
                or the session is not active
        """
        self._require_active("judge")
        if self.phase is not CardPhase.REVEALED:
            raise InvalidTransitionError("judge", self.state, self.phase)

        card = self.cards[self.current_index]
        new_wrong_count = apply_outcome(card, is_correct)
        if is_correct:
            self.correct += 1
        else:
            self.wrong_cards.append(card)

        self.current_index += 1
        self.phase = CardPhase.UNREVEALED
        self.hint_shown = False
        self._reveal = None

        next_card: Card | None = None
        cues: tuple[AudioCue, ...] = ()
        if self.current_index >= len(self.cards):
            self.state = SessionState.COMPLETE
            self.ended_at = datetime.now(UTC)
        else:
            next_card = self.cards[self.current_index]
            cues = self.presentation_cues()

        return Judgment(
            card=card,
            is_correct=is_correct,
            previous_wrong_count=card.wrong_count,
            new_wrong_count=new_wrong_count,
            answered_at=answered_at or datetime.now(UTC),
            next_card=next_card,
            cues=cues,
        )

    def abandon(self) -> None:
        """Stop an unfinished session; judgments already made stand.

        Raises:
            InvalidTransitionError: If the session is not active
        """
        self._require_active("abandon")
        self.state = SessionState.ABANDONED
        self.ended_at = datetime.now(UTC)

    def summary(self) -> SessionSummary:
        """Get the final score.

        Raises:
            InvalidTransitionError: If the session has not completed
        """
        if self.state is not SessionState.COMPLETE:
            raise InvalidTransitionError("summarize", self.state)
        return SessionSummary(
            correct=self.correct,
            total=len(self.cards),
            wrong_cards=tuple(self.wrong_cards),
            card_filter=self.card_filter,
            mode=self.mode,
        )

    def _require_active(self, operation: str) -> None:
        if self.state is not SessionState.ACTIVE:
            raise InvalidTransitionError(operation, self.state)
