"""Quiz session API routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from vocabcards.api.dependencies import RecoveryStoreDep, SessionManagerDep, rate_limit
from vocabcards.api.schemas import (
    AudioCueResponse,
    CardResponse,
    ErrorResponse,
    error_detail,
)
from vocabcards.domain.entities.session import InvalidTransitionError, QuizSession
from vocabcards.domain.services.selector import EmptyPoolError
from vocabcards.domain.services.session_manager import SessionNotFoundError
from vocabcards.domain.value_objects.audio_cue import AudioCue
from vocabcards.domain.value_objects.card_filter import CardFilter
from vocabcards.domain.value_objects.quiz_mode import QuizMode
from vocabcards.domain.value_objects.session_summary import SessionSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/session", tags=["session"])


# =============================================================================
# Request/Response Models
# =============================================================================


class StartSessionRequest(BaseModel):
    """Request body for starting a session."""

    filter: str = Field("all", description='"all", "_fav", "_weak" or a genre name')
    mode: QuizMode = QuizMode.NATIVE_TO_TARGET
    size: int | None = Field(None, ge=1, le=500)


class ReplaySessionRequest(BaseModel):
    """Request body for replaying a session's pool."""

    size: int | None = Field(None, ge=1, le=500)


class JudgeRequest(BaseModel):
    """Request body for judging the current card."""

    correct: bool


class QuizCardResponse(BaseModel):
    """Current card as shown before the answer is revealed."""

    id: str
    prompt: str
    favorite: bool
    has_hint: bool


class SessionResponse(BaseModel):
    """Session progress."""

    session_id: str
    state: str
    mode: str
    filter: str
    total: int
    position: int
    remaining: int
    correct: int
    phase: str
    current_card: QuizCardResponse | None = None
    cues: list[AudioCueResponse] = []
    recovered_updates: int = 0


class HintResponse(BaseModel):
    """Pronunciation hint (None if the card has none)."""

    hint: str | None


class RevealResponse(BaseModel):
    """Answer side of the current card."""

    card_id: str
    prompt: str
    answer: str
    pronunciation: str
    memo: str
    cues: list[AudioCueResponse]


class SummaryResponse(BaseModel):
    """Final score of a completed session."""

    correct: int
    wrong: int
    total: int
    percent: int
    wrong_cards: list[CardResponse]
    filter: str
    mode: str

    @classmethod
    def from_summary(cls, summary: SessionSummary) -> "SummaryResponse":
        return cls(
            correct=summary.correct,
            wrong=summary.wrong_count,
            total=summary.total,
            percent=summary.percent,
            wrong_cards=[CardResponse.from_card(c) for c in summary.wrong_cards],
            filter=summary.card_filter.to_key(),
            mode=summary.mode.value,
        )


class JudgeResponse(BaseModel):
    """Result of judging a card."""

    card_id: str
    correct: bool
    wrong_count: int
    persisted: bool
    session: SessionResponse
    summary: SummaryResponse | None = None


class SessionRecordResponse(BaseModel):
    """Past session from history."""

    session_id: str
    filter: str
    mode: str
    state: str
    started_at: str
    ended_at: str | None
    total: int
    correct: int
    judged: int


# =============================================================================
# Helpers
# =============================================================================


def _session_response(
    session: QuizSession,
    cues: tuple[AudioCue, ...] = (),
    recovered_updates: int = 0,
) -> SessionResponse:
    current = None
    if session.state.is_active():
        card = session.current_card()
        current = QuizCardResponse(
            id=card.id,
            prompt=session.current_prompt(),
            favorite=card.favorite,
            has_hint=bool(card.pronunciation),
        )
    return SessionResponse(
        session_id=session.id,
        state=session.state.value,
        mode=session.mode.value,
        filter=session.card_filter.to_key(),
        total=session.total,
        position=session.current_index,
        remaining=session.remaining,
        correct=session.correct,
        phase=session.phase.value,
        current_card=current,
        cues=AudioCueResponse.from_cues(cues),
        recovered_updates=recovered_updates,
    )


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error_detail("SESSION_NOT_FOUND", "Session not found or already ended"),
    )


def _invalid_transition(e: InvalidTransitionError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=error_detail(
            "INVALID_TRANSITION",
            str(e),
            {"operation": e.operation, "state": e.state.value},
        ),
    )


def _empty_pool(e: EmptyPoolError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=error_detail("EMPTY_POOL", str(e)),
    )


# =============================================================================
# Routes
# =============================================================================


@router.post(
    "/start",
    response_model=SessionResponse,
    responses={422: {"model": ErrorResponse, "description": "No cards match the filter"}},
)
async def start_session(
    request: StartSessionRequest,
    session_manager: SessionManagerDep,
    _: Annotated[None, Depends(rate_limit("/api/session/start"))],
) -> SessionResponse:
    """Start a new quiz session.

    Draws up to `size` cards from the filtered pool, favoring cards with
    a history of misses. Any unfinished session is abandoned.
    """
    try:
        card_filter = CardFilter.parse(request.filter)
        result = await session_manager.start_session(card_filter, request.mode, request.size)
    except EmptyPoolError as e:
        raise _empty_pool(e) from None

    return _session_response(result.session, result.cues, result.recovered_updates)


@router.get(
    "/current",
    response_model=SessionResponse,
    responses={404: {"model": ErrorResponse, "description": "No session"}},
)
async def get_current_session(session_manager: SessionManagerDep) -> SessionResponse:
    """Get the held session's progress."""
    session = session_manager.current_session
    if session is None:
        raise _not_found()
    return _session_response(session)


@router.get("/history", response_model=list[SessionRecordResponse])
async def session_history(
    recovery_store: RecoveryStoreDep,
    limit: int = 20,
) -> list[SessionRecordResponse]:
    """Recent sessions, newest first."""
    records = await recovery_store.get_recent_sessions(max(1, min(limit, 100)))
    return [
        SessionRecordResponse(
            session_id=r.id,
            filter=r.filter_key,
            mode=r.mode,
            state=r.state,
            started_at=r.started_at.isoformat(),
            ended_at=r.ended_at.isoformat() if r.ended_at else None,
            total=r.total,
            correct=r.correct,
            judged=r.judged,
        )
        for r in records
    ]


@router.post(
    "/{session_id}/hint",
    response_model=HintResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def show_hint(session_id: str, session_manager: SessionManagerDep) -> HintResponse:
    """Show the pronunciation before the answer."""
    try:
        return HintResponse(hint=session_manager.hint(session_id))
    except SessionNotFoundError:
        raise _not_found() from None
    except InvalidTransitionError as e:
        raise _invalid_transition(e) from None


@router.post(
    "/{session_id}/reveal",
    response_model=RevealResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def reveal_answer(session_id: str, session_manager: SessionManagerDep) -> RevealResponse:
    """Reveal the current card's answer.

    Cues are only returned on the first reveal of a card.
    """
    try:
        reveal = session_manager.reveal(session_id)
    except SessionNotFoundError:
        raise _not_found() from None
    except InvalidTransitionError as e:
        raise _invalid_transition(e) from None

    return RevealResponse(
        card_id=reveal.card.id,
        prompt=reveal.prompt,
        answer=reveal.answer,
        pronunciation=reveal.pronunciation,
        memo=reveal.memo,
        cues=AudioCueResponse.from_cues(reveal.cues),
    )


@router.post(
    "/{session_id}/judge",
    response_model=JudgeResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def judge_card(
    session_id: str,
    request: JudgeRequest,
    session_manager: SessionManagerDep,
    _: Annotated[None, Depends(rate_limit("/api/session/{session_id}/judge"))],
) -> JudgeResponse:
    """Judge the revealed card and move to the next one.

    The card's wrong count is saved before this returns. If saving fails
    the session still advances and `persisted` is false.
    """
    try:
        result = await session_manager.judge(session_id, request.correct)
        session = session_manager.get_session(session_id)
    except SessionNotFoundError:
        raise _not_found() from None
    except InvalidTransitionError as e:
        raise _invalid_transition(e) from None

    judgment = result.judgment
    summary = SummaryResponse.from_summary(session.summary()) if session.is_complete else None
    return JudgeResponse(
        card_id=judgment.card.id,
        correct=judgment.is_correct,
        wrong_count=judgment.new_wrong_count,
        persisted=result.persisted,
        session=_session_response(session, judgment.cues),
        summary=summary,
    )


@router.get(
    "/{session_id}/summary",
    response_model=SummaryResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def session_summary(session_id: str, session_manager: SessionManagerDep) -> SummaryResponse:
    """Final score; only available once every card is judged."""
    try:
        return SummaryResponse.from_summary(session_manager.summary(session_id))
    except SessionNotFoundError:
        raise _not_found() from None
    except InvalidTransitionError as e:
        raise _invalid_transition(e) from None


@router.post(
    "/{session_id}/replay",
    response_model=SessionResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def replay_session(
    session_id: str,
    session_manager: SessionManagerDep,
    _: Annotated[None, Depends(rate_limit("/api/session/start"))],
    request: ReplaySessionRequest | None = None,
) -> SessionResponse:
    """Start a new session with the same filter and mode."""
    try:
        result = await session_manager.replay_session(
            session_id, request.size if request else None
        )
    except SessionNotFoundError:
        raise _not_found() from None
    except EmptyPoolError as e:
        raise _empty_pool(e) from None

    return _session_response(result.session, result.cues, result.recovered_updates)


@router.post(
    "/{session_id}/end",
    response_model=SessionResponse,
    responses={404: {"model": ErrorResponse}},
)
async def end_session(session_id: str, session_manager: SessionManagerDep) -> SessionResponse:
    """Leave the session. Unfinished sessions are abandoned; judgments made stay saved."""
    try:
        session = await session_manager.end_session(session_id)
    except SessionNotFoundError:
        raise _not_found() from None
    return _session_response(session)
