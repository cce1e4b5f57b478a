"""Card management API routes."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from vocabcards.api.dependencies import CardCatalogDep, rate_limit
from vocabcards.api.schemas import CardResponse, ErrorResponse, error_detail
from vocabcards.domain.value_objects.card_filter import CardFilter
from vocabcards.ports.card_store import CardNotFoundError

router = APIRouter(prefix="/api/cards", tags=["cards"])


# =============================================================================
# Request/Response Models
# =============================================================================


class CreateCardRequest(BaseModel):
    """Request body for creating a card."""

    native_text: str = Field(..., min_length=1)
    target_text: str = Field(..., min_length=1)
    pronunciation: str = ""
    genre: str = ""
    memo: str = ""
    favorite: bool = False


class UpdateCardRequest(BaseModel):
    """Partial edit; omitted fields keep their value."""

    native_text: str | None = Field(None, min_length=1)
    target_text: str | None = Field(None, min_length=1)
    pronunciation: str | None = None
    genre: str | None = None
    memo: str | None = None
    favorite: bool | None = None


class CardListResponse(BaseModel):
    """Filtered card listing."""

    filter: str
    count: int
    cards: list[CardResponse]


class ImportCardsRequest(BaseModel):
    """Collection import (the export format, camelCase keys accepted)."""

    cards: list[dict[str, Any]]
    replace: bool = False


class ImportCardsResponse(BaseModel):
    imported: int


class ResetWeakResponse(BaseModel):
    reset: int


class EraseAllRequest(BaseModel):
    """Erasing requires typing DELETE."""

    confirm: str


# =============================================================================
# Helpers
# =============================================================================


def _card_not_found(card_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error_detail("CARD_NOT_FOUND", f"Card {card_id} not found"),
    )


def _invalid_card(e: ValueError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=error_detail("INVALID_CARD", str(e)),
    )


# =============================================================================
# Routes
# =============================================================================


@router.get("", response_model=CardListResponse)
async def list_cards(
    catalog: CardCatalogDep,
    filter: str = "all",
    q: str = "",
) -> CardListResponse:
    """List cards by filter key ("all", "_fav", "_weak" or genre) and search text."""
    card_filter = CardFilter.parse(filter)
    cards = await catalog.list_cards(card_filter, q)
    return CardListResponse(
        filter=card_filter.to_key(),
        count=len(cards),
        cards=[CardResponse.from_card(c) for c in cards],
    )


@router.post(
    "",
    response_model=CardResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_card(request: CreateCardRequest, catalog: CardCatalogDep) -> CardResponse:
    """Add a card to the collection."""
    try:
        card = await catalog.create_card(**request.model_dump())
    except ValueError as e:
        raise _invalid_card(e) from None
    return CardResponse.from_card(card)


@router.get("/export", response_model=list[dict[str, Any]])
async def export_cards(catalog: CardCatalogDep) -> list[dict[str, Any]]:
    """Dump the whole collection as JSON."""
    return await catalog.export_cards()


@router.post(
    "/import",
    response_model=ImportCardsResponse,
    responses={400: {"model": ErrorResponse}},
)
async def import_cards(
    request: ImportCardsRequest,
    catalog: CardCatalogDep,
    _: Annotated[None, Depends(rate_limit("/api/cards/import"))],
) -> ImportCardsResponse:
    """Load an exported collection, optionally replacing the current one."""
    try:
        imported = await catalog.import_cards(request.cards, replace=request.replace)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("INVALID_IMPORT", str(e)),
        ) from None
    return ImportCardsResponse(imported=imported)


@router.post("/weak/reset", response_model=ResetWeakResponse)
async def reset_weak_cards(catalog: CardCatalogDep) -> ResetWeakResponse:
    """Set every weak card's wrong count back to zero."""
    return ResetWeakResponse(reset=await catalog.reset_weak())


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}},
)
async def erase_all_cards(request: EraseAllRequest, catalog: CardCatalogDep) -> Response:
    """Erase the whole collection. Cannot be undone."""
    try:
        await catalog.erase_all(request.confirm)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("CONFIRMATION_REQUIRED", str(e)),
        ) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{card_id}",
    response_model=CardResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_card(card_id: str, catalog: CardCatalogDep) -> CardResponse:
    """Get one card."""
    try:
        return CardResponse.from_card(await catalog.get_card(card_id))
    except CardNotFoundError:
        raise _card_not_found(card_id) from None


@router.put(
    "/{card_id}",
    response_model=CardResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_card(
    card_id: str,
    request: UpdateCardRequest,
    catalog: CardCatalogDep,
) -> CardResponse:
    """Edit a card's text, genre, memo or favorite flag."""
    fields = request.model_dump(exclude_none=True)
    try:
        card = await catalog.edit_card(card_id, fields)
    except CardNotFoundError:
        raise _card_not_found(card_id) from None
    except ValueError as e:
        raise _invalid_card(e) from None
    return CardResponse.from_card(card)


@router.delete(
    "/{card_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_card(card_id: str, catalog: CardCatalogDep) -> Response:
    """Delete a card (no error if it is already gone)."""
    await catalog.delete_card(card_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{card_id}/favorite",
    response_model=CardResponse,
    responses={404: {"model": ErrorResponse}},
)
async def toggle_favorite(card_id: str, catalog: CardCatalogDep) -> CardResponse:
    """Flip the card's favorite flag."""
    try:
        return CardResponse.from_card(await catalog.toggle_favorite(card_id))
    except CardNotFoundError:
        raise _card_not_found(card_id) from None
