"""Collection overview API routes."""

from fastapi import APIRouter
from pydantic import BaseModel

from vocabcards.api.dependencies import CardCatalogDep

router = APIRouter(prefix="/api/collection", tags=["collection"])


# =============================================================================
# Response Models
# =============================================================================


class StatsResponse(BaseModel):
    """Dashboard counts."""

    total_count: int
    genre_count: int
    weak_count: int
    favorite_count: int
    has_cards: bool


class FilterOptionInfo(BaseModel):
    """Quiz setup choice with the number of cards it covers."""

    key: str
    label: str
    count: int
    empty: bool


class FiltersResponse(BaseModel):
    """Response for filter listing."""

    filters: list[FilterOptionInfo]


class GenresResponse(BaseModel):
    genres: list[str]


# =============================================================================
# Routes
# =============================================================================


@router.get("/stats", response_model=StatsResponse)
async def collection_stats(catalog: CardCatalogDep) -> StatsResponse:
    """Card, genre, weak and favorite counts."""
    stats = await catalog.stats()
    return StatsResponse(
        total_count=stats.total_count,
        genre_count=stats.genre_count,
        weak_count=stats.weak_count,
        favorite_count=stats.favorite_count,
        has_cards=stats.has_cards,
    )


@router.get("/filters", response_model=FiltersResponse)
async def list_filters(catalog: CardCatalogDep) -> FiltersResponse:
    """Filters offered on the quiz setup screen.

    Always starts with all, favorites and weak; genres follow sorted by name.
    Empty filters are listed so the client can disable them.
    """
    options = await catalog.filter_options()
    return FiltersResponse(
        filters=[
            FilterOptionInfo(
                key=option.key,
                label=option.label,
                count=option.count,
                empty=option.is_empty,
            )
            for option in options
        ]
    )


@router.get("/genres", response_model=GenresResponse)
async def list_genres(catalog: CardCatalogDep) -> GenresResponse:
    return GenresResponse(genres=await catalog.genres())
