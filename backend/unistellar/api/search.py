"""REST endpoints for ranked search over every searchable entity."""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Path, Query

from unistellar.domain.network import models
from unistellar.domain.search.service import SearchService
from unistellar.settings import ScorerName

router = APIRouter(prefix="/search", tags=["search"])

_service = SearchService()

QueryText = Annotated[str, Path(description="Search text; ASCII letters, digits and whitespace only")]
ScorerParam = Annotated[Optional[ScorerName], Query(description="Ranking strategy, defaults to the configured scorer")]


async def _search(kind: str, query: str, scorer: Optional[str]) -> list:
    result = await _service.search(kind, query, scorer_name=scorer)
    return result.payload()


@router.get("/users/{query}", response_model=list[str])
async def search_users(query: QueryText, scorer: ScorerParam = None) -> list:
    """User ids ranked by the best match on username, first or last name."""
    return await _search("users", query, scorer)


@router.get("/courses/{query}", response_model=list[models.Course])
async def search_courses(query: QueryText, scorer: ScorerParam = None) -> list:
    return await _search("courses", query, scorer)


@router.get("/universities/{query}", response_model=list[models.University])
async def search_universities(query: QueryText, scorer: ScorerParam = None) -> list:
    return await _search("universities", query, scorer)


@router.get("/majors/{query}", response_model=list[models.Major])
async def search_majors(query: QueryText, scorer: ScorerParam = None) -> list:
    return await _search("majors", query, scorer)


@router.get("/assignments/{query}", response_model=list[models.Assignment])
async def search_assignments(query: QueryText, scorer: ScorerParam = None) -> list:
    return await _search("assignments", query, scorer)
