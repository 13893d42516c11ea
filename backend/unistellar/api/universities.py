"""REST endpoints for universities."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from unistellar.api.params import uni_id_param
from unistellar.domain.common.ids import Identifier
from unistellar.domain.network.service import NetworkService

router = APIRouter(tags=["universities"])

_service = NetworkService()


@router.get("/uni/{uni_id}/students", response_model=list[Identifier])
async def uni_students(uni_id: Identifier = Depends(uni_id_param)) -> list[Identifier]:
    """Ids of the students attending the given university; 404 when it does not exist."""
    return await _service.students(uni_id)
