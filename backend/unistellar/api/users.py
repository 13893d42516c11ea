"""REST endpoints for users, follows and activity logs."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from unistellar.api.params import user_id_param
from unistellar.domain.common.ids import Identifier
from unistellar.domain.network import models
from unistellar.domain.network.service import NetworkService

router = APIRouter(tags=["users"])

_service = NetworkService()


@router.get("/user/{user_id}", response_model=models.User)
async def get_user(user_id: Identifier = Depends(user_id_param)) -> models.User:
    """Data of the user with the given id; 404 when absent."""
    return await _service.get_user(user_id)


@router.get("/user/{user_id}/following", response_model=list[Identifier])
async def user_following(user_id: Identifier = Depends(user_id_param)) -> list[Identifier]:
    return await _service.following(user_id)


@router.get("/user/{user_id}/followers", response_model=list[Identifier])
async def user_followers(user_id: Identifier = Depends(user_id_param)) -> list[Identifier]:
    return await _service.followers(user_id)


@router.get("/user/{user_id}/activities", response_model=list[models.Activity])
async def user_activities(user_id: Identifier = Depends(user_id_param)) -> list[models.Activity]:
    return await _service.activities(user_id)


@router.get("/user/{user_id}/stats", response_model=models.Stats)
async def user_stats(user_id: Identifier = Depends(user_id_param)) -> models.Stats:
    return await _service.stats(user_id)
