"""Path parameter parsing shared by the routers."""

from __future__ import annotations

from fastapi import HTTPException, Path

from unistellar.domain.common import ids
from unistellar.domain.common.ids import Identifier


def _ulid_or_404(raw: str) -> Identifier:
    # non-ULID path segments are treated as unknown routes, not bad requests
    try:
        return ids.parse_param(raw)
    except ids.MalformedIdentifier as exc:
        raise HTTPException(status_code=404, detail="not_found") from exc


def user_id_param(user_id: str = Path(..., description="User ULID")) -> Identifier:
    return _ulid_or_404(user_id)


def uni_id_param(uni_id: str = Path(..., description="University ULID")) -> Identifier:
    return _ulid_or_404(uni_id)
