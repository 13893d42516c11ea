"""Request ID helper for endpoints.

The observability middleware binds the request id into the logging context;
``RequestIdMiddleware`` also stores it on ``request.state``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from unistellar.obs import logging as obs_logging

REQUEST_ID_ATTR = "request_id"


def get_request_id(request: Optional[Request] = None, default: str = "unknown") -> str:
    """Return the current request id if bound, else a default."""
    if request is not None:
        rid = getattr(request.state, REQUEST_ID_ATTR, None)
        if rid:
            return rid
    return obs_logging.current_request_id() or default
