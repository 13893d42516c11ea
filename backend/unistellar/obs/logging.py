"""JSON logging with request-scoped context.

Every record is rendered as one JSON line carrying the service identity, the
request bound by :mod:`unistellar.obs.middleware` and any ``extra`` fields.
Search text is user input, so ``query`` fields are clipped and credentials are
redacted before they reach a handler.
"""

from __future__ import annotations

import json
import logging
import random
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from unistellar.settings import settings

_CONTEXT: Dict[str, ContextVar[Optional[str]]] = {
	"request_id": ContextVar("unistellar_request_id", default=None),
	"route": ContextVar("unistellar_route", default=None),
	"ip": ContextVar("unistellar_client_ip", default=None),
}

_ROOT_LOGGER = "unistellar"
_REDACT = ("password", "secret", "token", "authorization", "dsn", "postgres_url")
_CLIP = {"query": 24}
_MAX_TEXT = 256

# attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "taskName"}


def bind_context(
	*,
	request_id: Optional[str] = None,
	route: Optional[str] = None,
	client_ip: Optional[str] = None,
) -> Dict[str, Token]:
	values = {"request_id": request_id, "route": route, "ip": client_ip}
	return {key: _CONTEXT[key].set(value) for key, value in values.items() if value is not None}


def reset_context(tokens: Dict[str, Token]) -> None:
	for key, token in tokens.items():
		_CONTEXT[key].reset(token)


def current_request_id() -> Optional[str]:
	return _CONTEXT["request_id"].get()


def _clean(key: str, value: Any) -> Any:
	lowered = key.lower()
	if any(word in lowered for word in _REDACT):
		return "[redacted]"
	if isinstance(value, str):
		limit = _CLIP.get(lowered, _MAX_TEXT)
		return value if len(value) <= limit else value[:limit] + "…"
	if isinstance(value, dict):
		return {str(k): _clean(str(k), v) for k, v in value.items()}
	return value


class JSONLogFormatter(logging.Formatter):
	"""One JSON object per record."""

	def format(self, record: logging.LogRecord) -> str:  # noqa: A003
		payload: Dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"logger": record.name,
			"msg": record.getMessage(),
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		for key, var in _CONTEXT.items():
			value = var.get()
			if value:
				payload[key] = value
		for key, value in vars(record).items():
			if key not in _RECORD_ATTRS and key not in payload:
				payload[key] = _clean(key, value)
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		return json.dumps(payload, separators=(",", ":"), default=str)


class InfoSamplingFilter(logging.Filter):
	"""Keep a ``obs_log_sampling_rate_info`` share of INFO records; never drop others."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO:
			return True
		rate = settings.obs_log_sampling_rate_info
		return rate >= 1.0 or random.random() < max(rate, 0.0)


def _file_handler() -> logging.Handler:
	log_dir = Path(settings.log_dir).expanduser()
	if log_dir.exists() and not log_dir.is_dir():
		raise NotADirectoryError(f"{log_dir} exists but is not a directory")
	log_dir.mkdir(parents=True, exist_ok=True)
	# one file per process start
	path = log_dir / f"{datetime.now(timezone.utc).isoformat()}.log"
	if path.exists():
		raise FileExistsError(f"log file {path} already exists")
	return logging.FileHandler(path, encoding="utf-8")


def configure_logging() -> logging.Logger:
	"""Route the root logger to stdout or a timestamped file, as JSON."""

	handler = _file_handler() if settings.resolved_log_to() == "file" else logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	handler.addFilter(InfoSamplingFilter())
	root = logging.getLogger()
	root.handlers.clear()
	root.addHandler(handler)
	root.setLevel(settings.obs_log_level)
	logger = logging.getLogger(_ROOT_LOGGER)
	logger.info("initialized logging", extra={"log_to": settings.resolved_log_to()})
	return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
	return logging.getLogger(name or _ROOT_LOGGER)
