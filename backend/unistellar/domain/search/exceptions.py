"""Domain-level exceptions for search & ranking."""

from __future__ import annotations

from unistellar.domain.common.ids import MalformedIdentifier


class SearchError(Exception):
	"""Base class for search failures surfaced at the HTTP boundary."""

	reason: str = "search_error"
	status_code: int = 500

	def __init__(self, reason: str | None = None) -> None:
		super().__init__(reason or self.reason)
		if reason:
			self.reason = reason


class RejectedInput(SearchError):
	"""Raw search text contains characters outside the accepted class."""

	reason = "rejected_input"
	status_code = 400

	def __init__(self, raw: str, reason: str | None = None) -> None:
		super().__init__(reason)
		self.raw = raw


class SourceUnavailable(SearchError):
	"""The candidate fetch failed or timed out; nothing was ranked."""

	reason = "source_unavailable"
	status_code = 503


class CorruptCandidate(SearchError):
	"""A store row carried an identifier that is not a ULID."""

	reason = "malformed_identifier"
	status_code = 500

	def __init__(self, error: MalformedIdentifier) -> None:
		super().__init__()
		self.error = error


__all__ = [
	"CorruptCandidate",
	"MalformedIdentifier",
	"RejectedInput",
	"SearchError",
	"SourceUnavailable",
]
