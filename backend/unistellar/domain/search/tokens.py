"""Validated search text.

Search text arrives in a URL path segment and ends up inside a store query.
Queries are sent with bind parameters, and the character whitelist below is a
second, independent guard: anything that is not ASCII alphanumeric or ASCII
whitespace is refused outright. Widening the class without adding escaping
reopens query injection for any caller that interpolates the token.
"""

from __future__ import annotations

import string

from unistellar.domain.search.exceptions import RejectedInput

_ALLOWED = frozenset(string.ascii_letters + string.digits + string.whitespace)


class SearchToken(str):
	"""Immutable search text containing only ``[A-Za-z0-9]`` and ASCII whitespace."""

	__slots__ = ()

	def __new__(cls, raw: str) -> "SearchToken":
		if not isinstance(raw, str):
			raise RejectedInput(repr(raw), "not_text")
		if not _ALLOWED.issuperset(raw):
			raise RejectedInput(raw)
		return super().__new__(cls, raw)

	@classmethod
	def parse(cls, raw: str) -> "SearchToken":
		return cls(raw)

	def terms(self) -> list[str]:
		return self.split()

	def like_pattern(self, term: str) -> str:
		"""``ILIKE`` pattern for one term; safe because ``%`` and ``_`` cannot occur."""

		return f"%{term}%"

	def __repr__(self) -> str:
		return f"SearchToken({str.__repr__(self)})"
