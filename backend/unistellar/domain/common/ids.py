"""ULID identifiers and the codec between store rows and API payloads.

Every record in the store is keyed by a ULID, but the store does not hand the
key back as a bare string. Depending on the driver and the query it may come
back as a ``uuid.UUID`` (a ULID is 128 bits and fits a ``uuid`` column), as
raw bytes, as a record id such as ``user:01J7YZ7MC3P44547KT11KHXGJV``, or as a
nested document envelope like::

	{"tb": "user", "id": {"String": "01J7YZ7MC3P44547KT11KHXGJV"}}

The codec is deliberately asymmetric. ``decode`` accepts all of those shapes
and keeps only the ULID; ``encode`` always emits the flat 26 character
Crockford base32 text. Responses never carry the envelope, so nothing needs to
rebuild it; lookups go through :meth:`Identifier.to_uuid` instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping
from uuid import UUID

import ulid
from pydantic_core import core_schema

ULID_LENGTH = 26
_CROCKFORD = frozenset("0123456789ABCDEFGHJKMNPQRSTVWXYZ")
# first character carries only the top 3 bits of a 128-bit value
_FIRST_CHARS = frozenset("01234567")
_VARIANT_KEYS = ("String", "Ulid", "ulid", "string")
_MAX_DEPTH = 4


class MalformedIdentifier(ValueError):
	"""Raised when a store value does not carry a well-formed ULID."""

	def __init__(self, value: Any, reason: str = "not a ulid") -> None:
		self.value = value
		self.reason = reason
		super().__init__(f"malformed identifier ({reason}): {value!r}"[:200])


@dataclass(frozen=True, slots=True)
class Identifier:
	"""A normalized record identifier; a ULID with no store envelope.

	Holds the canonical uppercase text, so equality and hashing follow the ULID.
	"""

	text: str

	def __str__(self) -> str:
		return self.text

	def as_ulid(self) -> ulid.ULID:
		return ulid.from_str(self.text)

	def to_uuid(self) -> UUID:
		return self.as_ulid().uuid

	@classmethod
	def new(cls) -> "Identifier":
		return cls(ulid.new().str)

	@classmethod
	def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
		return core_schema.no_info_plain_validator_function(
			decode,
			serialization=core_schema.plain_serializer_function_ser_schema(encode, when_used="always"),
		)

	@classmethod
	def __get_pydantic_json_schema__(cls, schema: core_schema.CoreSchema, handler: Any) -> dict[str, Any]:
		return {
			"type": "string",
			"minLength": ULID_LENGTH,
			"maxLength": ULID_LENGTH,
			"pattern": "^[0-7][0-9A-HJKMNP-TV-Z]{25}$",
			"examples": ["01J7YZ7MC3P44547KT11KHXGJV"],
		}


def _from_text(text: str, original: Any) -> Identifier:
	candidate = text.strip()
	if ":" in candidate:
		# record id form: <table>:<key>, key optionally quoted
		_, candidate = candidate.split(":", 1)
		candidate = candidate.strip().strip("⟨⟩`")
	if len(candidate) != ULID_LENGTH:
		raise MalformedIdentifier(original, "expected 26 characters")
	candidate = candidate.upper()
	if candidate[0] not in _FIRST_CHARS or not _CROCKFORD.issuperset(candidate):
		raise MalformedIdentifier(original, "invalid base32 text")
	try:
		return Identifier(ulid.from_str(candidate).str)
	except ValueError as exc:
		raise MalformedIdentifier(original, "invalid base32 text") from exc


def _from_mapping(value: Mapping[Any, Any], original: Any, depth: int) -> Identifier:
	for key in _VARIANT_KEYS:
		if key in value:
			return _decode(value[key], original, depth + 1)
	if "id" in value:
		return _decode(value["id"], original, depth + 1)
	raise MalformedIdentifier(original, "unrecognised envelope")


def _decode(value: Any, original: Any, depth: int) -> Identifier:
	if depth > _MAX_DEPTH:
		raise MalformedIdentifier(original, "envelope nested too deeply")
	if isinstance(value, Identifier):
		return value
	if isinstance(value, ulid.ULID):
		return Identifier(value.str)
	if isinstance(value, UUID):
		return Identifier(ulid.from_uuid(value).str)
	if isinstance(value, (bytes, bytearray, memoryview)):
		raw = bytes(value)
		if len(raw) != 16:
			raise MalformedIdentifier(original, "expected 16 bytes")
		return Identifier(ulid.from_bytes(raw).str)
	if isinstance(value, str):
		return _from_text(value, original)
	if isinstance(value, Mapping):
		return _from_mapping(value, original, depth)
	raise MalformedIdentifier(original, f"unsupported type {type(value).__name__}")


def decode(value: Any) -> Identifier:
	"""Unify any store representation of a ULID key into an :class:`Identifier`."""

	return _decode(value, value, 0)


def encode(identifier: Identifier) -> str:
	"""Return the canonical 26 character ULID text for ``identifier``."""

	return identifier.text


def parse_param(raw: str) -> Identifier:
	"""Parse a URL path segment; only the bare 26 character form is accepted."""

	if ":" in raw:
		raise MalformedIdentifier(raw, "record ids are not accepted in paths")
	return _from_text(raw, raw)

