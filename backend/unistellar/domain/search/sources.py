"""Candidate sources: coarse retrieval that the ranker reorders.

A source only narrows the table down to plausible rows; it does not order
them by relevance. Rows come back in creation order (ULID order), which the
stable ranker keeps as the tie-break. Nothing is truncated: every coarse hit
reaches the ranker.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol

import asyncpg

from unistellar.domain.common import ids
from unistellar.domain.network import models
from unistellar.domain.search.models import Candidate, EntityKind
from unistellar.domain.search.tokens import SearchToken
from unistellar.infra import postgres
from unistellar.infra.memory_store import MemoryStore, memory_store
from unistellar.settings import settings


class CandidateSource(Protocol):
	async def fetch(self, kind: EntityKind, token: SearchToken) -> list[Candidate]:
		...


def _coarse_match(token: SearchToken, values: list[Optional[str]]) -> bool:
	terms = [term.lower() for term in token.terms()]
	haystacks = [value.lower() for value in values if value]
	return any(term in hay for term in terms for hay in haystacks)


@dataclass(slots=True)
class MemoryCandidateSource:
	"""Case-insensitive substring filter over the in-process store."""

	store: Optional[MemoryStore] = None

	async def fetch(self, kind: EntityKind, token: SearchToken) -> list[Candidate]:
		store = self.store or memory_store()
		async with store.lock:
			records = list(store.table(kind.name).values())
		results: list[Candidate] = []
		for record in records:
			candidate = kind.candidate(record)
			if _coarse_match(token, [candidate.fields.get(name) for name in kind.search_fields]):
				results.append(candidate)
		return results


@dataclass(frozen=True, slots=True)
class _TableDef:
	name: str
	columns: str
	search_columns: tuple[str, ...]
	from_row: Callable[[Mapping[str, Any]], Any]


def _user_from_row(row: Mapping[str, Any]) -> models.User:
	return models.User(
		id=ids.decode(row["id"]),
		name=models.Name(first=row["first_name"], last=row["last_name"]),
		username=row["username"],
		university=ids.decode(row["university_id"]),
		major=ids.decode(row["major_id"]),
		grad_year=row["grad_year"],
	)


def _course_from_row(row: Mapping[str, Any]) -> models.Course:
	return models.Course(id=ids.decode(row["id"]), name=row["name"], code=row["code"])


def _university_from_row(row: Mapping[str, Any]) -> models.University:
	return models.University(id=ids.decode(row["id"]), name=row["name"], short_name=row["short_name"])


def _major_from_row(row: Mapping[str, Any]) -> models.Major:
	return models.Major(id=ids.decode(row["id"]), name=row["name"])


def _assignment_from_row(row: Mapping[str, Any]) -> models.Assignment:
	return models.Assignment(id=ids.decode(row["id"]), name=row["name"], course=ids.decode(row["course_id"]))


TABLES: dict[str, _TableDef] = {
	"users": _TableDef(
		name="users",
		columns="id, username, first_name, last_name, university_id, major_id, grad_year",
		search_columns=("username", "first_name", "last_name"),
		from_row=_user_from_row,
	),
	"courses": _TableDef(
		name="courses",
		columns="id, name, code",
		search_columns=("name", "code"),
		from_row=_course_from_row,
	),
	"universities": _TableDef(
		name="universities",
		columns="id, name, short_name",
		search_columns=("name", "short_name"),
		from_row=_university_from_row,
	),
	"majors": _TableDef(
		name="majors",
		columns="id, name",
		search_columns=("name",),
		from_row=_major_from_row,
	),
	"assignments": _TableDef(
		name="assignments",
		columns="id, name, course_id",
		search_columns=("name",),
		from_row=_assignment_from_row,
	),
}


def build_coarse_query(table: _TableDef, token: SearchToken) -> tuple[str, list[Any]]:
	"""Any term contained in any searchable column; terms travel as bind parameters."""

	params: list[Any] = []
	clauses: list[str] = []
	for term in token.terms():
		params.append(token.like_pattern(term))
		placeholder = f"${len(params)}"
		clauses.extend(f"{column} ILIKE {placeholder}" for column in table.search_columns)
	where = " OR ".join(clauses) if clauses else "FALSE"
	sql = f"SELECT {table.columns} FROM {table.name} WHERE {where} ORDER BY id"
	return sql, params


@dataclass(slots=True)
class PostgresCandidateSource:
	"""Coarse ``ILIKE`` retrieval over an asyncpg pool.

	The pool is injected; when omitted it is resolved lazily from
	:mod:`unistellar.infra.postgres`.
	"""

	pool: Optional[asyncpg.Pool] = None
	pool_factory: Optional[Callable[[], Awaitable[asyncpg.Pool]]] = None

	async def _pool(self) -> asyncpg.Pool:
		if self.pool is None:
			factory = self.pool_factory or postgres.get_pool
			self.pool = await factory()
		return self.pool

	async def fetch(self, kind: EntityKind, token: SearchToken) -> list[Candidate]:
		table = TABLES[kind.name]
		sql, params = build_coarse_query(table, token)
		pool = await self._pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(sql, *params)
		return [kind.candidate(table.from_row(row)) for row in rows]


def resolve_source() -> CandidateSource:
	"""Source selected by ``settings.store_backend``."""

	if settings.store_backend == "memory":
		return MemoryCandidateSource()
	return PostgresCandidateSource()
