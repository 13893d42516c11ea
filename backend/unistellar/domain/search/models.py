"""Candidates and the per-entity search registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Generic, Mapping, Optional, TypeVar

from pydantic import BaseModel

from unistellar.domain.common.ids import Identifier
from unistellar.domain.network import models

R = TypeVar("R", bound=BaseModel)


@dataclass(frozen=True, slots=True)
class Candidate(Generic[R]):
	"""A store record eligible for ranking: one identifier, named text fields.

	Equality and hashing follow the identifier only.
	"""

	id: Identifier
	fields: Mapping[str, Optional[str]] = field(default_factory=dict, compare=False)
	record: Optional[R] = field(default=None, compare=False)


def select_fields(*names: str) -> Callable[[Candidate], list[Optional[str]]]:
	"""Field selector reading the named text fields off a candidate."""

	def _selector(candidate: Candidate) -> list[Optional[str]]:
		return [candidate.fields.get(name) for name in names]

	_selector.__name__ = f"select_{'_'.join(names)}"
	return _selector


@dataclass(frozen=True, slots=True)
class EntityKind(Generic[R]):
	"""How one searchable record type is matched and returned."""

	name: str
	record_type: type[R]
	search_fields: tuple[str, ...]
	extract: Callable[[R], dict[str, Optional[str]]]
	# "ids" returns encoded identifiers, "records" returns the full objects
	returns: str = "records"

	def candidate(self, record: R) -> Candidate[R]:
		return Candidate(id=record.id, fields=self.extract(record), record=record)  # type: ignore[attr-defined]

	@property
	def selector(self) -> Callable[[Candidate], list[Optional[str]]]:
		return select_fields(*self.search_fields)


USERS = EntityKind(
	name="users",
	record_type=models.User,
	search_fields=("username", "first", "last"),
	extract=lambda user: {"username": user.username, "first": user.name.first, "last": user.name.last},
	returns="ids",
)

COURSES = EntityKind(
	name="courses",
	record_type=models.Course,
	search_fields=("name", "code"),
	extract=lambda course: {"name": course.name, "code": course.code},
)

UNIVERSITIES = EntityKind(
	name="universities",
	record_type=models.University,
	search_fields=("name", "short_name"),
	extract=lambda uni: {"name": uni.name, "short_name": uni.short_name},
)

MAJORS = EntityKind(
	name="majors",
	record_type=models.Major,
	search_fields=("name",),
	extract=lambda major: {"name": major.name},
)

ASSIGNMENTS = EntityKind(
	name="assignments",
	record_type=models.Assignment,
	search_fields=("name",),
	extract=lambda assignment: {"name": assignment.name},
)

ENTITY_KINDS: dict[str, EntityKind] = {
	kind.name: kind for kind in (USERS, COURSES, UNIVERSITIES, MAJORS, ASSIGNMENTS)
}
