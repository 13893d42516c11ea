"""In-process record store used by tests and the ``memory`` backend."""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional

from unistellar.domain.common.ids import Identifier
from unistellar.domain.network import models


class MemoryStore:
	"""Insertion-ordered tables mirroring the PostgreSQL schema."""

	def __init__(self) -> None:
		self._lock = asyncio.Lock()
		self.users: dict[Identifier, models.User] = {}
		self.universities: dict[Identifier, models.University] = {}
		self.courses: dict[Identifier, models.Course] = {}
		self.majors: dict[Identifier, models.Major] = {}
		self.assignments: dict[Identifier, models.Assignment] = {}
		self.follows: list[models.Follow] = []
		self.activities: list[models.Activity] = []

	@property
	def lock(self) -> asyncio.Lock:
		return self._lock

	async def reset(self) -> None:
		async with self._lock:
			self.users.clear()
			self.universities.clear()
			self.courses.clear()
			self.majors.clear()
			self.assignments.clear()
			self.follows.clear()
			self.activities.clear()

	async def seed(
		self,
		*,
		users: Iterable[models.User] | None = None,
		universities: Iterable[models.University] | None = None,
		courses: Iterable[models.Course] | None = None,
		majors: Iterable[models.Major] | None = None,
		assignments: Iterable[models.Assignment] | None = None,
		follows: Iterable[tuple[Identifier, Identifier]] | None = None,
		activities: Iterable[models.Activity] | None = None,
	) -> None:
		async with self._lock:
			self.users = {user.id: user for user in users or []}
			self.universities = {uni.id: uni for uni in universities or []}
			self.courses = {course.id: course for course in courses or []}
			self.majors = {major.id: major for major in majors or []}
			self.assignments = {assignment.id: assignment for assignment in assignments or []}
			self.follows = [models.Follow(follower=a, followee=b) for a, b in follows or []]
			self.activities = list(activities or [])

	def table(self, name: str) -> dict[Identifier, object]:
		tables: dict[str, dict] = {
			"users": self.users,
			"universities": self.universities,
			"courses": self.courses,
			"majors": self.majors,
			"assignments": self.assignments,
		}
		return tables[name]


_MEMORY = MemoryStore()


def memory_store() -> MemoryStore:
	return _MEMORY


async def seed_memory_store(
	*,
	users: Optional[Iterable[models.User]] = None,
	universities: Optional[Iterable[models.University]] = None,
	courses: Optional[Iterable[models.Course]] = None,
	majors: Optional[Iterable[models.Major]] = None,
	assignments: Optional[Iterable[models.Assignment]] = None,
	follows: Optional[Iterable[tuple[Identifier, Identifier]]] = None,
	activities: Optional[Iterable[models.Activity]] = None,
) -> None:
	await _MEMORY.seed(
		users=users,
		universities=universities,
		courses=courses,
		majors=majors,
		assignments=assignments,
		follows=follows,
		activities=activities,
	)


async def reset_memory_state() -> None:
	await _MEMORY.reset()
