"""Lookups over users, universities, follows and activity logs."""

from __future__ import annotations

import logging
from typing import Optional

from unistellar.domain.common import ids
from unistellar.domain.common.ids import Identifier
from unistellar.domain.network import models
from unistellar.infra import postgres
from unistellar.infra.memory_store import memory_store
from unistellar.settings import settings

logger = logging.getLogger(__name__)


class NotFound(LookupError):
	def __init__(self, entity: str, identifier: Identifier) -> None:
		super().__init__(f"{entity} {identifier} not found")
		self.entity = entity
		self.identifier = identifier


def _activity_data(kind: str, duration_secs: Optional[int]) -> models.ActivityData:
	if kind == "worked_on":
		return models.WorkedOn(duration_secs=duration_secs or 0)
	if kind == "completed":
		return models.Completed()
	return models.Planning()


def compute_stats(activities: list[models.Activity]) -> models.Stats:
	completed = {activity.assignment for activity in activities if activity.data.kind == "completed"}
	secs = sum(activity.data.duration_secs for activity in activities if isinstance(activity.data, models.WorkedOn))
	return models.Stats(assignments_completed=len(completed), secs_worked=secs)


class NetworkService:
	"""Read side of the academic network; backend chosen by ``settings.store_backend``."""

	def _memory(self) -> bool:
		return settings.store_backend == "memory"

	async def get_user(self, user_id: Identifier) -> models.User:
		if self._memory():
			store = memory_store()
			async with store.lock:
				user = store.users.get(user_id)
		else:
			pool = await postgres.get_pool()
			async with pool.acquire() as conn:
				row = await conn.fetchrow(
					"""
					SELECT id, username, first_name, last_name, university_id, major_id, grad_year
					FROM users
					WHERE id = $1
					""",
					user_id.to_uuid(),
				)
			user = None
			if row is not None:
				user = models.User(
					id=ids.decode(row["id"]),
					name=models.Name(first=row["first_name"], last=row["last_name"]),
					username=row["username"],
					university=ids.decode(row["university_id"]),
					major=ids.decode(row["major_id"]),
					grad_year=row["grad_year"],
				)
		if user is None:
			raise NotFound("user", user_id)
		return user

	async def _require_university(self, uni_id: Identifier) -> None:
		if self._memory():
			store = memory_store()
			async with store.lock:
				exists = uni_id in store.universities
		else:
			pool = await postgres.get_pool()
			async with pool.acquire() as conn:
				exists = bool(await conn.fetchval("SELECT 1 FROM universities WHERE id = $1", uni_id.to_uuid()))
		if not exists:
			raise NotFound("university", uni_id)

	async def following(self, user_id: Identifier) -> list[Identifier]:
		"""Users ``user_id`` follows, oldest follow first."""

		await self.get_user(user_id)
		if self._memory():
			store = memory_store()
			async with store.lock:
				return [edge.followee for edge in store.follows if edge.follower == user_id]
		pool = await postgres.get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"SELECT followee_id FROM follows WHERE follower_id = $1 ORDER BY created_at, followee_id",
				user_id.to_uuid(),
			)
		return [ids.decode(row["followee_id"]) for row in rows]

	async def followers(self, user_id: Identifier) -> list[Identifier]:
		"""Users following ``user_id``, oldest follow first."""

		await self.get_user(user_id)
		if self._memory():
			store = memory_store()
			async with store.lock:
				return [edge.follower for edge in store.follows if edge.followee == user_id]
		pool = await postgres.get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"SELECT follower_id FROM follows WHERE followee_id = $1 ORDER BY created_at, follower_id",
				user_id.to_uuid(),
			)
		return [ids.decode(row["follower_id"]) for row in rows]

	async def students(self, uni_id: Identifier) -> list[Identifier]:
		await self._require_university(uni_id)
		if self._memory():
			store = memory_store()
			async with store.lock:
				return [user.id for user in store.users.values() if user.university == uni_id]
		pool = await postgres.get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"SELECT id FROM users WHERE university_id = $1 ORDER BY id",
				uni_id.to_uuid(),
			)
		return [ids.decode(row["id"]) for row in rows]

	async def activities(self, user_id: Identifier) -> list[models.Activity]:
		"""Activity log for a user, newest first."""

		await self.get_user(user_id)
		if self._memory():
			store = memory_store()
			async with store.lock:
				entries = [activity for activity in store.activities if activity.user == user_id]
			return sorted(entries, key=lambda activity: activity.created_at, reverse=True)
		pool = await postgres.get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"""
				SELECT id, user_id, assignment_id, created_at, kind, duration_secs
				FROM activities
				WHERE user_id = $1
				ORDER BY created_at DESC, id DESC
				""",
				user_id.to_uuid(),
			)
		return [
			models.Activity(
				id=ids.decode(row["id"]),
				user=ids.decode(row["user_id"]),
				assignment=ids.decode(row["assignment_id"]),
				created_at=row["created_at"],
				data=_activity_data(row["kind"], row["duration_secs"]),
			)
			for row in rows
		]

	async def stats(self, user_id: Identifier) -> models.Stats:
		return compute_stats(await self.activities(user_id))
