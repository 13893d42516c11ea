import asyncio
import unittest.mock
import uuid

import pytest
import ulid

from unistellar.domain.common import ids
from unistellar.domain.network import models
from unistellar.domain.search.exceptions import CorruptCandidate, RejectedInput, SourceUnavailable
from unistellar.domain.search.models import COURSES, USERS, Candidate
from unistellar.domain.search.scoring import EditDistanceScorer
from unistellar.domain.search.service import SearchService
from unistellar.domain.search.sources import MemoryCandidateSource, PostgresCandidateSource, TABLES, build_coarse_query
from unistellar.domain.search.tokens import SearchToken
from unistellar.infra.memory_store import seed_memory_store

BASE = "01J7YZ7MC3P44547KT11KHX"
UNI = f"{BASE}900"
MAJOR = f"{BASE}901"


def _id(n: int) -> str:
	return f"{BASE}{n:03d}"


def _course(n: int, name: str, code: str | None = None) -> models.Course:
	return models.Course(id=_id(n), name=name, code=code)


def _user(n: int, username: str, first: str, last: str) -> models.User:
	return models.User(
		id=_id(n),
		name=models.Name(first=first, last=last),
		username=username,
		university=UNI,
		major=MAJOR,
		grad_year=2026,
	)


class RecordingSource:
	def __init__(self, candidates=None, error: Exception | None = None, delay: float = 0.0) -> None:
		self.calls: list[tuple[str, str, int]] = []
		self._candidates = candidates or []
		self._error = error
		self._delay = delay

	async def fetch(self, kind, token):
		self.calls.append((kind.name, str(token)))
		if self._delay:
			await asyncio.sleep(self._delay)
		if self._error is not None:
			raise self._error
		return list(self._candidates)


@pytest.mark.asyncio
async def test_search_courses_from_memory_store():
	await seed_memory_store(
		courses=[
			_course(1, "Computer Science", "CS101"),
			_course(2, "History"),
			_course(3, "Data Science", "DS200"),
			_course(4, "Political Science"),
		]
	)
	service = SearchService(MemoryCandidateSource())

	result = await service.search("courses", "science")

	names = [course.name for course in result.records()]
	assert names[0] == "Data Science"
	assert "History" not in names
	assert set(names) == {"Computer Science", "Data Science", "Political Science"}
	assert result.payload() == result.records()


@pytest.mark.asyncio
async def test_search_users_returns_encoded_ids():
	await seed_memory_store(
		users=[
			_user(1, "bobsmith", "Bob", "Smith"),
			_user(2, "patelpower", "Amyra", "Patel"),
			_user(3, "choobipanda", "Amy", "Nguyen"),
		]
	)
	service = SearchService(MemoryCandidateSource(), scorer=EditDistanceScorer())

	result = await service.search("users", "Amy Nguyen")

	assert result.payload() == [_id(3), _id(2)]
	assert result.scorer.name == "distance"


@pytest.mark.asyncio
async def test_scorer_can_be_chosen_per_call():
	source = RecordingSource([COURSES.candidate(_course(1, "Algebra"))])
	service = SearchService(source)
	result = await service.search("courses", "algebra", scorer_name="normalized")
	assert result.scorer.name == "normalized"


@pytest.mark.asyncio
async def test_rejected_input_never_reaches_the_source():
	source = RecordingSource()
	service = SearchService(source)
	with pytest.raises(RejectedInput):
		await service.search("users", "O'Brien; DROP")
	with pytest.raises(RejectedInput):
		await service.search("users", "   ")
	assert source.calls == []


@pytest.mark.asyncio
async def test_source_failure_surfaces_as_unavailable():
	service = SearchService(RecordingSource(error=ConnectionRefusedError("store down")))
	with pytest.raises(SourceUnavailable) as excinfo:
		await service.search("majors", "history")
	assert isinstance(excinfo.value.__cause__, ConnectionRefusedError)


@pytest.mark.asyncio
async def test_slow_source_times_out():
	service = SearchService(RecordingSource(delay=1.0), timeout_seconds=0.01)
	with pytest.raises(SourceUnavailable):
		await service.search("majors", "history")


@pytest.mark.asyncio
async def test_every_coarse_hit_is_ranked():
	courses = [_course(n, f"Science Elective {n}") for n in range(1, 40)]
	courses.append(_course(99, "Science"))
	await seed_memory_store(courses=courses)
	source = RecordingSource()
	service = SearchService(MemoryCandidateSource())

	result = await service.search("courses", "science")

	assert len(result.ranked) == 40
	assert result.records()[0].name == "Science"

	empty = await SearchService(source).search("assignments", "essay")
	assert source.calls == [("assignments", "essay")]
	assert empty.payload() == []


def test_coarse_query_binds_every_term():
	sql, params = build_coarse_query(TABLES["users"], SearchToken("amy nguyen"))
	assert params == ["%amy%", "%nguyen%"]
	assert "amy" not in sql and "nguyen" not in sql
	assert "username ILIKE $1" in sql and "last_name ILIKE $2" in sql
	assert sql.endswith("ORDER BY id")
	assert "LIMIT" not in sql


def _mock_pool(rows):
	mock_conn = unittest.mock.AsyncMock()
	mock_conn.fetch.return_value = rows
	mock_pool = unittest.mock.MagicMock()
	mock_pool.acquire.return_value.__aenter__.return_value = mock_conn
	return mock_pool, mock_conn


@pytest.mark.asyncio
async def test_postgres_source_decodes_uuid_keys():
	course_id = ulid.from_str(_id(5)).uuid
	pool, conn = _mock_pool([{"id": course_id, "name": "Organic Chemistry", "code": "CHEM2"}])
	service = SearchService(PostgresCandidateSource(pool=pool))

	result = await service.search("courses", "chem")

	assert result.encoded_ids() == [_id(5)]
	sql, *params = conn.fetch.call_args.args
	assert "FROM courses" in sql
	assert params[0] == "%chem%"


@pytest.mark.asyncio
async def test_postgres_source_uses_injected_pool_factory():
	pool, _ = _mock_pool([])
	factory = unittest.mock.AsyncMock(return_value=pool)
	source = PostgresCandidateSource(pool_factory=factory)
	assert await source.fetch(COURSES, SearchToken("x")) == []
	assert await source.fetch(COURSES, SearchToken("y")) == []
	factory.assert_awaited_once()


@pytest.mark.asyncio
async def test_malformed_row_identifier_aborts_the_search():
	pool, _ = _mock_pool(
		[
			{"id": uuid.uuid4(), "name": "Fine", "code": None},
			{"id": "garbage", "name": "Broken", "code": None},
		]
	)
	service = SearchService(PostgresCandidateSource(pool=pool))
	with pytest.raises(CorruptCandidate) as excinfo:
		await service.search("courses", "fine")
	assert isinstance(excinfo.value.error, ids.MalformedIdentifier)


def test_entity_kinds_build_candidates():
	user = _user(9, "ada", "Ada", "Lovelace")
	candidate = USERS.candidate(user)
	assert isinstance(candidate, Candidate)
	assert candidate.id == ids.decode(_id(9))
	assert USERS.selector(candidate) == ["ada", "Ada", "Lovelace"]
	assert candidate.record is user
