"""Service layer for search: validate, fetch candidates, rank."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

import asyncpg

from unistellar.domain.common import ids
from unistellar.domain.search import ranking, scoring
from unistellar.domain.search.exceptions import CorruptCandidate, RejectedInput, SearchError, SourceUnavailable
from unistellar.domain.search.models import ENTITY_KINDS, Candidate, EntityKind
from unistellar.domain.search.sources import CandidateSource, resolve_source
from unistellar.domain.search.tokens import SearchToken
from unistellar.obs import metrics as obs_metrics
from unistellar.settings import settings

logger = logging.getLogger(__name__)

_STORE_ERRORS = (
	asyncio.TimeoutError,
	OSError,
	asyncpg.PostgresError,
	asyncpg.InterfaceError,
)


@dataclass(slots=True)
class SearchResult:
	kind: EntityKind
	query: SearchToken
	scorer: scoring.Scorer
	ranked: list[ranking.ScoredCandidate[Candidate]]

	def encoded_ids(self) -> list[str]:
		return [ids.encode(item.candidate.id) for item in self.ranked]

	def records(self) -> list:
		return [item.candidate.record for item in self.ranked]

	def payload(self) -> list:
		"""What the HTTP layer returns for this kind."""

		return self.encoded_ids() if self.kind.returns == "ids" else self.records()


def parse_query(raw: str) -> SearchToken:
	token = SearchToken.parse(raw)
	if not token.strip():
		raise RejectedInput(raw, "blank_query")
	return token


class SearchService:
	"""Runs one search: token, coarse fetch, rank. Holds no per-request state."""

	def __init__(
		self,
		source: Optional[CandidateSource] = None,
		*,
		scorer: Optional[scoring.Scorer] = None,
		timeout_seconds: Optional[float] = None,
	) -> None:
		self._source = source
		self._scorer = scorer
		self._timeout = timeout_seconds

	def source(self) -> CandidateSource:
		return self._source if self._source is not None else resolve_source()

	def scorer(self, name: Optional[str] = None) -> scoring.Scorer:
		if name:
			return scoring.get_scorer(name)
		if self._scorer is not None:
			return self._scorer
		return scoring.get_scorer(settings.search_scorer)

	async def _fetch(self, kind: EntityKind, token: SearchToken) -> list[Candidate]:
		timeout = self._timeout if self._timeout is not None else settings.search_fetch_timeout_seconds
		try:
			return await asyncio.wait_for(self.source().fetch(kind, token), timeout=timeout)
		except ids.MalformedIdentifier as exc:
			logger.error("search.corrupt_identifier kind=%s reason=%s", kind.name, exc.reason)
			raise CorruptCandidate(exc) from exc
		except _STORE_ERRORS as exc:
			logger.warning("search.source_unavailable kind=%s", kind.name, exc_info=True)
			raise SourceUnavailable() from exc

	async def search(self, kind_name: str, raw_query: str, *, scorer_name: Optional[str] = None) -> SearchResult:
		kind = ENTITY_KINDS[kind_name]
		start = time.perf_counter()
		try:
			token = parse_query(raw_query)
			scorer = self.scorer(scorer_name)
			candidates = await self._fetch(kind, token)
			rank_start = time.perf_counter()
			ranked = ranking.rank_scored(candidates, token, kind.selector, scorer)
			obs_metrics.observe_rank(kind.name, scorer.name, len(candidates), time.perf_counter() - rank_start)
			obs_metrics.inc_search_query(kind.name)
			logger.info(
				"search.%s",
				kind.name,
				extra={"scorer": scorer.name, "query": str(token), "candidates": len(candidates), "results": len(ranked)},
			)
			return SearchResult(kind=kind, query=token, scorer=scorer, ranked=ranked)
		except SearchError as exc:
			obs_metrics.inc_search_query(kind.name, outcome=exc.reason)
			raise
		finally:
			obs_metrics.observe_search_latency(kind.name, time.perf_counter() - start)
