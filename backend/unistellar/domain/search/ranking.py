"""Ranking helpers shared by every search endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Optional, Sequence, TypeVar

from unistellar.domain.common import ids
from unistellar.domain.search.scoring import SCORERS, Scorer

C = TypeVar("C")

FieldSelector = Callable[[C], Sequence[Optional[str]]]

DEFAULT_SCORER: Scorer = SCORERS["similarity"]


@dataclass(frozen=True, slots=True)
class ScoredCandidate(Generic[C]):
	candidate: C
	score: int


def score_candidate(candidate: C, query: str, field_selector: FieldSelector, scorer: Scorer) -> int:
	"""Best score over the candidate's searchable fields, ``scorer.worst`` if none."""

	fields = [field for field in field_selector(candidate) if isinstance(field, str) and field]
	if not fields:
		return scorer.worst
	return scorer.direction.best(scorer.score(query, field) for field in fields)


def rank_scored(
	candidates: Iterable[C],
	query: str,
	field_selector: FieldSelector,
	scorer: Scorer = DEFAULT_SCORER,
) -> list[ScoredCandidate[C]]:
	scored = [
		ScoredCandidate(candidate, score_candidate(candidate, query, field_selector, scorer))
		for candidate in candidates
	]
	# sorted() is stable: equal scores keep the source order
	return sorted(scored, key=lambda item: scorer.direction.sort_key(item.score))


def rank(
	candidates: Iterable[C],
	query: str,
	field_selector: FieldSelector,
	scorer: Scorer = DEFAULT_SCORER,
) -> list[C]:
	"""Reorder ``candidates`` best first; nothing is dropped or added."""

	return [item.candidate for item in rank_scored(candidates, query, field_selector, scorer)]


def rank_ids(
	candidates: Iterable[C],
	query: str,
	field_selector: FieldSelector,
	scorer: Scorer = DEFAULT_SCORER,
	*,
	id_of: Callable[[C], object] = lambda candidate: candidate.id,  # type: ignore[attr-defined]
) -> list[str]:
	"""Rank and project to encoded identifiers."""

	ranked = rank(candidates, query, field_selector, scorer)
	return [ids.encode(ids.decode(id_of(candidate))) for candidate in ranked]
