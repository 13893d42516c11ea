"""Fuzzy scorers used to rank search candidates.

Two families are supported and each declares which way is better:

* :class:`SimilarityScorer` is a local alignment score, higher is better.
* :class:`EditDistanceScorer` (and its normalized variant) is an edit
  distance, lower is better.

The ranker never assumes a direction; it asks the scorer.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Iterable, Protocol

MIN_SCORE = -(2**31)
MAX_SCORE = 2**31 - 1

# similarity tiers: alignment < contiguous query < identical field
_TIER = 1 << 24
_TIER_SPAN = _TIER // 2 - 1


class Direction(enum.Enum):
	HIGHER = "higher"
	LOWER = "lower"

	def best(self, scores: Iterable[int]) -> int:
		return max(scores) if self is Direction.HIGHER else min(scores)

	def sort_key(self, score: int) -> int:
		return -score if self is Direction.HIGHER else score


class Scorer(Protocol):
	name: str
	direction: Direction
	worst: int

	def score(self, query: str, field: str) -> int:
		...


def _fold(char: str) -> str:
	# ASCII-only case folding; other characters compare raw
	return char.lower() if char < "\x80" else char


def _contains_run(terms: list[str], field: str) -> bool:
	needle = "".join(_fold(c) for c in " ".join(terms))
	haystack = "".join(_fold(c) for c in " ".join(field.split()))
	return needle in haystack


def _word_start(field: str, j: int) -> bool:
	if j == 0:
		return True
	prev, cur = field[j - 1], field[j]
	if not prev.isalnum():
		return True
	return prev.islower() and cur.isupper()


@dataclass(frozen=True, slots=True)
class SimilarityScorer:
	"""Smith-Waterman style alignment of each query term inside the field.

	Every character of a term must appear in the field in order. Matched
	characters earn a base score plus bonuses for continuing a run, landing on
	a word start and agreeing in case; skipped field characters between two
	matches cost an affine gap penalty. Each field character not covered by a
	match costs one point, so tighter fields win. Terms that cannot be aligned
	contribute nothing.

	Scores fall into tiers. A field holding the whole query as one contiguous
	run (ignoring case and repeated whitespace) outranks every scattered
	alignment, however long the field; a field identical to the query outranks
	both. A field where no term aligns scores ``no_match``, one above ``worst``,
	which is kept for candidates with nothing to search.
	"""

	match: int = 16
	consecutive: int = 8
	boundary: int = 8
	case: int = 1
	gap_open: int = 3
	gap_extend: int = 1
	unmatched: int = 1

	name: str = "similarity"
	direction: Direction = Direction.HIGHER
	worst: int = MIN_SCORE
	no_match: int = MIN_SCORE + 1

	def _char_bonus(self, qc: str, field: str, j: int) -> int:
		bonus = self.match
		if qc == field[j]:
			bonus += self.case
		if _word_start(field, j):
			bonus += self.boundary
		return bonus

	def align(self, term: str, field: str) -> int | None:
		"""Best local alignment of ``term`` as a subsequence of ``field``."""

		m = len(field)
		if not term or len(term) > m:
			return None
		folded = [_fold(c) for c in field]
		prev: list[int | None] = [None] * m
		for i, qc in enumerate(term):
			target = _fold(qc)
			cur: list[int | None] = [None] * m
			gap_best: int | None = None
			for j in range(m):
				if i > 0 and j >= 2:
					if gap_best is not None:
						gap_best -= self.gap_extend
					opened = prev[j - 2]
					if opened is not None:
						opened -= self.gap_open
						if gap_best is None or opened > gap_best:
							gap_best = opened
				if folded[j] != target:
					continue
				if i == 0:
					best: int | None = 0
				else:
					best = gap_best
					diag = prev[j - 1] if j >= 1 else None
					if diag is not None:
						diag += self.consecutive
						if best is None or diag > best:
							best = diag
				if best is not None:
					cur[j] = best + self._char_bonus(qc, field, j)
			prev = cur
		matched = [value for value in prev if value is not None]
		return max(matched) if matched else None

	def score(self, query: str, field: str) -> int:
		if not field:
			return self.worst
		terms = query.split()
		if not terms:
			return self.no_match
		if field == query:
			return 2 * _TIER
		total = 0
		covered = 0
		for term in terms:
			aligned = self.align(term, field)
			if aligned is None:
				continue
			total += aligned
			covered += len(term)
		if covered == 0:
			return self.no_match
		base = total - self.unmatched * max(0, len(field) - covered)
		base = max(-_TIER_SPAN, min(_TIER_SPAN, base))
		if _contains_run(terms, field):
			base += _TIER
		return base


def levenshtein(a: str, b: str) -> int:
	"""Minimum single-character inserts, deletes and substitutions from a to b."""

	if a == b:
		return 0
	if len(a) < len(b):
		a, b = b, a
	if not b:
		return len(a)
	previous = list(range(len(b) + 1))
	for i, ca in enumerate(a, start=1):
		current = [i]
		for j, cb in enumerate(b, start=1):
			current.append(
				min(
					previous[j] + 1,
					current[j - 1] + 1,
					previous[j - 1] + (ca != cb),
				)
			)
		previous = current
	return previous[-1]


@dataclass(frozen=True, slots=True)
class EditDistanceScorer:
	"""Raw edit distance minus the absolute length difference, lower is better.

	Subtracting the length difference means a query contained in a much longer
	field is penalised far less than its raw distance. The adjusted value is
	doubled and an exact match keeps the even slot, so identical text stays
	strictly ahead of a zero-adjusted containment without reordering anything
	else.
	"""

	name: str = "distance"
	direction: Direction = Direction.LOWER
	worst: int = MAX_SCORE

	def score(self, query: str, field: str) -> int:
		if not field:
			return self.worst
		adjusted = levenshtein(query, field) - abs(len(query) - len(field))
		return 2 * adjusted + (0 if field == query else 1)


@dataclass(frozen=True, slots=True)
class NormalizedEditDistanceScorer:
	"""Edit distance scaled by the longer length into 0..1000, lower is better."""

	scale: int = 1000

	name: str = "normalized"
	direction: Direction = Direction.LOWER
	worst: int = MAX_SCORE

	def score(self, query: str, field: str) -> int:
		if not field:
			return self.worst
		distance = levenshtein(query, field)
		if distance == 0:
			return 0
		return math.ceil(self.scale * distance / max(len(query), len(field)))


SCORERS: dict[str, Scorer] = {
	"similarity": SimilarityScorer(),
	"distance": EditDistanceScorer(),
	"normalized": NormalizedEditDistanceScorer(),
}


def get_scorer(name: str) -> Scorer:
	try:
		return SCORERS[name.strip().lower()]
	except KeyError as exc:
		raise ValueError(f"unknown scorer {name!r}") from exc
