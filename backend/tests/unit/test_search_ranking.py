from unistellar.domain.common import ids
from unistellar.domain.common.ids import Identifier
from unistellar.domain.search import ranking
from unistellar.domain.search.models import Candidate, select_fields
from unistellar.domain.search.scoring import EditDistanceScorer, SimilarityScorer

BASE = "01J7YZ7MC3P44547KT11KHX"

by_name = select_fields("name")
by_person = select_fields("username", "first", "last")


def _id(n: int) -> Identifier:
	return ids.decode(f"{BASE}{n:03d}")


def _named(n: int, name):
	return Candidate(id=_id(n), fields={"name": name})


def _person(n: int, username: str, first: str, last: str):
	return Candidate(id=_id(n), fields={"username": username, "first": first, "last": last})


def test_science_scenario_with_similarity():
	computer = _named(1, "Computer Science")
	data = _named(2, "Data Science")
	history = _named(3, "History")

	ranked = ranking.rank([computer, data, history], "science", by_name, SimilarityScorer())

	assert ranked[-1] is history
	assert set(ranked[:2]) == {computer, data}
	assert ranked[0] is data


def test_amy_nguyen_scenario_with_edit_distance():
	bob = _person(1, "bob", "Bob", "Smith")
	amy = _person(2, "choobipanda", "Amy", "Nguyen")

	scored = ranking.rank_scored([bob, amy], "Amy Nguyen", by_person, EditDistanceScorer())

	assert [item.candidate for item in scored] == [amy, bob]
	assert scored[0].score < scored[1].score


def test_ties_keep_source_order():
	candidates = [_named(n, "Linear Algebra") for n in range(6)]
	ranked = ranking.rank(candidates, "algebra", by_name, SimilarityScorer())
	assert ranked == candidates
	assert ranking.rank(ranked, "algebra", by_name, SimilarityScorer()) == candidates


def test_ties_keep_source_order_between_better_and_worse_groups():
	a = _named(1, "Physics")
	b = _named(2, "Biology")
	c = _named(3, "Physics")
	d = _named(4, "Biology")
	ranked = ranking.rank([a, b, c, d], "biology", by_name, EditDistanceScorer())
	assert ranked == [b, d, a, c]


def test_best_field_wins_regardless_of_other_fields():
	for scorer in (SimilarityScorer(), EditDistanceScorer()):
		noisy = _person(1, "zzzzzzzzzzzz", "Qqqqqq", "Nguyen")
		clean = Candidate(id=_id(2), fields={"last": "Nguyen"})
		query = "Nguyen"
		assert ranking.score_candidate(noisy, query, by_person, scorer) == ranking.score_candidate(
			clean, query, by_person, scorer
		)


def test_candidates_without_fields_sort_last():
	for scorer in (SimilarityScorer(), EditDistanceScorer()):
		empty = Candidate(id=_id(1), fields={})
		blank = _named(2, None)
		match = _named(3, "Calculus")
		ranked = ranking.rank([empty, blank, match], "calculus", by_name, scorer)
		assert ranked == [match, empty, blank]
		assert ranking.score_candidate(empty, "calculus", by_name, scorer) == scorer.worst


def test_empty_candidates_sort_after_unmatched_ones():
	for scorer in (SimilarityScorer(), EditDistanceScorer()):
		empty = _named(1, None)
		unmatched = _named(2, "History")
		ranked = ranking.rank([empty, unmatched], "science", by_name, scorer)
		assert ranked == [unmatched, empty], scorer.name


def test_rank_never_drops_candidates():
	candidates = [_named(n, name) for n, name in enumerate(["Art", "Music", "Drama", "", "Art"])]
	ranked = ranking.rank(candidates, "zzz", by_name, SimilarityScorer())
	assert len(ranked) == len(candidates)
	assert set(ranked) == set(candidates)


def test_rank_ids_projects_envelopes_to_flat_ulids():
	rows = [
		{"id": {"tb": "major", "id": {"String": f"{BASE}001"}}, "name": "History"},
		{"id": f"major:{BASE}002", "name": "History of Art"},
	]
	projected = ranking.rank_ids(
		rows,
		"History",
		lambda row: [row["name"]],
		SimilarityScorer(),
		id_of=lambda row: row["id"],
	)
	assert projected == [f"{BASE}001", f"{BASE}002"]


def test_default_scorer_is_similarity():
	assert ranking.DEFAULT_SCORER.name == "similarity"
	assert ranking.rank([_named(1, "Chemistry")], "chem", by_name) == [_named(1, "Chemistry")]
