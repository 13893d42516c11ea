import string

import pytest

from unistellar.domain.search.exceptions import RejectedInput, SearchError
from unistellar.domain.search.service import parse_query
from unistellar.domain.search.tokens import SearchToken


@pytest.mark.parametrize(
	"raw",
	[
		"science",
		"Amy Nguyen",
		"CS 101",
		"tabs\tand\nnewlines",
		"   ",
		"",
		string.ascii_letters + string.digits,
	],
)
def test_accepts_ascii_alphanumerics_and_whitespace(raw):
	token = SearchToken.parse(raw)
	assert token == raw
	assert str(token) == raw
	assert isinstance(token, str)


@pytest.mark.parametrize(
	"raw",
	[
		"O'Brien; DROP",
		'say "hi"',
		"back\\slash",
		"a%b",
		"under_score",
		"semi;colon",
		"user:01J7YZ7MC3P44547KT11KHXGJV",
		"café",
		"日本",
		"null\x00byte",
		"non\u00a0breaking",
		"dash-ed",
	],
)
def test_rejects_anything_outside_the_class(raw):
	with pytest.raises(RejectedInput) as excinfo:
		SearchToken.parse(raw)
	assert excinfo.value.status_code == 400
	assert excinfo.value.reason == "rejected_input"
	assert excinfo.value.raw == raw


def test_rejected_input_is_a_client_error():
	with pytest.raises(SearchError) as excinfo:
		SearchToken("O'Brien; DROP")
	assert excinfo.value.status_code < 500


def test_terms_and_like_pattern():
	token = SearchToken("  Data   Science ")
	assert token.terms() == ["Data", "Science"]
	assert token.like_pattern("Data") == "%Data%"


def test_parse_query_rejects_blank_text():
	with pytest.raises(RejectedInput) as excinfo:
		parse_query(" \t ")
	assert excinfo.value.reason == "blank_query"
	assert parse_query("math") == "math"
