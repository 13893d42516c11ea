"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNTER = Counter(
	"unistellar_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"unistellar_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

SEARCH_QUERIES = Counter(
	"unistellar_search_queries_total",
	"Search queries executed",
	["kind", "outcome"],
)

SEARCH_LATENCY = Histogram(
	"unistellar_search_latency_seconds",
	"Search latency in seconds, fetch plus ranking",
	["kind"],
	buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0),
)

SEARCH_RANK_LATENCY = Histogram(
	"unistellar_search_rank_seconds",
	"Time spent scoring and sorting candidates",
	["kind", "scorer"],
	buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5),
)

SEARCH_CANDIDATES = Histogram(
	"unistellar_search_candidates",
	"Candidates returned by the store per search",
	["kind"],
	buckets=(0, 1, 5, 10, 25, 50, 100, 250, 500),
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_search_query(kind: str, outcome: str = "ok") -> None:
	SEARCH_QUERIES.labels(kind=kind, outcome=outcome).inc()


def observe_search_latency(kind: str, latency_seconds: float) -> None:
	SEARCH_LATENCY.labels(kind=kind).observe(latency_seconds)


def observe_rank(kind: str, scorer: str, candidates: int, latency_seconds: float) -> None:
	SEARCH_CANDIDATES.labels(kind=kind).observe(candidates)
	SEARCH_RANK_LATENCY.labels(kind=kind, scorer=scorer).observe(latency_seconds)
