"""Search domain exports."""

from .service import SearchResult, SearchService

__all__ = [
	"SearchResult",
	"SearchService",
]
