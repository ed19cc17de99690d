"""Exception hierarchy for the search engine.

Only the orchestrator and query parsing raise these. Geo, salary, scoring and
ranking are total functions and never raise on well-formed input.
"""


class SearchError(Exception):
    """Base class for all search engine errors."""


class InvalidQuery(SearchError):
    """The query is malformed: center/radius mismatch, unknown kind or frequency."""


class SourceFetchFailure(SearchError):
    """A data source failed to return rows for its entity kind."""

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(f"{kind}: {message}")
        self.kind = kind
