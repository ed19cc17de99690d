"""Abstract base class for entity data sources."""

from abc import ABC, abstractmethod

from nearsearch.core.schemas import BoundingBox, EntityKind, SearchableEntity
from nearsearch.sources.adapters import ADAPTERS, RawRow, RowAdapter, adapt_rows


class DataSource(ABC):
    """One source of raw rows for a single entity kind.

    The bounding-box hint passed to ``fetch`` is an optimisation the source
    may ignore; the engine always applies the exact distance check itself.
    Retries, if any, belong here and not in the engine.
    """

    def __init__(self, adapter: RowAdapter | None = None) -> None:
        self._adapter = adapter

    @property
    @abstractmethod
    def kind(self) -> EntityKind:
        """Entity kind this source returns."""

    @abstractmethod
    async def fetch(self, bbox: BoundingBox | None = None) -> list[RawRow]:
        """Return raw candidate rows, optionally pre-filtered to ``bbox``."""

    def adapt(self, rows: list[RawRow]) -> list[SearchableEntity]:
        """Convert raw rows with this source's adapter (default: the kind's adapter)."""
        return adapt_rows(self.kind, rows, self._adapter or ADAPTERS[self.kind])
