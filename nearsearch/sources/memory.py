"""Concrete data sources backed by in-memory rows or a JSON/YAML file."""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from nearsearch.core.schemas import BoundingBox, EntityKind
from nearsearch.sources.adapters import RawRow, RowAdapter, row_location
from nearsearch.sources.base import DataSource

logger = logging.getLogger(__name__)


class InMemorySource(DataSource):
    """Serves a fixed list of rows.

    Honours the bounding-box hint the way a database query would: rows
    without usable coordinates are dropped when a box is given.
    """

    def __init__(
        self,
        kind: EntityKind,
        rows: list[RawRow],
        adapter: RowAdapter | None = None,
    ) -> None:
        super().__init__(adapter)
        self._kind = kind
        self._rows = list(rows)

    @property
    def kind(self) -> EntityKind:
        return self._kind

    async def fetch(self, bbox: BoundingBox | None = None) -> list[RawRow]:
        if bbox is None:
            return list(self._rows)
        result = [r for r in self._rows if _in_box(r, bbox)]
        logger.debug(
            "InMemorySource(%s): %d/%d rows inside bounding box",
            self._kind.value, len(result), len(self._rows),
        )
        return result


class FileSource(InMemorySource):
    """Rows loaded from a ``.json``, ``.yaml`` or ``.yml`` file holding a list of objects."""

    def __init__(
        self,
        kind: EntityKind,
        path: str | Path,
        adapter: RowAdapter | None = None,
    ) -> None:
        super().__init__(kind, load_rows(path), adapter)
        self.path = Path(path)


def load_rows(path: str | Path) -> list[dict[str, Any]]:
    """Read a list of row objects from a JSON or YAML file."""
    path = Path(path)
    if not path.exists():
        msg = f"Source file not found: {path}"
        raise FileNotFoundError(msg)
    text = path.read_text()
    if path.suffix.lower() == ".json":
        raw = json.loads(text)
    else:
        raw = yaml.safe_load(text)
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(r, dict) for r in raw):
        msg = f"{path}: expected a list of objects"
        raise ValueError(msg)
    return raw


def _in_box(row: RawRow, bbox: BoundingBox) -> bool:
    point = row_location(row)
    return point is not None and bbox.contains(point)
