"""Organization to destination mapping loaded from a two-column CSV."""

import csv
import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Optional, TextIO, Union

from secret_migrate.migration.exceptions import MappingFormatError

logger = logging.getLogger(__name__)


class OrgDestinationMap(Mapping):
    """Read-only ``organization_id -> destination`` mapping."""

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()):
        entries: dict[str, str] = {}
        for organization_id, destination in pairs:
            # Later rows win
            entries[organization_id] = destination
        self._entries = entries

    def __getitem__(self, organization_id: str) -> str:
        return self._entries[organization_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"OrgDestinationMap({self._entries!r})"


class DestinationResolver:
    """Loads the org-to-destination CSV and answers destination lookups."""

    def load(self, source: Union[str, Path, TextIO]) -> OrgDestinationMap:
        """Load a mapping from a CSV path or an open text stream.

        Rows are ``organization_id,destination_id`` with no header. Blank
        lines are ignored; any other row that is not exactly two non-empty
        fields aborts the load.

        Raises:
            MappingFormatError: On the first malformed row.
            OSError: If the path cannot be opened.
        """
        if isinstance(source, (str, Path)):
            with open(source, newline="") as f:
                mapping = self.load_rows(csv.reader(f))
            logger.info(f"Loaded {len(mapping)} organization mappings from {source}")
            return mapping
        return self.load_rows(csv.reader(source))

    def load_rows(self, rows: Iterable[list[str]]) -> OrgDestinationMap:
        """Build a mapping from already-split rows, validating each one."""
        pairs = []
        for line_number, row in enumerate(rows, start=1):
            if not row:
                continue
            if len(row) != 2:
                raise MappingFormatError(line_number, list(row), f"expected 2 fields, got {len(row)}")
            organization_id, destination = (value.strip() for value in row)
            if not organization_id or not destination:
                raise MappingFormatError(line_number, list(row), "empty organization or destination")
            pairs.append((organization_id, destination))
        return OrgDestinationMap(pairs)

    @staticmethod
    def resolve(mapping: Mapping, organization_id: Optional[str]) -> Optional[str]:
        """Destination for ``organization_id``, or None when it cannot be routed."""
        if not organization_id:
            return None
        return mapping.get(organization_id) or None
