"""Per-archive record of entry names already written."""

from __future__ import annotations


class EntryCatalog:
    """Set of entry names in one output archive. The first reservation of a name wins."""

    def __init__(self) -> None:
        self._names: set[str] = set()

    def reserve(self, name: str) -> bool:
        """Record name. Returns False if it was already present."""
        if name in self._names:
            return False
        self._names.add(name)
        return True

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._names)
