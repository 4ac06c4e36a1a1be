from __future__ import annotations

from typing import Set


class Deduplicator:
    """Part numbers written during the current batch session.

    A new instance is created whenever a batch is opened, including when
    the batch file is reloaded from disk, so rows written by an earlier
    process are not known here.
    """

    def __init__(self) -> None:
        self._keys: Set[str] = set()

    def seen(self, key: str) -> bool:
        return key in self._keys

    def mark_seen(self, key: str) -> None:
        self._keys.add(key)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)


__all__ = ["Deduplicator"]
