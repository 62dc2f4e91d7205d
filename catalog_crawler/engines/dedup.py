from __future__ import annotations

from typing import Iterable, Set


class Deduplicator:
    """
    Product ids already emitted in one crawl run. Create one per run; the
    engine is single-threaded so no locking is needed.
    """

    def __init__(self, seen: Iterable[int] = ()) -> None:
        self._seen: Set[int] = set(seen)

    def admit(self, product_id: int) -> bool:
        """Record `product_id`; False if it was already emitted."""
        if product_id in self._seen:
            return False
        self._seen.add(product_id)
        return True

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._seen

    def __len__(self) -> int:
        return len(self._seen)
