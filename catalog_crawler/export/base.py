from __future__ import annotations

from typing import Protocol

from ..adapters.base import Product


class Exporter(Protocol):
    """
    A streaming sink: opened once per run, fed one product at a time by the
    crawl callback, closed when the run ends.
    """
    count: int

    def __enter__(self) -> "Exporter":
        ...

    def __exit__(self, *exc_info) -> None:
        ...

    def write(self, product: Product) -> None:
        ...
