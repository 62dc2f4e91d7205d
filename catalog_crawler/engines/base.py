from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..adapters.base import Product

ProductCallback = Callable[[Product], None]


@dataclass
class SkipDiagnostic:
    """One catalog item that was dropped because a required field could not be read."""

    category_url: str
    page_url: str
    reason: str
    product_id: Optional[int] = None
    title: Optional[str] = None


@dataclass
class CrawlReport:
    site: str = ""
    categories_visited: int = 0
    categories_failed: List[str] = field(default_factory=list)
    pages_fetched: int = 0
    emitted: int = 0
    duplicates: int = 0
    sku_misses: int = 0
    skipped: List[SkipDiagnostic] = field(default_factory=list)
    cancelled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class CrawlEngine(ABC):
    """
    Abstract engine interface. Implementations own the crawl lifecycle and
    stream accepted products to the caller's callback.
    """
    @abstractmethod
    async def crawl(self, on_product: ProductCallback,
                    cancel: Optional[asyncio.Event] = None) -> CrawlReport:  # pragma: no cover - interface
        ...
