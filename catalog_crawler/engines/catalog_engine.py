from __future__ import annotations

import asyncio
import logging
from typing import Iterator, Optional, Set, Union

from bs4.element import Tag

from .base import CrawlEngine, CrawlReport, ProductCallback, SkipDiagnostic
from .dedup import Deduplicator
from .pagination import Paginator
from ..adapters.base import Category, Product, ProductFields, SiteRules
from ..errors import ExtractionError, FetchError
from ..utils.http import DocumentProvider, HttpDocumentProvider
from ..utils.parsing import is_navigational, resolve_url

logger = logging.getLogger(__name__)


class CatalogCrawlEngine(CrawlEngine):
    """
    Shared traversal for every site:
    start page -> categories -> pages -> items -> dedup -> callback.

    - The provider owns HTTP; `rules` own selectors and text parsing.
    - Strictly sequential: one category, one page, one item at a time.
    - Item failures skip the item. Fetch failures skip the rest of the
      category unless `fail_fast` is set.
    """
    def __init__(
        self,
        rules: SiteRules,
        provider: DocumentProvider,
        *,
        max_pages_per_category: Optional[int] = None,
        fail_fast: bool = False,
    ) -> None:
        self.rules = rules
        self.provider = provider
        self.max_pages_per_category = max_pages_per_category
        self.fail_fast = fail_fast

    async def crawl(self, on_product: ProductCallback,
                    cancel: Optional[asyncio.Event] = None) -> CrawlReport:
        rules = self.rules
        report = CrawlReport(site=rules.name)
        dedup = Deduplicator()

        start = await self.provider.open(rules.start_url)
        categories = list(self.discover_categories(start))
        logger.info("%s: %s categories discovered from %s", rules.name, len(categories), rules.start_url)

        for category in categories:
            if cancel is not None and cancel.is_set():
                report.cancelled = True
                break
            report.categories_visited += 1
            try:
                await self._crawl_category(category, dedup, on_product, report, cancel)
            except FetchError as exc:
                report.categories_failed.append(category.url)
                if self.fail_fast:
                    raise
                logger.error("Abandoning category %s: %s", category.url, exc)
            if report.cancelled:
                break

        logger.info(
            "%s: %s products emitted, %s skipped, %s duplicates, %s categories failed%s",
            rules.name, report.emitted, len(report.skipped), report.duplicates,
            len(report.categories_failed), " (cancelled)" if report.cancelled else "",
        )
        return report

    # ---- Categories ---------------------------------------------------------

    def discover_categories(self, document: Tag) -> Iterator[Category]:
        """
        Category links from the start page, in document order, each category
        at most once.
        """
        rules = self.rules
        seen: Set[Union[int, str]] = set()
        for anchor in document.select(rules.category_selector):
            href = anchor.get("href")
            if not is_navigational(href) or not rules.include_category(href):
                continue
            url = resolve_url(rules.start_url, href)
            try:
                category = Category(id=rules.category_id(url), url=url)
            except ExtractionError as exc:
                logger.warning("Ignoring category %s: %s", url, exc)
                continue
            if category.key in seen or category.url in seen:
                continue
            seen.update((category.key, category.url))
            yield category

    async def _crawl_category(
        self,
        category: Category,
        dedup: Deduplicator,
        on_product: ProductCallback,
        report: CrawlReport,
        cancel: Optional[asyncio.Event],
    ) -> None:
        pager = Paginator(self.provider, category.url, self.rules.next_page,
                          max_pages=self.max_pages_per_category)
        before = report.emitted
        try:
            async for page_url, document in pager:
                report.pages_fetched += 1
                await self._process_page(category, page_url, document, dedup, on_product, report)
                if cancel is not None and cancel.is_set():
                    report.cancelled = True
                    break
        finally:
            logger.info("Category %s: %s pages, %s products",
                        category.url, pager.fetches, report.emitted - before)

    # ---- Items --------------------------------------------------------------

    async def _process_page(
        self,
        category: Category,
        page_url: str,
        document: Tag,
        dedup: Deduplicator,
        on_product: ProductCallback,
        report: CrawlReport,
    ) -> None:
        for item in document.select(self.rules.item_selector):
            try:
                fields = self.rules.extract_item(item)
            except ExtractionError as exc:
                self._skip(report, category, page_url, exc)
                continue

            if not dedup.admit(fields.id):
                report.duplicates += 1
                logger.debug("Duplicate product %s on %s", fields.id, page_url)
                continue

            sku = await self._resolve_sku(fields, page_url, report)
            on_product(Product(
                id=fields.id,
                name=fields.name,
                url=resolve_url(page_url, fields.url),
                price=fields.price,
                category_id=category.id,
                category_url=category.url,
                per_kilogram=fields.per_kilogram,
                sku=sku,
            ))
            report.emitted += 1

    async def _resolve_sku(self, fields: ProductFields, page_url: str, report: CrawlReport) -> str:
        error: Optional[Exception] = fields.sku_error
        sku = fields.sku
        if error is None and not sku and self.rules.detail_sku is not None:
            product_url = resolve_url(page_url, fields.url)
            try:
                sku = self.rules.detail_sku(await self.provider.open(product_url))
            except (ExtractionError, FetchError) as exc:
                error = exc
        if error is not None:
            report.sku_misses += 1
            logger.warning("No SKU for product %s (%s): %s", fields.id, fields.name, error)
            return ""
        return sku

    def _skip(self, report: CrawlReport, category: Category, page_url: str, exc: ExtractionError) -> None:
        report.skipped.append(SkipDiagnostic(
            category_url=category.url,
            page_url=page_url,
            reason=str(exc),
            product_id=exc.product_id,
            title=exc.title,
        ))
        logger.warning("Skipping product on %s (id=%s, title=%r): %s",
                       category.url, exc.product_id, exc.title, exc)


async def run_site(
    rules: SiteRules,
    on_product: ProductCallback,
    *,
    request_timeout: float = 15.0,
    user_agent: Optional[str] = None,
    max_pages_per_category: Optional[int] = None,
    fail_fast: bool = False,
    cancel: Optional[asyncio.Event] = None,
) -> CrawlReport:
    """Crawl one site over HTTP with a session scoped to this run."""
    async with HttpDocumentProvider(timeout=request_timeout, user_agent=user_agent) as provider:
        engine = CatalogCrawlEngine(rules, provider,
                                    max_pages_per_category=max_pages_per_category,
                                    fail_fast=fail_fast)
        return await engine.crawl(on_product, cancel=cancel)
