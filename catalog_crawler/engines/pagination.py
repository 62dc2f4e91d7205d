from __future__ import annotations

import enum
import logging
from typing import AsyncIterator, Optional, Set, Tuple

from bs4.element import Tag

from ..adapters.base import NextPageRule
from ..utils.http import DocumentProvider
from ..utils.parsing import is_navigational, resolve_url

logger = logging.getLogger(__name__)


# ---- Next-page detection rules ------------------------------------------------
# A rule inspects the pagination control of a fetched page and returns the raw
# href of the next page, or None. When several links qualify the first one in
# document order wins.


def next_by_rel(container: str, links: str = "a") -> NextPageRule:
    """Next page is the link carrying rel="next" inside `container`."""

    def rule(document: Tag) -> Optional[str]:
        control = document.select_one(container)
        if control is None:
            return None
        for link in control.select(links):
            rel = link.get("rel") or []
            if isinstance(rel, str):
                rel = rel.split()
            href = link.get("href")
            if "next" in rel and is_navigational(href):
                return href
        return None

    return rule


def next_by_text(container: str, label: str, links: str = "*") -> NextPageRule:
    """Next page is the first element under `container` whose text contains `label` and has an href."""

    def rule(document: Tag) -> Optional[str]:
        control = document.select_one(container)
        if control is None:
            return None
        for node in control.select(links):
            href = node.get("href")
            if is_navigational(href) and label in node.get_text():
                return href
        return None

    return rule


# ---- Navigator ------------------------------------------------------------------


class PageState(enum.Enum):
    FETCHING = "fetching"
    HAS_NEXT = "has_next"
    EXHAUSTED = "exhausted"


class Paginator:
    """
    Walks one category's result pages: Fetching(url) -> HasNext(next) ->
    Fetching(next) ... -> Exhausted.

    Yields (url, document) for every page fetched. A FetchError from the
    provider propagates to the caller; the paginator stays in FETCHING.
    """

    def __init__(
        self,
        provider: DocumentProvider,
        start_url: str,
        next_page: NextPageRule,
        *,
        max_pages: Optional[int] = None,
    ) -> None:
        self.provider = provider
        self.next_page = next_page
        self.max_pages = max_pages
        self.state = PageState.FETCHING
        self.url: Optional[str] = start_url
        self.fetches = 0
        self._seen: Set[str] = set()

    def __aiter__(self) -> AsyncIterator[Tuple[str, Tag]]:
        return self._walk()

    async def _walk(self) -> AsyncIterator[Tuple[str, Tag]]:
        while self.state is not PageState.EXHAUSTED:
            url = self.url
            self.state = PageState.FETCHING
            document = await self.provider.open(url)
            self.fetches += 1
            self._seen.add(url)
            yield url, document
            self._advance(url, document)

    def _advance(self, url: str, document: Tag) -> None:
        href = self.next_page(document)
        if href is None:
            self._exhaust()
            return
        next_url = resolve_url(url, href)
        if next_url in self._seen:
            logger.warning("Pagination on %s points back to %s; stopping", url, next_url)
            self._exhaust()
            return
        if self.max_pages is not None and self.fetches >= self.max_pages:
            logger.info("Page limit (%s) reached at %s", self.max_pages, url)
            self._exhaust()
            return
        self.state = PageState.HAS_NEXT
        self.url = next_url

    def _exhaust(self) -> None:
        self.state = PageState.EXHAUSTED
        self.url = None
