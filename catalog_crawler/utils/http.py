from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Mapping, Optional, Protocol, Union

import aiohttp
from aiohttp import ClientSession, ClientTimeout
from bs4 import BeautifulSoup

from ..errors import FetchError
from ..version import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


class DocumentProvider(Protocol):
    """
    The only I/O boundary the crawl engine depends on: given a URL, return a
    queryable document (a BeautifulSoup tree) or raise FetchError.
    """

    async def open(self, url: str) -> BeautifulSoup:
        ...


def parse_document(markup: Union[str, bytes], encoding: Optional[str] = None) -> BeautifulSoup:
    if isinstance(markup, bytes):
        # The declared charset is only tried first; bs4 falls back when the bytes disagree.
        return BeautifulSoup(markup, "html.parser", from_encoding=encoding)
    return BeautifulSoup(markup, "html.parser")


def create_session(*, timeout: float = 15.0, user_agent: Optional[str] = None) -> ClientSession:
    """
    Create the aiohttp ClientSession shared by every fetch of one crawl run.
    """
    # Note: caller is responsible for closing the session (await session.close()).
    headers = {"User-Agent": user_agent or DEFAULT_USER_AGENT}
    connector = aiohttp.TCPConnector(limit=1)  # pages are fetched one at a time
    return aiohttp.ClientSession(connector=connector, headers=headers, timeout=ClientTimeout(total=timeout))


class HttpDocumentProvider:
    """
    Fetches pages over HTTP. Use as an async context manager so the session
    is closed when the crawl run ends.
    """

    def __init__(self, *, timeout: float = 15.0, user_agent: Optional[str] = None,
                 session: Optional[ClientSession] = None) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "HttpDocumentProvider":
        if self._session is None:
            self._session = create_session(timeout=self.timeout, user_agent=self.user_agent)
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def open(self, url: str) -> BeautifulSoup:
        if self._session is None:
            raise RuntimeError("HttpDocumentProvider used outside of `async with`")
        try:
            async with self._session.get(url) as resp:
                resp.raise_for_status()
                body = await resp.read()
                charset = resp.charset
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.debug("GET %s failed: %r", url, exc)
            raise FetchError(url, exc) from exc
        logger.debug("GET %s -> %s bytes", url, len(body))
        try:
            return parse_document(body, charset)
        except (UnicodeDecodeError, LookupError) as exc:
            raise FetchError(url, exc) from exc


class StaticDocumentProvider:
    """
    Serves documents from an in-memory url -> html mapping. Unknown URLs raise
    FetchError. Every requested URL is appended to `fetched`.
    """

    def __init__(self, pages: Mapping[str, str]) -> None:
        self.pages: Dict[str, str] = dict(pages)
        self.fetched: List[str] = []

    async def open(self, url: str) -> BeautifulSoup:
        self.fetched.append(url)
        try:
            html = self.pages[url]
        except KeyError:
            raise FetchError(url, "not found") from None
        return parse_document(html)
