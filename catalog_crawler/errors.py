from __future__ import annotations

from typing import Iterable, Optional


class CrawlerError(Exception):
    """Base class for everything the crawler raises on purpose."""


class ConfigError(CrawlerError, ValueError):
    pass


class UnknownSiteError(ConfigError):
    def __init__(self, site: str, known: Iterable[str] = ()) -> None:
        self.site = site
        self.known = sorted(known)
        hint = f" (known: {', '.join(self.known)})" if self.known else ""
        super().__init__(f"Unknown site {site!r}{hint}")


class FetchError(CrawlerError):
    """A document could not be opened. Scoped to the category being crawled."""

    def __init__(self, url: str, cause: object = None) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to open {url}: {cause!r}" if cause is not None else f"Failed to open {url}")


# ---- Item level ----------------------------------------------------------


class ExtractionError(CrawlerError):
    """
    A single catalog item could not be turned into a record.
    Extractors fill in whatever context they had reached when it failed.
    """

    reason = "extraction failed"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        self.product_id: Optional[int] = None
        self.title: Optional[str] = None
        super().__init__(f"{self.reason}: {detail}" if detail else self.reason)


class MissingElement(ExtractionError):
    reason = "missing element"

    def __init__(self, which: str) -> None:
        self.which = which
        super().__init__(which)


class MissingAttribute(ExtractionError):
    reason = "missing attribute"

    def __init__(self, which: str) -> None:
        self.which = which
        super().__init__(which)


class UnparseablePrice(ExtractionError):
    reason = "unparseable price"

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(repr(text))


class UnparseableId(ExtractionError):
    reason = "unparseable id"

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(repr(text))


class MissingSKU(ExtractionError):
    reason = "missing sku"
