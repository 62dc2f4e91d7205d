from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple, Union
from urllib.parse import urljoin, urlparse, urlunparse

from bs4.element import Tag

from ..errors import MissingAttribute, MissingSKU, UnparseableId, UnparseablePrice

_DIGITS = re.compile(r"[0-9]+")
_WHITESPACE = re.compile(r"\s+")
_NON_NAVIGATIONAL = ("#", "javascript:", "mailto:", "tel:")


# ---- URLs -----------------------------------------------------------------


def normalize_url(url: str) -> str:
    """
    Normalize URL by removing fragments.
    """
    parts = list(urlparse(url))
    parts[5] = ""  # strip fragment
    return urlunparse(parts)


def resolve_url(base_url: str, href: str) -> str:
    """Resolve a (possibly relative) href against the page it was found on."""
    return normalize_url(urljoin(base_url, href.strip()))


def is_navigational(href: Optional[str]) -> bool:
    if not href or not href.strip():
        return False
    return not href.strip().lower().startswith(_NON_NAVIGATIONAL)


# ---- Elements ---------------------------------------------------------------


def text_of(node: Optional[Tag]) -> str:
    if node is None:
        return ""
    return node.get_text(" ", strip=True)


def attr_of(node: Tag, name: str) -> str:
    """Attribute value or MissingAttribute. Multi-valued attributes are joined."""
    value = node.get(name)
    if value is None:
        raise MissingAttribute(name)
    if isinstance(value, list):
        value = " ".join(value)
    return value


# ---- Ids --------------------------------------------------------------------


def parse_id(text: Optional[str]) -> int:
    value = (text or "").strip()
    if not _DIGITS.fullmatch(value):
        raise UnparseableId(text or "")
    return int(value)


def id_from_url(pattern: Union[str, Pattern[str]], url: str) -> int:
    """
    Pull a numeric id out of a URL with a single-group pattern.
    Exactly one match is required; zero or several is ambiguous.
    """
    expr = re.compile(pattern) if isinstance(pattern, str) else pattern
    matches = expr.findall(url)
    if len(matches) != 1:
        raise UnparseableId(url)
    return parse_id(matches[0])


# ---- Prices -----------------------------------------------------------------


@dataclass(frozen=True)
class PriceFormat:
    """Locale conventions for price strings. Tokens are matched case-insensitively."""

    currency_tokens: Tuple[str, ...] = ("gs.", "gs")
    thousands_separators: Tuple[str, ...] = (".",)
    per_kg_markers: Tuple[str, ...] = ("el kg.", "x kg.", "kg.")


GUARANI = PriceFormat()


def _strip_tokens(text: str, tokens: Tuple[str, ...]) -> Tuple[str, bool]:
    found = False
    # Longest first so "gs." wins over "gs" and "el kg." over "kg.".
    for token in sorted(tokens, key=len, reverse=True):
        token = token.lower()
        if token and token in text:
            found = True
            text = text.replace(token, " ")
    return text, found


def parse_price(text: Optional[str], fmt: PriceFormat = GUARANI) -> Tuple[int, bool]:
    """
    Parse a display price into (amount, per_kilogram).

    >>> parse_price("3.200 Gs. el kg.")
    (3200, True)
    """
    raw = text or ""
    value = raw.strip().lower()
    if not value:
        raise UnparseablePrice(raw)

    value, per_kg = _strip_tokens(value, fmt.per_kg_markers)
    value, _ = _strip_tokens(value, fmt.currency_tokens)
    for sep in fmt.thousands_separators:
        value = value.replace(sep, "")
    value = _WHITESPACE.sub("", value)

    if not _DIGITS.fullmatch(value):
        raise UnparseablePrice(raw)
    return int(value), per_kg


# ---- SKUs -------------------------------------------------------------------


def sku_from_image(src: Optional[str], placeholders: Tuple[str, ...] = ("default",)) -> str:
    """
    Derive a vendor code from a product image path: the file name without
    its extension. Stock "no image" assets yield an empty SKU.
    """
    path = urlparse((src or "").strip()).path
    name = posixpath.basename(path)
    if not name:
        raise MissingSKU(f"no file name in image path {src!r}")
    stem, _ = posixpath.splitext(name)
    if not stem:
        raise MissingSKU(f"no file name in image path {src!r}")
    lowered = stem.lower()
    if any(p.lower() in lowered for p in placeholders):
        return ""
    return stem


def sku_from_label(text: Optional[str], label: str, delimiter: str = ":") -> str:
    """Read the value of a `Label: value` text field."""
    value = text or ""
    if label not in value:
        raise MissingSKU(f"label {label!r} not found")
    _, sep, tail = value.split(label, 1)[1].partition(delimiter)
    if not sep:
        raise MissingSKU(f"no {delimiter!r} after label {label!r}")
    sku = tail.replace("\r", "").replace("\n", "").strip()
    if not sku:
        raise MissingSKU(f"empty value for label {label!r}")
    return sku
