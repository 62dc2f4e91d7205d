from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

from bs4.element import Tag

from ..errors import ExtractionError, MissingAttribute, MissingElement
from ..utils.parsing import (
    GUARANI,
    PriceFormat,
    attr_of,
    id_from_url,
    parse_id,
    parse_price,
    sku_from_image,
    text_of,
)

# Field order of an emitted record; exporters write columns in this order.
PRODUCT_FIELDS = ("id", "name", "url", "price", "categoryId", "categoryUrl", "perKilogram", "sku")


@dataclass(frozen=True)
class Product:
    """A normalized catalog record. Only built once every required field is known."""

    id: int
    name: str
    url: str
    price: int
    category_id: int
    category_url: str
    per_kilogram: bool = False
    sku: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "price": self.price,
            "categoryId": self.category_id,
            "categoryUrl": self.category_url,
            "perKilogram": self.per_kilogram,
            "sku": self.sku,
        }


@dataclass(frozen=True)
class ProductFields:
    """What an extractor can read from one item fragment (no category context)."""

    id: int
    name: str
    url: str
    price: int
    per_kilogram: bool = False
    sku: str = ""
    sku_error: Optional[ExtractionError] = None


@dataclass(frozen=True)
class Category:
    id: int
    url: str

    @property
    def key(self) -> Union[int, str]:
        # Sites without a numeric scheme report 0; fall back to the URL.
        return self.id if self.id else self.url


# ---- Rule building blocks ---------------------------------------------------

IdRule = Callable[[Tag, str], int]  # (identifier element, product link) -> id
SkuRule = Callable[[Tag], str]
NextPageRule = Callable[[Tag], Optional[str]]


def id_from_attribute(attr: str) -> IdRule:
    def rule(node: Tag, link: str) -> int:
        return parse_id(attr_of(node, attr))
    return rule


def id_from_link(pattern: str) -> IdRule:
    def rule(node: Tag, link: str) -> int:
        return id_from_url(pattern, link)
    return rule


def sku_from_image_attr(attr: str = "src", placeholders: Tuple[str, ...] = ("default",)) -> SkuRule:
    def rule(node: Tag) -> str:
        return sku_from_image(attr_of(node, attr), placeholders)
    return rule


def category_filter(require: Optional[str] = None, exclude: Iterable[str] = ()) -> Callable[[str], bool]:
    """
    Build an inclusion predicate over raw category hrefs: the href must contain
    `require` (when given) and none of the `exclude` path segments.
    """
    excluded = tuple(exclude)

    def include(href: str) -> bool:
        if require and require not in href:
            return False
        return not any(token in href for token in excluded)

    return include


def _accept_all(href: str) -> bool:
    return True


def _no_category_id(url: str) -> int:
    return 0


@dataclass(frozen=True)
class ItemSelectors:
    """CSS locators, relative to one item element."""

    price: str
    title: str
    link: str
    identifier: str
    sku: Optional[str] = None
    link_attr: str = "href"


class SelectorExtractor:
    """
    Generic field extractor: locate the elements with `selectors`, then hand
    them to the site's id / price / sku rules. Raises an ExtractionError
    subclass for anything required; SKU trouble is carried on the result.
    """

    def __init__(
        self,
        selectors: ItemSelectors,
        *,
        parse_id: IdRule,
        price_format: PriceFormat = GUARANI,
        parse_sku: Optional[SkuRule] = None,
    ) -> None:
        self.selectors = selectors
        self.parse_id = parse_id
        self.price_format = price_format
        self.parse_sku = parse_sku

    def __call__(self, item: Tag) -> ProductFields:
        sel = self.selectors
        product_id: Optional[int] = None
        title: Optional[str] = None
        try:
            title_el = self._require(item, sel.title, "title")
            link_el = self._require(item, sel.link, "link")
            id_el = self._require(item, sel.identifier, "identifier")

            title = text_of(title_el) or None
            link = attr_of(link_el, sel.link_attr).strip()
            if not link:
                raise MissingAttribute(sel.link_attr)
            product_id = self.parse_id(id_el, link)
            price_el = self._require(item, sel.price, "price")
            price, per_kg = parse_price(price_el.get_text(), self.price_format)
            if not title:
                raise MissingElement("title")
        except ExtractionError as exc:
            exc.product_id = product_id
            exc.title = title
            raise

        sku, sku_error = "", None
        if self.parse_sku is not None and sel.sku:
            try:
                sku = self.parse_sku(self._require(item, sel.sku, "sku"))
            except ExtractionError as exc:
                exc.product_id, exc.title = product_id, title
                sku_error = exc

        return ProductFields(
            id=product_id,
            name=title,
            url=link,
            price=price,
            per_kilogram=per_kg,
            sku=sku,
            sku_error=sku_error,
        )

    @staticmethod
    def _require(item: Tag, selector: str, which: str) -> Tag:
        node = item.select_one(selector)
        if node is None:
            raise MissingElement(which)
        return node


@dataclass(frozen=True)
class SiteRules:
    """
    Everything site-specific about a crawl. The engine owns traversal,
    error policy and deduplication; a site only supplies selectors and
    parsing functions.
    """

    name: str
    start_url: str
    category_selector: str
    item_selector: str
    extract_item: Callable[[Tag], ProductFields]
    next_page: NextPageRule
    include_category: Callable[[str], bool] = _accept_all
    category_id: Callable[[str], int] = _no_category_id
    # Reads the SKU from the product's own page when the listing lacks it.
    detail_sku: Optional[SkuRule] = None
    description: str = ""
