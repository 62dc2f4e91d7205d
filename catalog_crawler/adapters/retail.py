from __future__ import annotations

from typing import Optional

from bs4.element import Tag

from .base import ItemSelectors, SelectorExtractor, SiteRules, category_filter, id_from_link
from ..engines.pagination import next_by_text
from ..errors import MissingSKU
from ..utils.parsing import id_from_url, sku_from_label

# Superseis and Stock run the same storefront software, so they share one rule set.

PRODUCT_ID_PATTERN = r"/products/(\d+)-"
CATEGORY_ID_PATTERN = r"/category/(\d+)-"
SKU_LABEL = "Código de Barras"


def category_id(url: str) -> int:
    return id_from_url(CATEGORY_ID_PATTERN, url)


def barcode_from_detail(document: Tag) -> str:
    """The barcode printed on the product page, e.g. `Código de Barras: 7840001234567`."""
    node: Optional[Tag] = document.select_one(".sku")
    if node is None:
        raise MissingSKU("no .sku element on product page")
    return sku_from_label(node.get_text(), SKU_LABEL)


extract_item = SelectorExtractor(
    ItemSelectors(
        price=".price-label",
        title=".product-title a",
        link=".product-title-link",
        identifier=".product-title-link",
    ),
    parse_id=id_from_link(PRODUCT_ID_PATTERN),
)


def retail_rules(name: str, start_url: str, description: str = "") -> SiteRules:
    return SiteRules(
        name=name,
        start_url=start_url,
        category_selector="a",
        include_category=category_filter(require="/category/"),
        category_id=category_id,
        item_selector=".product-item",
        extract_item=extract_item,
        next_page=next_by_text(".product-pager-box", "Siguiente", links="div *"),
        detail_sku=barcode_from_detail,
        description=description,
    )


SUPERSEIS = retail_rules("s6", "http://www.superseis.com.py/default.aspx", "Superseis supermarkets")
STOCK = retail_rules("stock", "http://www.stock.com.py/default.aspx", "Stock supermarkets")
