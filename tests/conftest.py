"""Demo storefront used across the engine tests: rules plus HTML builders."""

from typing import Iterable, Optional, Tuple

from catalog_crawler.adapters.base import (
    ItemSelectors,
    SelectorExtractor,
    SiteRules,
    category_filter,
    id_from_attribute,
    sku_from_image_attr,
)
from catalog_crawler.engines.pagination import next_by_rel

BASE = "https://shop.example/"

DEMO_RULES = SiteRules(
    name="demo",
    start_url=BASE,
    category_selector="nav a",
    include_category=category_filter(exclude=("ofertas",)),
    item_selector=".item",
    extract_item=SelectorExtractor(
        ItemSelectors(
            price=".price",
            title=".title a",
            link=".title a",
            identifier=".buy",
            sku=".thumb img",
        ),
        parse_id=id_from_attribute("data-id"),
        parse_sku=sku_from_image_attr(),
    ),
    next_page=next_by_rel(".pagination", "a"),
    description="in-memory demo shop",
)

Item = Tuple[int, str, Optional[str]]  # (id, name, price text or None for no price element)


def item_html(product_id: int, name: str, price: Optional[str]) -> str:
    price_html = f'<span class="price">{price}</span>' if price is not None else ""
    return (
        '<div class="item">'
        f'<div class="thumb"><img src="/img/products/SKU{product_id}.jpg"></div>'
        f'<h3 class="title"><a href="/p/{product_id}">{name}</a></h3>'
        f"{price_html}"
        f'<button class="buy" data-id="{product_id}">Comprar</button>'
        "</div>"
    )


def page_html(items: Iterable[Item], next_href: Optional[str] = None) -> str:
    next_html = f'<li><a rel="next" href="{next_href}">&raquo;</a></li>' if next_href else ""
    body = "".join(item_html(*item) for item in items)
    return (
        f"<html><body><main>{body}</main>"
        f'<ul class="pagination"><li><a href="#">1</a></li>{next_html}</ul>'
        "</body></html>"
    )


def start_html(*hrefs: str) -> str:
    links = "".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    return f"<html><body><nav>{links}</nav></body></html>"

