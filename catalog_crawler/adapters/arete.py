from __future__ import annotations

from .base import ItemSelectors, SelectorExtractor, SiteRules, category_filter, id_from_attribute, sku_from_image_attr
from ..engines.pagination import next_by_rel

START_URL = "https://www.arete.com.py/"

# Promotions and "new arrivals" re-list products from the regular categories.
EXCLUDED_SECTIONS = ("ofertas", "novedades")

ARETE = SiteRules(
    name="arete",
    start_url=START_URL,
    category_selector="#dl-menu a",
    include_category=category_filter(require="https://", exclude=EXCLUDED_SECTIONS),
    item_selector=".item",
    extract_item=SelectorExtractor(
        ItemSelectors(
            # The struck-through pre-discount price shares the class.
            price=".price-product:not(.price-discount)",
            title=".desc-product a",
            link=".desc-product a",
            identifier=".buy",
            sku=".imgproduct img",
        ),
        parse_id=id_from_attribute("data-id"),
        parse_sku=sku_from_image_attr("src", placeholders=("default",)),
    ),
    next_page=next_by_rel(".pagination", "li a"),
    description="Areté home & gifts",
)
