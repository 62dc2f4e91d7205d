from __future__ import annotations

from .base import ItemSelectors, SelectorExtractor, SiteRules, category_filter, id_from_attribute
from ..engines.pagination import next_by_rel

START_URL = "https://www.casarica.com.py/"

CASA_RICA = SiteRules(
    name="casarica",
    start_url=START_URL,
    category_selector="#sideNavbar a",
    include_category=category_filter(require="https://", exclude=("promociones",)),
    item_selector=".divproduct",
    # Prices may be quoted per kilogram ("3.200 Gs. el kg."); no SKU on listings.
    extract_item=SelectorExtractor(
        ItemSelectors(
            price=".pprice",
            title=".psubtitle",
            link=".pimg a",
            identifier=".productsListId",
        ),
        parse_id=id_from_attribute("value"),
    ),
    next_page=next_by_rel(".pagination", "li a"),
    description="Casa Rica supermarket",
)
