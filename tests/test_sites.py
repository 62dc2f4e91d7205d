"""Each built-in rule set against fixture fragments shaped like the real storefronts."""

import pytest
from bs4 import BeautifulSoup

from catalog_crawler.adapters.arete import ARETE
from catalog_crawler.adapters.casarica import CASA_RICA
from catalog_crawler.adapters.retail import STOCK, SUPERSEIS, barcode_from_detail
from catalog_crawler.engines.catalog_engine import CatalogCrawlEngine
from catalog_crawler.errors import MissingAttribute, MissingElement, MissingSKU, UnparseableId
from catalog_crawler.utils.http import StaticDocumentProvider


def _item(html: str, selector: str):
    return BeautifulSoup(html, "html.parser").select_one(selector)


def _categories(rules, html: str):
    engine = CatalogCrawlEngine(rules, StaticDocumentProvider({}))
    return [(c.id, c.url) for c in engine.discover_categories(BeautifulSoup(html, "html.parser"))]


class TestRetail:
    ITEM = """
    <div class="product-item">
      <div class="product-title"><a href="#">Banana de Ecuador</a></div>
      <a class="product-title-link" href="http://www.superseis.com.py/products/4567-banana-de-ecuador.aspx"></a>
      <span class="price-label">12.500</span>
    </div>
    """

    def test_extract_item(self):
        fields = SUPERSEIS.extract_item(_item(self.ITEM, ".product-item"))

        assert fields.id == 4567
        assert fields.name == "Banana de Ecuador"
        assert fields.url == "http://www.superseis.com.py/products/4567-banana-de-ecuador.aspx"
        assert fields.price == 12500
        assert fields.per_kilogram is False
        assert fields.sku == ""

    def test_link_without_product_id(self):
        html = self.ITEM.replace("/products/4567-banana-de-ecuador.aspx", "/promo.aspx")
        with pytest.raises(UnparseableId):
            SUPERSEIS.extract_item(_item(html, ".product-item"))

    def test_missing_link_element(self):
        html = self.ITEM.replace('class="product-title-link"', 'class="other"')
        with pytest.raises(MissingElement) as err:
            SUPERSEIS.extract_item(_item(html, ".product-item"))
        assert err.value.which == "link"
        assert err.value.title is None

    def test_categories_need_numeric_id(self):
        html = """
        <a href="http://www.stock.com.py/category/12-frutas.aspx">Frutas</a>
        <a href="http://www.stock.com.py/category/lacteos.aspx">Lácteos</a>
        <a href="http://www.stock.com.py/category/12-frutas.aspx">Frutas (footer)</a>
        <a href="http://www.stock.com.py/contacto.aspx">Contacto</a>
        <a href="/category/30-bebidas.aspx">Bebidas</a>
        """
        assert _categories(STOCK, html) == [
            (12, "http://www.stock.com.py/category/12-frutas.aspx"),
            (30, "http://www.stock.com.py/category/30-bebidas.aspx"),
        ]

    def test_pager_siguiente(self):
        doc = BeautifulSoup(
            '<div class="product-pager-box"><div>'
            '<a href="?pageindex=1">1</a><span>2</span>'
            '<a href="http://www.superseis.com.py/category/12-frutas.aspx?pageindex=2">Siguiente</a>'
            "</div></div>",
            "html.parser",
        )
        assert SUPERSEIS.next_page(doc) == "http://www.superseis.com.py/category/12-frutas.aspx?pageindex=2"

    def test_last_page(self):
        doc = BeautifulSoup('<div class="product-pager-box"><div><a href="?p=1">Anterior</a></div></div>',
                            "html.parser")
        assert SUPERSEIS.next_page(doc) is None

    def test_barcode_from_product_page(self):
        doc = BeautifulSoup('<span class="sku">Código de Barras:\r\n 7840001234567</span>', "html.parser")
        assert barcode_from_detail(doc) == "7840001234567"

    def test_barcode_missing(self):
        with pytest.raises(MissingSKU):
            barcode_from_detail(BeautifulSoup("<p>sin datos</p>", "html.parser"))
        with pytest.raises(MissingSKU):
            barcode_from_detail(BeautifulSoup('<span class="sku">SKU: 1</span>', "html.parser"))

    def test_both_storefronts_share_rules(self):
        assert SUPERSEIS.extract_item is STOCK.extract_item
        assert SUPERSEIS.start_url != STOCK.start_url


class TestArete:
    ITEM = """
    <div class="item">
      <div class="imgproduct"><img src="https://www.arete.com.py/images/products/AB-1234.png"></div>
      <div class="desc-product"><a href="https://www.arete.com.py/producto/taza"> Taza de cerámica </a></div>
      <span class="price-product price-discount">Gs. 60.000</span>
      <span class="price-product">Gs. 45.000</span>
      <a class="buy" data-id="991">Comprar</a>
    </div>
    """

    def test_extract_item_ignores_struck_price(self):
        fields = ARETE.extract_item(_item(self.ITEM, ".item"))

        assert fields.id == 991
        assert fields.name == "Taza de cerámica"
        assert fields.url == "https://www.arete.com.py/producto/taza"
        assert fields.price == 45000
        assert fields.sku == "AB-1234"
        assert fields.sku_error is None

    def test_placeholder_image(self):
        html = self.ITEM.replace("AB-1234.png", "default.jpg")
        assert ARETE.extract_item(_item(html, ".item")).sku == ""

    def test_missing_image_is_tolerated(self):
        html = self.ITEM.replace('class="imgproduct"', 'class="noimg"')
        fields = ARETE.extract_item(_item(html, ".item"))
        assert fields.sku == ""
        assert isinstance(fields.sku_error, MissingElement)

    def test_missing_data_id(self):
        html = self.ITEM.replace('data-id="991"', "")
        with pytest.raises(MissingAttribute) as err:
            ARETE.extract_item(_item(html, ".item"))
        assert err.value.which == "data-id"
        assert err.value.title == "Taza de cerámica"

    def test_empty_product_link(self):
        html = self.ITEM.replace('href="https://www.arete.com.py/producto/taza"', 'href=" "')
        with pytest.raises(MissingAttribute) as err:
            ARETE.extract_item(_item(html, ".item"))
        assert err.value.which == "href"
        assert err.value.product_id is None
        assert err.value.title == "Taza de cerámica"

    def test_categories_skip_promotions_and_new_arrivals(self):
        html = """
        <ul id="dl-menu">
          <li><a href="https://www.arete.com.py/hogar">Hogar</a></li>
          <li><a href="https://www.arete.com.py/ofertas">Ofertas</a></li>
          <li><a href="https://www.arete.com.py/novedades">Novedades</a></li>
          <li><a href="/cocina">Cocina</a></li>
          <li><a href="#">Menú</a></li>
        </ul>
        <a href="https://www.arete.com.py/bano">outside the menu</a>
        """
        assert _categories(ARETE, html) == [(0, "https://www.arete.com.py/hogar")]

    def test_rel_next(self):
        doc = BeautifulSoup(
            '<ul class="pagination"><li><a rel="prev" href="?page=1">«</a></li>'
            '<li><a rel="next" href="https://www.arete.com.py/hogar?page=3">»</a></li></ul>',
            "html.parser",
        )
        assert ARETE.next_page(doc) == "https://www.arete.com.py/hogar?page=3"


class TestCasaRica:
    ITEM = """
    <div class="divproduct">
      <input type="hidden" class="productsListId" value="321">
      <div class="pimg"><a href="https://www.casarica.com.py/producto/queso"><img src="q.jpg"></a></div>
      <div class="ptitle">Quesos</div>
      <div class="psubtitle"> Queso Paraguay </div>
      <div class="pprice">3.200 Gs. el kg.</div>
    </div>
    """

    def test_extract_per_kg_item(self):
        fields = CASA_RICA.extract_item(_item(self.ITEM, ".divproduct"))

        assert fields.id == 321
        assert fields.name == "Queso Paraguay"
        assert fields.url == "https://www.casarica.com.py/producto/queso"
        assert (fields.price, fields.per_kilogram) == (3200, True)
        assert fields.sku == ""

    def test_unit_price(self):
        html = self.ITEM.replace("3.200 Gs. el kg.", "Gs. 15.000")
        fields = CASA_RICA.extract_item(_item(html, ".divproduct"))
        assert (fields.price, fields.per_kilogram) == (15000, False)

    def test_missing_product_id(self):
        html = self.ITEM.replace(' value="321"', "")
        with pytest.raises(MissingAttribute):
            CASA_RICA.extract_item(_item(html, ".divproduct"))

    def test_categories(self):
        html = """
        <div id="sideNavbar">
          <a href="https://www.casarica.com.py/lacteos">Lácteos</a>
          <a href="https://www.casarica.com.py/promociones">Promociones</a>
          <a href="https://www.casarica.com.py/lacteos#quesos">Quesos</a>
        </div>
        """
        assert _categories(CASA_RICA, html) == [(0, "https://www.casarica.com.py/lacteos")]


class TestRetailCrawl:
    @pytest.mark.asyncio
    async def test_crawl_with_barcode_lookup(self):
        start = "http://www.superseis.com.py/default.aspx"
        cat = "http://www.superseis.com.py/category/12-frutas.aspx"
        prod = "http://www.superseis.com.py/products/4567-banana-de-ecuador.aspx"
        provider = StaticDocumentProvider({
            start: f'<a href="{cat}">Frutas</a>',
            cat: TestRetail.ITEM,
            prod: '<div class="sku">Código de Barras: 7840001234567</div>',
        })
        emitted = []

        report = await CatalogCrawlEngine(SUPERSEIS, provider).crawl(emitted.append)

        assert len(emitted) == 1
        product = emitted[0]
        assert (product.id, product.category_id, product.category_url) == (4567, 12, cat)
        assert product.sku == "7840001234567"
        assert provider.fetched == [start, cat, prod]
        assert report.sku_misses == 0
