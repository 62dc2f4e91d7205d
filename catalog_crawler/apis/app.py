from __future__ import annotations

from typing import Any, Dict, List, Optional
import logging

try:
    from fastapi import FastAPI, HTTPException
    from pydantic import BaseModel
except ImportError as exc:  # pragma: no cover - optional dependency
    raise RuntimeError(
        "FastAPI not installed. Install with `pip install 'catalog-crawler[api]'` "
        "or avoid using the API server."
    ) from exc

from ..adapters.base import Product
from ..adapters.registry import build_registry
from ..config import CrawlConfig
from ..engines.catalog_engine import run_site
from ..errors import ConfigError, FetchError, UnknownSiteError
from ..version import __version__

logger = logging.getLogger(__name__)

app = FastAPI(title="catalog_crawler API", version=__version__)


class CrawlRequest(BaseModel):
    site: str
    max_pages_per_category: Optional[int] = None
    fail_fast: Optional[bool] = None
    extra_sites: Optional[List[str]] = None


class SiteInfo(BaseModel):
    name: str
    start_url: str
    description: str = ""


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/sites", response_model=List[SiteInfo])
async def sites() -> List[SiteInfo]:
    registry = build_registry(CrawlConfig.from_env().extra_sites)
    return [SiteInfo(name=r.name, start_url=r.start_url, description=r.description) for r in registry.sites]


@app.post("/crawl")
async def crawl(req: CrawlRequest) -> Dict[str, Any]:
    cfg = CrawlConfig.from_env()
    cfg.site = req.site
    if req.max_pages_per_category is not None:
        cfg.max_pages_per_category = req.max_pages_per_category
    if req.fail_fast is not None:
        cfg.fail_fast = req.fail_fast
    if req.extra_sites:
        cfg.extra_sites = req.extra_sites

    try:
        cfg.validate()
        rules = build_registry(cfg.extra_sites).get(cfg.site)
    except UnknownSiteError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ConfigError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    products: List[Product] = []
    try:
        report = await run_site(
            rules,
            products.append,
            request_timeout=cfg.request_timeout,
            user_agent=cfg.user_agent,
            max_pages_per_category=cfg.max_pages_per_category,
            fail_fast=cfg.fail_fast,
        )
    except FetchError as exc:
        logger.error("API crawl of %s aborted: %s", cfg.site, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return {"report": report.to_dict(), "products": [p.to_dict() for p in products]}
