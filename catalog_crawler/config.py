from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any
from pathlib import Path
import os
import json

from .errors import ConfigError
from .version import CONFIG_SCHEMA_VERSION, DEFAULT_USER_AGENT

DEFAULT_EXPORTER = "catalog_crawler.export.json_exporter:JSONLinesExporter"


@dataclass
class CrawlConfig:
    """
    Canonical configuration object for one crawl run.
    Keep it dataclass-only (no heavy deps) to stay upgrade-friendly.
    """
    schema_version: int = CONFIG_SCHEMA_VERSION
    # Site identifier from the registry, e.g. "s6", "stock", "casarica", "arete".
    site: str = ""
    request_timeout: float = 15.0
    user_agent: str = DEFAULT_USER_AGENT
    # None means follow pagination until the site runs out of pages.
    max_pages_per_category: Optional[int] = None
    # Abort the whole run when a category page cannot be fetched.
    fail_fast: bool = False
    # Dotted path for the exporter to allow runtime swapping without code changes.
    exporter: str = DEFAULT_EXPORTER
    # Extra SiteRules (dotted paths) to register at startup
    extra_sites: List[str] = field(default_factory=list)
    # Where to write results
    output_path: str = "output/products.jsonl"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    # ---------- Loaders ----------

    @classmethod
    def from_env(cls) -> "CrawlConfig":
        """
        Build config from CATALOG_* environment variables (all optional).
        """
        def _get(name: str, default: str) -> str:
            return os.getenv(name, default)

        max_pages = _get("CATALOG_MAX_PAGES", "").strip()
        try:
            return cls(
                site=_get("CATALOG_SITE", ""),
                request_timeout=float(_get("CATALOG_REQUEST_TIMEOUT", "15.0")),
                user_agent=_get("CATALOG_USER_AGENT", DEFAULT_USER_AGENT),
                max_pages_per_category=int(max_pages) if max_pages else None,
                fail_fast=_get("CATALOG_FAIL_FAST", "").strip().lower() in ("1", "true", "yes", "on"),
                exporter=_get("CATALOG_EXPORTER", DEFAULT_EXPORTER),
                extra_sites=[a.strip() for a in _get("CATALOG_EXTRA_SITES", "").split(",") if a.strip()],
                output_path=_get("CATALOG_OUTPUT_PATH", "output/products.jsonl"),
            )
        except ValueError as exc:
            raise ConfigError(f"Invalid CATALOG_* environment value: {exc}") from exc

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "CrawlConfig":
        """
        Load configuration from a JSON file. Older schema versions are migrated.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as exc:
            raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
        except ValueError as exc:
            raise ConfigError(f"Config file {path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must hold a JSON object")
        data = migrate_config(data)
        try:
            return cls(**data)
        except TypeError as exc:
            raise ConfigError(f"Invalid config file {path}: {exc}") from exc

    # ---------- Validation ----------

    def validate(self) -> None:
        if not self.site:
            raise ConfigError("site cannot be empty; pick one of the registered sites.")
        if self.request_timeout <= 0:
            raise ConfigError("request_timeout must be > 0")
        if self.max_pages_per_category is not None and self.max_pages_per_category <= 0:
            raise ConfigError("max_pages_per_category must be > 0")
        # Validate output path parent exists or is creatable
        parent = Path(self.output_path).parent
        parent.mkdir(parents=True, exist_ok=True)


def migrate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Migrate config dict to the latest schema version.
    Keep this pure and additive. Add migrations here as you bump schema.
    """
    raw = dict(raw)
    schema = raw.get("schema_version", 1)

    if schema == 1:
        # v1 named the category page cap `max_pages` and plugins `extra_adapters`.
        if "max_pages" in raw:
            raw["max_pages_per_category"] = raw.pop("max_pages")
        if "extra_adapters" in raw:
            raw["extra_sites"] = raw.pop("extra_adapters")
        schema = 2

    if schema > CONFIG_SCHEMA_VERSION:
        raise ConfigError(f"Config schema {schema} is newer than supported ({CONFIG_SCHEMA_VERSION})")
    raw["schema_version"] = CONFIG_SCHEMA_VERSION
    return raw
