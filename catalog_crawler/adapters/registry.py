from __future__ import annotations

import logging
from importlib import metadata
from typing import Dict, Iterable, List

from .arete import ARETE
from .base import SiteRules
from .casarica import CASA_RICA
from .retail import STOCK, SUPERSEIS
from ..errors import ConfigError, UnknownSiteError
from ..utils.loader import load_symbol

logger = logging.getLogger(__name__)

BUILTIN_SITES = (SUPERSEIS, STOCK, CASA_RICA, ARETE)


class SiteRegistry:
    """
    Rule sets by site identifier.
    Supports built-ins, config-defined dotted objects, and entry-point plugins.
    """
    def __init__(self) -> None:
        self._sites: Dict[str, SiteRules] = {rules.name: rules for rules in BUILTIN_SITES}

    # ---- Introspection / Management ----

    def register(self, rules: SiteRules) -> None:
        if rules.name in self._sites:
            logger.info("Replacing rules for site %s", rules.name)
        self._sites[rules.name] = rules

    @property
    def names(self) -> List[str]:
        return sorted(self._sites)

    @property
    def sites(self) -> List[SiteRules]:
        return [self._sites[name] for name in self.names]

    def get(self, name: str) -> SiteRules:
        """Rules for `name`; UnknownSiteError before anything touches the network."""
        try:
            return self._sites[name]
        except KeyError:
            raise UnknownSiteError(name, self._sites) from None

    def __contains__(self, name: object) -> bool:
        return name in self._sites

    # ---- Discovery ----

    def discover_entry_points(self, group: str = "catalog_crawler.sites") -> int:
        """
        Register rule sets published by installed packages under `group`.
        Each entry point may name a SiteRules value or a zero-argument factory.
        Returns count of newly registered sites.
        """
        added = 0
        for ep in metadata.entry_points().select(group=group):
            try:
                rules = _as_rules(ep.load())
            except Exception as exc:
                logger.warning("Failed to load site plugin %s: %r", ep.name, exc)
                continue
            if not isinstance(rules, SiteRules):
                logger.warning("Site plugin %s did not produce SiteRules", ep.name)
                continue
            self.register(rules)
            added += 1
        return added


def build_registry(extra_sites: Iterable[str] = (), *, entry_points: bool = True) -> SiteRegistry:
    """Built-ins, then installed plugins, then dotted paths from config (last one wins)."""
    registry = SiteRegistry()
    if entry_points:
        registry.discover_entry_points()
    for dotted in extra_sites:
        obj = load_symbol(dotted)
        try:
            rules = _as_rules(obj)
        except TypeError as exc:
            raise ConfigError(f"Cannot build site rules from {dotted}: {exc}") from exc
        if not isinstance(rules, SiteRules):
            raise ConfigError(f"{dotted} did not produce SiteRules")
        registry.register(rules)
    return registry


def _as_rules(obj: object) -> object:
    # A SiteRules value, or a zero-argument factory returning one.
    if isinstance(obj, SiteRules) or not callable(obj):
        return obj
    return obj()
