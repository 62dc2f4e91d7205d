"""Crawl product catalogs from e-commerce sites into normalized records."""

from .version import __version__

__all__ = ["__version__"]
