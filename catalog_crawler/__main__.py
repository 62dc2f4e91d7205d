"""`python -m catalog_crawler SITE OUTPUT`"""

from catalog_crawler.ui.cli import run_cli

raise SystemExit(run_cli())
