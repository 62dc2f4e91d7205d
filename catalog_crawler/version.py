"""Version and schema constants for catalog_crawler."""

__all__ = ["__version__", "CONFIG_SCHEMA_VERSION", "DEFAULT_USER_AGENT"]

#: Semantic version of this codebase (bump using SemVer).
__version__ = "0.3.0"

#: Configuration schema version. Bump on breaking config changes and add a migration.
CONFIG_SCHEMA_VERSION = 2

DEFAULT_USER_AGENT = f"catalog_crawler/{__version__}"
