"""
Catalog lifecycle status.

Catalog sets are append-only. A new revision is a new set directory; only
PUBLISHED sets are picked by default at startup. Retired sets remain for
replaying how an older tenant configuration was resolved.
"""

from enum import Enum, unique


@unique
class CatalogStatus(str, Enum):
    """Lifecycle status for a catalog set."""

    DRAFT = "draft"
    PUBLISHED = "published"
    RETIRED = "retired"
