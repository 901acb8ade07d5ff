"""
Entidades del dominio.
"""
from realm_indexer.domain.entities.realm import (
    ListingEntry,
    RecentEntry,
    ResolvedProfile,
    RealmRecord,
)
from realm_indexer.domain.entities.checkpoint import (
    Checkpoint,
    PageResult,
    TickReport,
    DrainReport,
)

__all__ = [
    "ListingEntry",
    "RecentEntry",
    "ResolvedProfile",
    "RealmRecord",
    "Checkpoint",
    "PageResult",
    "TickReport",
    "DrainReport",
]
