"""
Repositorios en memoria.

Se usan en tests y en el modo --dry-run del CLI: permiten correr el
pipeline completo contra el upstream real sin tocar la base de datos.
"""
from dataclasses import replace
from typing import Dict, Optional

from realm_indexer.domain.entities.checkpoint import Checkpoint
from realm_indexer.domain.entities.realm import RealmRecord
from realm_indexer.domain.repositories.realm_repository import (
    ICheckpointRepository,
    IRealmRepository,
)
from realm_indexer.shared.constants.realm_constants import ScanMode
from realm_indexer.shared.exceptions.ingestion import CheckpointStoreError


class InMemoryRealmRepository(IRealmRepository):
    """Tabla de realms en un dict indexado por name."""

    def __init__(self) -> None:
        self.rows: Dict[str, RealmRecord] = {}
        self.inserts = 0
        self.updates = 0

    async def get_by_name(self, name: str) -> Optional[RealmRecord]:
        row = self.rows.get(name)
        return replace(row) if row else None

    async def insert(self, record: RealmRecord) -> None:
        if record.name in self.rows:
            raise ValueError(f"name duplicado: {record.name}")
        self.rows[record.name] = replace(record)
        self.inserts += 1

    async def update_mutable(
        self,
        name: str,
        owner_address: Optional[str],
        profile_pointer: Optional[str],
    ) -> None:
        row = self.rows.get(name)
        if row is None:
            return
        row.owner_address = owner_address
        row.profile_pointer = profile_pointer
        self.updates += 1

    async def count(self) -> int:
        return len(self.rows)


class InMemoryCheckpointRepository(ICheckpointRepository):
    """Checkpoint store en memoria (documentos como dict)."""

    def __init__(self) -> None:
        self.documents: Dict[str, dict] = {}

    async def load(self, mode: ScanMode) -> Checkpoint:
        try:
            return Checkpoint.from_dict(self.documents.get(mode.value))
        except ValueError as e:
            raise CheckpointStoreError(mode.value, f"documento corrupto: {e}") from e

    async def save(self, mode: ScanMode, checkpoint: Checkpoint) -> None:
        self.documents[mode.value] = checkpoint.to_dict()
