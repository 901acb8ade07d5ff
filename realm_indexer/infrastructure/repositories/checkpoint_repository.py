"""
Repositorio para el checkpoint del escaneo.

Guarda un documento JSON por modo bajo la clave `realm_checkpoint:<modo>`,
con el mismo patrón clave/valor de una tabla de settings.
"""
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from loguru import logger

from realm_indexer.domain.entities.checkpoint import Checkpoint
from realm_indexer.domain.repositories.realm_repository import ICheckpointRepository
from realm_indexer.infrastructure.database.models import SyncCheckpointModel
from realm_indexer.shared.constants.realm_constants import CHECKPOINT_KEY_PREFIX, ScanMode
from realm_indexer.shared.exceptions.ingestion import CheckpointStoreError


def checkpoint_key(mode: ScanMode) -> str:
    """Clave del documento para un modo de escaneo."""
    return f"{CHECKPOINT_KEY_PREFIX}:{mode.value}"


class CheckpointRepository(ICheckpointRepository):
    """
    Gestiona la tabla sync_checkpoints.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def load(self, mode: ScanMode) -> Checkpoint:
        key = checkpoint_key(mode)
        try:
            async with self._session_factory() as session:
                row = await session.get(SyncCheckpointModel, key)
                return Checkpoint.from_dict(row.value if row else None)
        except SQLAlchemyError as e:
            raise CheckpointStoreError(key, str(e)) from e
        except ValueError as e:
            raise CheckpointStoreError(key, f"documento corrupto: {e}") from e

    async def save(self, mode: ScanMode, checkpoint: Checkpoint) -> None:
        key = checkpoint_key(mode)
        try:
            async with self._session_factory() as session:
                existing = await session.get(SyncCheckpointModel, key)
                if existing:
                    existing.value = checkpoint.to_dict()
                else:
                    session.add(SyncCheckpointModel(key=key, value=checkpoint.to_dict()))
                await session.commit()
        except SQLAlchemyError as e:
            raise CheckpointStoreError(key, str(e)) from e

        logger.debug(f"Checkpoint '{key}' guardado: {checkpoint.to_dict()}")
