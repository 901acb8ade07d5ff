"""
Interfaces de persistencia del pipeline.
Definen el contrato que debe cumplir cualquier implementación
(SQLAlchemy en produccion, memoria en tests y --dry-run).
"""
from abc import ABC, abstractmethod
from typing import Optional

from realm_indexer.domain.entities.checkpoint import Checkpoint
from realm_indexer.domain.entities.realm import RealmRecord
from realm_indexer.shared.constants.realm_constants import ScanMode


class IRealmRepository(ABC):
    """
    Puerto de almacenamiento de realms.

    Cada operación es independiente: no hay transacción que abarque
    el chequeo de existencia y la escritura posterior.
    """

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[RealmRecord]:
        """
        Obtiene la fila persistida de un realm.

        Args:
            name: Nombre del realm (clave unica)

        Returns:
            Optional[RealmRecord]: Fila encontrada o None
        """
        pass

    @abstractmethod
    async def insert(self, record: RealmRecord) -> None:
        """
        Inserta la fila completa (identidad + campos mutables).

        Args:
            record: Fila a insertar
        """
        pass

    @abstractmethod
    async def update_mutable(
        self,
        name: str,
        owner_address: Optional[str],
        profile_pointer: Optional[str],
    ) -> None:
        """
        Actualiza solo los campos mutables de una fila existente.

        Args:
            name: Nombre del realm
            owner_address: Direccion actual del dueño
            profile_pointer: Puntero de perfil (state.latest.d)
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Cantidad de realms persistidos."""
        pass


class ICheckpointRepository(ABC):
    """Puerto del checkpoint store: un documento por modo de escaneo."""

    @abstractmethod
    async def load(self, mode: ScanMode) -> Checkpoint:
        """
        Lee el checkpoint del modo.

        Returns:
            Checkpoint: Documento persistido o un checkpoint en cero
        """
        pass

    @abstractmethod
    async def save(self, mode: ScanMode, checkpoint: Checkpoint) -> None:
        """Escribe el documento completo del modo."""
        pass
