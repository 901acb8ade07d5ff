"""
Persistencia idempotente de perfiles resueltos.

Regla de upsert por `name`:
- no existe: insert de la fila completa
- existe con el mismo id: solo se actualizan owner_address y profile_pointer
- existe con otro id: se rechaza; el binding name -> id es permanente

El chequeo y la escritura son dos operaciones separadas. Con un unico
escritor por tick es seguro; la entrega repetida del mismo perfil siempre
produce la misma fila.
"""
from __future__ import annotations

from loguru import logger

from realm_indexer.domain.entities.realm import RealmRecord, ResolvedProfile
from realm_indexer.domain.repositories.realm_repository import IRealmRepository


class RealmUpsertWriter:
    """Inserta realms nuevos y actualiza owner/puntero de los existentes."""

    def __init__(self, repository: IRealmRepository):
        self._repository = repository

    async def upsert(self, name: str, profile: ResolvedProfile) -> bool:
        """
        Returns:
            bool: True si la fila quedo persistida con el perfil, False si se
            rechazo o fallo la escritura (se reintenta en el siguiente tick).
        """
        try:
            existing = await self._repository.get_by_name(name)

            if existing is None:
                await self._repository.insert(RealmRecord.from_profile(name, profile))
                logger.info(f"Realm nuevo: {name} (#{profile.sequence_number}, {profile.id})")
                return True

            if existing.id != profile.id:
                logger.warning(
                    f"Realm '{name}' ya esta ligado a {existing.id}; se ignora {profile.id}"
                )
                return False

            if (
                existing.owner_address == profile.owner_address
                and existing.profile_pointer == profile.profile_pointer
            ):
                return True

            await self._repository.update_mutable(
                name,
                owner_address=profile.owner_address,
                profile_pointer=profile.profile_pointer,
            )
            logger.info(f"Realm actualizado: {name} owner={profile.owner_address}")
            return True
        except Exception as e:
            logger.error(f"Error persistiendo el realm '{name}': {e}")
            return False
