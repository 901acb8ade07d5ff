"""
Implementación SQLAlchemy del repositorio de realms.

Cada método abre su propia sesión y hace commit al terminar: el chequeo
de existencia y la escritura son operaciones separadas. Si el proceso se
corta a mitad de página, lo escrito hasta ese momento queda durable.
"""
from typing import Optional
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from realm_indexer.domain.entities.realm import RealmRecord
from realm_indexer.domain.repositories.realm_repository import IRealmRepository
from realm_indexer.infrastructure.database.models import RealmModel


class RealmRepository(IRealmRepository):
    """Repositorio para gestionar realms en la base de datos."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_by_name(self, name: str) -> Optional[RealmRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(RealmModel).where(RealmModel.name == name)
            )
            model = result.scalars().first()
            return self._to_entity(model) if model else None

    async def insert(self, record: RealmRecord) -> None:
        async with self._session_factory() as session:
            session.add(
                RealmModel(
                    name=record.name,
                    atomical_id=record.id,
                    atomical_number=record.sequence_number,
                    mint_time=record.mint_time,
                    mint_address=record.mint_address,
                    owner_address=record.owner_address,
                    profile_pointer=record.profile_pointer,
                )
            )
            await session.commit()

    async def update_mutable(
        self,
        name: str,
        owner_address: Optional[str],
        profile_pointer: Optional[str],
    ) -> None:
        async with self._session_factory() as session:
            await session.execute(
                update(RealmModel)
                .where(RealmModel.name == name)
                .values(owner_address=owner_address, profile_pointer=profile_pointer)
            )
            await session.commit()

    async def count(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(select(func.count()).select_from(RealmModel))
            return int(result.scalar_one())

    @staticmethod
    def _to_entity(model: RealmModel) -> RealmRecord:
        return RealmRecord(
            name=model.name,
            id=model.atomical_id,
            sequence_number=model.atomical_number,
            mint_time=model.mint_time,
            mint_address=model.mint_address,
            owner_address=model.owner_address,
            profile_pointer=model.profile_pointer,
        )
