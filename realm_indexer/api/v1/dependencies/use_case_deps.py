"""
Dependencias para inyeccion de casos de uso.
"""
from typing import AsyncGenerator

from realm_indexer.application.use_cases.ingestion_use_cases import (
    RealmIngestionUseCases,
    open_ingestion,
)


async def get_ingestion_use_cases() -> AsyncGenerator[RealmIngestionUseCases, None]:
    """
    Dependencia para obtener el orquestador de ingesta.

    Abre un cliente HTTP por request y lo cierra al terminar.

    Yields:
        RealmIngestionUseCases: Orquestador con repositorios SQLAlchemy
    """
    async with open_ingestion() as use_cases:
        yield use_cases
