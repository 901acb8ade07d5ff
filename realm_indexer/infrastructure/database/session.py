"""
Gestión de sesiones de base de datos.
"""
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker
)
from sqlalchemy.orm import declarative_base

from realm_indexer.core.config import settings


# Base para modelos de SQLAlchemy
Base = declarative_base()


def _create_engine_args(database_url: str) -> dict:
    """
    Construye los argumentos del engine segun el tipo de base de datos.
    PostgreSQL usa pool de conexiones, SQLite no lo soporta.
    """
    args = {
        "echo": settings.DEBUG,
        "future": True,
    }

    # Configuracion de pool solo para PostgreSQL
    if "postgresql" in database_url:
        args.update({
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_pre_ping": True,  # Verifica conexion antes de usar
        })

    return args


def build_engine(database_url: str) -> AsyncEngine:
    """Crea un engine async para la URL indicada."""
    return create_async_engine(database_url, **_create_engine_args(database_url))


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory con la configuracion comun del proyecto."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


# Engine de base de datos
engine = build_engine(settings.DATABASE_URL)

# Session factory
AsyncSessionLocal = build_session_factory(engine)


async def init_db(bind: AsyncEngine = engine) -> None:
    """Inicializa la base de datos creando todas las tablas."""
    # Registrar modelos en Base.metadata antes de crear tablas
    from realm_indexer.infrastructure.database import models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Cierra las conexiones de la base de datos."""
    await engine.dispose()
