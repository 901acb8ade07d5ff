"""
Configuracion de Alembic para migraciones de base de datos.

- Usa la URL de base de datos desde settings (config.py)
- Importa los modelos para autogenerate
- Los drivers async (asyncpg, aiosqlite) se reemplazan por sus equivalentes
  sincronos para correr las migraciones
"""
import sys
from pathlib import Path
from logging.config import fileConfig

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context

# Agregar el directorio raiz al path para imports
PROJECT_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_DIR))

from realm_indexer.core.config import settings
from realm_indexer.infrastructure.database.session import Base

# Importar los modelos para que Alembic los detecte
from realm_indexer.infrastructure.database.models import (  # noqa: F401
    RealmModel,
    SyncCheckpointModel,
)

config = context.config


def sync_database_url(url: str) -> str:
    """Convierte una URL async de SQLAlchemy en su variante sincrona."""
    return url.replace("+asyncpg", "+psycopg").replace("+aiosqlite", "")


config.set_main_option("sqlalchemy.url", sync_database_url(settings.DATABASE_URL))

# Configurar logging desde alembic.ini
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """
    Ejecuta migraciones en modo 'offline'.

    Genera SQL sin conectarse a la base de datos.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Conecta a la base de datos y ejecuta las migraciones directamente."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
