"""
Script para inicializar la base de datos.
"""
import asyncio
import sys
from pathlib import Path

from loguru import logger
from dotenv import load_dotenv

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

load_dotenv(_PROJECT_ROOT / ".env", override=False)

from realm_indexer.core.config import settings  # noqa: E402
from realm_indexer.infrastructure.database.session import close_db, init_db  # noqa: E402


async def main():
    """Función principal para inicializar la base de datos."""
    logger.info(f"Inicializando base de datos: {settings.DATABASE_URL.split('@')[-1]}")

    try:
        await init_db()
        logger.success("Base de datos inicializada correctamente")
    except Exception as e:
        logger.error(f"Error al inicializar base de datos: {e}")
        raise
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
