"""
Manejadores de eventos de inicio y cierre de la aplicacion.
"""
import sys
from typing import Callable
from fastapi import FastAPI
from loguru import logger

from realm_indexer.core.config import settings
from realm_indexer.infrastructure.database.session import init_db, close_db


def setup_logging(level: str = None, log_file: str = None) -> None:
    """
    Configura los sinks de loguru: stderr y archivo con rotacion.

    Se llama tanto desde el servidor como desde los scripts del CLI.
    """
    level = level or settings.LOG_LEVEL
    log_file = log_file if log_file is not None else settings.LOG_FILE

    logger.remove()
    logger.add(sys.stderr, level=level)
    if log_file:
        logger.add(
            log_file,
            rotation="500 MB",
            retention="10 days",
            level=level
        )


def startup_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de inicio de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de inicio
    """
    async def startup() -> None:
        """Inicializa recursos al inicio de la aplicacion."""
        try:
            setup_logging()
            logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
            logger.info(f"Entorno: {settings.ENVIRONMENT}")

            _validate_config()

            # Crea las tablas si no existen
            await init_db()
            logger.info("Base de datos inicializada")

            logger.success("Aplicacion iniciada correctamente")

        except Exception as e:
            logger.error(f"Error durante startup: {e}")
            logger.exception("Detalle del error:")
            raise

    return startup


def _validate_config() -> None:
    """Valida que la configuracion critica este presente."""
    warnings = []

    if not settings.electrumx_origins:
        warnings.append("ELECTRUMX_ORIGINS vacia - todas las llamadas devolveran 503")

    if settings.RESCAN_PAGE_SIZE <= 0 or settings.DRAIN_PAGE_SIZE <= 0:
        warnings.append("Tamano de pagina no positivo - la paginacion no avanzara")

    for warning in warnings:
        logger.warning(f"CONFIG: {warning}")


def shutdown_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de cierre de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de cierre
    """
    async def shutdown() -> None:
        """Libera recursos al cerrar la aplicacion."""
        logger.info("Cerrando aplicacion...")

        await close_db()
        logger.info("Conexiones de base de datos cerradas")

        logger.success("Aplicacion cerrada correctamente")

    return shutdown
