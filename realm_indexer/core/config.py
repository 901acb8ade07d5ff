"""
Configuracion central del indexador.
Gestiona variables de entorno y configuraciones globales.

Los valores se leen del entorno o de un archivo .env. Las origins del
proxy ElectrumX son intercambiables: el fetcher rota entre ellas.
"""
import json
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, computed_field


DEFAULT_ELECTRUMX_ORIGINS = (
    "https://ep.wizz.cash/proxy,"
    "https://ep.atomicalmarket.com/proxy,"
    "https://ep.nextdao.xyz/proxy"
)


class Settings(BaseSettings):
    """
    Clase de configuracion del indexador.
    Lee variables de entorno y proporciona valores por defecto.

    - DATABASE_URL: URL async de SQLAlchemy (sqlite+aiosqlite o postgresql+asyncpg)
    - ELECTRUMX_ORIGINS: lista JSON o separada por comas de origins del proxy
    - RESCAN_PAGE_SIZE: tamano de pagina del rescan ciclico (una pagina por tick)
    - DRAIN_PAGE_SIZE: tamano de pagina del drain completo (/action/index)
    """

    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="Realm Indexer")
    APP_VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")

    # Configuracion del servidor (triggers manuales de debug)
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # Base de datos
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./realms.db")
    DB_POOL_SIZE: int = Field(default=5)
    DB_MAX_OVERFLOW: int = Field(default=10)

    # Upstream ElectrumX
    ELECTRUMX_ORIGINS: str = Field(default=DEFAULT_ELECTRUMX_ORIGINS)
    HTTP_TIMEOUT_SECONDS: float = Field(default=30.0)
    FIND_REALMS_VERIFIED_ONLY: bool = Field(default=True)

    # Paginacion
    RESCAN_PAGE_SIZE: int = Field(default=400)
    DRAIN_PAGE_SIZE: int = Field(default=1000)
    TAIL_LIMIT: int = Field(default=100)

    # Decodificacion de scripts
    BITCOIN_NETWORK: str = Field(default="main")

    # Scheduler (solo para el modo --loop del CLI)
    RESCAN_INTERVAL_SECONDS: int = Field(default=300)
    TAIL_INTERVAL_SECONDS: int = Field(default=60)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/indexer.log")

    @computed_field
    @property
    def electrumx_origins(self) -> List[str]:
        """Origins del proxy ya parseadas y sin barra final."""
        return get_api_origins(self.ELECTRUMX_ORIGINS)

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


def get_api_origins(origins_string: str) -> List[str]:
    """
    Parsea la lista de origins del proxy.
    Acepta una lista JSON o una lista separada por comas.
    """
    try:
        parsed = json.loads(origins_string)
    except json.JSONDecodeError:
        parsed = origins_string.split(",")
    if isinstance(parsed, str):
        parsed = [parsed]
    return [str(origin).strip().rstrip("/") for origin in parsed if str(origin).strip()]


# Instancia global de configuracion
settings = Settings()
