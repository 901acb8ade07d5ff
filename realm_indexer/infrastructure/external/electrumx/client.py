"""
Cliente HTTP con failover entre origins del proxy ElectrumX.

Requisitos cubiertos:
- httpx (AsyncClient reutilizable)
- rotacion determinista: cada origin se intenta como maximo una vez por
  llamada; el origin inicial avanza round-robin entre llamadas
- sin backoff ni delay entre intentos
- nunca lanza por fallas de transporte: si todas las origins fallan
  devuelve una respuesta sintetica 503 y el caller inspecciona el status
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

import httpx
from loguru import logger

UNAVAILABLE_STATUS = 503
UNAVAILABLE_BODY = "All API servers are unavailable"

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "en-US,en;q=0.9",
}


class FailoverFetcher:
    """
    Ejecuta GETs contra un conjunto de origins intercambiables.

    Importante:
    - No interpreta el body: eso lo hace ElectrumxApi.
    - Un status no exitoso o un error de transporte pasan al siguiente origin.
    """

    def __init__(
        self,
        origins: Sequence[str],
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: float = 30.0,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        if not origins:
            raise ValueError("Se requiere al menos un origin para el fetcher")
        self._origins = [origin.rstrip("/") for origin in origins]
        self._headers = dict(headers or DEFAULT_HEADERS)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._next_start = 0

    def _rotation(self) -> list[str]:
        """Orden de intento para una llamada: todas las origins, sin repetir."""
        start = self._next_start
        self._next_start = (start + 1) % len(self._origins)
        return self._origins[start:] + self._origins[:start]

    async def fetch(self, path: str, params: Optional[Mapping[str, Any]] = None) -> httpx.Response:
        """
        GET `<origin>/<path>` con failover.

        Returns:
            httpx.Response: primera respuesta 2xx, o una 503 sintetica si
            todas las origins fallaron.
        """
        path = path.lstrip("/")

        for origin in self._rotation():
            url = f"{origin}/{path}"
            try:
                response = await self._client.get(url, params=params, headers=self._headers)
            except httpx.HTTPError as e:
                logger.error(f"Error consultando {url}: {e!r}")
                continue

            if response.is_success:
                return response

            logger.warning(f"Servidor {url} respondió con status {response.status_code}")

        logger.error(f"Todas las origins fallaron para {path}")
        return httpx.Response(
            UNAVAILABLE_STATUS,
            text=UNAVAILABLE_BODY,
            request=httpx.Request("GET", f"{self._origins[0]}/{path}", params=params),
        )

    async def aclose(self) -> None:
        """Cierra el cliente HTTP si fue creado por el fetcher."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "FailoverFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
