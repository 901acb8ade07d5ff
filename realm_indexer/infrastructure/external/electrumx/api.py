"""
Operaciones de lectura del indexador ElectrumX (estilo JSON-RPC via proxy).

Cada llamada se traduce a `GET <origin>/<metodo>?params=<array JSON>`.
Los errores se reportan con la taxonomia de realm_indexer.shared.exceptions:
transporte (UpstreamUnavailableError), envelope vacio (UpstreamEnvelopeError)
y esquema (UpstreamSchemaError).
"""

from __future__ import annotations

import json
from typing import Any

from realm_indexer.domain.entities.realm import ListingEntry, RecentEntry
from realm_indexer.shared.constants.realm_constants import (
    FIND_REALMS_METHOD,
    GET_STATE_METHOD,
    LIST_METHOD,
    LIST_OFFSET_LATEST,
)
from realm_indexer.shared.exceptions.ingestion import UpstreamSchemaError, UpstreamUnavailableError

from .client import FailoverFetcher
from .schemas import (
    AtomicalStateSchema,
    parse_atomical_state,
    parse_listing_page,
    parse_recent_list,
    unwrap_envelope,
)


def encode_params(params: list[Any]) -> str:
    """Serializa los parametros posicionales como array JSON compacto."""
    return json.dumps(params, separators=(",", ":"))


class ElectrumxApi:
    """Wrapper tipado sobre el FailoverFetcher."""

    def __init__(self, fetcher: FailoverFetcher) -> None:
        self._fetcher = fetcher

    async def call(self, method: str, params: list[Any]) -> Any:
        """
        Ejecuta un metodo y devuelve response.result ya desenvuelto.

        Raises:
            UpstreamUnavailableError: el fetcher devolvio un status no exitoso
            UpstreamEnvelopeError: success=false o sin result
            UpstreamSchemaError: el body no es JSON o el envelope es invalido
        """
        response = await self._fetcher.fetch(method, params={"params": encode_params(params)})
        if not response.is_success:
            raise UpstreamUnavailableError(method, response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamSchemaError(method, [{"loc": [], "msg": "el body no es JSON", "type": "json"}]) from e

        return unwrap_envelope(method, payload)

    async def find_realms(
        self,
        *,
        limit: int,
        offset: int,
        prefix: str = "",
        verbose: bool = False,
        verified_only: bool = True,
    ) -> list[ListingEntry]:
        """Pagina del ledger-scan de realms."""
        result = await self.call(FIND_REALMS_METHOD, [prefix, verbose, limit, offset, verified_only])
        return parse_listing_page(FIND_REALMS_METHOD, result)

    async def get_state(self, atomical_id: str) -> AtomicalStateSchema:
        """Detalle completo de una entidad."""
        result = await self.call(GET_STATE_METHOD, [atomical_id])
        return parse_atomical_state(GET_STATE_METHOD, result)

    async def list_recent(
        self,
        *,
        limit: int,
        offset: int = LIST_OFFSET_LATEST,
        asc: bool = False,
    ) -> list[RecentEntry]:
        """Entidades mas recientes (tail poll)."""
        result = await self.call(LIST_METHOD, [limit, offset, asc])
        return parse_recent_list(LIST_METHOD, result)
