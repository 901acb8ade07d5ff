"""
Paginacion del ledger-scan (find_realms).

Dos modos sobre el mismo fetch de pagina:
- step(): una pagina por invocacion, devuelve un PageOutcome etiquetado.
  Es lo que permite que cada tick del scheduler tenga un costo acotado.
- drain(): recorre paginas hasta fin de datos; ante cualquier error de
  pagina abandona el escaneo completo (fail-fast).

El paginador no filtra: entrega las filas crudas al handler de pagina.
"""
from __future__ import annotations

from typing import Awaitable, Callable

from loguru import logger

from realm_indexer.domain.entities.checkpoint import DrainReport, PageResult
from realm_indexer.domain.entities.realm import ListingEntry
from realm_indexer.infrastructure.external.electrumx.api import ElectrumxApi
from realm_indexer.shared.constants.realm_constants import PageOutcome
from realm_indexer.shared.exceptions.ingestion import UpstreamError

PageHandler = Callable[[list[ListingEntry], PageResult], Awaitable[None]]


class RealmPaginator:
    """Recorre find_realms por offset: un paso por tick o un drain completo."""

    def __init__(self, api: ElectrumxApi, *, page_size: int, verified_only: bool = True):
        if page_size <= 0:
            raise ValueError("page_size debe ser positivo")
        self._api = api
        self.page_size = page_size
        self._verified_only = verified_only

    async def step(self, page_index: int, handler: PageHandler) -> PageResult:
        """
        Procesa exactamente una pagina.

        Returns:
            PageResult: CONTINUE si la pagina vino llena, DONE si vino corta,
            ERROR si fallo el fetch/parseo de la pagina o el handler.
        """
        result = PageResult(outcome=PageOutcome.ERROR, page_index=page_index)
        offset = page_index * self.page_size

        try:
            entries = await self._api.find_realms(
                limit=self.page_size,
                offset=offset,
                verified_only=self._verified_only,
            )
        except UpstreamError as e:
            logger.error(f"Error obteniendo la pagina {page_index} (offset={offset}): {e.message}")
            result.error = e.message
            return result

        result.entries = len(entries)
        try:
            await handler(entries, result)
        except Exception as e:
            logger.exception(f"Error procesando la pagina {page_index}")
            result.error = str(e)
            return result

        result.outcome = PageOutcome.DONE if len(entries) < self.page_size else PageOutcome.CONTINUE
        logger.info(
            f"Pagina {page_index}: entries={result.entries}, resolved={result.resolved}, "
            f"written={result.written}, outcome={result.outcome.value}"
        )
        return result

    async def drain(self, handler: PageHandler, start_page: int = 0) -> DrainReport:
        """Recorre todas las paginas desde start_page hasta fin de datos o error."""
        report = DrainReport()
        page_index = start_page

        while True:
            page = await self.step(page_index, handler)
            report.add(page)

            if page.outcome is PageOutcome.ERROR:
                logger.error(f"Drain abandonado en la pagina {page_index}")
                return report

            if page.outcome is PageOutcome.DONE:
                report.completed = True
                logger.info(f"Drain completado: pages={report.pages}, written={report.written}")
                return report

            page_index += 1
