"""
Casos de uso de ingesta de realms (orquestador).

Cada metodo corresponde a una invocacion independiente y acotada:
- run_rescan_tick: una pagina del rescan ciclico, guiada por checkpoint
- run_tail_poll: entidades mas recientes, para descubrir realms nuevos rapido
- run_full_drain: escaneo completo de una sola vez (trigger manual)

Entrega at-least-once: si el tick se corta despues de escribir filas pero
antes de guardar el checkpoint, la misma pagina se reprocesa en el
siguiente tick y el upsert idempotente absorbe los duplicados.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from realm_indexer.application.services.realm_paginator import RealmPaginator
from realm_indexer.application.services.realm_resolver import RealmResolver
from realm_indexer.application.services.upsert_writer import RealmUpsertWriter
from realm_indexer.core.config import Settings, settings
from realm_indexer.domain.entities.checkpoint import Checkpoint, DrainReport, PageResult, TickReport
from realm_indexer.domain.entities.realm import ListingEntry
from realm_indexer.domain.repositories.realm_repository import (
    ICheckpointRepository,
    IRealmRepository,
)
from realm_indexer.infrastructure.database.session import AsyncSessionLocal
from realm_indexer.infrastructure.external.electrumx.address_decoder import AddressDecoder
from realm_indexer.infrastructure.external.electrumx.api import ElectrumxApi
from realm_indexer.infrastructure.external.electrumx.client import FailoverFetcher
from realm_indexer.infrastructure.repositories.checkpoint_repository import CheckpointRepository
from realm_indexer.infrastructure.repositories.realm_repository import RealmRepository
from realm_indexer.shared.constants.realm_constants import PageOutcome, ScanMode
from realm_indexer.shared.exceptions.ingestion import CheckpointStoreError, UpstreamError
from realm_indexer.shared.utils.datetime_utils import DateTimeUtils


class RealmIngestionUseCases:
    """
    Orquestador del pipeline.

    Los puertos de almacenamiento (realms y checkpoints) se inyectan para
    poder sustituirlos por implementaciones en memoria.
    """

    def __init__(
        self,
        *,
        api: ElectrumxApi,
        resolver: RealmResolver,
        writer: RealmUpsertWriter,
        checkpoints: ICheckpointRepository,
        rescan_page_size: int = 400,
        drain_page_size: int = 1000,
        tail_limit: int = 100,
        verified_only: bool = True,
    ) -> None:
        self._api = api
        self._resolver = resolver
        self._writer = writer
        self._checkpoints = checkpoints
        self._rescan = RealmPaginator(api, page_size=rescan_page_size, verified_only=verified_only)
        self._drain = RealmPaginator(api, page_size=drain_page_size, verified_only=verified_only)
        self._tail_limit = tail_limit

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    async def run_rescan_tick(self) -> TickReport:
        """
        Procesa la pagina indicada por el checkpoint y lo avanza.

        CONTINUE -> cursor + 1, DONE -> cursor 0, ERROR -> errorCount + 1.
        """
        started_at = DateTimeUtils.now_utc()
        checkpoint = await self._load_checkpoint(ScanMode.RESCAN)
        if checkpoint is None:
            return self._aborted_tick(ScanMode.RESCAN, started_at)

        logger.info(f"Rescan tick: pagina {checkpoint.page_cursor} (page_size={self._rescan.page_size})")
        page = await self._rescan.step(checkpoint.page_cursor, self._process_listing_page)

        after = checkpoint.advance(page.outcome, page.max_sequence)
        saved = await self._save_checkpoint(ScanMode.RESCAN, after)

        return TickReport(
            mode=ScanMode.RESCAN,
            outcome=page.outcome,
            checkpoint_before=checkpoint,
            checkpoint_after=after,
            page=page,
            checkpoint_saved=saved,
            started_at=started_at,
            finished_at=DateTimeUtils.now_utc(),
        )

    async def run_tail_poll(self) -> TickReport:
        """
        Consulta las entidades mas recientes y persiste las de subtipo realm.

        No usa cursor; su checkpoint solo lleva highWaterMark y errorCount.
        """
        started_at = DateTimeUtils.now_utc()
        checkpoint = await self._load_checkpoint(ScanMode.TAIL)
        if checkpoint is None:
            return self._aborted_tick(ScanMode.TAIL, started_at)

        result = PageResult(outcome=PageOutcome.ERROR, page_index=0)
        try:
            entries = await self._api.list_recent(limit=self._tail_limit)
        except UpstreamError as e:
            logger.error(f"Tail poll fallido: {e.message}")
            result.error = e.message
        else:
            result.entries = len(entries)
            candidates = [entry for entry in entries if entry.is_realm_candidate()]
            logger.info(f"Tail poll: {len(entries)} entidades, {len(candidates)} candidatos")

            for entry in candidates:
                profile = await self._resolver.resolve(entry.id)
                if profile is None:
                    continue
                result.resolved += 1

                name = entry.name or profile.full_name
                if not name:
                    logger.warning(f"Realm {entry.id} sin nombre en el listado ni en el detalle")
                    continue

                if await self._writer.upsert(name, profile):
                    result.record_written(profile.sequence_number)

            result.outcome = PageOutcome.DONE

        after = checkpoint.advance(result.outcome, result.max_sequence)
        saved = await self._save_checkpoint(ScanMode.TAIL, after)

        return TickReport(
            mode=ScanMode.TAIL,
            outcome=result.outcome,
            checkpoint_before=checkpoint,
            checkpoint_after=after,
            page=result,
            checkpoint_saved=saved,
            started_at=started_at,
            finished_at=DateTimeUtils.now_utc(),
        )

    async def run_full_drain(self) -> DrainReport:
        """Escaneo completo sin checkpoint; fail-fast ante un error de pagina."""
        logger.info(f"Iniciando drain completo (page_size={self._drain.page_size})")
        return await self._drain.drain(self._process_listing_page)

    # ------------------------------------------------------------------
    # Checkpoints (debug)
    # ------------------------------------------------------------------

    async def get_checkpoint(self, mode: ScanMode) -> Checkpoint:
        return await self._checkpoints.load(mode)

    async def reset_checkpoint(self, mode: ScanMode) -> Checkpoint:
        """Fuerza un ciclo completo desde la pagina 0 en el proximo tick."""
        checkpoint = Checkpoint()
        await self._checkpoints.save(mode, checkpoint)
        logger.info(f"Checkpoint reseteado: {mode.value}")
        return checkpoint

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------

    async def _process_listing_page(self, entries: list[ListingEntry], result: PageResult) -> None:
        """Resuelve y persiste cada fila de la pagina, una a la vez."""
        for entry in entries:
            profile = await self._resolver.resolve(entry.id)
            if profile is None:
                continue
            result.resolved += 1

            if await self._writer.upsert(entry.name, profile):
                result.record_written(profile.sequence_number)

    async def _load_checkpoint(self, mode: ScanMode) -> Optional[Checkpoint]:
        try:
            return await self._checkpoints.load(mode)
        except CheckpointStoreError as e:
            logger.error(f"No se pudo leer el checkpoint {mode.value}: {e.message}")
            return None

    async def _save_checkpoint(self, mode: ScanMode, checkpoint: Checkpoint) -> bool:
        """
        Escritura best-effort: un fallo se registra y el tick sigue.
        La pagina se reprocesara; el upsert idempotente lo tolera.
        """
        try:
            await self._checkpoints.save(mode, checkpoint)
            return True
        except Exception as e:
            logger.error(f"No se pudo guardar el checkpoint {mode.value}: {e}")
            return False

    @staticmethod
    def _aborted_tick(mode: ScanMode, started_at) -> TickReport:
        empty = Checkpoint()
        return TickReport(
            mode=mode,
            outcome=PageOutcome.ERROR,
            checkpoint_before=empty,
            checkpoint_after=empty,
            checkpoint_saved=False,
            started_at=started_at,
            finished_at=DateTimeUtils.now_utc(),
        )


def build_ingestion_use_cases(
    *,
    fetcher: FailoverFetcher,
    realm_repository: IRealmRepository,
    checkpoint_repository: ICheckpointRepository,
    config: Settings = settings,
) -> RealmIngestionUseCases:
    """Compone el pipeline a partir de sus colaboradores."""
    api = ElectrumxApi(fetcher)
    resolver = RealmResolver(api, AddressDecoder(config.BITCOIN_NETWORK))
    return RealmIngestionUseCases(
        api=api,
        resolver=resolver,
        writer=RealmUpsertWriter(realm_repository),
        checkpoints=checkpoint_repository,
        rescan_page_size=config.RESCAN_PAGE_SIZE,
        drain_page_size=config.DRAIN_PAGE_SIZE,
        tail_limit=config.TAIL_LIMIT,
        verified_only=config.FIND_REALMS_VERIFIED_ONLY,
    )


@asynccontextmanager
async def open_ingestion(
    *,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    realm_repository: Optional[IRealmRepository] = None,
    checkpoint_repository: Optional[ICheckpointRepository] = None,
    config: Settings = settings,
) -> AsyncIterator[RealmIngestionUseCases]:
    """
    Abre el pipeline con repositorios SQLAlchemy (o los inyectados) y
    cierra el cliente HTTP al salir.
    """
    factory = session_factory or AsyncSessionLocal
    fetcher = FailoverFetcher(config.electrumx_origins, timeout_s=config.HTTP_TIMEOUT_SECONDS)
    try:
        yield build_ingestion_use_cases(
            fetcher=fetcher,
            realm_repository=realm_repository or RealmRepository(factory),
            checkpoint_repository=checkpoint_repository or CheckpointRepository(factory),
            config=config,
        )
    finally:
        await fetcher.aclose()
