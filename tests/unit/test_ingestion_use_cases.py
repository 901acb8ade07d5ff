"""
Tests del orquestador de ingesta.

Cubre los ticks de rescan y tail, el drain completo y la escritura
best-effort del checkpoint. Usa repositorios en memoria y paginas de 2 filas.
"""
from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from realm_indexer.application.use_cases.ingestion_use_cases import (
    RealmIngestionUseCases,
    build_ingestion_use_cases,
)
from realm_indexer.application.services.upsert_writer import RealmUpsertWriter
from realm_indexer.core.config import Settings
from realm_indexer.domain.entities.checkpoint import Checkpoint
from realm_indexer.domain.repositories.realm_repository import ICheckpointRepository
from realm_indexer.infrastructure.repositories.memory_repository import (
    InMemoryCheckpointRepository,
    InMemoryRealmRepository,
)
from realm_indexer.shared.constants.realm_constants import GET_STATE_METHOD, PageOutcome, ScanMode
from realm_indexer.shared.exceptions.ingestion import CheckpointStoreError
from tests.conftest import P2PKH_ADDRESS, P2PKH_SCRIPT, FakeElectrumx, recent_row, realm_state


def _seed(upstream: FakeElectrumx, count: int) -> None:
    for i in range(count):
        upstream.add_realm(f"id-{i}", f"realm{i}", 100 + i)


@pytest.mark.asyncio
async def test_rescan_tick_advances_cursor_on_full_page(
    upstream: FakeElectrumx,
    use_cases: RealmIngestionUseCases,
    realm_repo: InMemoryRealmRepository,
    checkpoint_repo: InMemoryCheckpointRepository,
) -> None:
    _seed(upstream, 3)

    tick = await use_cases.run_rescan_tick()

    assert tick.outcome is PageOutcome.CONTINUE
    assert tick.checkpoint_after.page_cursor == 1
    assert tick.checkpoint_after.high_water_mark == 101
    assert tick.checkpoint_saved
    assert checkpoint_repo.documents["rescan"] == {"pageCursor": 1, "highWaterMark": 101}
    assert await realm_repo.count() == 2


@pytest.mark.asyncio
async def test_rescan_cycle_resets_cursor_on_short_page(
    upstream: FakeElectrumx,
    use_cases: RealmIngestionUseCases,
    realm_repo: InMemoryRealmRepository,
    checkpoint_repo: InMemoryCheckpointRepository,
) -> None:
    _seed(upstream, 3)

    first = await use_cases.run_rescan_tick()
    second = await use_cases.run_rescan_tick()

    assert first.outcome is PageOutcome.CONTINUE
    assert second.outcome is PageOutcome.DONE
    assert second.checkpoint_before.page_cursor == 1
    assert second.checkpoint_after.page_cursor == 0
    assert await realm_repo.count() == 3
    assert checkpoint_repo.documents["rescan"]["pageCursor"] == 0


@pytest.mark.asyncio
async def test_rescan_tick_error_keeps_cursor_and_counts_error(
    upstream: FakeElectrumx,
    use_cases: RealmIngestionUseCases,
    checkpoint_repo: InMemoryCheckpointRepository,
) -> None:
    _seed(upstream, 6)
    checkpoint_repo.documents["rescan"] = {"pageCursor": 1}
    upstream.failing_offsets.add(2)

    tick = await use_cases.run_rescan_tick()

    assert tick.outcome is PageOutcome.ERROR
    assert tick.checkpoint_after == Checkpoint(page_cursor=1, error_count=1)
    assert checkpoint_repo.documents["rescan"] == {"pageCursor": 1, "errorCount": 1}


@pytest.mark.asyncio
async def test_rescan_skips_unresolvable_records(
    upstream: FakeElectrumx,
    use_cases: RealmIngestionUseCases,
    realm_repo: InMemoryRealmRepository,
) -> None:
    upstream.add_realm("id-0", "realm0", 100)
    upstream.add_realm("id-1", "token1", 101, subtype="token")

    tick = await use_cases.run_rescan_tick()

    assert tick.outcome is PageOutcome.CONTINUE
    assert tick.page.resolved == 1
    assert tick.page.written == 1
    assert await realm_repo.get_by_name("token1") is None
    assert await realm_repo.get_by_name("realm0") is not None


@pytest.mark.asyncio
async def test_rescan_refreshes_owner_on_next_cycle(
    upstream: FakeElectrumx,
    use_cases: RealmIngestionUseCases,
    realm_repo: InMemoryRealmRepository,
) -> None:
    upstream.add_realm("id-0", "realm0", 100)
    await use_cases.run_rescan_tick()
    original = await realm_repo.get_by_name("realm0")

    # Transferencia: cambia el script de la ubicacion actual
    upstream.states["id-0"] = realm_state(
        "id-0", 100, owner_script=P2PKH_SCRIPT
    )
    await use_cases.run_rescan_tick()

    updated = await realm_repo.get_by_name("realm0")
    assert updated.owner_address == P2PKH_ADDRESS
    assert updated.mint_address == original.mint_address
    assert updated.sequence_number == original.sequence_number


@pytest.mark.asyncio
async def test_checkpoint_save_failure_does_not_fail_tick(
    upstream: FakeElectrumx,
    api,
    resolver,
    realm_repo: InMemoryRealmRepository,
) -> None:
    _seed(upstream, 1)
    checkpoints = AsyncMock(spec=ICheckpointRepository)
    checkpoints.load.return_value = Checkpoint()
    checkpoints.save.side_effect = CheckpointStoreError("realm_checkpoint:rescan", "locked")

    use_cases = RealmIngestionUseCases(
        api=api,
        resolver=resolver,
        writer=RealmUpsertWriter(realm_repo),
        checkpoints=checkpoints,
        rescan_page_size=2,
    )
    tick = await use_cases.run_rescan_tick()

    assert tick.outcome is PageOutcome.DONE
    assert tick.checkpoint_saved is False
    assert await realm_repo.count() == 1


@pytest.mark.asyncio
async def test_checkpoint_load_failure_aborts_tick(
    upstream: FakeElectrumx,
    api,
    resolver,
    realm_repo: InMemoryRealmRepository,
) -> None:
    _seed(upstream, 1)
    checkpoints = AsyncMock(spec=ICheckpointRepository)
    checkpoints.load.side_effect = CheckpointStoreError("realm_checkpoint:rescan", "db down")

    use_cases = RealmIngestionUseCases(
        api=api,
        resolver=resolver,
        writer=RealmUpsertWriter(realm_repo),
        checkpoints=checkpoints,
    )
    tick = await use_cases.run_rescan_tick()

    assert tick.outcome is PageOutcome.ERROR
    assert tick.checkpoint_saved is False
    checkpoints.save.assert_not_called()
    assert upstream.calls == []


@pytest.mark.asyncio
async def test_tail_poll_filters_by_subtype(
    upstream: FakeElectrumx,
    use_cases: RealmIngestionUseCases,
    realm_repo: InMemoryRealmRepository,
    checkpoint_repo: InMemoryCheckpointRepository,
) -> None:
    upstream.recent = [
        recent_row("r-1", 501, "realm", name="fresh"),
        recent_row("t-1", 502, "token"),
        recent_row("s-1", 503, "subrealm", name="fresh.sub"),
        recent_row("c-1", 504, None),
    ]
    upstream.states["r-1"] = realm_state("r-1", 501)
    upstream.states["s-1"] = realm_state("s-1", 503, subtype="subrealm")

    tick = await use_cases.run_tail_poll()

    assert tick.outcome is PageOutcome.DONE
    assert tick.page.entries == 4
    assert tick.page.written == 2
    resolved_ids = [params[0] for params in upstream.calls_to(GET_STATE_METHOD)]
    assert resolved_ids == ["r-1", "s-1"]
    assert await realm_repo.get_by_name("fresh") is not None
    assert await realm_repo.get_by_name("fresh.sub") is not None
    assert checkpoint_repo.documents["tail"] == {"pageCursor": 0, "highWaterMark": 503}


@pytest.mark.asyncio
async def test_tail_poll_uses_state_name_when_listing_has_none(
    upstream: FakeElectrumx,
    use_cases: RealmIngestionUseCases,
    realm_repo: InMemoryRealmRepository,
) -> None:
    upstream.recent = [recent_row("r-1", 501, "realm")]
    upstream.states["r-1"] = realm_state("r-1", 501, name="fromstate")

    await use_cases.run_tail_poll()

    assert await realm_repo.get_by_name("fromstate") is not None


@pytest.mark.asyncio
async def test_tail_poll_failure_counts_error(
    upstream: FakeElectrumx,
    use_cases: RealmIngestionUseCases,
    checkpoint_repo: InMemoryCheckpointRepository,
) -> None:
    upstream.list_status = 503
    checkpoint_repo.documents["tail"] = {"pageCursor": 0, "errorCount": 2}

    tick = await use_cases.run_tail_poll()

    assert tick.outcome is PageOutcome.ERROR
    assert checkpoint_repo.documents["tail"] == {"pageCursor": 0, "errorCount": 3}


@pytest.mark.asyncio
async def test_full_drain_ignores_checkpoint(
    upstream: FakeElectrumx,
    use_cases: RealmIngestionUseCases,
    realm_repo: InMemoryRealmRepository,
    checkpoint_repo: InMemoryCheckpointRepository,
) -> None:
    _seed(upstream, 5)
    checkpoint_repo.documents["rescan"] = {"pageCursor": 2}

    report = await use_cases.run_full_drain()

    assert report.completed
    assert report.pages == 3
    assert report.written == 5
    assert await realm_repo.count() == 5
    assert checkpoint_repo.documents["rescan"] == {"pageCursor": 2}


@pytest.mark.asyncio
async def test_reset_checkpoint(
    use_cases: RealmIngestionUseCases,
    checkpoint_repo: InMemoryCheckpointRepository,
) -> None:
    checkpoint_repo.documents["rescan"] = {"pageCursor": 9, "errorCount": 4}

    checkpoint = await use_cases.reset_checkpoint(ScanMode.RESCAN)

    assert checkpoint == Checkpoint()
    assert await use_cases.get_checkpoint(ScanMode.RESCAN) == Checkpoint()


def test_build_from_settings(fetcher) -> None:
    config = Settings(RESCAN_PAGE_SIZE=50, DRAIN_PAGE_SIZE=500, TAIL_LIMIT=20)

    use_cases = build_ingestion_use_cases(
        fetcher=fetcher,
        realm_repository=InMemoryRealmRepository(),
        checkpoint_repository=InMemoryCheckpointRepository(),
        config=config,
    )

    assert use_cases._rescan.page_size == 50
    assert use_cases._drain.page_size == 500
    assert use_cases._tail_limit == 20


@pytest.mark.asyncio
async def test_corrupt_checkpoint_aborts_tick_without_raising(
    upstream: FakeElectrumx,
    use_cases: RealmIngestionUseCases,
    checkpoint_repo: InMemoryCheckpointRepository,
) -> None:
    _seed(upstream, 2)
    checkpoint_repo.documents["rescan"] = {"pageCursor": "abc"}

    tick = await use_cases.run_rescan_tick()

    assert tick.outcome is PageOutcome.ERROR
    assert tick.checkpoint_saved is False
    assert upstream.calls == []
    assert checkpoint_repo.documents["rescan"] == {"pageCursor": "abc"}

    await use_cases.reset_checkpoint(ScanMode.RESCAN)
    assert (await use_cases.run_rescan_tick()).outcome is PageOutcome.CONTINUE


@pytest.mark.asyncio
async def test_unparseable_mint_time_does_not_abort_page(
    upstream: FakeElectrumx,
    use_cases: RealmIngestionUseCases,
    realm_repo: InMemoryRealmRepository,
) -> None:
    upstream.add_realm("id-a", "alpha", 1, mint_time="1e400")
    upstream.add_realm("id-b", "beta", 2)
    upstream.add_realm("id-c", "gamma", 3)

    tick = await use_cases.run_rescan_tick()

    assert tick.outcome is PageOutcome.CONTINUE
    assert tick.page.written == 2
    assert (await realm_repo.get_by_name("alpha")).mint_time is None
    assert await realm_repo.get_by_name("beta") is not None
