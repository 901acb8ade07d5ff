"""
CLI: ingesta de realms ElectrumX -> base de datos.

Uso recomendado:
  - Ejecutar como job (cron/systemd timer), un tick por invocacion.
  - O bien dejarlo corriendo con --loop como scheduler simple.

Ejecucion:
  python scripts/run_ingestion.py rescan
  python scripts/run_ingestion.py tail --loop --interval 60
  python scripts/run_ingestion.py drain
  python scripts/run_ingestion.py rescan --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from dotenv import load_dotenv

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

load_dotenv(_PROJECT_ROOT / ".env", override=False)

from realm_indexer.application.use_cases.ingestion_use_cases import (  # noqa: E402
    RealmIngestionUseCases,
    open_ingestion,
)
from realm_indexer.core.config import settings  # noqa: E402
from realm_indexer.core.events import setup_logging  # noqa: E402
from realm_indexer.infrastructure.database.session import close_db, init_db  # noqa: E402
from realm_indexer.infrastructure.repositories.memory_repository import (  # noqa: E402
    InMemoryCheckpointRepository,
    InMemoryRealmRepository,
)
from realm_indexer.shared.constants.realm_constants import PageOutcome  # noqa: E402


MODES = ("rescan", "tail", "drain")


def _default_interval(mode: str) -> int:
    if mode == "tail":
        return settings.TAIL_INTERVAL_SECONDS
    return settings.RESCAN_INTERVAL_SECONDS


async def _run_once(use_cases: RealmIngestionUseCases, mode: str) -> bool:
    """Ejecuta una invocacion del modo y devuelve True si no hubo error."""
    if mode == "drain":
        report = await use_cases.run_full_drain()
        logger.info(f"Drain: {json.dumps(report.to_dict())}")
        return report.completed

    if mode == "rescan":
        tick = await use_cases.run_rescan_tick()
    else:
        tick = await use_cases.run_tail_poll()
    logger.info(f"Tick {mode}: {json.dumps(tick.to_dict())}")
    return tick.outcome is not PageOutcome.ERROR


async def run(mode: str, loop: bool, interval: Optional[int], dry_run: bool) -> int:
    realm_repository = None
    checkpoint_repository = None
    if dry_run:
        # Sin base de datos: todo queda en memoria y se descarta al salir
        realm_repository = InMemoryRealmRepository()
        checkpoint_repository = InMemoryCheckpointRepository()
        logger.warning("Modo --dry-run: no se escribira en la base de datos")
    else:
        await init_db()

    sleep_s = interval if interval is not None else _default_interval(mode)
    ok = True
    try:
        async with open_ingestion(
            realm_repository=realm_repository,
            checkpoint_repository=checkpoint_repository,
        ) as use_cases:
            while True:
                ok = await _run_once(use_cases, mode)
                if not loop:
                    break
                logger.debug(f"Esperando {sleep_s}s hasta el proximo tick")
                await asyncio.sleep(sleep_s)
    finally:
        if not dry_run:
            await close_db()

    if dry_run and realm_repository is not None:
        logger.info(f"Dry-run: {await realm_repository.count()} realm(s) en memoria")

    return 0 if ok else 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Ingesta incremental de realms Atomicals")
    parser.add_argument("mode", choices=MODES, help="Modo de escaneo a ejecutar")
    parser.add_argument(
        "--loop",
        action="store_true",
        help="Repite el tick indefinidamente (scheduler simple).",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help="Segundos entre ticks con --loop (por defecto segun el modo).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Usa repositorios en memoria en lugar de la base de datos.",
    )
    args = parser.parse_args()

    setup_logging()
    logger.info(f"Iniciando ingesta: modo={args.mode} origins={settings.electrumx_origins}")

    try:
        return asyncio.run(run(args.mode, args.loop, args.interval, args.dry_run))
    except KeyboardInterrupt:
        logger.info("Ingesta interrumpida por el usuario")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
