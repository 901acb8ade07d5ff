"""
Triggers manuales de debug del pipeline.

GET /action/{action}:
- index:  drain completo de find_realms (sin checkpoint)
- rescan: un tick del rescan ciclico
- tail:   un tick del tail poll
Cualquier otra accion responde un saludo.
"""
from fastapi import APIRouter, Depends, status
from loguru import logger

from realm_indexer.api.v1.dependencies.use_case_deps import get_ingestion_use_cases
from realm_indexer.application.dto.ingestion_dto import ActionResultDTO
from realm_indexer.application.use_cases.ingestion_use_cases import RealmIngestionUseCases
from realm_indexer.shared.constants.realm_constants import PageOutcome


router = APIRouter(prefix="/action", tags=["Actions"])


def _message(action: str, success: bool) -> str:
    return f"{action} succeed." if success else f"{action} failed."


@router.get(
    "/{action}",
    response_model=ActionResultDTO,
    status_code=status.HTTP_200_OK,
    summary="Ejecutar una accion del pipeline de ingesta"
)
async def run_action(
    action: str,
    use_cases: RealmIngestionUseCases = Depends(get_ingestion_use_cases)
) -> ActionResultDTO:
    """
    Ejecuta una accion del pipeline y devuelve sus contadores.

    Un fallo del pipeline no produce un 5xx: se informa con success=false,
    el siguiente tick reintenta.
    """
    logger.info(f"Trigger manual: {action}")

    if action == "index":
        drain = await use_cases.run_full_drain()
        return ActionResultDTO(
            action=action,
            success=drain.completed,
            message=_message(action, drain.completed),
            report=drain.to_dict(),
        )

    if action in ("rescan", "tail"):
        if action == "rescan":
            tick = await use_cases.run_rescan_tick()
        else:
            tick = await use_cases.run_tail_poll()
        success = tick.outcome is not PageOutcome.ERROR
        return ActionResultDTO(
            action=action,
            success=success,
            message=_message(action, success),
            report=tick.to_dict(),
        )

    return ActionResultDTO(action=action, success=True, message=f"hello world, {action}")
