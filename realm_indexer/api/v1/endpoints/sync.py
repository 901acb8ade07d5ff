"""
Endpoints de inspeccion de checkpoints.
Permiten ver y resetear el cursor de cada modo de escaneo desde la UI.
"""
from fastapi import APIRouter, Depends, status
from loguru import logger

from realm_indexer.api.v1.dependencies.use_case_deps import get_ingestion_use_cases
from realm_indexer.application.dto.ingestion_dto import CheckpointDTO
from realm_indexer.application.use_cases.ingestion_use_cases import RealmIngestionUseCases
from realm_indexer.shared.constants.realm_constants import ScanMode
from realm_indexer.shared.exceptions.ingestion import UnknownScanModeError


router = APIRouter(prefix="/sync", tags=["Sync"])


def _parse_mode(mode: str) -> ScanMode:
    try:
        return ScanMode(mode)
    except ValueError:
        raise UnknownScanModeError(mode, [m.value for m in ScanMode])


@router.get(
    "/checkpoints/{mode}",
    response_model=CheckpointDTO,
    status_code=status.HTTP_200_OK,
    summary="Obtener el checkpoint de un modo de escaneo"
)
async def get_checkpoint(
    mode: str,
    use_cases: RealmIngestionUseCases = Depends(get_ingestion_use_cases)
) -> CheckpointDTO:
    """Devuelve el checkpoint guardado, o el inicial si nunca se guardo uno."""
    scan_mode = _parse_mode(mode)
    checkpoint = await use_cases.get_checkpoint(scan_mode)
    return CheckpointDTO.from_entity(scan_mode, checkpoint)


@router.post(
    "/checkpoints/{mode}/reset",
    response_model=CheckpointDTO,
    status_code=status.HTTP_200_OK,
    summary="Resetear el checkpoint de un modo de escaneo"
)
async def reset_checkpoint(
    mode: str,
    use_cases: RealmIngestionUseCases = Depends(get_ingestion_use_cases)
) -> CheckpointDTO:
    """
    Resetea el checkpoint a la pagina 0.

    Esto fuerza un ciclo completo en el proximo tick.
    """
    scan_mode = _parse_mode(mode)
    logger.info(f"Reset de checkpoint solicitado desde API: {scan_mode.value}")
    checkpoint = await use_cases.reset_checkpoint(scan_mode)
    return CheckpointDTO.from_entity(scan_mode, checkpoint)
