"""
DTOs de la API de debug de ingesta.
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from realm_indexer.domain.entities.checkpoint import Checkpoint
from realm_indexer.shared.constants.realm_constants import ScanMode


class ActionResultDTO(BaseModel):
    """Resultado de un trigger manual (/action/{action})."""

    action: str = Field(..., description="Accion ejecutada")
    success: bool = Field(..., description="True si el tick/drain termino sin error de pagina")
    message: str = Field(..., description="Mensaje legible")
    report: Optional[Dict[str, Any]] = Field(None, description="Contadores del tick o drain")


class CheckpointDTO(BaseModel):
    """Estado del checkpoint de un modo de escaneo."""

    mode: ScanMode
    page_cursor: int = Field(..., ge=0)
    high_water_mark: Optional[int] = None
    error_count: int = Field(0, ge=0)

    @classmethod
    def from_entity(cls, mode: ScanMode, checkpoint: Checkpoint) -> "CheckpointDTO":
        return cls(
            mode=mode,
            page_cursor=checkpoint.page_cursor,
            high_water_mark=checkpoint.high_water_mark,
            error_count=checkpoint.error_count,
        )
