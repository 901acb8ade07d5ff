"""
Checkpoint del escaneo y reportes de ejecucion.

El checkpoint es un documento durable por modo de escaneo. Solo el
orquestador lo muta, una vez por tick, siguiendo las reglas de
Checkpoint.advance(). Su escritura es best-effort: si se pierde, el
siguiente tick reprocesa la misma pagina y el upsert idempotente absorbe
los duplicados.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict, replace
from datetime import datetime
from typing import Any, Dict, Optional

from realm_indexer.shared.constants.realm_constants import PageOutcome, ScanMode
from realm_indexer.shared.utils.datetime_utils import DateTimeUtils


@dataclass(frozen=True)
class Checkpoint:
    """
    Progreso persistido de un modo de escaneo.

    - page_cursor: indice de la proxima pagina a procesar
    - high_water_mark: mayor sequence_number persistido (informativo)
    - error_count: ticks fallidos acumulados
    """

    page_cursor: int = 0
    high_water_mark: Optional[int] = None
    error_count: int = 0

    def advance(self, outcome: PageOutcome, high_water_mark: Optional[int] = None) -> "Checkpoint":
        """
        Calcula el checkpoint siguiente a partir del resultado de la pagina.

        CONTINUE avanza el cursor, DONE lo reinicia a 0 (nuevo ciclo) y
        ERROR solo incrementa el contador de errores.
        """
        hwm = self._merge_high_water_mark(high_water_mark)
        if outcome is PageOutcome.CONTINUE:
            return replace(self, page_cursor=self.page_cursor + 1, high_water_mark=hwm)
        if outcome is PageOutcome.DONE:
            return replace(self, page_cursor=0, high_water_mark=hwm)
        return replace(self, error_count=self.error_count + 1, high_water_mark=hwm)

    def _merge_high_water_mark(self, candidate: Optional[int]) -> Optional[int]:
        if candidate is None:
            return self.high_water_mark
        if self.high_water_mark is None:
            return candidate
        return max(self.high_water_mark, candidate)

    def to_dict(self) -> Dict[str, Any]:
        """Forma externa: { pageCursor, highWaterMark?, errorCount? }."""
        data: Dict[str, Any] = {"pageCursor": self.page_cursor}
        if self.high_water_mark is not None:
            data["highWaterMark"] = self.high_water_mark
        if self.error_count:
            data["errorCount"] = self.error_count
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Checkpoint":
        """
        Tolera documentos parciales; los campos faltantes toman su default.

        Raises:
            ValueError: Si el documento no es un objeto o sus campos no son enteros
        """
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"documento de checkpoint invalido: {data!r}")
        try:
            hwm = data.get("highWaterMark")
            return cls(
                page_cursor=int(data.get("pageCursor") or 0),
                high_water_mark=int(hwm) if hwm is not None else None,
                error_count=int(data.get("errorCount") or 0),
            )
        except (TypeError, OverflowError) as e:
            raise ValueError(f"documento de checkpoint invalido: {data!r}") from e


@dataclass
class PageResult:
    """Contadores de una pagina procesada."""

    outcome: PageOutcome
    page_index: int
    entries: int = 0
    resolved: int = 0
    written: int = 0
    max_sequence: Optional[int] = None
    error: Optional[str] = None

    def record_written(self, sequence_number: int) -> None:
        self.written += 1
        if self.max_sequence is None or sequence_number > self.max_sequence:
            self.max_sequence = sequence_number


@dataclass
class TickReport:
    """Resumen de una invocacion del scheduler (un tick)."""

    mode: ScanMode
    outcome: PageOutcome
    checkpoint_before: Checkpoint
    checkpoint_after: Checkpoint
    page: Optional[PageResult] = None
    checkpoint_saved: bool = True
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "outcome": self.outcome.value,
            "checkpoint_before": self.checkpoint_before.to_dict(),
            "checkpoint_after": self.checkpoint_after.to_dict(),
            "page": _page_to_dict(self.page),
            "checkpoint_saved": self.checkpoint_saved,
            "started_at": DateTimeUtils.to_iso_string(self.started_at),
            "finished_at": DateTimeUtils.to_iso_string(self.finished_at),
        }


@dataclass
class DrainReport:
    """Resumen de un drain completo (sin checkpoint)."""

    completed: bool = False
    pages: int = 0
    entries: int = 0
    resolved: int = 0
    written: int = 0
    page_results: list[PageResult] = field(default_factory=list)

    def add(self, page: PageResult) -> None:
        self.pages += 1
        self.entries += page.entries
        self.resolved += page.resolved
        self.written += page.written
        self.page_results.append(page)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completed": self.completed,
            "pages": self.pages,
            "entries": self.entries,
            "resolved": self.resolved,
            "written": self.written,
        }


def _page_to_dict(page: Optional[PageResult]) -> Optional[Dict[str, Any]]:
    if page is None:
        return None
    data = asdict(page)
    data["outcome"] = page.outcome.value
    return data
