"""
Utilidades para manejo de fechas y horas.
"""
from datetime import datetime, timezone
from typing import Any, Optional


class DateTimeUtils:
    """Clase de utilidades para operaciones con fechas y horas."""

    @staticmethod
    def now_utc() -> datetime:
        """
        Obtiene la fecha y hora actual en UTC.

        Returns:
            datetime: Fecha y hora actual en UTC
        """
        return datetime.now(timezone.utc)

    @staticmethod
    def to_iso_string(dt: Optional[datetime]) -> Optional[str]:
        """Convierte un datetime a string ISO 8601 (None se conserva)."""
        return dt.isoformat() if dt else None

    @staticmethod
    def coerce_unix_seconds(value: Any) -> Optional[int]:
        """
        Normaliza un timestamp unix que puede venir como int, float o string.

        El indexador reporta el tiempo de mint en segundos; valores no
        numericos, negativos o fuera de rango (inf, nan) se descartan.

        Returns:
            Optional[int]: Segundos desde epoch o None
        """
        if value is None or isinstance(value, bool):
            return None
        try:
            seconds = int(float(value))
        except (ValueError, TypeError, OverflowError):
            return None
        return seconds if seconds >= 0 else None
