"""
Excepción base del indexador.

Todas las fallas conocidas del pipeline (upstream, decodificación,
checkpoint) heredan de AppException para que la API de debug pueda
serializarlas de forma uniforme.
"""
from typing import Optional, Dict, Any


class AppException(Exception):
    """
    Excepción base de la aplicación.

    Attributes:
        message: Mensaje de error descriptivo
        status_code: Código HTTP con el que se expone en la API de debug
        error_code: Código de error estable (para logs y clientes)
        details: Contexto adicional (ids, origins, errores de validación)
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Representación JSON usada por el handler global de FastAPI."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }
