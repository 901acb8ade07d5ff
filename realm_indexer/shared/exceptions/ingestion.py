"""
Excepciones del pipeline de ingesta.

Taxonomia:
- UpstreamUnavailableError: todas las origins fallaron (transporte)
- UpstreamEnvelopeError: success=false o falta response.result
- UpstreamSchemaError: el payload no cumple el esquema esperado
- AddressDecodeError: script no decodificable (falla a nivel registro)
- CheckpointStoreError: fallo leyendo/escribiendo el checkpoint

Ninguna es fatal para el proceso: los callers las convierten en
None / PageOutcome.ERROR y el siguiente tick reintenta.
"""
from typing import Any, Dict, List, Optional

from realm_indexer.shared.exceptions.base import AppException


class UpstreamError(AppException):
    """Excepción base para errores del indexador ElectrumX."""

    def __init__(self, message: str, error_code: str = "UPSTREAM_ERROR", details=None):
        super().__init__(
            message=message,
            status_code=502,
            error_code=error_code,
            details=details
        )


class UpstreamUnavailableError(UpstreamError):
    """Ninguna origin devolvió un status exitoso."""

    def __init__(self, method: str, status_code: int, body: str = ""):
        super().__init__(
            message=f"Upstream no disponible para {method} (status {status_code})",
            error_code="UPSTREAM_UNAVAILABLE",
            details={"method": method, "status": status_code, "body": body[:500]}
        )
        self.status_code = 503


class UpstreamEnvelopeError(UpstreamError):
    """El envelope no trae datos utilizables (success falso o sin result)."""

    def __init__(self, method: str, reason: str):
        super().__init__(
            message=f"Respuesta sin datos utilizables para {method}: {reason}",
            error_code="UPSTREAM_EMPTY_ENVELOPE",
            details={"method": method, "reason": reason}
        )


class UpstreamSchemaError(UpstreamError):
    """El resultado no pudo validarse contra el esquema tipado."""

    def __init__(self, method: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=f"Resultado de {method} no cumple el esquema esperado",
            error_code="UPSTREAM_SCHEMA_ERROR",
            details={"method": method, "errors": errors or []}
        )


class AddressDecodeError(AppException):
    """Un script de salida no pudo convertirse en direccion."""

    def __init__(self, hex_script: str, reason: str):
        super().__init__(
            message=f"No se pudo decodificar el script '{hex_script[:80]}': {reason}",
            status_code=422,
            error_code="ADDRESS_DECODE_ERROR",
            details={"script": hex_script, "reason": reason}
        )


class CheckpointStoreError(AppException):
    """Fallo de I/O del checkpoint store."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            message=f"Checkpoint '{key}' no disponible: {reason}",
            status_code=500,
            error_code="CHECKPOINT_STORE_ERROR",
            details={"key": key, "reason": reason}
        )


class UnknownScanModeError(AppException):
    """Modo de escaneo no soportado."""

    def __init__(self, mode: str, valid_modes: list[str]):
        super().__init__(
            message=f"El modo de escaneo '{mode}' no es válido",
            status_code=404,
            error_code="UNKNOWN_SCAN_MODE",
            details={"mode_provided": mode, "valid_modes": valid_modes}
        )
