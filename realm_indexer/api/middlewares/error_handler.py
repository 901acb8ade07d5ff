"""
Middleware para manejo centralizado de errores.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Convierte cualquier excepcion no controlada del pipeline en un 500 JSON."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.opt(exception=exc).error(
                "Error no manejado en {} {}: {}", request.method, request.url.path, exc
            )

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "INTERNAL_SERVER_ERROR",
                    "message": "Ha ocurrido un error interno del indexador",
                    "details": {}
                }
            )
