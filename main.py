"""
Punto de entrada del servidor de debug del indexador.
Expone los triggers manuales (/api/v1/action/{action}) y la inspeccion
de checkpoints. La ingesta programada corre via scripts/run_ingestion.py.
"""
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from realm_indexer.core.config import settings
from realm_indexer.core.events import startup_handler, shutdown_handler
from realm_indexer.api.v1.router import api_router
from realm_indexer.api.middlewares.error_handler import ErrorHandlerMiddleware
from realm_indexer.shared.exceptions.base import AppException


def create_application() -> FastAPI:
    """
    Factory para crear y configurar la aplicacion FastAPI.

    Returns:
        FastAPI: Instancia configurada de la aplicacion
    """
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Indexador incremental de realms Atomicals",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    application.add_middleware(ErrorHandlerMiddleware)

    application.add_event_handler("startup", startup_handler(application))
    application.add_event_handler("shutdown", shutdown_handler(application))

    application.include_router(api_router, prefix="/api")

    # Manejador global de excepciones personalizadas
    @application.exception_handler(AppException)
    async def app_exception_handler(request, exc: AppException):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @application.get("/health", tags=["Health"])
    async def health_check():
        """Endpoint para verificar el estado de la aplicacion."""
        return {
            "status": "healthy",
            "app_name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "origins": len(settings.electrumx_origins),
        }

    return application


# Crear instancia de la aplicacion
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
