"""
Casos de uso de la aplicacion.
"""
from .ingestion_use_cases import RealmIngestionUseCases, build_ingestion_use_cases, open_ingestion

__all__ = ["RealmIngestionUseCases", "build_ingestion_use_cases", "open_ingestion"]
