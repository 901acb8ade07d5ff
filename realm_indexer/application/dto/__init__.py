"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .ingestion_dto import ActionResultDTO, CheckpointDTO

__all__ = [
    "ActionResultDTO",
    "CheckpointDTO",
]
