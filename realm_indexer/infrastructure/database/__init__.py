"""
Configuración de base de datos.

Importa todos los modelos para que se registren con Base
antes de crear las tablas.
"""
from realm_indexer.infrastructure.database.models import (
    RealmModel,
    SyncCheckpointModel,
)
