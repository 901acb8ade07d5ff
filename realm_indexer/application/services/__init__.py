"""
Servicios de aplicacion.

Componentes reutilizables del pipeline de ingesta; el orquestador
(casos de uso) los compone por tick.
"""
from realm_indexer.application.services.realm_paginator import RealmPaginator, PageHandler
from realm_indexer.application.services.realm_resolver import RealmResolver, ScriptDecoder
from realm_indexer.application.services.upsert_writer import RealmUpsertWriter

__all__ = [
    "RealmPaginator",
    "PageHandler",
    "RealmResolver",
    "ScriptDecoder",
    "RealmUpsertWriter",
]
