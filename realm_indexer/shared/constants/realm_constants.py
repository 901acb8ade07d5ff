"""
Constantes del dominio de realms Atomicals.
Define metodos RPC, modos de escaneo y el filtro de tipo/subtipo.
"""
from enum import Enum


class ScanMode(str, Enum):
    """Modos de escaneo; cada uno tiene su propio checkpoint."""
    RESCAN = "rescan"
    TAIL = "tail"


class PageOutcome(str, Enum):
    """Resultado etiquetado de procesar una pagina del escaneo."""
    CONTINUE = "continue"  # pagina llena, probablemente hay mas
    DONE = "done"          # pagina corta, fin de datos
    ERROR = "error"        # fallo de fetch/parseo de la pagina


# Metodos RPC del proxy ElectrumX
FIND_REALMS_METHOD = "blockchain.atomicals.find_realms"
GET_STATE_METHOD = "blockchain.atomicals.get_state"
LIST_METHOD = "blockchain.atomicals.list"

# Offset centinela de blockchain.atomicals.list: "los mas recientes"
LIST_OFFSET_LATEST = -1

# Filtro del resolver
REALM_ENTITY_TYPE = "NFT"
REALM_SUBTYPES = frozenset({"realm", "subrealm"})

CHECKPOINT_KEY_PREFIX = "realm_checkpoint"
