"""
Entidades del dominio de realms.

Representan los datos que fluyen por el pipeline de ingesta:
- ListingEntry: fila cruda de una pagina de find_realms (efimera)
- RecentEntry: fila del tail poll (blockchain.atomicals.list)
- ResolvedProfile: perfil completo de un realm, listo para persistir
- RealmRecord: fila persistida, clave unica = name
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from realm_indexer.shared.constants.realm_constants import REALM_SUBTYPES


@dataclass(frozen=True)
class ListingEntry:
    """Fila de una pagina del ledger-scan. Unica por id dentro de la pagina."""

    id: str
    name: str
    raw_name_hex: Optional[str] = None
    status: Optional[str] = None
    sequence_hint: Optional[int] = None


@dataclass(frozen=True)
class RecentEntry:
    """Entidad reciente devuelta por el tail poll."""

    id: str
    sequence_number: Optional[int]
    type: Optional[str]
    subtype: Optional[str]
    name: Optional[str] = None

    def is_realm_candidate(self) -> bool:
        """Predicado de subtipo aplicado antes de resolver."""
        return self.subtype in REALM_SUBTYPES


@dataclass(frozen=True)
class ResolvedProfile:
    """
    Perfil resuelto de un realm.

    Inmutable una vez producido por el resolver. Los campos de identidad
    (id, sequence_number, mint_time, mint_address) son write-once en la
    tabla; owner_address y profile_pointer pueden cambiar por transferencia.
    """

    id: str
    sequence_number: int
    mint_time: Optional[int]
    mint_address: Optional[str]
    owner_address: Optional[str]
    profile_pointer: Optional[str] = None
    full_name: Optional[str] = None


@dataclass
class RealmRecord:
    """Fila persistida de la tabla realms."""

    name: str
    id: str
    sequence_number: int
    mint_time: Optional[int]
    mint_address: Optional[str]
    owner_address: Optional[str]
    profile_pointer: Optional[str] = None

    @classmethod
    def from_profile(cls, name: str, profile: ResolvedProfile) -> "RealmRecord":
        """Construye la fila completa para el primer avistamiento de un name."""
        return cls(
            name=name,
            id=profile.id,
            sequence_number=profile.sequence_number,
            mint_time=profile.mint_time,
            mint_address=profile.mint_address,
            owner_address=profile.owner_address,
            profile_pointer=profile.profile_pointer,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
