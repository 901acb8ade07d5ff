"""
Esquemas tipados de las respuestas del proxy ElectrumX.

Todo payload del upstream pasa por aqui antes de llegar a la logica de
negocio: o se obtiene un objeto tipado, o un UpstreamSchemaError con los
errores de validacion de pydantic. Los campos desconocidos se ignoran.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from realm_indexer.domain.entities.realm import ListingEntry, RecentEntry
from realm_indexer.shared.constants.realm_constants import REALM_ENTITY_TYPE, REALM_SUBTYPES
from realm_indexer.shared.exceptions.ingestion import UpstreamEnvelopeError, UpstreamSchemaError
from realm_indexer.shared.utils.datetime_utils import DateTimeUtils


class _UpstreamModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RpcResponse(_UpstreamModel):
    result: Any = None


class RpcEnvelope(_UpstreamModel):
    """{ success: bool, response: { result: T } }"""

    success: bool = False
    response: Optional[RpcResponse] = None


class RealmListingSchema(_UpstreamModel):
    """Fila de find_realms."""

    atomical_id: str
    realm: str
    realm_hex: Optional[str] = None
    status: Optional[str] = None
    tx_num: Optional[int] = None

    def to_entity(self) -> ListingEntry:
        return ListingEntry(
            id=self.atomical_id,
            name=self.realm,
            raw_name_hex=self.realm_hex,
            status=self.status,
            sequence_hint=self.tx_num,
        )


class RecentAtomicalSchema(_UpstreamModel):
    """Fila de blockchain.atomicals.list."""

    atomical_id: str
    atomical_number: Optional[int] = None
    type: Optional[str] = None
    subtype: Optional[str] = None
    full_realm_name: Optional[str] = Field(default=None, alias="$full_realm_name")
    realm: Optional[str] = Field(default=None, alias="$realm")

    def to_entity(self) -> RecentEntry:
        return RecentEntry(
            id=self.atomical_id,
            sequence_number=self.atomical_number,
            type=self.type,
            subtype=self.subtype,
            name=self.full_realm_name or self.realm,
        )


class MintInfoSchema(_UpstreamModel):
    reveal_location_script: Optional[str] = None
    args: Optional[dict[str, Any]] = None

    @property
    def mint_time(self) -> Optional[int]:
        if not self.args:
            return None
        return DateTimeUtils.coerce_unix_seconds(self.args.get("time"))


class LocationInfoSchema(_UpstreamModel):
    script: Optional[str] = None


class StateSchema(_UpstreamModel):
    latest: Optional[dict[str, Any]] = None


class AtomicalStateSchema(_UpstreamModel):
    """Resultado de blockchain.atomicals.get_state."""

    atomical_id: str
    atomical_number: int
    type: Optional[str] = None
    subtype: Optional[str] = None
    mint_info: MintInfoSchema = Field(default_factory=MintInfoSchema)
    location_info: list[LocationInfoSchema] = Field(default_factory=list)
    state: Optional[StateSchema] = None
    full_realm_name: Optional[str] = Field(default=None, alias="$full_realm_name")
    realm: Optional[str] = Field(default=None, alias="$realm")

    @field_validator("mint_info", mode="before")
    @classmethod
    def _mint_info_default(cls, value: Any) -> Any:
        return value if value is not None else {}

    @field_validator("location_info", mode="before")
    @classmethod
    def _location_info_default(cls, value: Any) -> Any:
        return value if value is not None else []

    def is_realm(self) -> bool:
        return self.type == REALM_ENTITY_TYPE and self.subtype in REALM_SUBTYPES

    @property
    def owner_script(self) -> Optional[str]:
        """Script de la ubicacion actual (primer location)."""
        if not self.location_info:
            return None
        return self.location_info[0].script

    @property
    def profile_pointer(self) -> Optional[str]:
        """state.latest.d: solo se acepta como string."""
        if not self.state or not self.state.latest:
            return None
        pointer = self.state.latest.get("d")
        return pointer if isinstance(pointer, str) and pointer else None

    @property
    def name(self) -> Optional[str]:
        return self.full_realm_name or self.realm


_LISTING_ADAPTER = TypeAdapter(list[RealmListingSchema])
_RECENT_ADAPTER = TypeAdapter(list[RecentAtomicalSchema])


def unwrap_envelope(method: str, payload: Any) -> Any:
    """
    Valida el envelope y devuelve response.result.

    success=false o result ausente se tratan igual: "sin datos utilizables".
    """
    if not isinstance(payload, dict):
        raise UpstreamEnvelopeError(method, "payload vacio o no es un objeto")
    try:
        envelope = RpcEnvelope.model_validate(payload)
    except ValidationError as e:
        raise UpstreamSchemaError(method, _errors(e)) from e

    if not envelope.success:
        raise UpstreamEnvelopeError(method, "success=false")
    if envelope.response is None or envelope.response.result is None:
        raise UpstreamEnvelopeError(method, "falta response.result")
    return envelope.response.result


def parse_listing_page(method: str, result: Any) -> list[ListingEntry]:
    try:
        rows = _LISTING_ADAPTER.validate_python(result)
    except ValidationError as e:
        raise UpstreamSchemaError(method, _errors(e)) from e
    return [row.to_entity() for row in rows]


def parse_recent_list(method: str, result: Any) -> list[RecentEntry]:
    try:
        rows = _RECENT_ADAPTER.validate_python(result)
    except ValidationError as e:
        raise UpstreamSchemaError(method, _errors(e)) from e
    return [row.to_entity() for row in rows]


def parse_atomical_state(method: str, result: Any) -> AtomicalStateSchema:
    try:
        return AtomicalStateSchema.model_validate(result)
    except ValidationError as e:
        raise UpstreamSchemaError(method, _errors(e)) from e


def _errors(error: ValidationError) -> list[dict[str, Any]]:
    # include_input=False: los payloads pueden ser enormes
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in error.errors(include_input=False)
    ]
