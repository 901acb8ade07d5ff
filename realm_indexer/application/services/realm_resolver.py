"""
Resolucion de un realm a partir de su atomical id.

Obtiene el detalle via get_state, aplica el filtro de tipo/subtipo y
extrae los campos del perfil. Los errores de un registro se registran y
se convierten en None: nunca cortan el loop de la pagina.
"""
from __future__ import annotations

from typing import Callable, Optional

from loguru import logger

from realm_indexer.domain.entities.realm import ResolvedProfile
from realm_indexer.infrastructure.external.electrumx.api import ElectrumxApi
from realm_indexer.shared.exceptions.ingestion import (
    AddressDecodeError,
    UpstreamEnvelopeError,
    UpstreamError,
)

ScriptDecoder = Callable[[Optional[str]], Optional[str]]


class RealmResolver:
    """Produce ResolvedProfile para entidades NFT de subtipo realm/subrealm."""

    def __init__(self, api: ElectrumxApi, decode: ScriptDecoder):
        self._api = api
        self._decode = decode

    async def resolve(self, atomical_id: str) -> Optional[ResolvedProfile]:
        try:
            state = await self._api.get_state(atomical_id)
        except UpstreamEnvelopeError as e:
            logger.warning(f"Sin datos para {atomical_id}: {e.message}")
            return None
        except UpstreamError as e:
            logger.error(f"Error obteniendo el perfil de {atomical_id}: {e.message}")
            return None

        if not state.is_realm():
            logger.debug(f"Omitiendo {atomical_id}: type={state.type} subtype={state.subtype}")
            return None

        try:
            return ResolvedProfile(
                id=state.atomical_id,
                sequence_number=state.atomical_number,
                mint_time=state.mint_info.mint_time,
                mint_address=self._decode(state.mint_info.reveal_location_script),
                owner_address=self._decode(state.owner_script),
                profile_pointer=state.profile_pointer,
                full_name=state.name,
            )
        except AddressDecodeError as e:
            logger.error(f"Error decodificando scripts de {atomical_id}: {e.message}")
            return None
        except (ValueError, TypeError, OverflowError) as e:
            logger.error(f"Perfil invalido para {atomical_id}: {e}")
            return None
