"""
Decodificacion de scripts de salida Bitcoin a direcciones.

Funcion pura apoyada en embit. Un script vacio o ausente devuelve None
sin invocar al parser: un buffer vacio no es un script valido.
"""

from __future__ import annotations

from typing import Optional

from embit.networks import NETWORKS
from embit.script import Script

from realm_indexer.shared.exceptions.ingestion import AddressDecodeError


class AddressDecoder:
    """
    Convierte `hex(scriptPubKey)` en direccion para una red dada.

    Soporta los tipos que embit sabe representar como direccion
    (p2pkh, p2sh, p2wpkh, p2wsh, p2tr).
    """

    def __init__(self, network: str = "main") -> None:
        if network not in NETWORKS:
            raise ValueError(f"Red desconocida '{network}'. Opciones: {sorted(NETWORKS)}")
        self.network = network
        self._params = NETWORKS[network]

    def decode(self, hex_script: Optional[str]) -> Optional[str]:
        """
        Returns:
            Optional[str]: Direccion o None si no hay script

        Raises:
            AddressDecodeError: hex invalido o script sin representacion
        """
        if not hex_script:
            return None

        try:
            raw = bytes.fromhex(hex_script)
        except ValueError as e:
            raise AddressDecodeError(hex_script, "hex invalido") from e

        if not raw:
            return None

        try:
            return Script(raw).address(self._params)
        except Exception as e:
            raise AddressDecodeError(hex_script, str(e) or type(e).__name__) from e

    __call__ = decode


def script_address(hex_script: Optional[str], network: str = "main") -> Optional[str]:
    """Atajo funcional de AddressDecoder(network).decode(hex_script)."""
    return AddressDecoder(network).decode(hex_script)
