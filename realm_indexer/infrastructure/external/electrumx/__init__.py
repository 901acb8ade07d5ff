"""
Integracion de solo lectura con el indexador ElectrumX de Atomicals.

Capas:
- client: GET con failover entre origins del proxy
- schemas: validacion tipada del envelope y de cada resultado
- api: metodos find_realms / get_state / list
- address_decoder: scriptPubKey -> direccion
"""
from .address_decoder import AddressDecoder, script_address
from .api import ElectrumxApi
from .client import FailoverFetcher

__all__ = ["AddressDecoder", "ElectrumxApi", "FailoverFetcher", "script_address"]
