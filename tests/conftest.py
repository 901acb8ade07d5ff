"""
Configuración de fixtures para pytest.

El upstream ElectrumX se simula con httpx.MockTransport: FakeElectrumx
enruta cada GET por nombre de metodo y registra las llamadas recibidas.
"""
from __future__ import annotations

import json
from typing import Any, AsyncGenerator, Dict, List, Optional

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from realm_indexer.application.services.realm_resolver import RealmResolver
from realm_indexer.application.services.upsert_writer import RealmUpsertWriter
from realm_indexer.application.use_cases.ingestion_use_cases import RealmIngestionUseCases
from realm_indexer.infrastructure.database import models  # noqa: F401
from realm_indexer.infrastructure.database.session import Base
from realm_indexer.infrastructure.external.electrumx.address_decoder import AddressDecoder
from realm_indexer.infrastructure.external.electrumx.api import ElectrumxApi
from realm_indexer.infrastructure.external.electrumx.client import FailoverFetcher
from realm_indexer.infrastructure.repositories.memory_repository import (
    InMemoryCheckpointRepository,
    InMemoryRealmRepository,
)
from realm_indexer.shared.constants.realm_constants import (
    FIND_REALMS_METHOD,
    GET_STATE_METHOD,
    LIST_METHOD,
)


# URL de base de datos de prueba
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ORIGINS = [
    "https://ep-a.example/proxy",
    "https://ep-b.example/proxy",
    "https://ep-c.example/proxy",
]

# Scripts de ejemplo con direccion conocida
P2WPKH_SCRIPT = "0014751e76e8199196d454941c45d1b3a323f1433bd6"
P2WPKH_ADDRESS = "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"
P2PKH_SCRIPT = "76a91462e907b15cbf27d5425399ebf6f0fb50ebb88f1888ac"
P2PKH_ADDRESS = "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"


def envelope(result: Any) -> Dict[str, Any]:
    return {"success": True, "response": {"result": result}}


def listing_row(atomical_id: str, name: str, tx_num: int = 0) -> Dict[str, Any]:
    return {
        "atomical_id": atomical_id,
        "realm": name,
        "realm_hex": name.encode().hex(),
        "status": "verified",
        "tx_num": tx_num,
    }


def realm_state(
    atomical_id: str,
    number: int,
    *,
    subtype: str = "realm",
    entity_type: str = "NFT",
    mint_script: Optional[str] = P2PKH_SCRIPT,
    owner_script: Optional[str] = P2WPKH_SCRIPT,
    pointer: Any = None,
    mint_time: Any = 1700000000,
    name: Optional[str] = None,
) -> Dict[str, Any]:
    state: Dict[str, Any] = {
        "atomical_id": atomical_id,
        "atomical_number": number,
        "type": entity_type,
        "subtype": subtype,
        "mint_info": {
            "reveal_location_script": mint_script,
            "args": {"time": mint_time},
        },
        "location_info": [{"script": owner_script}] if owner_script is not None else [],
        "state": {"latest": {"d": pointer}} if pointer is not None else {},
    }
    if name is not None:
        state["$full_realm_name"] = name
    return state


def recent_row(atomical_id: str, number: int, subtype: Optional[str], name: Optional[str] = None) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "atomical_id": atomical_id,
        "atomical_number": number,
        "type": "NFT",
        "subtype": subtype,
    }
    if name is not None:
        row["$realm"] = name
    return row


class FakeElectrumx:
    """Upstream falso: responde find_realms, get_state y list desde memoria."""

    def __init__(self) -> None:
        self.realms: List[Dict[str, Any]] = []
        self.states: Dict[str, Dict[str, Any]] = {}
        self.recent: List[Dict[str, Any]] = []
        self.failing_offsets: set[int] = set()
        self.failing_states: set[str] = set()
        self.list_status = 200
        self.calls: List[tuple[str, list]] = []
        self.hosts: List[str] = []

    def add_realm(self, atomical_id: str, name: str, number: int, **state_kwargs: Any) -> None:
        self.realms.append(listing_row(atomical_id, name, tx_num=number))
        self.states[atomical_id] = realm_state(atomical_id, number, **state_kwargs)

    def calls_to(self, method: str) -> List[list]:
        return [params for called, params in self.calls if called == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        params = json.loads(request.url.params["params"])
        self.calls.append((method, params))
        self.hosts.append(request.url.host)

        if method == FIND_REALMS_METHOD:
            _prefix, _verbose, limit, offset, _verified = params
            if offset in self.failing_offsets:
                return httpx.Response(500, text="boom")
            return httpx.Response(200, json=envelope(self.realms[offset:offset + limit]))

        if method == GET_STATE_METHOD:
            atomical_id = params[0]
            if atomical_id in self.failing_states:
                return httpx.Response(502, text="bad gateway")
            state = self.states.get(atomical_id)
            if state is None:
                return httpx.Response(200, json={"success": False})
            return httpx.Response(200, json=envelope(state))

        if method == LIST_METHOD:
            if self.list_status != 200:
                return httpx.Response(self.list_status)
            limit = params[0]
            return httpx.Response(200, json=envelope(self.recent[:limit]))

        return httpx.Response(404)


@pytest.fixture
def upstream() -> FakeElectrumx:
    return FakeElectrumx()


@pytest.fixture
async def http_client(upstream: FakeElectrumx) -> AsyncGenerator[httpx.AsyncClient, None]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    yield client
    await client.aclose()


@pytest.fixture
def fetcher(http_client: httpx.AsyncClient) -> FailoverFetcher:
    return FailoverFetcher(ORIGINS, client=http_client)


@pytest.fixture
def api(fetcher: FailoverFetcher) -> ElectrumxApi:
    return ElectrumxApi(fetcher)


@pytest.fixture
def realm_repo() -> InMemoryRealmRepository:
    return InMemoryRealmRepository()


@pytest.fixture
def checkpoint_repo() -> InMemoryCheckpointRepository:
    return InMemoryCheckpointRepository()


@pytest.fixture
def resolver(api: ElectrumxApi) -> RealmResolver:
    return RealmResolver(api, AddressDecoder("main"))


@pytest.fixture
def use_cases(
    api: ElectrumxApi,
    resolver: RealmResolver,
    realm_repo: InMemoryRealmRepository,
    checkpoint_repo: InMemoryCheckpointRepository,
) -> RealmIngestionUseCases:
    """Orquestador con paginas de 2 filas para forzar varios ticks."""
    return RealmIngestionUseCases(
        api=api,
        resolver=resolver,
        writer=RealmUpsertWriter(realm_repo),
        checkpoints=checkpoint_repo,
        rescan_page_size=2,
        drain_page_size=2,
        tail_limit=10,
    )


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """
    Session factory sobre una base SQLite en memoria.
    StaticPool comparte la misma conexion entre sesiones.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()
