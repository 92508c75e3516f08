import httpx
import pytest

from console_shell import ConsoleShell
from engine_client import EngineClient
from fake_engine import EngineState, create_engine
from registry_store import JsonFileStore


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def engine_state():
    return EngineState()


@pytest.fixture
def engine_transport(engine_state):
    return httpx.ASGITransport(app=create_engine(engine_state))


@pytest.fixture
def client(engine_transport):
    return EngineClient("http://engine", transport=engine_transport)


@pytest.fixture
def store(tmp_path):
    return JsonFileStore(tmp_path / "disks.json")


@pytest.fixture
def shell(client, store):
    console = ConsoleShell(client, store, notice_seconds=60)
    console.registry.load()
    return console
