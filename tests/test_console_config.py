import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from console_config import load_settings, setup_logging
from etcd_registry import EtcdRegistryStore
from registry_store import JsonFileStore, open_store


def test_defaults():
    settings = load_settings(env={})
    assert settings.engine_url == "http://localhost:3000"
    assert settings.registry_backend == "json"
    assert settings.registry_path.name == "disks.json"


def test_environment_then_overrides():
    env = {
        "DISK_CONSOLE_ENGINE_URL": "http://engine:3000",
        "DISK_CONSOLE_REQUEST_TIMEOUT": "2.5",
        "DISK_CONSOLE_REGISTRY_PATH": "/tmp/from-env.json",
    }
    settings = load_settings(env=env, registry_path="/tmp/cli.json", log_level=None)
    assert settings.engine_url == "http://engine:3000"
    assert settings.request_timeout == 2.5
    assert settings.registry_path == Path("/tmp/cli.json")
    assert settings.log_level == "INFO"


def test_unknown_backend_is_rejected():
    with pytest.raises(ValidationError):
        load_settings(env={"DISK_CONSOLE_REGISTRY_BACKEND": "redis"})


def test_open_store(tmp_path):
    settings = load_settings(env={}, registry_path=str(tmp_path / "d.json"))
    store = open_store(settings)
    assert isinstance(store, JsonFileStore)


def test_open_store_etcd(monkeypatch):
    created = {}

    def fake_init(self, host, port, key, client=None):
        created.update(host=host, port=port, key=key)

    monkeypatch.setattr(EtcdRegistryStore, "__init__", fake_init)
    settings = load_settings(env={"DISK_CONSOLE_REGISTRY_BACKEND": "etcd", "DISK_CONSOLE_ETCD_PORT": "2380"})
    assert isinstance(open_store(settings), EtcdRegistryStore)
    assert created == {"host": "localhost", "port": 2380, "key": "/disk-console/disks"}


def test_setup_logging_accepts_names(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
    setup_logging("debug")
    assert calls[0]["level"] == "DEBUG"
