import logging
import os
from pathlib import Path
from typing import Literal, Mapping, Optional

from pydantic import BaseModel

ENV_PREFIX = "DISK_CONSOLE_"
DEFAULT_REGISTRY_PATH = Path.home() / ".config" / "disk-console" / "disks.json"


class ConsoleSettings(BaseModel):
    engine_url: str = "http://localhost:3000"
    request_timeout: float = 10.0
    registry_backend: Literal["json", "etcd"] = "json"
    registry_path: Path = DEFAULT_REGISTRY_PATH
    etcd_host: str = "localhost"
    etcd_port: int = 2379
    etcd_key: str = "/disk-console/disks"
    notice_seconds: float = 5.0
    log_level: str = "INFO"


def load_settings(env: Optional[Mapping[str, str]] = None, **overrides) -> ConsoleSettings:
    """Build settings from DISK_CONSOLE_* variables, then explicit overrides."""
    env = os.environ if env is None else env
    values = {}
    for name in ConsoleSettings.model_fields:
        key = ENV_PREFIX + name.upper()
        if key in env:
            values[name] = env[key]
    values.update({k: v for k, v in overrides.items() if v is not None})
    return ConsoleSettings(**values)


def setup_logging(level="INFO"):
    logging.basicConfig(
        level=level.upper() if isinstance(level, str) else level,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
