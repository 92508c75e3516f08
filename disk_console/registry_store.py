import hashlib
import json
import os
import threading
from pathlib import Path
from typing import List, Optional, Tuple


class JsonFileStore:
    """Keeps the disk registry as a JSON list of {displayName, filePath} records.

    Versions are digests of the file content; ``save`` only writes when the
    file still holds the version the caller read.
    """

    def __init__(self, path):
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _read(self) -> Tuple[List[dict], Optional[str]]:
        if not self.path.exists():
            return [], None
        raw = self.path.read_bytes()
        return json.loads(raw.decode("utf-8")), hashlib.sha256(raw).hexdigest()

    # ---------- READ ----------
    def load(self) -> Tuple[List[dict], Optional[str]]:
        with self._lock:
            return self._read()

    # ---------- WRITE ----------
    def save(self, records: List[dict], expected_version: Optional[str]) -> bool:
        with self._lock:
            _, current = self._read()
            if current != expected_version:
                return False
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(records, indent=2), encoding="utf-8")
            os.replace(tmp, self.path)
            return True

    # ---------- DELETE ----------
    def clear(self):
        with self._lock:
            self.path.unlink(missing_ok=True)


def open_store(settings):
    if settings.registry_backend == "etcd":
        from etcd_registry import EtcdRegistryStore

        return EtcdRegistryStore(
            host=settings.etcd_host, port=settings.etcd_port, key=settings.etcd_key
        )
    return JsonFileStore(settings.registry_path)
