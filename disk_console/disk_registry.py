import logging
import threading
from typing import Callable, Iterable, List, Tuple

from console_errors import ValidationError
from engine_models import DiskEntry

logger = logging.getLogger(__name__)

# attempts before giving up on a store that keeps changing underneath us
MAX_COMMIT_ATTEMPTS = 8


def display_name(file_path: str) -> str:
    """Last path segment, or the whole path when there is none."""
    return file_path.rsplit("/", 1)[-1] or file_path


class DiskRegistry:
    """Deduplicated list of known disk images, persisted in full on every change."""

    def __init__(self, store):
        self.store = store
        self.entries: List[DiskEntry] = []
        self.error = None
        self.loading = False
        self._lock = threading.Lock()

    def load(self) -> List[DiskEntry]:
        records, _ = self.store.load()
        self.entries = [DiskEntry.model_validate(r) for r in records]
        return self.entries

    def paths(self) -> List[str]:
        return [e.file_path for e in self.entries]

    def _commit(self, mutate: Callable[[List[DiskEntry]], List[DiskEntry]]) -> List[DiskEntry]:
        # read the last persisted snapshot, apply the change, write it back only
        # if nobody else wrote in between
        with self._lock:
            for _ in range(MAX_COMMIT_ATTEMPTS):
                records, version = self.store.load()
                current = [DiskEntry.model_validate(r) for r in records]
                updated = mutate(current)
                payload = [e.model_dump(by_alias=True) for e in updated]
                if self.store.save(payload, version):
                    self.entries = updated
                    return updated
                logger.debug("registry changed during write, retrying")
            raise RuntimeError("disk registry is being modified concurrently, try again")

    # ---------- ADD ----------
    def add_disk(self, file_path: str) -> Tuple[bool, str]:
        if not file_path or not file_path.strip():
            raise ValidationError("Enter the full path of the disk file.")
        outcome = {}

        def mutate(current):
            if any(e.file_path == file_path for e in current):
                outcome["duplicate"] = True
                return current
            outcome["duplicate"] = False
            return current + [DiskEntry(display_name=display_name(file_path), file_path=file_path)]

        self._commit(mutate)
        if outcome["duplicate"]:
            self.error = "The disk has already been added."
            return False, self.error
        self.error = None
        logger.info("disk added: %s", file_path)
        return True, f"Disk {display_name(file_path)} added"

    def add_disks_from_folder(self, file_paths: Iterable[str]) -> List[DiskEntry]:
        incoming = [p for p in file_paths if p and p.strip()]
        added: List[DiskEntry] = []
        self.loading = True
        try:
            def mutate(current):
                known = {e.file_path for e in current}
                added[:] = [
                    DiskEntry(display_name=display_name(p), file_path=p)
                    for p in incoming
                    if p not in known
                ]
                return current + added

            self._commit(mutate)
        finally:
            self.loading = False
        logger.info("%d disk(s) added from folder", len(added))
        return list(added)

    # ---------- CLEAR ----------
    def clear_disks(self):
        with self._lock:
            self.store.clear()
            self.entries = []
            self.error = None
        logger.info("disk registry cleared")
