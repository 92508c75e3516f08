import json

import pytest

from console_errors import ValidationError
from disk_registry import DiskRegistry, display_name
from registry_store import JsonFileStore


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/home/user/disk.mia", "disk.mia"),
        ("disk.mia", "disk.mia"),
        ("relative/dir/A.mia", "A.mia"),
        ("/home/user/", "/home/user/"),
    ],
)
def test_display_name(path, expected):
    assert display_name(path) == expected


def test_add_disk_twice_keeps_one_entry(store):
    registry = DiskRegistry(store)
    ok, _ = registry.add_disk("/disks/A.mia")
    assert ok is True

    ok, message = registry.add_disk("/disks/A.mia")
    assert ok is False
    assert "already" in message
    assert registry.error == message
    assert registry.paths() == ["/disks/A.mia"]


def test_registry_is_persisted_in_full(tmp_path):
    path = tmp_path / "disks.json"
    registry = DiskRegistry(JsonFileStore(path))
    registry.add_disk("/disks/A.mia")
    registry.add_disk("/disks/B.mia")

    records = json.loads(path.read_text(encoding="utf-8"))
    assert records == [
        {"displayName": "A.mia", "filePath": "/disks/A.mia"},
        {"displayName": "B.mia", "filePath": "/disks/B.mia"},
    ]

    reloaded = DiskRegistry(JsonFileStore(path))
    reloaded.load()
    assert reloaded.paths() == ["/disks/A.mia", "/disks/B.mia"]


def test_bulk_add_skips_known_disks_only(store):
    registry = DiskRegistry(store)
    registry.add_disk("/disks/A.mia")

    added = registry.add_disks_from_folder(["/disks/A.mia", "/disks/B.mia", "/disks/B.mia"])

    # the batch itself is not deduplicated
    assert [e.file_path for e in added] == ["/disks/B.mia", "/disks/B.mia"]
    assert registry.paths() == ["/disks/A.mia", "/disks/B.mia", "/disks/B.mia"]
    assert registry.loading is False


def test_clear_disks_empties_registry_and_storage(tmp_path):
    path = tmp_path / "disks.json"
    registry = DiskRegistry(JsonFileStore(path))
    registry.add_disk("/disks/A.mia")

    registry.clear_disks()

    assert registry.entries == []
    assert not path.exists()
    assert DiskRegistry(JsonFileStore(path)).load() == []


def test_two_writers_do_not_lose_updates(tmp_path):
    path = tmp_path / "disks.json"
    first = DiskRegistry(JsonFileStore(path))
    second = DiskRegistry(JsonFileStore(path))
    first.load()
    second.load()

    first.add_disk("/disks/A.mia")
    # second still holds an empty in-memory list
    second.add_disks_from_folder(["/disks/B.mia", "/disks/A.mia"])

    assert second.paths() == ["/disks/A.mia", "/disks/B.mia"]
    assert DiskRegistry(JsonFileStore(path)).load()[1].file_path == "/disks/B.mia"


class FlakyStore(JsonFileStore):
    """Refuses the first save as if another writer got there first."""

    def __init__(self, path):
        super().__init__(path)
        self.refusals = 1

    def save(self, records, expected_version):
        if self.refusals:
            self.refusals -= 1
            return False
        return super().save(records, expected_version)


def test_commit_retries_after_conflict(tmp_path):
    registry = DiskRegistry(FlakyStore(tmp_path / "disks.json"))
    ok, _ = registry.add_disk("/disks/A.mia")
    assert ok is True
    assert registry.paths() == ["/disks/A.mia"]


@pytest.mark.parametrize("path", ["", "   ", "\t"])
def test_blank_path_is_rejected(store, path):
    registry = DiskRegistry(store)
    with pytest.raises(ValidationError):
        registry.add_disk(path)
    assert registry.entries == []
    assert store.load() == ([], None)


def test_bulk_add_skips_blank_paths(store):
    registry = DiskRegistry(store)
    added = registry.add_disks_from_folder(["", "/disks/A.mia", "  "])
    assert [e.file_path for e in added] == ["/disks/A.mia"]
    assert registry.paths() == ["/disks/A.mia"]
