import time
import tomllib

import pytest

from tasktree.errors import TasktreeError
from tasktree.registry import (
    REGISTRY_VERSION,
    RegistryFile,
    RegistryStore,
    TasktreeEntry,
    default_registry_path,
)


@pytest.fixture
def store(tmp_path):
    return RegistryStore(tmp_path / "registry.toml")


def test_load_missing_file(store):
    registry = store.load()
    assert registry.tasktrees == []
    assert registry.version == REGISTRY_VERSION


def test_load_corrupt_file(tmp_path):
    path = tmp_path / "registry.toml"
    path.write_text("this is not [[[ valid toml")
    with pytest.raises(TasktreeError, match="parse registry"):
        RegistryStore(path).load()


def test_register_new_entry(store):
    store.register("/tmp/ws/alpha", "alpha")
    registry = store.load()
    assert len(registry.tasktrees) == 1
    assert registry.tasktrees[0].path == "/tmp/ws/alpha"
    assert registry.tasktrees[0].name == "alpha"
    assert registry.tasktrees[0].added_at is not None


def test_register_duplicate_path_updates_name(store):
    store.register("/tmp/ws/alpha", "old-name")
    store.register("/tmp/ws/alpha", "new-name")
    registry = store.load()
    assert len(registry.tasktrees) == 1
    assert registry.tasktrees[0].name == "new-name"


def test_register_preserves_added_at(store):
    store.register("/tmp/ws/alpha", "alpha")
    original = store.load().tasktrees[0].added_at
    time.sleep(0.01)
    store.register("/tmp/ws/alpha", "alpha-renamed")
    assert store.load().tasktrees[0].added_at == original


def test_register_multiple_entries(store):
    store.register("/tmp/ws/alpha", "alpha")
    store.register("/tmp/ws/beta", "beta")
    assert len(store.load().tasktrees) == 2


def test_deregister_existing(store):
    store.register("/tmp/ws/alpha", "alpha")
    store.register("/tmp/ws/beta", "beta")
    store.deregister("/tmp/ws/alpha")
    registry = store.load()
    assert len(registry.tasktrees) == 1
    assert registry.tasktrees[0].path == "/tmp/ws/beta"


def test_deregister_non_existent(store):
    store.deregister("/tmp/ws/nonexistent")
    assert store.load().tasktrees == []


def test_save_creates_parent_directories(tmp_path):
    deep = tmp_path / "a" / "b" / "c" / "registry.toml"
    RegistryStore(deep).register("/tmp/ws/alpha", "alpha")
    assert deep.is_file()


def test_roundtrip(store):
    store.register("/tmp/ws/alpha", "alpha")
    store.register("/tmp/ws/beta", "beta")
    registry = store.load()
    assert [e.path for e in registry.tasktrees] == ["/tmp/ws/alpha", "/tmp/ws/beta"]


def test_saved_file_is_toml_with_version(store):
    store.register("/tmp/ws/alpha", "alpha")
    with open(store.path, "rb") as handle:
        data = tomllib.load(handle)
    assert data["version"] == 1
    assert data["tasktrees"][0]["path"] == "/tmp/ws/alpha"
    assert data["tasktrees"][0]["name"] == "alpha"


def test_save_and_load_explicit_registry(store):
    entry = TasktreeEntry(path="/tmp/ws/gamma", name="gamma")
    store.save(RegistryFile(tasktrees=[entry]))
    loaded = store.load()
    assert loaded.tasktrees == [entry]


def test_default_registry_path(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert default_registry_path() == str(
        tmp_path / ".local" / "state" / "tasktree" / "registry.toml"
    )