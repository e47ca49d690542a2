import os

import pytest
import yaml

from tasktree.aliases import (
    AliasFile,
    AliasRepo,
    AliasStore,
    default_alias_path,
    default_alias_store,
)
from tasktree.errors import TasktreeError

API_URL = "git@example.com:acme/api.git"
WEB_URL = "git@example.com:acme/web.git"


@pytest.fixture
def store(tmp_path):
    return AliasStore(str(tmp_path / "cfg" / "repos.yml"))


def test_load_missing_file_is_empty(store):
    assert store.load().repos == []


def test_load_empty_file_is_empty(tmp_path):
    path = tmp_path / "repos.yml"
    path.write_bytes(b"")
    assert AliasStore(str(path)).load().repos == []


def test_load_invalid_yaml_raises(tmp_path):
    path = tmp_path / "repos.yml"
    path.write_text("repos: [unclosed\n")
    with pytest.raises(TasktreeError, match="parse repo aliases"):
        AliasStore(str(path)).load()


def test_normalize_merges_sorts_and_filters():
    alias_file = AliasFile(
        repos=[
            AliasRepo(url=WEB_URL, aliases=["web", "acme-web"]),
            AliasRepo(url=API_URL, aliases=["api", "", "a/b", "api"]),
            AliasRepo(url="", aliases=["orphan"]),
            AliasRepo(url=API_URL, aliases=["acme-api", "api"]),
        ]
    )
    alias_file.normalize()
    assert [r.url for r in alias_file.repos] == [API_URL, WEB_URL]
    assert alias_file.repos[0].aliases == ["acme-api", "api"]
    assert alias_file.repos[1].aliases == ["acme-web", "web"]


def test_normalize_is_idempotent():
    alias_file = AliasFile(repos=[AliasRepo(url=API_URL, aliases=["z", "a"])])
    alias_file.normalize()
    first = [(r.url, list(r.aliases)) for r in alias_file.repos]
    alias_file.normalize()
    assert [(r.url, r.aliases) for r in alias_file.repos] == first


def test_save_and_load_round_trip(store):
    store.save(AliasFile(repos=[AliasRepo(url=API_URL, aliases=["api", "acme-api"])]))
    loaded = store.load()
    assert loaded.repos == [AliasRepo(url=API_URL, aliases=["acme-api", "api"])]


def test_save_does_not_mutate_argument(store):
    original = AliasFile(repos=[AliasRepo(url=API_URL, aliases=["b", "a"])])
    store.save(original)
    assert original.repos[0].aliases == ["b", "a"]


def test_saved_file_layout(store):
    store.save(AliasFile(repos=[AliasRepo(url=API_URL, aliases=["api"])]))
    with open(store.path, encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    assert data == {"repos": [{"url": API_URL, "aliases": ["api"]}]}


def test_resolve_found_and_missing(store):
    store.save(
        AliasFile(
            repos=[
                AliasRepo(url=API_URL, aliases=["api"]),
                AliasRepo(url=WEB_URL, aliases=["web"]),
            ]
        )
    )
    assert store.resolve("web") == WEB_URL
    assert store.resolve("api") == API_URL
    assert store.resolve("nope") is None


def test_load_normalizes_hand_written_file(tmp_path):
    path = tmp_path / "repos.yml"
    path.write_text(
        f"repos:\n  - url: {WEB_URL}\n    aliases: [web]\n"
        f"  - url: {API_URL}\n    aliases: [api, api]\n"
    )
    loaded = AliasStore(str(path)).load()
    assert [r.url for r in loaded.repos] == [API_URL, WEB_URL]
    assert loaded.repos[0].aliases == ["api"]


def test_default_alias_path_uses_xdg(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert default_alias_path() == os.path.join(str(tmp_path), "tasktree", "repos.yml")
    assert default_alias_store().path == default_alias_path()
    assert default_alias_store().resolve("api") is None