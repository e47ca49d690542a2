"""The per-user file of repository aliases."""

from __future__ import annotations

import copy
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import InvalidRepoNameError, TasktreeError
from .fsutil import atomic_write_file
from .repo import validate_repo_name


def default_alias_path() -> str:
    """Location of repos.yml in the user's configuration directory."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg:
        return os.path.join(xdg, "tasktree", "repos.yml")
    if sys.platform == "darwin":
        try:
            home = Path.home()
        except RuntimeError as exc:
            raise TasktreeError(f"resolve user home dir: {exc}") from exc
        return str(home / ".config" / "tasktree" / "repos.yml")
    if sys.platform == "win32":
        config_dir = os.environ.get("APPDATA", "")
        if not config_dir:
            raise TasktreeError("resolve user config dir: %AppData% is not defined")
    else:
        try:
            config_dir = str(Path.home() / ".config")
        except RuntimeError as exc:
            raise TasktreeError(f"resolve user config dir: {exc}") from exc
    return os.path.join(config_dir, "tasktree", "repos.yml")


@dataclass
class AliasRepo:
    url: str
    aliases: list[str] = field(default_factory=list)


@dataclass
class AliasFile:
    repos: list[AliasRepo] = field(default_factory=list)

    def normalize(self) -> None:
        """Merge entries by URL, drop empty or unsafe aliases, and sort."""
        by_url: dict[str, list[str]] = {}
        for repo in self.repos:
            if not repo.url:
                continue
            aliases = by_url.setdefault(repo.url, [])
            seen = set(aliases)
            for alias in repo.aliases:
                if not alias or alias in seen:
                    continue
                try:
                    validate_repo_name(alias)
                except InvalidRepoNameError:
                    continue
                seen.add(alias)
                aliases.append(alias)
            aliases.sort()
        self.repos = [AliasRepo(url=url, aliases=by_url[url]) for url in sorted(by_url)]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _file_from_data(data: Any) -> AliasFile:
    if data is None:
        return AliasFile()
    if not isinstance(data, Mapping):
        raise TypeError("expected a mapping at the top level")
    repos = []
    for item in data.get("repos") or []:
        if not isinstance(item, Mapping):
            raise TypeError("each repo entry must be a mapping")
        repos.append(
            AliasRepo(
                url=_text(item.get("url")),
                aliases=[_text(a) for a in item.get("aliases") or []],
            )
        )
    return AliasFile(repos=repos)


@dataclass
class AliasStore:
    """Reads, writes and queries a repos.yml alias file."""

    path: str

    def load(self) -> AliasFile:
        """Parse and normalize the file; an absent or empty file is empty."""
        try:
            with open(self.path, "rb") as handle:
                contents = handle.read()
        except FileNotFoundError:
            return AliasFile()
        except OSError as exc:
            raise TasktreeError(f"read repo aliases: {exc}") from exc
        if not contents:
            return AliasFile()
        try:
            alias_file = _file_from_data(yaml.safe_load(contents.decode("utf-8")))
        except (yaml.YAMLError, UnicodeDecodeError, TypeError, AttributeError) as exc:
            raise TasktreeError(f"parse repo aliases: {exc}") from exc
        alias_file.normalize()
        return alias_file

    def save(self, alias_file: AliasFile) -> None:
        """Write a normalized copy of alias_file atomically."""
        normalized = copy.deepcopy(alias_file)
        normalized.normalize()
        contents = yaml.safe_dump(
            {"repos": [{"url": r.url, "aliases": list(r.aliases)} for r in normalized.repos]},
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
        try:
            os.makedirs(os.path.dirname(self.path) or ".", mode=0o755, exist_ok=True)
        except OSError as exc:
            raise TasktreeError(f"create repo alias config dir: {exc}") from exc
        atomic_write_file(self.path, contents.encode("utf-8"), 0o644)

    def resolve(self, name: str) -> str | None:
        """URL the alias points at, or None when no repository has it."""
        for repo in self.load().repos:
            if name in repo.aliases:
                return repo.url
        return None


def default_alias_store() -> AliasStore:
    return AliasStore(default_alias_path())