"""The global registry of tasktrees known on this machine."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import tomli_w

from .errors import TasktreeError
from .fsutil import atomic_write_file

REGISTRY_VERSION = 1


def default_registry_path() -> str:
    """Path of the registry file: ~/.local/state/tasktree/registry.toml."""
    try:
        home = Path.home()
    except RuntimeError as exc:
        raise TasktreeError(f"resolve registry path: {exc}") from exc
    return str(home / ".local" / "state" / "tasktree" / "registry.toml")


@dataclass
class TasktreeEntry:
    """A single registered tasktree."""

    path: str
    name: str
    added_at: datetime | None = None


@dataclass
class RegistryFile:
    """Contents of the registry file."""

    version: int = REGISTRY_VERSION
    tasktrees: list[TasktreeEntry] = field(default_factory=list)


def _parse_time(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _entry_from_dict(data: Any) -> TasktreeEntry:
    if not isinstance(data, dict):
        raise TypeError("tasktree entry must be a table")
    return TasktreeEntry(
        path=str(data.get("path", "")),
        name=str(data.get("name", "")),
        added_at=_parse_time(data.get("added_at")),
    )


def _entry_to_dict(entry: TasktreeEntry) -> dict[str, Any]:
    out: dict[str, Any] = {"path": entry.path, "name": entry.name}
    if entry.added_at is not None:
        out["added_at"] = entry.added_at
    return out


class RegistryStore:
    """Reads and writes the global registry file."""

    def __init__(self, path: str | os.PathLike | None = None) -> None:
        self.path = os.fspath(path) if path is not None else default_registry_path()

    def load(self) -> RegistryFile:
        """Parse the registry; an absent file gives an empty registry."""
        try:
            with open(self.path, "rb") as handle:
                raw = handle.read()
        except FileNotFoundError:
            return RegistryFile()
        except OSError as exc:
            raise TasktreeError(f"read registry: {exc}") from exc
        try:
            data = tomllib.loads(raw.decode("utf-8"))
            tasktrees = data.get("tasktrees") or []
            if not isinstance(tasktrees, list):
                raise TypeError("tasktrees must be an array")
            return RegistryFile(
                version=int(data.get("version", 0)),
                tasktrees=[_entry_from_dict(item) for item in tasktrees],
            )
        except (tomllib.TOMLDecodeError, UnicodeDecodeError, TypeError, ValueError) as exc:
            raise TasktreeError(f"parse registry at {self.path}: {exc}") from exc

    def save(self, registry: RegistryFile) -> None:
        """Write the registry atomically, creating parent directories."""
        try:
            os.makedirs(os.path.dirname(self.path) or ".", mode=0o755, exist_ok=True)
        except OSError as exc:
            raise TasktreeError(f"create registry directory: {exc}") from exc
        data = tomli_w.dumps(
            {
                "version": registry.version,
                "tasktrees": [_entry_to_dict(e) for e in registry.tasktrees],
            }
        )
        try:
            atomic_write_file(self.path, data.encode("utf-8"), 0o600)
        except OSError as exc:
            raise TasktreeError(f"write registry: {exc}") from exc

    def register(self, path: str, name: str) -> None:
        """Add path, or rename its existing entry keeping its added_at."""
        registry = self.load()
        for entry in registry.tasktrees:
            if entry.path == path:
                entry.name = name
                break
        else:
            registry.tasktrees.append(
                TasktreeEntry(path=path, name=name, added_at=datetime.now(timezone.utc))
            )
        self.save(registry)

    def deregister(self, path: str) -> None:
        """Remove the entry for path; unknown paths are ignored."""
        registry = self.load()
        registry.tasktrees = [e for e in registry.tasktrees if e.path != path]
        self.save(registry)