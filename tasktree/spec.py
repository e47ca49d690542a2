"""The Tasktree.yml workspace specification and annotation key rules."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import StrEnum
from typing import Any

from .errors import InvalidAnnotationKeyError

SPEC_FILE_NAME = "Tasktree.yml"
LEGACY_FILE_NAME = ".tasktree.toml"
API_VERSION = "tasktree.dev/v1"
KIND_TASKTREE = "Tasktree"

_ANNOTATION_KEY_RE = re.compile(r"[a-zA-Z0-9][a-zA-Z0-9._\-]*")
_MAX_ANNOTATION_KEY = 128


def validate_annotation_key(key: str) -> None:
    """Raise InvalidAnnotationKeyError when key is not a valid annotation key."""
    if key == "":
        raise InvalidAnnotationKeyError(key, "key must not be empty")
    length = len(key.encode("utf-8"))
    if length > _MAX_ANNOTATION_KEY:
        raise InvalidAnnotationKeyError(
            key, f"key length {length} exceeds maximum of {_MAX_ANNOTATION_KEY}"
        )
    if not _ANNOTATION_KEY_RE.fullmatch(key):
        raise InvalidAnnotationKeyError(key, "key must match ^[a-zA-Z0-9][a-zA-Z0-9._-]*$")


class SourceType(StrEnum):
    GIT = "git"
    HTTP = "http"
    ARCHIVE = "archive"
    STATIC = "static"
    LOCAL = "local"


@dataclass
class GitSourceSpec:
    url: str
    ref: str = ""
    branch: str = ""


@dataclass
class SourceSpec:
    name: str
    type: str = SourceType.GIT
    path: str = ""
    git: GitSourceSpec | None = None


@dataclass
class WorkspaceSpec:
    sources: list[SourceSpec] = field(default_factory=list)


@dataclass
class SpecMetadata:
    name: str = ""
    description: str = ""
    created_at: datetime | None = None
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass
class TasktreeSpec:
    """The user-authored declarative workspace file."""

    api_version: str = API_VERSION
    kind: str = KIND_TASKTREE
    metadata: SpecMetadata = field(default_factory=SpecMetadata)
    spec: WorkspaceSpec = field(default_factory=WorkspaceSpec)


def _format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _parse_time(value: Any) -> datetime | None:
    if value is None or value == "":
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


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _string_map(value: Any) -> dict[str, str]:
    if not value:
        return {}
    return {str(k): _text(v) for k, v in value.items()}


def _source_type(value: Any) -> str:
    text = _text(value)
    try:
        return SourceType(text)
    except ValueError:
        return text


def _source_to_dict(source: SourceSpec) -> dict[str, Any]:
    out: dict[str, Any] = {"name": source.name, "type": str(source.type)}
    if source.path:
        out["path"] = source.path
    if source.git is not None:
        git: dict[str, Any] = {"url": source.git.url}
        if source.git.ref:
            git["ref"] = source.git.ref
        if source.git.branch:
            git["branch"] = source.git.branch
        out["git"] = git
    return out


def _source_from_dict(data: Mapping[str, Any]) -> SourceSpec:
    git_data = data.get("git")
    git = None
    if git_data is not None:
        git = GitSourceSpec(
            url=_text(git_data.get("url")),
            ref=_text(git_data.get("ref")),
            branch=_text(git_data.get("branch")),
        )
    return SourceSpec(
        name=_text(data.get("name")),
        type=_source_type(data.get("type")),
        path=_text(data.get("path")),
        git=git,
    )


def spec_to_dict(spec: TasktreeSpec) -> dict[str, Any]:
    """Plain mapping in Tasktree.yml layout, omitting empty optional fields."""
    metadata: dict[str, Any] = {"name": spec.metadata.name}
    if spec.metadata.description:
        metadata["description"] = spec.metadata.description
    if spec.metadata.created_at is not None:
        metadata["createdAt"] = _format_time(spec.metadata.created_at)
    if spec.metadata.labels:
        metadata["labels"] = dict(spec.metadata.labels)
    if spec.metadata.annotations:
        metadata["annotations"] = dict(spec.metadata.annotations)
    return {
        "apiVersion": spec.api_version,
        "kind": spec.kind,
        "metadata": metadata,
        "spec": {"sources": [_source_to_dict(s) for s in spec.spec.sources]},
    }


def spec_from_dict(data: Mapping[str, Any] | None) -> TasktreeSpec:
    """Build a TasktreeSpec from a mapping in Tasktree.yml layout."""
    data = data or {}
    meta = data.get("metadata") or {}
    body = data.get("spec") or {}
    return TasktreeSpec(
        api_version=_text(data.get("apiVersion")),
        kind=_text(data.get("kind")),
        metadata=SpecMetadata(
            name=_text(meta.get("name")),
            description=_text(meta.get("description")),
            created_at=_parse_time(meta.get("createdAt")),
            labels=_string_map(meta.get("labels")),
            annotations=_string_map(meta.get("annotations")),
        ),
        spec=WorkspaceSpec(
            sources=[_source_from_dict(s) for s in body.get("sources") or []],
        ),
    )