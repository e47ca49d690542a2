"""Exceptions raised by tasktree operations."""

from __future__ import annotations

import json


def _quote(value: str) -> str:
    """Render a value in double quotes with escapes, as shown in messages."""
    return json.dumps(str(value), ensure_ascii=False)


class TasktreeError(Exception):
    """Base class for all tasktree errors."""


class NotInTasktreeError(TasktreeError):
    """No Tasktree.yml was found in the start directory or any parent."""

    def __init__(self, start: str) -> None:
        self.start = start
        super().__init__(
            "Not inside a tasktree (no Tasktree.yml found in current directory or parents).\n"
            "Run `tasktree init` to create one."
        )


class LegacyMetadataError(TasktreeError):
    """A legacy .tasktree.toml was found instead of Tasktree.yml."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"Found legacy .tasktree.toml at {path}.\n"
            "Run `tasktree migrate` to convert to Tasktree.yml."
        )


class MetadataExistsError(TasktreeError):
    """Tasktree metadata is already present at the target."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"tasktree metadata already exists at {path}")


class DuplicateRepoNameError(TasktreeError):
    """A source with the same name is already part of the tasktree."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"repository {_quote(name)} already exists in this tasktree; "
            "use --name to choose a different checkout name"
        )


class DestinationExistsError(TasktreeError):
    """The checkout destination is already present on disk."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"destination already exists at {path}")


class InvalidRepoNameError(TasktreeError):
    """A repository name is empty, a dot entry or contains a separator."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"invalid repository name {_quote(name)}")


class UnresolvedRefError(TasktreeError):
    """A ref could not be resolved in a repository."""

    def __init__(self, repo_url: str, ref: str) -> None:
        self.repo_url = repo_url
        self.ref = ref
        super().__init__(f"could not resolve ref {_quote(ref)} for {repo_url}")


class BranchExistsError(TasktreeError):
    """A branch with this name already exists in the checkout."""

    def __init__(self, branch: str) -> None:
        self.branch = branch
        super().__init__(f"branch {_quote(branch)} already exists in this checkout")


class RepoNotFoundError(TasktreeError):
    """No source of this name is part of the tasktree."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"repository {_quote(name)} was not found in this tasktree")


class UnsafePathError(TasktreeError):
    """A path operation would escape the tasktree."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"unsafe path operation rejected for {path}")


class InvalidBranchNameError(TasktreeError):
    """A branch name was rejected by git."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"invalid branch name {_quote(name)}")


class RepoAliasNotFoundError(TasktreeError):
    """No repository alias of this name exists."""

    def __init__(self, alias: str) -> None:
        self.alias = alias
        super().__init__(f"repository alias {_quote(alias)} was not found")


class RepoAliasInUseError(TasktreeError):
    """The alias already points at a different repository."""

    def __init__(self, alias: str, url: str) -> None:
        self.alias = alias
        self.url = url
        super().__init__(f"repository alias {_quote(alias)} is already used by {url}")


class UnknownSourceTypeError(TasktreeError):
    """A source declares a type that is not known."""

    def __init__(self, source_type: str) -> None:
        self.source_type = source_type
        super().__init__(f"unknown source type {_quote(source_type)}")


class MissingSourceSpecError(TasktreeError):
    """A source lacks the block for its declared type."""

    def __init__(self, name: str, source_type: str) -> None:
        self.name = name
        self.source_type = source_type
        super().__init__(
            f"source {_quote(name)} of type {_quote(source_type)} "
            "is missing its type-specific spec block"
        )


class InvalidAnnotationKeyError(TasktreeError):
    """An annotation key failed validation."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"invalid annotation key {_quote(key)}: {reason}")