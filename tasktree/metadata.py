"""Loading and saving the Tasktree.yml file of a tasktree."""

from __future__ import annotations

import os
from collections.abc import Mapping

import yaml

from .errors import TasktreeError
from .fsutil import atomic_write_file
from .spec import SPEC_FILE_NAME, TasktreeSpec, spec_from_dict, spec_to_dict


class MetadataStore:
    """Reads and writes Tasktree.yml under a tasktree root."""

    def path(self, root: str | os.PathLike) -> str:
        return os.path.join(os.fspath(root), SPEC_FILE_NAME)

    def load(self, root: str | os.PathLike) -> TasktreeSpec:
        """Parse the spec file; OSError is raised if it cannot be read."""
        with open(self.path(root), encoding="utf-8") as handle:
            contents = handle.read()
        try:
            data = yaml.safe_load(contents)
        except yaml.YAMLError as exc:
            raise TasktreeError(f"parse metadata: {exc}") from exc
        if data is not None and not isinstance(data, Mapping):
            raise TasktreeError("parse metadata: expected a mapping at the top level")
        try:
            return spec_from_dict(data)
        except (AttributeError, TypeError, ValueError) as exc:
            raise TasktreeError(f"parse metadata: {exc}") from exc

    def save(self, root: str | os.PathLike, spec: TasktreeSpec) -> None:
        contents = yaml.safe_dump(
            spec_to_dict(spec),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
        atomic_write_file(self.path(root), contents.encode("utf-8"), 0o644)