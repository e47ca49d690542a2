# tasktree

`tasktree` is a Python library of building blocks for task-focused workspaces
that gather several Git repositories under one directory. A workspace is
described by a `Tasktree.yml` file at its root. A global registry records the
workspaces on the machine, and an alias file maps short names to clone URLs.

## Installation

```
pip install .
```

Python 3.11 or later is required. `tasktree.git` runs the `git` executable,
which must be on `PATH` (or passed as `GitClient(binary=...)`).

## Modules

- `tasktree.spec`: the `Tasktree.yml` data model (`TasktreeSpec`,
  `SpecMetadata`, `WorkspaceSpec`, `SourceSpec`, `GitSourceSpec`, and the
  `SourceType` enum with `git`, `http`, `archive`, `static`, `local`).
  `spec_to_dict` and `spec_from_dict` convert to and from the file's mapping
  layout; empty optional fields are left out when writing.
  `validate_annotation_key` raises `InvalidAnnotationKeyError` for keys that are
  empty, longer than 128 bytes, or do not match `^[a-zA-Z0-9][a-zA-Z0-9._-]*$`.
- `tasktree.metadata`: `MetadataStore` with `path(root)`, `load(root)` and
  `save(root, spec)` for the `Tasktree.yml` of a workspace root.
- `tasktree.fsutil`:
  - `resolve_tasktree_root(start)` walks up from `start` to the nearest
    directory holding `Tasktree.yml`. It raises `LegacyMetadataError` if it
    meets a `.tasktree.toml` first, and `NotInTasktreeError` if it reaches the
    filesystem root.
  - `atomic_write_file(path, data, perm)` writes through a synced temporary file
    and an atomic rename.
  - `exists(path)` and `is_within(root, target)` are path checks.
- `tasktree.repo`: `derive_repo_name` and `derive_repo_aliases` work on clone
  URLs. For `git@example.com:myorg/api.git` they give `api` and
  `["api", "myorg-api"]`. The module also has `validate_repo_name`,
  `requested_checkout` and `repo_path_for_name`.
- `tasktree.git`: `GitClient` runs `git` for cloning (`clone`, `clone_bare`),
  fetching (`fetch_all_prune`), remotes (`remote_set_url`), and checkouts and
  branches (`checkout`, `create_branch`, `create_tracking_branch`,
  `validate_branch_name`, `branch_exists`). It also inspects refs and state:
  `default_branch`, `commit_sha`, `current_full_ref`, `resolve_full_ref`,
  `resolve_commit`, `current_branch`, `head_description` and `is_dirty`.
  When `verbose_writer` is set, each command is echoed to it. A failed command
  raises `CommandError`, which carries `git_args`, `stdout`, `stderr` and
  `exit_code`. `format_args` renders arguments for display.
- `tasktree.registry`: `RegistryStore` keeps the list of workspaces in a TOML
  file, by default `~/.local/state/tasktree/registry.toml`
  (`default_registry_path()`). It has `load`, `save`, `register(path, name)` and
  `deregister(path)`. Registering a known path only renames its entry and keeps
  its `added_at`.
- `tasktree.aliases`: `AliasStore` keeps repository aliases in a `repos.yml`
  file and has `load`, `save` and `resolve(name)`. `resolve` returns the URL or
  `None`. `default_alias_path()` uses `$XDG_CONFIG_HOME/tasktree/repos.yml` if
  that variable is set. Otherwise it uses `~/.config` on macOS and other POSIX
  systems, and `%APPDATA%` on Windows. `AliasFile.normalize` merges entries by
  URL, drops empty or unsafe aliases, and sorts the result.
- `tasktree.tables`: `write_tasktree_table`, `write_repo_table`,
  `write_status_table`, `write_annotations_table` and `write_repo_alias_table`
  write column-aligned text tables to a text stream. Their rows are
  `TasktreeRow`, `SourceSpec`, `AnnotationRow`, `StatusRepoRow` and
  `RepoAliasRow`.
- `tasktree.errors`: `TasktreeError` is the base class of the package's own
  exceptions. Reading or writing files can also raise `OSError`.

## Example

```python
import sys
import tempfile
from datetime import datetime, timezone

from tasktree.fsutil import resolve_tasktree_root
from tasktree.metadata import MetadataStore
from tasktree.spec import (
    GitSourceSpec, SourceSpec, SourceType, SpecMetadata, TasktreeSpec, WorkspaceSpec,
)
from tasktree.tables import write_repo_table

root = tempfile.mkdtemp()
spec = TasktreeSpec(
    metadata=SpecMetadata(name="feature-payments", created_at=datetime.now(timezone.utc)),
    spec=WorkspaceSpec(sources=[
        SourceSpec(
            name="api",
            type=SourceType.GIT,
            path="api",
            git=GitSourceSpec(url="git@example.com:myorg/api.git", branch="feature/payments"),
        ),
    ]),
)

store = MetadataStore()
store.save(root, spec)
assert resolve_tasktree_root(root) == root
write_repo_table(sys.stdout, store.load(root).spec.sources)
```

## What this package does not do

The package provides the pieces and no more. It has no command-line program,
and it has no operations that create a workspace or bring its repositories to
disk. Adding a repository, checking out its declared branch, caching clones,
and reporting combined status are all left to the caller. The caller builds
them from `GitClient`, `MetadataStore`, `RegistryStore` and `AliasStore`.

## Running the tests

```
pip install ".[test]"
pytest
```