"""Plain-text tables for command output, aligned in columns."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TextIO

from .spec import SourceSpec

_PADDING = 2


@dataclass
class TasktreeRow:
    name: str
    path: str
    status: str = ""  # empty means OK


@dataclass
class AnnotationRow:
    key: str
    value: str


@dataclass
class RepoAliasRow:
    alias: str
    url: str


@dataclass
class StatusRepoRow:
    name: str
    path: str
    head: str
    state: str


def _align(rows: Sequence[Sequence[str]]) -> list[str]:
    """Align cells in column blocks; the last cell of each row is left as-is."""
    widths: list[int] = []
    out: list[str] = []

    def emit(start: int, stop: int) -> None:
        for cells in rows[start:stop]:
            out.append(
                "".join(
                    cell.ljust(widths[j]) if j < len(widths) else cell
                    for j, cell in enumerate(cells)
                )
            )

    def layout(start: int, stop: int) -> None:
        column = len(widths)
        current = start
        while current < stop:
            if column >= len(rows[current]) - 1:
                current += 1
                continue
            emit(start, current)
            start = current
            width = 0
            while current < stop and column < len(rows[current]) - 1:
                width = max(width, len(rows[current][column]) + _PADDING)
                current += 1
            widths.append(width)
            layout(start, current)
            widths.pop()
            start = current
        emit(start, stop)

    layout(0, len(rows))
    return out


def _write_aligned(out: TextIO, rows: Sequence[Sequence[str]]) -> None:
    for line in _align(rows):
        out.write(line + "\n")


def write_tasktree_table(out: TextIO, rows: Iterable[TasktreeRow]) -> None:
    """Known tasktrees, with a non-OK status shown in parentheses."""
    rows = list(rows)
    if not rows:
        out.write("No tasktrees registered.\n")
        return
    table = [["NAME", "PATH", "STATUS"]]
    table.extend(
        [row.name, row.path, f"({row.status})" if row.status else ""] for row in rows
    )
    _write_aligned(out, table)


def write_repo_table(out: TextIO, sources: Iterable[SourceSpec]) -> None:
    """Sources of a tasktree with their path, ref and branch."""
    table = [["NAME", "PATH", "REF", "BRANCH"]]
    for source in sources:
        ref = source.git.ref if source.git else ""
        branch = (source.git.branch if source.git else "") or "-"
        table.append([source.name, source.path or source.name, ref, branch])
    _write_aligned(out, table)


def write_status_table(
    out: TextIO,
    tasktree_name: str,
    root: str,
    annotations: Iterable[AnnotationRow],
    repos: Iterable[StatusRepoRow],
) -> None:
    """Header lines, annotations if any, then the live repository table."""
    out.write(f"Tasktree: {tasktree_name}\n")
    out.write(f"Root:     {root}\n")
    annotations = list(annotations)
    if annotations:
        out.write("\n")
        _write_aligned(out, [[f"  {a.key}", a.value] for a in annotations])
    out.write("\n")
    table = [["REPO", "PATH", "HEAD", "STATE"]]
    table.extend([r.name, r.path, r.head, r.state] for r in repos)
    _write_aligned(out, table)


def write_annotations_table(out: TextIO, rows: Iterable[AnnotationRow]) -> None:
    rows = list(rows)
    if not rows:
        out.write("No annotations set.\n")
        return
    _write_aligned(out, [["KEY", "VALUE"], *([r.key, r.value] for r in rows)])


def write_repo_alias_table(out: TextIO, aliases: Iterable[RepoAliasRow]) -> None:
    _write_aligned(out, [["ALIAS", "URL"], *([a.alias, a.url] for a in aliases)])