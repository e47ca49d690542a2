"""A thin client that runs the git command line tool."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TextIO

from .errors import InvalidBranchNameError, TasktreeError

_QUOTE_TRIGGERS = frozenset(" \t\n\"'\\")
_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


class CommandError(TasktreeError):
    """A git invocation failed or could not be started."""

    def __init__(
        self,
        git_args: Sequence[str],
        stdout: str,
        stderr: str,
        exit_code: int,
        reason: str = "",
    ) -> None:
        self.git_args = list(git_args)
        self.stdout = stdout
        self.stderr = stderr
        self.exit_code = exit_code
        self.reason = reason
        parts = [f"git {' '.join(self.git_args)}"]
        if stderr:
            parts.append(stderr.strip())
        if reason:
            parts.append(reason)
        super().__init__(": ".join(parts))


def _quote(text: str) -> str:
    out = ['"']
    for ch in text:
        code = ord(ch)
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        elif code < 0x20 or code == 0x7F:
            out.append(f"\\x{code:02x}")
        elif code < 0x10000:
            out.append(f"\\u{code:04x}")
        else:
            out.append(f"\\U{code:08x}")
    out.append('"')
    return "".join(out)


def _quote_arg(arg: str) -> str:
    if arg == "":
        return '""'
    if any(ch in _QUOTE_TRIGGERS for ch in arg):
        return _quote(arg)
    return arg


def format_args(args: Sequence[str]) -> str:
    """Render arguments for display, quoting those that need it."""
    return " ".join(_quote_arg(arg) for arg in args)


@dataclass
class GitClient:
    """Runs git commands; echoes them to verbose_writer when it is set."""

    binary: str = "git"
    verbose_writer: TextIO | None = None

    def _run(self, *args: str) -> tuple[str, str]:
        if self.verbose_writer is not None:
            self.verbose_writer.write(f"git {format_args(args)}\n")
        try:
            proc = subprocess.run([self.binary or "git", *args], capture_output=True)
        except OSError as exc:
            raise CommandError(args, "", "", -1, str(exc)) from exc
        stdout = proc.stdout.decode("utf-8", "replace")
        stderr = proc.stderr.decode("utf-8", "replace")
        if proc.returncode != 0:
            if proc.returncode < 0:
                exit_code, reason = -1, f"signal: {-proc.returncode}"
            else:
                exit_code, reason = proc.returncode, f"exit status {proc.returncode}"
            raise CommandError(args, stdout, stderr, exit_code, reason)
        return stdout, stderr

    def _output(self, *args: str) -> str:
        stdout, _ = self._run(*args)
        return stdout.strip()

    def clone_bare(self, repo_url: str, dest_path: str) -> None:
        self._run("clone", "--bare", repo_url, dest_path)

    def fetch_all_prune(self, repo_path: str) -> None:
        self._run(
            "-C", repo_path, "fetch", "origin", "--prune",
            "+refs/heads/*:refs/heads/*", "+refs/tags/*:refs/tags/*",
        )

    def clone(self, repo_path: str, dest_path: str) -> None:
        self._run("clone", repo_path, dest_path)

    def remote_set_url(self, repo_path: str, remote_name: str, repo_url: str) -> None:
        self._run("-C", repo_path, "remote", "set-url", remote_name, repo_url)

    def default_branch(self, repo_path: str) -> str:
        """Branch that origin/HEAD points at, without the origin/ prefix."""
        branch = self._output("-C", repo_path, "symbolic-ref", "--short", "refs/remotes/origin/HEAD")
        return branch.removeprefix("origin/")

    def checkout(self, repo_path: str, ref: str) -> None:
        self._run("-C", repo_path, "checkout", ref)

    def create_branch(self, repo_path: str, branch: str) -> None:
        self._run("-C", repo_path, "checkout", "-b", branch)

    def create_tracking_branch(self, repo_path: str, branch: str, upstream: str) -> None:
        self._run("-C", repo_path, "checkout", "-b", branch, "--track", upstream)

    def validate_branch_name(self, branch: str) -> None:
        """Raise InvalidBranchNameError when git rejects the branch name."""
        try:
            self._run("check-ref-format", "--branch", branch)
        except CommandError as exc:
            if exc.exit_code != 0:
                raise InvalidBranchNameError(branch) from exc
            raise

    def branch_exists(self, repo_path: str, branch: str) -> bool:
        try:
            self._run("-C", repo_path, "show-ref", "--verify", "--quiet", f"refs/heads/{branch}")
        except CommandError as exc:
            if exc.exit_code == 1:
                return False
            raise
        return True

    def commit_sha(self, repo_path: str) -> str:
        return self._output("-C", repo_path, "rev-parse", "HEAD")

    def current_full_ref(self, repo_path: str) -> str:
        """Full ref HEAD points at, or an empty string when detached."""
        try:
            return self._output("-C", repo_path, "symbolic-ref", "-q", "HEAD")
        except CommandError as exc:
            if exc.exit_code == 1:
                return ""
            raise

    def resolve_full_ref(self, repo_path: str, ref: str) -> str:
        """Full symbolic name of ref, or an empty string if it is not a ref."""
        resolved = self._output("-C", repo_path, "rev-parse", "--symbolic-full-name", ref)
        return resolved if resolved.startswith("refs/") else ""

    def resolve_commit(self, repo_path: str, ref: str) -> str:
        return self._output("-C", repo_path, "rev-parse", f"{ref}^{{commit}}")

    def current_branch(self, repo_path: str) -> str:
        """Short branch name of HEAD, or an empty string when detached."""
        try:
            return self._output("-C", repo_path, "symbolic-ref", "--quiet", "--short", "HEAD")
        except CommandError as exc:
            if exc.exit_code == 1:
                return ""
            raise

    def head_description(self, repo_path: str) -> str:
        """Tag exactly at HEAD, or the first 12 characters of its commit."""
        try:
            return self._output("-C", repo_path, "describe", "--tags", "--exact-match", "HEAD")
        except CommandError as exc:
            if exc.exit_code != 128:
                raise
        return self.commit_sha(repo_path)[:12]

    def is_dirty(self, repo_path: str) -> bool:
        stdout, _ = self._run("-C", repo_path, "status", "--porcelain")
        return stdout.strip() != ""