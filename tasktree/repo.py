"""Repository name and alias derivation from clone URLs."""

from __future__ import annotations

import os
import re
from urllib.parse import unquote

from .errors import InvalidRepoNameError

_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):")


def _clean(path: str) -> str:
    """Lexically clean a slash-separated path."""
    if path == "":
        return "."
    rooted = path.startswith("/")
    parts: list[str] = []
    for part in path.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if parts and parts[-1] != "..":
                parts.pop()
            elif not rooted:
                parts.append("..")
            continue
        parts.append(part)
    joined = "/".join(parts)
    if rooted:
        return "/" + joined
    return joined or "."


def _base(path: str) -> str:
    """Last element of a slash-separated path."""
    if path == "":
        return "."
    path = path.rstrip("/")
    if path == "":
        return "/"
    return path.rsplit("/", 1)[-1]


def _dir(path: str) -> str:
    """All but the last element of a slash-separated path, cleaned."""
    head = path[: path.rfind("/") + 1]
    return _clean(head)


def _url_path(trimmed: str) -> str | None:
    """Path of a URL with a scheme, or None when it does not parse as one."""
    match = _SCHEME_RE.match(trimmed)
    if not match:
        return None
    if any(ord(c) < 0x20 or ord(c) == 0x7F for c in trimmed):
        return None
    rest = trimmed[match.end():]
    rest = rest.split("#", 1)[0].split("?", 1)[0]
    if not rest.startswith("/"):
        return ""
    if rest.startswith("//"):
        authority, slash, remainder = rest[2:].partition("/")
        host = authority.rsplit("@", 1)[-1]
        if not host.startswith("[") and ":" in host:
            port = host.rsplit(":", 1)[1]
            if port and not port.isdigit():
                return None
        rest = slash + remainder
    try:
        return unquote(rest, errors="strict")
    except UnicodeDecodeError:
        return None


def _repo_url_path(repo_url: str) -> str:
    trimmed = repo_url.strip().removesuffix("/")
    parsed = _url_path(trimmed)
    if parsed is not None:
        return parsed
    if ":" in trimmed:
        _, after = trimmed.split(":", 1)
        if "\\" not in after:
            return after
    return trimmed


def validate_repo_name(name: str) -> None:
    """Raise InvalidRepoNameError unless name is a single safe path element."""
    if name in ("", ".", ".."):
        raise InvalidRepoNameError(name)
    if os.sep in name or "/" in name or "\\" in name:
        raise InvalidRepoNameError(name)


def derive_repo_name(repo_url: str) -> str:
    """Checkout name for a clone URL: its last path element without .git."""
    name = _base(_repo_url_path(repo_url)).removesuffix(".git")
    validate_repo_name(name)
    return name


def derive_repo_aliases(repo_url: str) -> list[str]:
    """Aliases for a clone URL: the repo name, then owner-name when available."""
    repo_name = derive_repo_name(repo_url)
    aliases = [repo_name]
    repo_path = _repo_url_path(repo_url).removesuffix("/")
    owner = _base(_dir(repo_path))
    if owner not in ("", ".", "/"):
        owner_repo = f"{owner}-{repo_name}"
        if owner_repo != repo_name:
            try:
                validate_repo_name(owner_repo)
            except InvalidRepoNameError:
                pass
            else:
                aliases.append(owner_repo)
    return aliases


def requested_checkout(default_branch: str, requested_ref: str) -> str:
    """The requested ref if given, else the default branch."""
    return requested_ref or default_branch


def repo_path_for_name(name: str) -> str:
    """Relative checkout path for a source name."""
    return f"{name}"