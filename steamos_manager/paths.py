"""Filesystem helpers that resolve absolute paths under a movable root."""

from __future__ import annotations

import os
from pathlib import Path

_root: Path | None = None


def set_root(root: str | os.PathLike[str] | None) -> None:
    """Resolve all later absolute paths under ``root``; ``None`` restores ``/``."""
    global _root
    _root = None if root is None else Path(root)


def get_root() -> Path | None:
    """Return the current root, or ``None`` when paths resolve as given."""
    return _root


def path(p: str | os.PathLike[str]) -> Path:
    """Return ``p`` placed under the current root, if one is set."""
    if _root is None:
        return Path(p)
    return _root / os.fspath(p).lstrip("/")


def write_synced(path: str | os.PathLike[str], data: bytes | str) -> None:
    """Write ``data`` to ``path`` and flush it to stable storage."""
    if isinstance(data, str):
        data = data.encode()
    with open(path, "wb") as handle:
        handle.write(data)
        handle.flush()
        os.fsync(handle.fileno())