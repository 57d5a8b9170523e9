"""Filesystem helpers for rewriting project files."""

from __future__ import annotations

import json
import os
import stat
import tempfile
from pathlib import Path

__all__ = ["replace_text", "write_json"]

NEW_FILE_MODE = 0o644


def replace_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Swap in new content for path via a sibling temp file.

    Readers never see a half-written file. An existing file keeps its
    permission bits; a new one gets NEW_FILE_MODE.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = stat.S_IMODE(path.stat().st_mode) if path.exists() else NEW_FILE_MODE

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        # mkstemp creates 0600
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    finally:
        tmp.unlink(missing_ok=True)


def write_json(path: Path, data: object, *, indent: int = 2) -> None:
    """Write data the way npm does: indented, non-ASCII kept, trailing newline."""
    replace_text(path, json.dumps(data, indent=indent, ensure_ascii=False) + "\n")
