"""All-or-nothing file writes.

Rules:
- every file is rendered in memory by the caller before anything touches disk
- content goes to a temp file in the target directory, then `os.replace`
- if any step fails, files already swapped in get their old bytes back and
  temp files are removed
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Mapping

from core.errors import FilesystemError

logger = logging.getLogger(__name__)


def _read_bytes(path: Path) -> bytes | None:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None


def _write_temp(path: Path, data: bytes) -> Path:
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return Path(tmp_name)


def write_files_atomically(files: Mapping[Path, str], *, operation: str) -> list[Path]:
    """Write UTF-8 text files as one unit.

    Returns the paths whose bytes were already identical (left untouched).
    Raises `FilesystemError` on any failure; disk state is then unchanged.
    """

    payloads = {path: text.encode("utf-8") for path, text in files.items()}
    try:
        previous = {path: _read_bytes(path) for path in payloads}
    except OSError as exc:
        raise FilesystemError(f"cannot read {exc.filename}: {exc.strerror}", operation=operation) from exc
    unchanged = [path for path, data in payloads.items() if previous[path] == data]
    pending = {path: data for path, data in payloads.items() if path not in unchanged}

    temps: dict[Path, Path] = {}
    swapped: list[Path] = []
    try:
        for path, data in pending.items():
            path.parent.mkdir(parents=True, exist_ok=True)
            temps[path] = _write_temp(path, data)
        for path, tmp in temps.items():
            os.replace(tmp, path)
            swapped.append(path)
    except OSError as exc:
        for path in swapped:
            old = previous[path]
            try:
                if old is None:
                    path.unlink(missing_ok=True)
                else:
                    path.write_bytes(old)
            except OSError as restore_exc:
                logger.error("could not restore %s: %s", path, restore_exc)
        raise FilesystemError(f"write failed: {exc}", operation=operation) from exc
    finally:
        for path, tmp in temps.items():
            if path not in swapped:
                tmp.unlink(missing_ok=True)

    return unchanged
