"""Locking and all-or-nothing replacement of the output directory.

A build writes its whole tree into a staging directory beside ``out_dir``
and swaps it in only after every file was written. Lock files live beside
``out_dir`` as well, so nothing but artifacts is ever published.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Iterable

import portalocker

logger = logging.getLogger(__name__)


def lock_path_for(out_dir: Path) -> Path:
    """Lock file guarding ``out_dir``: ``<parent>/.<name>.lock``."""
    out_dir = Path(out_dir)
    return out_dir.parent / f".{out_dir.name}.lock"


@contextmanager
def output_lock(out_dir: Path, timeout: float = 10.0) -> Generator[None, None, None]:
    """Hold an exclusive lock on an output directory.

    Raises:
        portalocker.LockException: If the lock cannot be acquired in time
    """
    lock_path = lock_path_for(out_dir)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with portalocker.Lock(lock_path, timeout=timeout):
        yield


@contextmanager
def atomic_write(path: Path, mode: str = "w", encoding: str = "utf-8") -> Generator:
    """Write one file through a uniquely named temporary in the same directory."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)

    try:
        if "b" in mode:
            with os.fdopen(fd, mode) as f:
                yield f
        else:
            with os.fdopen(fd, mode, encoding=encoding) as f:
                yield f
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def _swap_in(staging: Path, out_dir: Path) -> None:
    if not out_dir.exists():
        os.replace(staging, out_dir)
        return

    backup = Path(tempfile.mkdtemp(dir=out_dir.parent, prefix=f".{out_dir.name}-old-"))
    backup.rmdir()
    os.replace(out_dir, backup)
    try:
        os.replace(staging, out_dir)
    except OSError:
        os.replace(backup, out_dir)
        raise
    shutil.rmtree(backup, ignore_errors=True)


@contextmanager
def staged_directory(
    out_dir: Path,
    keep: Iterable[str] = (),
    timeout: float = 10.0,
) -> Generator[Path, None, None]:
    """Yield an empty staging directory that replaces ``out_dir`` on success.

    The old ``out_dir`` stays untouched if the body raises. Files named in
    ``keep`` are carried over from the old directory unless the body wrote
    its own.

    Args:
        out_dir: Directory to replace
        keep: Relative paths to copy from the previous output
        timeout: Seconds to wait for the output lock
    """
    out_dir = Path(out_dir)
    if out_dir.exists() and not out_dir.is_dir():
        raise NotADirectoryError(f"Output path is not a directory: {out_dir}")
    out_dir.parent.mkdir(parents=True, exist_ok=True)

    with output_lock(out_dir, timeout=timeout):
        staging = Path(tempfile.mkdtemp(dir=out_dir.parent, prefix=f".{out_dir.name}-new-"))
        os.chmod(staging, 0o755)
        try:
            yield staging
            for relative in keep:
                old, new = out_dir / relative, staging / relative
                if old.is_file() and not new.exists():
                    new.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(old, new)
            _swap_in(staging, out_dir)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise
    logger.debug("Replaced %s", out_dir)
