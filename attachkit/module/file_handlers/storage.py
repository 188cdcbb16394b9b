from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Callable, List, Optional
from uuid import uuid4

from attachkit.module.logging import LoggingInterceptor

logger = LoggingInterceptor("file_handlers_storage")


def expand_path(path: str | os.PathLike) -> str:
    """Return the absolute, user-expanded form of a path without touching the filesystem."""
    return os.path.abspath(os.path.expanduser(os.fspath(path)))


def ensure_directory(path: Path, *, mode: Optional[int] = None) -> Path:
    """Create a directory and its missing parents, applying mode to the ones created here."""
    missing: List[Path] = []
    current = path
    while not current.exists() and current != current.parent:
        missing.append(current)
        current = current.parent
    path.mkdir(parents=True, exist_ok=True)
    if mode is not None:
        for created in reversed(missing):
            os.chmod(created, mode)
            logger.info("Directory permissions applied", path=str(created), mode=oct(mode))
    return path


def ensure_parent_directory(target: Path, *, mode: Optional[int] = None) -> Path:
    return ensure_directory(target.parent, mode=mode)


def apply_permissions(path: Path, mode: Optional[int]) -> None:
    """chmod path when a mode is configured; no-op otherwise."""
    if mode is None:
        return
    os.chmod(path, mode)
    logger.info("Permissions applied", path=str(path), mode=oct(mode))


def _atomic_write(target: Path, writer: Callable[[Path], None]) -> Path:
    ensure_directory(target.parent)
    # Temp name length does not depend on the target name.
    temp_path = target.with_name(f".tmp-{uuid4().hex}")
    try:
        writer(temp_path)
        temp_path.replace(target)
    except OSError:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Temporary file cleanup failed", temp_path=str(temp_path))
        raise
    return target


def atomic_write_bytes(target: Path, content: bytes) -> Path:
    """Write bytes atomically to target path."""
    logger.info("Atomic write bytes", target=str(target), size=len(content))
    return _atomic_write(target, lambda tmp: tmp.write_bytes(content))


def atomic_copy(source: Path, target: Path) -> Path:
    """Copy a file into target atomically."""
    logger.info("Atomic copy", source=str(source), target=str(target))
    return _atomic_write(target, lambda tmp: shutil.copyfile(source, tmp))


def move_file(source: Path, target: Path) -> Path:
    """Move a file, renaming in place when source and target share a filesystem."""
    logger.info("Move file", source=str(source), target=str(target))
    shutil.move(os.fspath(source), os.fspath(target))
    return target


def remove_file(path: Path) -> None:
    logger.info("Remove file", path=str(path))
    path.unlink()


__all__ = [
    "apply_permissions",
    "atomic_copy",
    "atomic_write_bytes",
    "ensure_directory",
    "ensure_parent_directory",
    "expand_path",
    "move_file",
    "remove_file",
]
