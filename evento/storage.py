"""Local file cache helpers: size reporting, lookup and writing downloaded data."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

_KIB = 1024
_MIB = 1024 * 1024
_GIB = 1024 * 1024 * 1024

PathLike = Union[str, "os.PathLike[str]"]


def format_size(size: int) -> str:
    """Format a byte count as B, KiB, MiB or GiB with two decimals above bytes."""
    if size < _KIB:
        return f"{size}B"
    if size < _MIB:
        return f"{size / _KIB:.2f}KiB"
    if size < _GIB:
        return f"{size / _MIB:.2f}MiB"
    return f"{size / _GIB:.2f}GiB"


def total_cache_size_string(directory: Optional[PathLike]) -> str:
    """Return the formatted total size of the files directly inside ``directory``.

    A directory of None yields "0B".
    """
    if directory is None:
        return "0B"
    total = sum(entry.stat().st_size for entry in os.scandir(directory) if entry.is_file())
    return format_size(total)


def find_cached_file(directory: PathLike, stem: str) -> Optional[Path]:
    """Return the absolute path of a file in ``directory`` whose stem is ``stem``."""
    for entry in Path(directory).iterdir():
        if entry.stem == stem:
            return entry.absolute()
    return None


def _write(data: bytes, path: Path) -> bool:
    try:
        with open(path, "wb") as handle:
            handle.write(data)
    except OSError as exc:
        logger.warning("Failed to save file %s: %s", path, exc)
        return False
    return True


async def save_to_disk(data: Union[bytes, str], path: PathLike) -> bool:
    """Write ``data`` to ``path``, replacing its contents; return whether it succeeded."""
    payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    return await asyncio.to_thread(_write, payload, Path(path))