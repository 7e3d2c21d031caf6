"""Shared utility functions."""

from __future__ import annotations

import logging
import os
import re
import shutil
import sys
from pathlib import Path

from devsweep.errors import DeletionFailure

log = logging.getLogger(__name__)

_DOCKER_SIZE_RE = re.compile(r"^\s*([\d.]+)\s*([kKMGTP]?B)\s*$")
_DOCKER_UNITS = {"B": 1, "kB": 1000, "KB": 1000, "MB": 1000**2, "GB": 1000**3, "TB": 1000**4, "PB": 1000**5}


def has_command(name: str) -> bool:
    """Check if a command exists on the system."""
    return shutil.which(name) is not None


def is_macos() -> bool:
    return sys.platform == "darwin"


def xdg_cache_home() -> Path:
    """Return XDG_CACHE_HOME, defaulting to ~/.cache."""
    return Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def xdg_data_home() -> Path:
    """Return XDG_DATA_HOME, defaulting to ~/.local/share."""
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def os_cache_root() -> Path:
    """Return the per-user application cache root for this platform."""
    if is_macos():
        return Path.home() / "Library" / "Caches"
    return xdg_cache_home()


def remove_path(path: Path) -> None:
    """Remove a file or directory tree without following symlinks.

    Raises:
        DeletionFailure: If the path vanished or could not be removed.
    """
    if not path.exists() and not path.is_symlink():
        raise DeletionFailure(f"{path}: no longer exists")
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        raise DeletionFailure(f"{path}: {e.strerror or e}") from e


def bytes_to_human(size_bytes: int | None) -> str:
    """Convert byte count to a human-readable string."""
    if size_bytes is None:
        return "unknown"
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes == 0:
        return "0 B"

    units = ("B", "KB", "MB", "GB", "TB")
    value = float(size_bytes)
    for unit in units[:-1]:
        if abs(value) < 1024:
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1024
    return f"{value:.1f} {units[-1]}"


def parse_docker_size(text: str) -> int | None:
    """Parse a Docker size string such as ``72.8MB`` into bytes.

    Docker reports sizes in decimal units. Container sizes look like
    ``"0B (virtual 72.8MB)"``; only the leading writable size is used.
    Returns None for anything unparseable.
    """
    if not text:
        return None
    head = text.split("(", 1)[0]
    match = _DOCKER_SIZE_RE.match(head)
    if match is None:
        return None
    number, unit = match.groups()
    try:
        return int(round(float(number) * _DOCKER_UNITS[unit]))
    except (ValueError, KeyError):
        return None

