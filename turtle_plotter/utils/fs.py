"""Atomic filesystem operations and YAML handling.

Provides:
    - Atomic writes: tmp file → fsync → rename (prevents partial reads)
    - YAML load with safe_load
    - Directory creation with exist_ok semantics

A program written while a viewer (or the controller's file watcher) is
polling the output directory is never observed half-written.

All paths use pathlib.Path for cross-platform compatibility.

Usage:
    from turtle_plotter.utils import fs
    fs.atomic_write_text(out_dir / "drawing.gcode", program_text)
    settings = fs.load_yaml("plotter.yaml")
"""

import os
from pathlib import Path
from typing import Any, Union

import yaml


def ensure_dir(p: Union[str, Path]) -> Path:
    """Create directory if it doesn't exist, return Path object.

    Parameters
    ----------
    p : Union[str, Path]
        Directory path

    Returns
    -------
    Path
        Path object (guaranteed to exist)
    """
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def atomic_write_bytes(
    path: Union[str, Path],
    data: bytes,
    tmp_suffix: str = ".tmp"
) -> None:
    """Write bytes to file atomically (tmp → fsync → rename).

    Parameters
    ----------
    path : Union[str, Path]
        Target file path
    data : bytes
        Data to write
    tmp_suffix : str
        Temporary file suffix, default ".tmp"

    Notes
    -----
    Uses same directory for tmp file to ensure atomic rename on same filesystem.
    """
    path = Path(path)
    ensure_dir(path.parent)

    tmp_path = path.with_suffix(path.suffix + tmp_suffix)

    try:
        with open(tmp_path, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        # Atomic rename (overwrites existing file on POSIX)
        tmp_path.replace(path)
    except OSError as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to write {path} atomically: {e}") from e


def atomic_write_text(
    path: Union[str, Path],
    text: str,
    encoding: str = "utf-8"
) -> None:
    """Write text to file atomically.

    Convenience wrapper around atomic_write_bytes.
    """
    atomic_write_bytes(path, text.encode(encoding))


def load_yaml(path: Union[str, Path]) -> Any:
    """Load YAML file safely.

    Parameters
    ----------
    path : Union[str, Path]
        YAML file path (JSON files parse too)

    Returns
    -------
    Any
        Parsed YAML content (``None`` for an empty file)

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    yaml.YAMLError
        If YAML parsing fails
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e
