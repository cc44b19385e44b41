"""Program export -- write an assembled program to disk.

Programs are written atomically so a controller watching the output
directory never picks up a half-written file.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from turtle_plotter.utils.fs import atomic_write_text

logger = logging.getLogger(__name__)


def default_program_filename(now: datetime | None = None) -> str:
    """Timestamped file name, e.g. ``turtletoy-2026-10-18T13-45-12.gcode``."""
    now = now or datetime.now()
    return f"turtletoy-{now.strftime('%Y-%m-%dT%H-%M-%S')}.gcode"


def export_program(text: str, path: str | Path) -> Path:
    """Write *text* to *path* with a trailing newline.

    Raises
    ------
    ValueError
        If the program is empty (drawing not finished or never rebuilt).
    """
    if not text or not text.strip():
        raise ValueError("G-code program is empty; wait for the drawing to finish")
    path = Path(path)
    atomic_write_text(path, text if text.endswith("\n") else text + "\n")
    logger.info("Wrote G-code to %s (%d bytes)", path, len(text))
    return path
