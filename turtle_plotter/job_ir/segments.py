"""Segments -- the vocabulary between a drawing and the program generator.

A *segment* is one straight pen-down stroke reported by the drawing
engine, in **drawing space**: turtle coordinates spanning roughly
-100..100 on each axis with +Y pointing down.  Segments are immutable
and are kept in arrival order by a :class:`SegmentStore`, the single
source of truth every program rebuild starts from.

Segment files
-------------
:func:`load_segments` reads YAML or JSON files holding either a list of
entries or a mapping with a ``segments`` key.  Each entry is
``[x1, y1, x2, y2]`` or ``{x1: .., y1: .., x2: .., y2: ..}``.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from numbers import Real
from pathlib import Path
from typing import Any

import yaml

from turtle_plotter.utils.fs import load_yaml

_KEYS = ("x1", "y1", "x2", "y2")


class SegmentFormatError(ValueError):
    """Raised when a segment entry is not four real numbers."""

    pass


# ---------------------------------------------------------------------------
# Value type
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Segment:
    """Straight line from ``(x1, y1)`` to ``(x2, y2)`` in drawing space."""

    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def start(self) -> tuple[float, float]:
        return (self.x1, self.y1)

    @property
    def end(self) -> tuple[float, float]:
        return (self.x2, self.y2)

    @property
    def length(self) -> float:
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)

    @classmethod
    def from_entry(cls, entry: Any) -> Segment:
        """Build a segment from a 4-sequence or an ``x1..y2`` mapping.

        Raises
        ------
        SegmentFormatError
            If *entry* does not hold exactly four real numbers.
        """
        if isinstance(entry, Mapping):
            missing = [k for k in _KEYS if k not in entry]
            if missing:
                raise SegmentFormatError(
                    f"segment mapping is missing {', '.join(missing)}: {entry!r}"
                )
            values = [entry[k] for k in _KEYS]
        elif isinstance(entry, Sequence) and not isinstance(entry, str):
            if len(entry) != 4:
                raise SegmentFormatError(
                    f"segment needs 4 values [x1, y1, x2, y2], got {len(entry)}"
                )
            values = list(entry)
        else:
            raise SegmentFormatError(f"unsupported segment entry: {entry!r}")

        for v in values:
            if isinstance(v, bool) or not isinstance(v, Real):
                raise SegmentFormatError(f"segment coordinate must be a number, got {v!r}")
        return cls(*(float(v) for v in values))


# ---------------------------------------------------------------------------
# Command store
# ---------------------------------------------------------------------------


class SegmentStore:
    """Ordered, append-only history of recorded segments.

    ``record`` never fails, drops or merges a segment; the only way to
    remove segments is :meth:`clear`, which empties the whole history.
    """

    def __init__(self, segments: Sequence[Segment] = ()) -> None:
        self._segments: list[Segment] = list(segments)

    def record(self, segment: Segment) -> None:
        self._segments.append(segment)

    def clear(self) -> None:
        self._segments.clear()

    def snapshot(self) -> tuple[Segment, ...]:
        """Immutable view of the history at this instant."""
        return tuple(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def __bool__(self) -> bool:
        return bool(self._segments)


# ---------------------------------------------------------------------------
# Segment files
# ---------------------------------------------------------------------------


def load_segments(path: str | Path) -> list[Segment]:
    """Load a segment list from a YAML or JSON file.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    SegmentFormatError
        If the file content is not a list of segment entries.
    """
    try:
        data = load_yaml(path)
    except yaml.YAMLError as exc:
        raise SegmentFormatError(str(exc)) from exc
    if data is None:
        return []
    if isinstance(data, Mapping):
        if "segments" not in data:
            raise SegmentFormatError(f"{path}: mapping has no 'segments' key")
        data = data["segments"] or []
    if not isinstance(data, list):
        raise SegmentFormatError(
            f"{path}: expected a list of segments, got {type(data).__name__}"
        )

    segments = []
    for i, entry in enumerate(data):
        try:
            segments.append(Segment.from_entry(entry))
        except SegmentFormatError as exc:
            raise SegmentFormatError(f"{path}: entry {i}: {exc}") from exc
    return segments
