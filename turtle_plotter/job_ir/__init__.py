"""
Segment module.

Defines the immutable segment value type recorded from drawings, the
append-only store that holds them, and segment file loading.

All coordinates are in drawing space (turtle units, +Y down).
"""

from turtle_plotter.job_ir.segments import (
    Segment,
    SegmentFormatError,
    SegmentStore,
    load_segments,
)

__all__ = [
    "Segment",
    "SegmentFormatError",
    "SegmentStore",
    "load_segments",
]
