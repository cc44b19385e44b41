"""Bounding-box normaliser -- drawing space to output space.

Plotters expect non-negative work-area coordinates, so the whole drawing
is shifted until its leftmost point lands on ``X=0`` and its lowest point
(after the Y flip) lands on ``Y=0``.  The shift is computed in drawing
units over the *entire* segment history and the shifted value is then
multiplied by the scale::

    gx = (x - x_shift) * scale
    gy = (-y - y_shift) * scale

Because a later segment can extend the bounding box, any coordinate
computed before the history is complete may move.  Callers therefore
recompute the transform on every rebuild.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from turtle_plotter.job_ir.segments import Segment


@dataclass(frozen=True, slots=True)
class Transform:
    """Uniform scale plus additive shift.

    Parameters
    ----------
    scale : float
        ``scale_percent / 100``.
    x_shift : float
        Minimum drawing-space X over all endpoints.
    y_shift : float
        Minimum inverted Y (``-y``) over all endpoints.
    """

    scale: float
    x_shift: float
    y_shift: float

    def apply(self, x: float, y: float) -> tuple[float, float]:
        """Map a drawing-space point to output space (Y flipped)."""
        return (x - self.x_shift) * self.scale, (-y - self.y_shift) * self.scale


def bounding_box(segments: Iterable[Segment]) -> tuple[float, float, float, float]:
    """Drawing-space extent ``(min_x, min_y, max_x, max_y)`` of all endpoints.

    Raises
    ------
    ValueError
        If *segments* is empty.
    """
    min_x = min_y = float("inf")
    max_x = max_y = float("-inf")
    count = 0
    for seg in segments:
        count += 1
        min_x = min(min_x, seg.x1, seg.x2)
        max_x = max(max_x, seg.x1, seg.x2)
        min_y = min(min_y, seg.y1, seg.y2)
        max_y = max(max_y, seg.y1, seg.y2)
    if count == 0:
        raise ValueError("bounding box of an empty segment history is undefined")
    return min_x, min_y, max_x, max_y


def compute_transform(segments: Iterable[Segment], scale_percent: float) -> Transform:
    """Derive the normalising transform for a non-empty segment history."""
    min_x, _, _, max_y = bounding_box(segments)
    # min(-y) == -max(y)
    return Transform(scale=scale_percent / 100.0, x_shift=min_x, y_shift=-max_y)
