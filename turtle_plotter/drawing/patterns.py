"""Built-in drawings.

Each function returns a flat ``list[Segment]`` in drawing space, drawn
by a :class:`Turtle` exactly as a user script would be.  They are used
by the CLI (``--pattern``) and as fixtures for program tests.

Common parameters:

    size : float
        Overall extent in drawing units (the nominal canvas is 200 wide).
    origin : tuple[float, float]
        Where the turtle starts.
"""

from __future__ import annotations

from turtle_plotter.drawing.turtle import Turtle
from turtle_plotter.job_ir.segments import Segment


def _turtle_at(origin: tuple[float, float]) -> Turtle:
    t = Turtle()
    t.jump(*origin)
    return t


def polygon(
    sides: int = 6,
    size: float = 80.0,
    origin: tuple[float, float] = (-40.0, 40.0),
) -> list[Segment]:
    """Regular polygon with side length *size*, drawn counter-clockwise on screen."""
    if sides < 3:
        raise ValueError(f"polygon needs at least 3 sides, got {sides}")
    t = _turtle_at(origin)
    for _ in range(sides):
        t.forward(size)
        t.left(360.0 / sides)
    return t.segments


def square(
    size: float = 100.0,
    origin: tuple[float, float] = (-50.0, 50.0),
) -> list[Segment]:
    """Axis-aligned square -- verify X/Y scale and the Y flip."""
    return polygon(4, size, origin)


def star(
    points: int = 5,
    size: float = 150.0,
    origin: tuple[float, float] = (-75.0, 25.0),
) -> list[Segment]:
    """Star polygon drawn in one continuous stroke (odd *points* only)."""
    if points < 5 or points % 2 == 0:
        raise ValueError(f"star needs an odd number of points >= 5, got {points}")
    t = _turtle_at(origin)
    turn = 180.0 - 180.0 / points
    for _ in range(points):
        t.forward(size)
        t.right(turn)
    return t.segments


def spiral(
    turns: int = 40,
    step: float = 4.0,
    angle: float = 91.0,
    origin: tuple[float, float] = (0.0, 0.0),
) -> list[Segment]:
    """Square-ish spiral growing by *step* per segment."""
    t = _turtle_at(origin)
    for i in range(1, turns + 1):
        t.forward(i * step)
        t.right(angle)
    return t.segments


def grid(
    lines: int = 5,
    size: float = 160.0,
    origin: tuple[float, float] = (-80.0, -80.0),
) -> list[Segment]:
    """Grid of disjoint horizontal and vertical lines (many travel moves)."""
    if lines < 2:
        raise ValueError(f"grid needs at least 2 lines, got {lines}")
    x0, y0 = origin
    pitch = size / (lines - 1)
    t = Turtle()
    for i in range(lines):
        t.jump(x0, y0 + i * pitch)
        t.goto(x0 + size, y0 + i * pitch)
    for i in range(lines):
        t.jump(x0 + i * pitch, y0)
        t.goto(x0 + i * pitch, y0 + size)
    return t.segments


def circle(
    radius: float = 60.0,
    origin: tuple[float, float] = (0.0, 60.0),
) -> list[Segment]:
    """Chord-approximated circle whose centre is *radius* above *origin*."""
    t = _turtle_at(origin)
    t.circle(radius)
    return t.segments


PATTERN_MAP = {
    "square": square,
    "polygon": polygon,
    "star": star,
    "spiral": spiral,
    "grid": grid,
    "circle": circle,
}
