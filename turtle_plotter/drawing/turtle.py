"""Turtle graphics segment producer.

A small turtletoy-compatible turtle used to feed the program generator
without a script engine.  Coordinates are in drawing space: origin in
the centre, roughly -100..100 on each axis, +Y pointing **down**.  A
heading of 0 points along +X and :meth:`Turtle.right` turns clockwise
on screen (the heading grows).

Every pen-down movement is reported through ``on_draw_line(x1, y1, x2,
y2)``, the same hook the drawing engine calls, so a turtle can drive a
:class:`~turtle_plotter.gcode.generator.ProgramGenerator` or a
:class:`~turtle_plotter.driver.session.DrawingSession` directly.
"""

from __future__ import annotations

import math
from typing import Callable

from turtle_plotter.job_ir.segments import Segment

DrawLineCallback = Callable[[float, float, float, float], None]


class Turtle:
    """Turtle graphics state machine.

    Parameters
    ----------
    x, y : float
        Start position.
    on_draw_line : callable, optional
        Called with ``(x1, y1, x2, y2)`` for every pen-down move.  When
        omitted, segments are collected in :attr:`segments`.
    """

    def __init__(
        self,
        x: float = 0.0,
        y: float = 0.0,
        on_draw_line: DrawLineCallback | None = None,
    ) -> None:
        self.x = float(x)
        self.y = float(y)
        self.heading = 0.0
        self.is_down = True
        self.segments: list[Segment] = []
        self._on_draw_line = on_draw_line

    # ------------------------------------------------------------------
    # Pen
    # ------------------------------------------------------------------

    def penup(self) -> None:
        self.is_down = False

    def pendown(self) -> None:
        self.is_down = True

    # ------------------------------------------------------------------
    # Motion
    # ------------------------------------------------------------------

    def goto(self, x: float, y: float) -> None:
        """Move to ``(x, y)``, drawing if the pen is down."""
        x, y = float(x), float(y)
        if self.is_down:
            self._draw(self.x, self.y, x, y)
        self.x, self.y = x, y

    def jump(self, x: float, y: float) -> None:
        """Move to ``(x, y)`` without drawing; the pen state is kept."""
        was_down = self.is_down
        self.penup()
        self.goto(x, y)
        self.is_down = was_down

    def forward(self, distance: float) -> None:
        rad = math.radians(self.heading)
        self.goto(self.x + math.cos(rad) * distance, self.y + math.sin(rad) * distance)

    def backward(self, distance: float) -> None:
        self.forward(-distance)

    def right(self, angle: float) -> None:
        self.heading = (self.heading + angle) % 360.0

    def left(self, angle: float) -> None:
        self.heading = (self.heading - angle) % 360.0

    def setheading(self, angle: float) -> None:
        self.heading = angle % 360.0

    def home(self) -> None:
        """Go back to the origin (drawing if the pen is down), heading 0."""
        self.goto(0.0, 0.0)
        self.heading = 0.0

    def circle(self, radius: float, extent: float = 360.0, steps: int | None = None) -> None:
        """Approximate an arc with chords.

        The centre lies *radius* units to the turtle's left; a negative
        radius puts it on the right.
        """
        if steps is None:
            frac = abs(extent) / 360.0
            steps = 1 + int(min(11 + abs(radius) / 6.0, 59.0) * frac)
        w = extent / steps
        w2 = 0.5 * w
        chord = 2.0 * radius * math.sin(math.radians(w2))
        if radius < 0:
            chord, w, w2 = -chord, -w, -w2
        self.left(w2)
        for _ in range(steps):
            self.forward(chord)
            self.left(w)
        self.right(w2)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _draw(self, x1: float, y1: float, x2: float, y2: float) -> None:
        if self._on_draw_line is not None:
            self._on_draw_line(x1, y1, x2, y2)
        else:
            self.segments.append(Segment(x1, y1, x2, y2))
