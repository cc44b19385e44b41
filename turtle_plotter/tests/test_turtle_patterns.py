"""Tests for the turtle segment producer and the built-in patterns."""

from __future__ import annotations

import pytest

from turtle_plotter.drawing import patterns
from turtle_plotter.drawing.turtle import Turtle
from turtle_plotter.gcode.generator import ProgramGenerator
from turtle_plotter.job_ir.segments import Segment


# ---------------------------------------------------------------------------
# Turtle
# ---------------------------------------------------------------------------


class TestTurtle:
    def test_forward_along_x(self) -> None:
        t = Turtle()
        t.forward(10)
        assert t.segments == [Segment(0.0, 0.0, 10.0, 0.0)]

    def test_right_turns_towards_positive_y(self) -> None:
        t = Turtle()
        t.right(90)
        t.forward(10)
        seg = t.segments[0]
        assert seg.x2 == pytest.approx(0.0, abs=1e-9)
        assert seg.y2 == pytest.approx(10.0)

    def test_left_is_opposite_of_right(self) -> None:
        t = Turtle()
        t.left(90)
        assert t.heading == 270.0
        t.right(180)
        assert t.heading == 90.0

    def test_pen_up_moves_do_not_draw(self) -> None:
        t = Turtle()
        t.penup()
        t.forward(10)
        t.goto(5, 5)
        assert t.segments == []
        assert (t.x, t.y) == (5.0, 5.0)

    def test_jump_keeps_pen_state(self) -> None:
        t = Turtle()
        t.jump(20, 20)
        assert t.is_down
        assert t.segments == []
        t.forward(1)
        assert t.segments == [Segment(20.0, 20.0, 21.0, 20.0)]

    def test_backward(self) -> None:
        t = Turtle(5, 5)
        t.backward(5)
        assert t.segments == [Segment(5.0, 5.0, 0.0, 5.0)]

    def test_home_resets_heading(self) -> None:
        t = Turtle()
        t.setheading(45)
        t.penup()
        t.forward(10)
        t.home()
        assert (t.x, t.y, t.heading) == (0.0, 0.0, 0.0)

    def test_callback_receives_segments(self) -> None:
        seen = []
        t = Turtle(on_draw_line=lambda *args: seen.append(args))
        t.goto(10, 0)
        t.goto(10, 10)
        assert seen == [(0.0, 0.0, 10.0, 0.0), (10.0, 0.0, 10.0, 10.0)]
        assert t.segments == []

    def test_drives_generator(self) -> None:
        gen = ProgramGenerator()
        t = Turtle(on_draw_line=gen.add_line)
        t.forward(10)
        assert gen.segments == (Segment(0.0, 0.0, 10.0, 0.0),)

    def test_full_circle_closes(self) -> None:
        t = Turtle()
        t.circle(50)
        first, last = t.segments[0], t.segments[-1]
        assert last.x2 == pytest.approx(first.x1, abs=1e-6)
        assert last.y2 == pytest.approx(first.y1, abs=1e-6)
        assert t.heading == pytest.approx(0.0, abs=1e-6) or t.heading == pytest.approx(360.0)

    def test_circle_explicit_steps(self) -> None:
        t = Turtle()
        t.circle(30, extent=180, steps=6)
        assert len(t.segments) == 6


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------


def _is_chained(segs: list[Segment]) -> bool:
    return all(
        a.x2 == pytest.approx(b.x1) and a.y2 == pytest.approx(b.y1)
        for a, b in zip(segs, segs[1:])
    )


class TestPatterns:
    def test_square(self) -> None:
        segs = patterns.square()
        assert len(segs) == 4
        assert _is_chained(segs)
        assert segs[-1].x2 == pytest.approx(segs[0].x1, abs=1e-9)
        assert segs[-1].y2 == pytest.approx(segs[0].y1, abs=1e-9)
        assert all(s.length == pytest.approx(100.0) for s in segs)

    def test_polygon_sides(self) -> None:
        assert len(patterns.polygon(7)) == 7

    def test_polygon_needs_three_sides(self) -> None:
        with pytest.raises(ValueError):
            patterns.polygon(2)

    def test_star_is_one_stroke(self) -> None:
        segs = patterns.star()
        assert len(segs) == 5
        assert _is_chained(segs)

    @pytest.mark.parametrize("points", [4, 3])
    def test_star_rejects_bad_points(self, points: int) -> None:
        with pytest.raises(ValueError):
            patterns.star(points)

    def test_spiral_grows(self) -> None:
        segs = patterns.spiral(turns=10, step=2)
        assert len(segs) == 10
        assert segs[-1].length == pytest.approx(20.0)

    def test_grid_lines_are_disjoint(self) -> None:
        segs = patterns.grid(lines=3, size=100)
        assert len(segs) == 6
        assert not _is_chained(segs)

    def test_grid_needs_two_lines(self) -> None:
        with pytest.raises(ValueError):
            patterns.grid(lines=1)

    def test_circle(self) -> None:
        segs = patterns.circle(radius=60)
        assert len(segs) == 22
        assert _is_chained(segs)

    def test_pattern_map(self) -> None:
        assert set(patterns.PATTERN_MAP) == {
            "square", "polygon", "star", "spiral", "grid", "circle",
        }
        for factory in patterns.PATTERN_MAP.values():
            assert factory()
