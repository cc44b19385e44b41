"""
Drawing module.

Turtle segment producer and built-in test drawings.
"""

from turtle_plotter.drawing.patterns import (
    PATTERN_MAP,
    circle,
    grid,
    polygon,
    spiral,
    square,
    star,
)
from turtle_plotter.drawing.turtle import Turtle

__all__ = [
    "PATTERN_MAP",
    "Turtle",
    "circle",
    "grid",
    "polygon",
    "spiral",
    "square",
    "star",
]
