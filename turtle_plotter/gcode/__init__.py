"""
G-code generation module.

Normalises the recorded segment history into output space and compiles
it into a complete plotter program with pen up/down transitions.
"""

from turtle_plotter.gcode.export import default_program_filename, export_program
from turtle_plotter.gcode.generator import (
    EmissionState,
    GCodeError,
    ProgramGenerator,
)
from turtle_plotter.gcode.normalizer import Transform, bounding_box, compute_transform

__all__ = [
    "EmissionState",
    "GCodeError",
    "ProgramGenerator",
    "Transform",
    "bounding_box",
    "compute_transform",
    "default_program_filename",
    "export_program",
]
