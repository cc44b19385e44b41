"""
Turtle Plotter Package.

Compiles line segments recorded from turtle-graphics drawings into G-code
programs for pen plotters and CNC machines.  Programs are rebuilt from the
full segment history on every request so that the bounding-box
normalisation stays correct as new segments arrive.

Subpackages:
    job_ir: Segment value type and the segment store
    gcode: Bounding-box normalisation and program generation
    configs: Plotter configuration loading and validation
    drawing: Turtle segment producer and built-in patterns
    driver: Serialised, debounced drawing session
    utils: Logging, filesystem helpers, program parse-back VM
"""

__version__ = "0.1.0"

__all__ = ["job_ir", "gcode", "configs", "drawing", "driver", "utils"]
