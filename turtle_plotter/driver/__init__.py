"""
Driver module.

Serialised, debounced drawing session around the program generator.
"""

from turtle_plotter.driver.session import DEFAULT_DEBOUNCE_S, DrawingSession

__all__ = ["DEFAULT_DEBOUNCE_S", "DrawingSession"]
