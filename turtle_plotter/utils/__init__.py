"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Atomic I/O and YAML loading (fs)
    - Unified logging (logging_config)
    - G-code replay and checks (gcode_vm)

No module in utils/ may import from upper layers (gcode, configs, driver, etc.).

Convenience imports:
    from turtle_plotter.utils import fs, gcode_vm
    from turtle_plotter.utils.logging_config import setup_logging, get_logger
"""

from . import fs
from . import gcode_vm
from . import logging_config

from .logging_config import get_logger, push_context, setup_logging

__all__ = [
    'fs',
    'gcode_vm',
    'logging_config',
    'setup_logging',
    'get_logger',
    'push_context',
]
