"""Offline G-code replay for dry-run validation.

Provides:
    - Dry-run execution: replay a generated program without hardware
    - Bounds: min/max X and Y reached by any motion
    - Pen bookkeeping: toggle counts, redundant toggles, draws with pen up
    - Time estimation: constant-velocity model from feeds and distances

Used by:
    - CLI ``--check``: validate a program before sending it to a plotter
    - Tests: check the grounding, pen-minimality and scale properties of
      generated programs by parsing them back

Pen commands are opaque configured strings, so the VM is told which
command lifts and which lowers the pen.  A line whose code part (text
before ``;``) equals one of them is a pen toggle.

Public API:
    vm = ProgramVM(pen_up="M5", pen_down="M3")
    vm.load_string(program_text)
    result = vm.run()  # → {bounds, pen_downs, pen_ups, violations, ...}

Usage:
    from turtle_plotter.utils import gcode_vm

    result = gcode_vm.check_program(text, config)
    print(f"Estimated time: {result['time_estimate_s']:.1f}s")
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
import re
import logging
import math

logger = logging.getLogger(__name__)

_NUMBER = r'[-+]?(?:\d+(?:\.\d*)?|\.\d+)'


# ============================================================================
# PROGRAM VM
# ============================================================================

class ProgramVM:
    """Offline G-code virtual machine for generated plotter programs.

    Parameters
    ----------
    pen_up : str
        Command that lifts the pen, default "M5"
    pen_down : str
        Command that lowers the pen, default "M3"
    rapid_mm_min : float
        Travel speed assumed for G0 moves (mm/min), default 6000
    pen_time_s : float
        Time per pen up/down operation (seconds), default 0.2

    Attributes
    ----------
    pos : Tuple[float, float]
        Current position (X, Y) in output units
    pen_is_down : bool
        Current pen state
    feed : float
        Current modal feed rate (mm/min)
    violations : List[str]
        Accumulated problems (redundant toggles, draws with pen up)
    """

    def __init__(
        self,
        pen_up: str = "M5",
        pen_down: str = "M3",
        rapid_mm_min: float = 6000.0,
        pen_time_s: float = 0.2,
    ):
        self.pen_up = pen_up.strip()
        self.pen_down = pen_down.strip()
        self.rapid_mm_min = rapid_mm_min
        self.pen_time_s = pen_time_s

        self.gcode_lines: List[str] = []
        self.reset()

    def load_file(self, path: Union[str, Path]) -> None:
        """Load G-code file for execution.

        Raises
        ------
        FileNotFoundError
            If file doesn't exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"G-code file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            self.gcode_lines = f.read().splitlines()

        logger.info("Loaded %d G-code lines from %s", len(self.gcode_lines), path)

    def load_string(self, gcode: str) -> None:
        """Load G-code from string."""
        self.gcode_lines = gcode.splitlines()
        logger.debug("Loaded %d G-code lines from string", len(self.gcode_lines))

    def reset(self) -> None:
        """Reset VM state to the origin with the pen up."""
        self.pos: Tuple[float, float] = (0.0, 0.0)
        self.pen_is_down = False
        self.feed = 0.0
        self.absolute_mode = True

        self.violations: List[str] = []
        self.pen_downs = 0
        self.pen_ups = 0
        self.rapid_count = 0
        self.draw_count = 0
        self.draw_distance = 0.0
        self.travel_distance = 0.0
        self.total_time = 0.0
        self.min_x = self.min_y = math.inf
        self.max_x = self.max_y = -math.inf
        self.draw_paths: List[List[Tuple[float, float]]] = []

    def parse_coordinates(self, line: str) -> Dict[str, float]:
        """Parse X, Y, F words from a G-code line.

        Accepts numbers like X.5 (leading decimal point).
        """
        coords = {}
        for axis in ['X', 'Y', 'F']:
            match = re.search(rf'{axis}\s*({_NUMBER})', line, re.IGNORECASE)
            if match:
                coords[axis] = float(match.group(1))
        return coords

    def execute_line(self, line: str, line_idx: Optional[int] = None) -> None:
        """Execute a single G-code line.

        Updates position, pen state, bounds and the time estimate.
        """
        code = line.split(';', 1)[0].strip()
        if not code:
            return
        where = f"line {line_idx + 1}" if line_idx is not None else f"'{line.strip()}'"

        if code == self.pen_down:
            if self.pen_is_down:
                self._violation(f"Redundant pen down at {where}")
            self.pen_is_down = True
            self.pen_downs += 1
            self.total_time += self.pen_time_s
            self.draw_paths.append([self.pos])
            return

        if code == self.pen_up:
            if not self.pen_is_down:
                self._violation(f"Redundant pen up at {where}")
            self.pen_is_down = False
            self.pen_ups += 1
            self.total_time += self.pen_time_s
            return

        upper = code.upper()
        # Use regex to avoid misclassifying G10 as G1
        is_g0 = bool(re.match(r'^(?:G0|G00)\b', upper))
        is_g1 = bool(re.match(r'^(?:G1|G01)\b', upper))

        if is_g0 or is_g1:
            coords = self.parse_coordinates(code)
            if 'F' in coords:
                self.feed = coords['F']

            if self.absolute_mode:
                new_pos = (coords.get('X', self.pos[0]), coords.get('Y', self.pos[1]))
            else:
                new_pos = (
                    self.pos[0] + coords.get('X', 0.0),
                    self.pos[1] + coords.get('Y', 0.0),
                )
            dist = math.dist(self.pos, new_pos)

            if is_g1:
                if not self.pen_is_down:
                    self._violation(f"G1 with pen up at {where}")
                self.draw_count += 1
                self.draw_distance += dist
                if self.feed > 0:
                    self.total_time += dist / (self.feed / 60.0)
                if self.draw_paths:
                    self.draw_paths[-1].append(new_pos)
            else:
                if self.pen_is_down and dist > 0:
                    self._violation(f"G0 travel with pen down at {where}")
                self.rapid_count += 1
                self.travel_distance += dist
                self.total_time += dist / (self.rapid_mm_min / 60.0)

            self.pos = new_pos
            self._track_bounds(new_pos)

        elif upper.startswith('G90'):
            self.absolute_mode = True

        elif upper.startswith('G91'):
            self.absolute_mode = False

        # Everything else (G21, start/end commands) does not move the tool

    def run(self) -> Dict[str, Any]:
        """Execute loaded G-code and return results.

        Returns
        -------
        Dict[str, Any]
            Results dictionary with keys:
                - bounds: (min_x, min_y, max_x, max_y) or None without motion
                - pen_downs / pen_ups: toggle counts
                - rapid_count / draw_count: G0 / G1 counts
                - draw_distance / travel_distance: path lengths
                - time_estimate_s: estimated run time
                - ends_pen_up: pen state after the last line
                - final_pos: (X, Y) after the last line
                - violations: List[str]

        Raises
        ------
        RuntimeError
            If no G-code loaded
        """
        if not self.gcode_lines:
            raise RuntimeError("No G-code loaded, call load_file() or load_string() first")

        self.reset()
        for i, line in enumerate(self.gcode_lines):
            self.execute_line(line, line_idx=i)

        if self.pen_is_down:
            self._violation("Program ends with the pen down")

        logger.debug(
            "VM execution complete: %d draws, %d rapids, %.1fs estimated",
            self.draw_count, self.rapid_count, self.total_time,
        )

        bounds = None
        if self.min_x <= self.max_x:
            bounds = (self.min_x, self.min_y, self.max_x, self.max_y)

        return {
            'bounds': bounds,
            'pen_downs': self.pen_downs,
            'pen_ups': self.pen_ups,
            'rapid_count': self.rapid_count,
            'draw_count': self.draw_count,
            'draw_distance': self.draw_distance,
            'travel_distance': self.travel_distance,
            'time_estimate_s': self.total_time,
            'ends_pen_up': not self.pen_is_down,
            'final_pos': self.pos,
            'violations': list(self.violations),
        }

    def _track_bounds(self, pos: Tuple[float, float]) -> None:
        x, y = pos
        self.min_x = min(self.min_x, x)
        self.max_x = max(self.max_x, x)
        self.min_y = min(self.min_y, y)
        self.max_y = max(self.max_y, y)

    def _violation(self, msg: str) -> None:
        self.violations.append(msg)
        logger.warning(msg)


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def check_program(gcode: str, config: Any, rapid_mm_min: float = 6000.0) -> Dict[str, Any]:
    """Replay *gcode* with the pen commands of *config* (a ``PlotterConfig``).

    Returns
    -------
    Dict[str, Any]
        VM execution results (see ProgramVM.run())
    """
    vm = ProgramVM(config.pen_up, config.pen_down, rapid_mm_min=rapid_mm_min)
    vm.load_string(gcode)
    return vm.run()
