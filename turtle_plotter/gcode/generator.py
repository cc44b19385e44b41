"""G-code generator -- recorded segments to a plotter program.

The generator owns the segment history and rebuilds the complete
program from it on every :meth:`ProgramGenerator.rebuild` call.  A
rebuild is a pure function of ``(history, configuration)``: the
normalising transform is derived from the whole history first, then
every segment is emitted in recorded order while a single
:class:`EmissionState` tracks the tool position and pen state.

Program layout::

    G21 ; Set units to millimeters
    G90 ; Absolute positioning
    <start> ;

    <body>

    G0 X0 Y0 ; Return to origin
    <end> ; End program

Pen state machine:
    The pen is lifted only when a travel move is needed and lowered only
    right before a ``G1``.  A toggle is emitted only when the required
    state differs from the current one, so chained segments (start within
    ``POSITION_TOLERANCE`` of the current position) draw as one
    continuous pen-down path.

The generator is not thread-safe; see ``turtle_plotter.driver.session``
for serialised access and debounced rebuilds.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from turtle_plotter.configs.loader import PlotterConfig
from turtle_plotter.gcode.normalizer import Transform, bounding_box, compute_transform
from turtle_plotter.job_ir.segments import Segment, SegmentStore

logger = logging.getLogger(__name__)

POSITION_TOLERANCE = 0.01
"""Output-space distance below which no travel move is emitted."""

EMPTY_PROGRAM_COMMENT = "; No drawing commands recorded"


class GCodeError(Exception):
    """Raised when a program cannot be generated from the recorded history."""

    pass


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _coord(value: float) -> str:
    """Format an output coordinate with 3 decimals (never ``-0.000``)."""
    text = f"{value:.3f}"
    return "0.000" if text == "-0.000" else text


def _header(config: PlotterConfig) -> list[str]:
    return [
        "G21 ; Set units to millimeters",
        "G90 ; Absolute positioning",
        f"{config.start} ;",
        "",
    ]


def _closing(config: PlotterConfig) -> list[str]:
    return [
        "",
        "G0 X0 Y0 ; Return to origin",
        f"{config.end} ; End program",
    ]


@dataclass
class EmissionState:
    """Tool position and pen state threaded through one rebuild."""

    current_x: float = 0.0
    current_y: float = 0.0
    pen_is_down: bool = False

    def reset(self) -> None:
        self.current_x = 0.0
        self.current_y = 0.0
        self.pen_is_down = False


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class ProgramGenerator:
    """Accumulate segments and compile them into a G-code program.

    Parameters
    ----------
    config : PlotterConfig | Mapping | None
        Initial configuration.  A mapping is validated with
        :meth:`PlotterConfig.from_mapping`; ``None`` uses the defaults.

    Notes
    -----
    ``get_program_text()`` returns the program assembled by the last
    ``rebuild()`` / ``initialize()``; it never rebuilds on its own.
    """

    def __init__(self, config: PlotterConfig | Mapping[str, Any] | None = None) -> None:
        if config is None:
            config = PlotterConfig()
        elif not isinstance(config, PlotterConfig):
            config = PlotterConfig.from_mapping(config)
        self._cfg: PlotterConfig = config
        self._store = SegmentStore()
        self._state = EmissionState()
        self._lines: list[str] = []
        self.initialize()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> PlotterConfig:
        return self._cfg

    @property
    def segments(self) -> tuple[Segment, ...]:
        return self._store.snapshot()

    @property
    def state(self) -> EmissionState:
        return self._state

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self._lines)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def record(self, segment: Segment) -> None:
        """Append *segment* to the history (the program is not rebuilt)."""
        self._store.record(segment)

    def add_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        """Record a segment given as drawing-engine callback arguments."""
        self._store.record(Segment(x1, y1, x2, y2))

    def clear(self) -> None:
        """Drop the whole history, the emission state and the program text."""
        self._store.clear()
        self._state.reset()
        self._lines = []

    def initialize(self) -> None:
        """Show a header-only program (drawing started, nothing rebuilt yet)."""
        self._state.reset()
        self._lines = _header(self._cfg)

    def update_configuration(self, patch: PlotterConfig | Mapping[str, Any]) -> None:
        """Replace the configuration or merge-patch it field by field.

        The program text is left as it is until the next rebuild.

        Raises
        ------
        InvalidConfigurationError
            If the patched configuration fails validation; the previous
            configuration stays active.
        """
        if isinstance(patch, PlotterConfig):
            new_cfg = patch
        else:
            new_cfg = self._cfg.merged(patch)
        if new_cfg != self._cfg:
            logger.info("Configuration updated: %s", new_cfg.model_dump())
        self._cfg = new_cfg

    def rebuild(self) -> str:
        """Recompute the complete program from the recorded history.

        Returns
        -------
        str
            The new program text (also available via ``get_program_text``).
        """
        cfg = self._cfg
        segments = self._store.snapshot()
        self._state.reset()
        lines = _header(cfg)

        if not segments:
            lines.append(EMPTY_PROGRAM_COMMENT)
            lines.extend(_closing(cfg))
            self._lines = lines
            logger.debug("Rebuilt empty program")
            return self.get_program_text()

        transform = compute_transform(segments, cfg.scale_percent)
        for seg in segments:
            self._emit_segment(seg, transform, lines)

        if self._state.pen_is_down:
            lines.append(f"{cfg.pen_up} ; Pen up")
            self._state.pen_is_down = False
        lines.extend(_closing(cfg))

        self._lines = lines
        if logger.isEnabledFor(logging.DEBUG):
            min_x, min_y, max_x, max_y = bounding_box(segments)
            logger.debug(
                "Rebuilt program: %d segments, %d lines, extent "
                "x=[%.3f, %.3f] y=[%.3f, %.3f], scale=%.3f",
                len(segments), len(lines), min_x, max_x, min_y, max_y,
                transform.scale,
            )
        return self.get_program_text()

    def finalize(self) -> str:
        """Rebuild once drawing has finished."""
        return self.rebuild()

    def get_program_text(self) -> str:
        """Current program, newline separated (no trailing newline)."""
        return "\n".join(self._lines)

    # ------------------------------------------------------------------
    # Motion emitter
    # ------------------------------------------------------------------

    def _emit_segment(self, seg: Segment, transform: Transform, lines: list[str]) -> None:
        cfg = self._cfg
        st = self._state
        gx1, gy1 = transform.apply(seg.x1, seg.y1)
        gx2, gy2 = transform.apply(seg.x2, seg.y2)
        for v in (gx1, gy1, gx2, gy2):
            if not math.isfinite(v):
                raise GCodeError(f"Non-finite output coordinate for segment {seg}")

        if (
            abs(gx1 - st.current_x) > POSITION_TOLERANCE
            or abs(gy1 - st.current_y) > POSITION_TOLERANCE
        ):
            if st.pen_is_down:
                lines.append(f"{cfg.pen_up} ; Pen up")
                st.pen_is_down = False
            lines.append(f"G0 X{_coord(gx1)} Y{_coord(gy1)} ;")
            st.current_x = gx1
            st.current_y = gy1

        if not st.pen_is_down:
            lines.append(f"{cfg.pen_down} ; Pen down")
            st.pen_is_down = True
        lines.append(f"G1 X{_coord(gx2)} Y{_coord(gy2)} F{cfg.feed_rate} ;")
        st.current_x = gx2
        st.current_y = gy2
