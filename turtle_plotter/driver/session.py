"""Drawing session -- serialised access and debounced rebuilds.

The program generator is single-owner and synchronous.  A drawing
engine, on the other hand, reports segments one at a time from its own
thread and at its own pace.  :class:`DrawingSession` sits between them:

- every generator call (record, clear, configuration update, rebuild)
  runs under one ``threading.Lock``, so a rebuild never interleaves with
  a record or a clear;
- each new segment re-arms a quiet-period timer.  When no segment has
  arrived for ``debounce_s`` seconds the program is rebuilt once and
  handed to ``on_program``.  A burst of segments therefore costs one
  rebuild, not one per segment.

Cancelling the drawing upstream simply means no further
``on_draw_line`` calls; the last pending rebuild still fires.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any, Callable

from turtle_plotter.configs.loader import PlotterConfig
from turtle_plotter.gcode.generator import ProgramGenerator
from turtle_plotter.job_ir.segments import Segment

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_S = 0.4

ProgramCallback = Callable[[str], None]


class DrawingSession:
    """Thread-safe wrapper driving a :class:`ProgramGenerator`.

    Parameters
    ----------
    generator : ProgramGenerator | None
        Generator to drive; a default-configured one is created if omitted.
    debounce_s : float
        Quiet period before an automatic rebuild.
    on_program : callable, optional
        Receives the program text after every rebuild (automatic,
        :meth:`flush` or :meth:`regenerate`) and after :meth:`reset`.
    """

    def __init__(
        self,
        generator: ProgramGenerator | None = None,
        debounce_s: float = DEFAULT_DEBOUNCE_S,
        on_program: ProgramCallback | None = None,
    ) -> None:
        if debounce_s < 0:
            raise ValueError(f"debounce_s must be >= 0, got {debounce_s}")
        self._gen = generator if generator is not None else ProgramGenerator()
        self._debounce_s = debounce_s
        self._on_program = on_program
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._rebuild_count = 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def generator(self) -> ProgramGenerator:
        return self._gen

    @property
    def rebuild_count(self) -> int:
        """Number of rebuilds performed so far."""
        with self._lock:
            return self._rebuild_count

    @property
    def pending(self) -> bool:
        """True while a debounced rebuild is scheduled."""
        with self._lock:
            return self._timer is not None

    @property
    def program_text(self) -> str:
        with self._lock:
            return self._gen.get_program_text()

    # ------------------------------------------------------------------
    # Drawing engine hooks
    # ------------------------------------------------------------------

    def on_draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        """Record one segment and re-arm the rebuild timer."""
        self.record(Segment(x1, y1, x2, y2))

    def record(self, segment: Segment) -> None:
        with self._lock:
            self._gen.record(segment)
            self._arm_timer()

    def reset(self) -> None:
        """Start a new drawing: drop history and show a header-only program."""
        with self._lock:
            self._cancel_timer()
            self._gen.clear()
            self._gen.initialize()
            text = self._gen.get_program_text()
        self._publish(text)

    # ------------------------------------------------------------------
    # Explicit triggers
    # ------------------------------------------------------------------

    def flush(self) -> str:
        """Cancel any pending timer and rebuild now."""
        with self._lock:
            self._cancel_timer()
            text = self._rebuild_locked()
        self._publish(text)
        return text

    def update_configuration(self, patch: PlotterConfig | Mapping[str, Any]) -> None:
        with self._lock:
            self._gen.update_configuration(patch)

    def regenerate(self, patch: PlotterConfig | Mapping[str, Any] | None = None) -> str:
        """Apply an optional configuration patch and rebuild immediately."""
        with self._lock:
            if patch is not None:
                self._gen.update_configuration(patch)
            self._cancel_timer()
            text = self._rebuild_locked()
        self._publish(text)
        return text

    def close(self) -> None:
        """Cancel any pending rebuild."""
        with self._lock:
            self._cancel_timer()

    def __enter__(self) -> DrawingSession:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _arm_timer(self) -> None:
        self._cancel_timer()
        timer = threading.Timer(self._debounce_s, self._on_timer)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        with self._lock:
            if self._timer is not threading.current_thread():
                # Superseded by a newer segment or cancelled.
                return
            self._timer = None
            text = self._rebuild_locked()
        self._publish(text)

    def _rebuild_locked(self) -> str:
        text = self._gen.rebuild()
        self._rebuild_count += 1
        logger.debug(
            "Session rebuild #%d (%d segments)",
            self._rebuild_count, len(self._gen.segments),
        )
        return text

    def _publish(self, text: str) -> None:
        if self._on_program is not None:
            self._on_program(text)
