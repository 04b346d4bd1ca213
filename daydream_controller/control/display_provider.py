"""Terminal display of the controller transform and recent events."""

from __future__ import annotations

import collections
import logging
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .host import EventSink, TransformSink

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DisplayFrame:
    """Latest state shown by display providers."""

    rotation_deg: tuple[float, float, float] = (0.0, 0.0, 0.0)
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    events: list[str] = field(default_factory=list)
    event_count: int = 0


def _format_detail(detail: dict[str, Any]) -> str:
    parts = []
    for key, value in detail.items():
        if isinstance(value, tuple) and all(isinstance(v, float) for v in value):
            value = "(" + ", ".join(f"{v:.3f}" for v in value) + ")"
        parts.append(f"{key}={value}")
    return " ".join(parts)


def _status_lines(frame: DisplayFrame) -> list[str]:
    r = frame.rotation_deg
    p = frame.position
    lines = [
        "Daydream Controller",
        f"position xyz (m)  = ({p[0]: .3f}, {p[1]: .3f}, {p[2]: .3f})",
        f"rotation xyz (deg)= ({r[0]: 7.2f}, {r[1]: 7.2f}, {r[2]: 7.2f})",
        f"events            = {frame.event_count}",
    ]
    lines.extend(f"  {evt}" for evt in frame.events)
    return lines


class _CliStatsSink:
    def __init__(self, mode: str):
        self.mode = "live" if mode == "live" else "scroll"
        self._is_tty = bool(getattr(sys.stderr, "isatty", lambda: False)())
        self._live_enabled = self.mode == "live" and self._is_tty
        self._line_count = 0

    def emit(self, lines: list[str], scroll_line: str) -> None:
        if not self._live_enabled:
            logger.info(scroll_line)
            return

        out = sys.stderr
        if self._line_count > 0:
            out.write(f"\x1b[{self._line_count}F")

        max_lines = max(self._line_count, len(lines))
        for i in range(max_lines):
            line = lines[i] if i < len(lines) else ""
            out.write("\x1b[2K")
            out.write(line)
            out.write("\n")
        out.flush()
        self._line_count = len(lines)


class TuiDisplayProvider(TransformSink, EventSink):
    """Transform and event sink that renders to the terminal.

    Rendering is throttled to display_hz; events are kept in a short ring.
    """

    def __init__(
        self,
        cli_output: str = "live",
        display_hz: float = 5.0,
        max_events: int = 6,
        set_status: Optional[Callable[[str], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.cli_sink = _CliStatsSink(cli_output)
        self.frame = DisplayFrame()
        self._events: collections.deque[str] = collections.deque(maxlen=max_events)
        self.display_interval = (1.0 / display_hz) if display_hz > 0.0 else 0.0
        self.last_display_t = 0.0
        self._set_status = set_status
        self._clock = clock

    def set_rotation(self, rotation_deg: tuple[float, float, float]) -> None:
        self.frame.rotation_deg = tuple(float(v) for v in rotation_deg)

    def set_position(self, position: tuple[float, float, float]) -> None:
        self.frame.position = tuple(float(v) for v in position)

    def emit(self, name: str, detail: dict[str, Any]) -> None:
        self.frame.event_count += 1
        self._events.append(f"{name} {_format_detail(detail)}")
        self.frame.events = list(self._events)

    def render(self) -> bool:
        """Render if the display interval elapsed; True when rendered."""
        if self.display_interval <= 0.0:
            return False
        now = self._clock()
        if (now - self.last_display_t) < self.display_interval:
            return False
        self.last_display_t = now

        lines = _status_lines(self.frame)
        if self._set_status is not None:
            self._set_status("\n".join(lines[1:]))
        p = self.frame.position
        r = self.frame.rotation_deg
        self.cli_sink.emit(
            lines=lines,
            scroll_line=(
                "[DISPLAY] pos=(%.3f, %.3f, %.3f) rot=(%.1f, %.1f, %.1f) events=%d"
                % (p[0], p[1], p[2], r[0], r[1], r[2], self.frame.event_count)
            ),
        )
        return True

    def close(self) -> None:
        pass


class LoggingEventSink(EventSink):
    """Logs each event; wraps another sink when given."""

    def __init__(self, inner: EventSink | None = None, level: int = logging.DEBUG):
        self.inner = inner
        self.level = level

    def emit(self, name: str, detail: dict[str, Any]) -> None:
        logger.log(self.level, "[INPUT] %s %s", name, _format_detail(detail))
        if self.inner is not None:
            self.inner.emit(name, detail)
