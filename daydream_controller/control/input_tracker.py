"""Edge detection over button, touch and axis state.

Each tracked button keeps one record holding the previous frame's pressed and
touched flags. Records live in a fixed array indexed by button id and start
released/untouched, so the first real press after startup is a transition.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .device import ButtonState
from .feedback import ButtonColorizer
from .host import EventSink

logger = logging.getLogger(__name__)


class ButtonId(enum.IntEnum):
    TRACKPAD = 0
    MENU = 1
    SYSTEM = 2


BUTTON_COUNT = 4

# Unlisted ids still get edge detection and events, just no recolouring.
BUTTON_NAMES: dict[int, str] = {
    ButtonId.TRACKPAD: "trackpad",
    ButtonId.MENU: "menu",
    ButtonId.SYSTEM: "system",
}


@dataclass
class ButtonRecord:
    pressed: bool = False
    touched: bool = False

    def snapshot(self) -> ButtonState:
        return ButtonState(pressed=self.pressed, touched=self.touched)


class InputEventTracker:
    def __init__(
        self,
        event_sink: EventSink,
        colorizer: Optional[ButtonColorizer] = None,
        button_count: int = BUTTON_COUNT,
    ):
        self.event_sink = event_sink
        self.colorizer = colorizer
        self.records = [ButtonRecord() for _ in range(button_count)]
        self.previous_axis: tuple[float, ...] = ()

    def _record(self, button_id: int) -> ButtonRecord:
        if not 0 <= button_id < len(self.records):
            raise ValueError(
                f"button id must be in [0,{len(self.records) - 1}], got {button_id}"
            )
        return self.records[button_id]

    def _update_button_model(self, button_id: int, state: str) -> None:
        if self.colorizer is None:
            return
        name = BUTTON_NAMES.get(button_id)
        if name is None:
            logger.debug("[INPUT] button %s has no mesh mapping; skip recolour", button_id)
            return
        self.colorizer.update(name, state)

    def handle_press(self, button_id: int, state: ButtonState) -> bool:
        """Emit buttondown/buttonup on a pressed transition; True if changed.

        An id outside the record array is a caller bug and raises ValueError;
        device data never chooses the id.
        """
        record = self._record(button_id)
        pressed = bool(state.pressed)
        if pressed == record.pressed:
            return False
        evt = "down" if pressed else "up"
        record.pressed = pressed
        self.event_sink.emit("button" + evt, {"id": button_id})
        self._update_button_model(button_id, evt)
        return True

    def handle_touch(
        self, button_id: int, state: ButtonState, axis: Sequence[float] = ()
    ) -> bool:
        """Emit touchstart/touchend on a touched transition; True if changed.

        Raises ValueError for an id outside the record array, like handle_press.
        """
        record = self._record(button_id)
        touched = bool(state.touched)
        if touched == record.touched:
            return False
        evt = "touchstart" if touched else "touchend"
        record.touched = touched
        self.event_sink.emit(
            evt,
            {"id": button_id, "state": record.snapshot(), "axis": tuple(axis)},
        )
        self._update_button_model(button_id, evt)
        return True

    def handle_trackpad_button(
        self, state: ButtonState, axis: Sequence[float] = ()
    ) -> bool:
        """Press then touch for the trackpad; at most one buttonchanged per call."""
        button_id = int(ButtonId.TRACKPAD)
        press_changed = self.handle_press(button_id, state)
        touch_changed = self.handle_touch(button_id, state, axis)
        if not (press_changed or touch_changed):
            return False
        self.event_sink.emit("buttonchanged", {"id": button_id, "state": state})
        return True

    def handle_trackpad_axes(self, axes: Sequence[float]) -> bool:
        """Emit axismove when any component differs from the last stored axes.

        Comparison is exact: sensor noise counts as movement.
        """
        current = tuple(float(v) for v in axes)
        previous = self.previous_axis
        changed = any(
            i >= len(previous) or previous[i] != value for i, value in enumerate(current)
        )
        if not changed:
            return False
        self.previous_axis = current
        self.event_sink.emit("axismove", {"axis": current})
        return True
