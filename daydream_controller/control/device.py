"""Device-side interfaces: snapshots, controller handles and registries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

import numpy as np

from ..math3d.quaternion import q_from_xyzw

ConnectionListener = Callable[[bool, str], None]


@dataclass(frozen=True)
class ButtonState:
    pressed: bool = False
    touched: bool = False


@dataclass(frozen=True)
class DeviceSnapshot:
    """One frame of raw device state.

    orientation:
      Device order [x, y, z, w], or None when the device reports none.
    axes:
      Analog values, copied at capture time.
    """

    orientation: Optional[tuple[float, ...]] = None
    position: Optional[tuple[float, ...]] = None
    buttons: tuple[ButtonState, ...] = ()
    axes: tuple[float, ...] = ()

    def orientation_q(self) -> np.ndarray:
        """Unit [w, x, y, z]; identity when missing or malformed."""
        return q_from_xyzw(self.orientation)

    def button(self, button_id: int) -> ButtonState:
        if 0 <= button_id < len(self.buttons):
            return self.buttons[button_id]
        return ButtonState()


def snapshot_from_payload(payload: dict[str, Any]) -> DeviceSnapshot:
    """Build a snapshot from the ``{pose, buttons, axes}`` gamepad shape."""
    pose = payload.get("pose") or {}
    orientation = pose.get("orientation")
    position = pose.get("position")
    buttons = tuple(
        ButtonState(
            pressed=bool(b.get("pressed", False)),
            touched=bool(b.get("touched", False)),
        )
        for b in payload.get("buttons") or ()
        if isinstance(b, dict)
    )
    axes = tuple(float(v) for v in payload.get("axes") or ())
    return DeviceSnapshot(
        orientation=None if orientation is None else tuple(float(v) for v in orientation),
        position=None if position is None else tuple(float(v) for v in position),
        buttons=buttons,
        axes=axes,
    )


class ControllerDevice:
    """Handle to one physical controller."""

    id: str = ""

    def get_snapshot(self) -> Optional[DeviceSnapshot]:
        """Latest state, or None when the device went away."""
        raise NotImplementedError


@dataclass
class StaticControllerDevice(ControllerDevice):
    """Device whose snapshot is assigned by the caller."""

    id: str = ""
    snapshot: Optional[DeviceSnapshot] = field(default_factory=DeviceSnapshot)

    def get_snapshot(self) -> Optional[DeviceSnapshot]:
        return self.snapshot


class DeviceRegistry:
    """Base interface for device discovery and connection notifications."""

    def __init__(self) -> None:
        self._listeners: list[ConnectionListener] = []

    def get_devices(self) -> Sequence[ControllerDevice]:
        raise NotImplementedError

    def get_devices_by_prefix(self, id_prefix: str) -> list[ControllerDevice]:
        return [d for d in self.get_devices() if d.id.startswith(id_prefix)]

    def is_device_present(self, id_prefix: str) -> bool:
        return bool(self.get_devices_by_prefix(id_prefix))

    def add_connection_listener(self, listener: ConnectionListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_connection_listener(self, listener: ConnectionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, connected: bool, device_id: str) -> None:
        for listener in list(self._listeners):
            listener(connected, device_id)

    def run(self, on_tick: Callable[[float], None]) -> None:
        """Run the registry's event loop and call on_tick(delta_s) per frame."""
        raise NotImplementedError

    def close(self) -> None:
        pass
