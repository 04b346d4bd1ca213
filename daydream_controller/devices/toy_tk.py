"""ToyCV-style Tk sliders simulating one controller and the head."""

from __future__ import annotations

import time
import tkinter as tk
from typing import Callable, Optional, Sequence

import numpy as np

from ..control.device import ButtonState, ControllerDevice, DeviceRegistry, DeviceSnapshot
from ..control.host import HeadPoseSource
from ..control.pose import HeadSample
from ..math3d.quaternion import euler_yaw_pitch_roll_to_q, q_to_xyzw

TOY_DEVICE_ID = "Daydream Controller (toy)"


class _ToyDevice(ControllerDevice):
    def __init__(self, registry: "ToyTkDeviceRegistry"):
        self.id = TOY_DEVICE_ID
        self._registry = registry

    def get_snapshot(self) -> Optional[DeviceSnapshot]:
        return self._registry.read_snapshot()


class ToyTkDeviceRegistry(DeviceRegistry, HeadPoseSource):
    """Debug registry in scene axes (x right, y up, -z forward)."""

    def __init__(self, title: str, head_height: float = 1.6):
        super().__init__()
        self.root = tk.Tk()
        self.root.title(title)

        self._var_head_yaw = tk.DoubleVar(value=0.0)
        self._var_head_pitch = tk.DoubleVar(value=0.0)
        self._var_head_y = tk.DoubleVar(value=head_height)
        self._var_yaw = tk.DoubleVar(value=0.0)
        self._var_pitch = tk.DoubleVar(value=0.0)
        self._var_roll = tk.DoubleVar(value=0.0)
        self._var_axis_x = tk.DoubleVar(value=0.0)
        self._var_axis_y = tk.DoubleVar(value=0.0)
        self._var_connected = tk.IntVar(value=1)
        self._var_touched = tk.IntVar(value=0)
        self._var_pressed = tk.IntVar(value=0)

        self._device = _ToyDevice(self)
        self._build_ui()

        self._on_tick = None
        self._closed = False
        self._last_t = time.monotonic()
        self.root.protocol("WM_DELETE_WINDOW", self._handle_close)

    def _build_ui(self) -> None:
        def add_slider(label: str, var: tk.DoubleVar, lo: float, hi: float, res: float) -> None:
            tk.Label(self.root, text=label).pack(anchor="w", padx=10, pady=2)
            tk.Scale(
                self.root,
                from_=lo,
                to=hi,
                orient="horizontal",
                resolution=res,
                length=520,
                variable=var,
            ).pack(padx=10, pady=2)

        add_slider("Head yaw (deg)         [-180..180]", self._var_head_yaw, -180, 180, 1)
        add_slider("Head pitch (deg)       [-89..89]", self._var_head_pitch, -89, 89, 1)
        add_slider("Head height (m)        [0..2.2]", self._var_head_y, 0.0, 2.2, 0.01)
        add_slider("Controller yaw (deg)   [-180..180]", self._var_yaw, -180, 180, 1)
        add_slider("Controller pitch (deg) [-89..89]", self._var_pitch, -89, 89, 1)
        add_slider("Controller roll (deg)  [-180..180]", self._var_roll, -180, 180, 1)
        add_slider("Trackpad x [-1..1]", self._var_axis_x, -1.0, 1.0, 0.01)
        add_slider("Trackpad y [-1..1]", self._var_axis_y, -1.0, 1.0, 0.01)
        tk.Checkbutton(
            self.root,
            text="Connected",
            variable=self._var_connected,
            command=self._handle_connected_toggle,
        ).pack(anchor="w", padx=10, pady=2)
        tk.Checkbutton(self.root, text="Trackpad touched", variable=self._var_touched).pack(
            anchor="w", padx=10, pady=2
        )
        tk.Checkbutton(self.root, text="Trackpad pressed", variable=self._var_pressed).pack(
            anchor="w", padx=10, pady=2
        )

        self._stats = tk.Label(self.root, text="", justify="left", font=("Consolas", 10))
        self._stats.pack(padx=10, pady=8)

    def _handle_connected_toggle(self) -> None:
        self._notify(bool(self._var_connected.get()), TOY_DEVICE_ID)

    def _handle_close(self) -> None:
        self._closed = True
        self.root.destroy()

    def get_devices(self) -> Sequence[ControllerDevice]:
        if int(self._var_connected.get()) != 1:
            return []
        return [self._device]

    def read_snapshot(self) -> Optional[DeviceSnapshot]:
        if self._closed or int(self._var_connected.get()) != 1:
            return None
        q = euler_yaw_pitch_roll_to_q(
            float(self._var_yaw.get()),
            float(self._var_pitch.get()),
            float(self._var_roll.get()),
        )
        return DeviceSnapshot(
            orientation=tuple(float(v) for v in q_to_xyzw(q)),
            buttons=(
                ButtonState(
                    pressed=int(self._var_pressed.get()) == 1,
                    touched=int(self._var_touched.get()) == 1,
                ),
            ),
            axes=(float(self._var_axis_x.get()), float(self._var_axis_y.get())),
        )

    def get_head_sample(self) -> HeadSample:
        return HeadSample(
            quaternion=euler_yaw_pitch_roll_to_q(
                float(self._var_head_yaw.get()), float(self._var_head_pitch.get()), 0.0
            ),
            position=np.array([0.0, float(self._var_head_y.get()), 0.0], dtype=np.float64),
        )

    def set_status(self, text: str) -> None:
        if not self._closed:
            self._stats.config(text=text)

    def run(self, on_tick: Callable[[float], None]) -> None:
        self._on_tick = on_tick
        self._last_t = time.monotonic()
        self.root.after(16, self._tick)
        self.root.mainloop()

    def _tick(self) -> None:
        if self._closed:
            return
        now = time.monotonic()
        if self._on_tick is not None:
            self._on_tick(now - self._last_t)
        self._last_t = now
        self.root.after(16, self._tick)

    def close(self) -> None:
        if not self._closed:
            self._handle_close()
