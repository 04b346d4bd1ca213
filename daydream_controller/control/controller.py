"""Frame loop for a Daydream-style 3DoF controller.

Binds the first registry device whose id starts with ``GAMEPAD_ID_PREFIX``,
feeds head pose and controller orientation through the arm model, writes the
resulting transform and turns trackpad state into discrete events.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..math3d.quaternion import q_to_euler_xyz
from .arm_model import ArmModelParams, OrientationArmModel
from .device import ControllerDevice, DeviceRegistry, DeviceSnapshot
from .feedback import ButtonColorizer
from .host import AssetBinder, AssetDescriptor, EventSink, HeadPoseSource, TransformSink
from .input_tracker import InputEventTracker

logger = logging.getLogger(__name__)

GAMEPAD_ID_PREFIX = "Daydream Controller"

CONTROLLER_MODEL = AssetDescriptor(
    obj="https://cdn.aframe.io/controllers/vive/vr_controller_vive.obj",
    mtl="https://cdn.aframe.io/controllers/vive/vr_controller_vive.mtl",
    pivot_offset=(0.0, -0.015, 0.04),
)

# rotation_offset value asking for a per-hand offset.
ROTATION_OFFSET_AUTO = -999.0


@dataclass(frozen=True)
class ComponentConfig:
    button_color: str = "#FAFAFA"
    button_touched_color: str = "yellow"
    button_pressed_color: str = "orange"
    model: bool = True
    rotation_offset: float = 0.0
    hand: str = "right"


def resolve_rotation_offset(offset: float, hand: str) -> float:
    """Degrees added to the z rotation.

    The per-hand automatic offset has no formula yet; the sentinel resolves
    to 0.
    """
    if offset == ROTATION_OFFSET_AUTO:
        logger.warning(
            "[ARM] rotation_offset=%s (auto for hand=%s) is not supported; using 0",
            offset,
            hand,
        )
        return 0.0
    return float(offset)


class DaydreamController:
    def __init__(
        self,
        registry: DeviceRegistry,
        head_source: HeadPoseSource,
        transform_sink: TransformSink,
        event_sink: EventSink,
        asset_binder: AssetBinder,
        config: ComponentConfig | None = None,
        arm_params: ArmModelParams | None = None,
    ):
        self.config = config or ComponentConfig()
        self.registry = registry
        self.head_source = head_source
        self.transform_sink = transform_sink
        self.event_sink = event_sink
        self.asset_binder = asset_binder

        self.controller_present = False
        self.device: Optional[ControllerDevice] = None
        self.arm_model = OrientationArmModel(arm_params, hand=self.config.hand)
        self.colorizer = ButtonColorizer(
            idle_color=self.config.button_color,
            touched_color=self.config.button_touched_color,
            pressed_color=self.config.button_pressed_color,
        )
        self.tracker = InputEventTracker(event_sink, colorizer=self.colorizer)
        self.rotation_offset = resolve_rotation_offset(
            self.config.rotation_offset, self.config.hand
        )

    def play(self) -> None:
        self.check_if_controller_present()
        self.registry.add_connection_listener(self.on_connection_changed)

    def pause(self) -> None:
        self.registry.remove_connection_listener(self.on_connection_changed)

    def remove(self) -> None:
        self.pause()
        if self.controller_present:
            self._unbind()

    def on_connection_changed(self, connected: bool, device_id: str) -> None:
        logger.debug("[DEVICE] %s %s", device_id, "connected" if connected else "disconnected")
        self.check_if_controller_present()

    def check_if_controller_present(self) -> None:
        is_present = self.registry.is_device_present(GAMEPAD_ID_PREFIX)
        if is_present == self.controller_present:
            if is_present:
                self._follow_first_device()
            return
        if is_present:
            self._bind()
        else:
            self._unbind()

    def _bind(self) -> None:
        devices = self.registry.get_devices_by_prefix(GAMEPAD_ID_PREFIX)
        if not devices:
            return
        self.controller_present = True
        self.device = devices[0]
        self.arm_model.reset()
        self.asset_binder.add_model_loaded_listener(self.on_model_loaded)
        logger.info("[DEVICE] bound %s", self.device.id)
        if not self.config.model:
            return
        self.asset_binder.attach(CONTROLLER_MODEL)

    def _follow_first_device(self) -> None:
        devices = self.registry.get_devices_by_prefix(GAMEPAD_ID_PREFIX)
        if not devices or devices[0] is self.device:
            return
        # Bound handle went away while another matching device stayed connected.
        logger.info(
            "[DEVICE] rebound %s -> %s",
            self.device.id if self.device else "<none>",
            devices[0].id,
        )
        self.device = devices[0]
        self.arm_model.reset()

    def _unbind(self) -> None:
        logger.info("[DEVICE] unbound %s", self.device.id if self.device else "<none>")
        self.controller_present = False
        self.device = None
        if self.config.model:
            self.asset_binder.detach()
        self.asset_binder.remove_model_loaded_listener(self.on_model_loaded)
        self.colorizer.unbind_meshes()

    def on_model_loaded(self, meshes: Mapping[str, Any]) -> None:
        if not self.config.model:
            return
        self.colorizer.bind_meshes(meshes)

    def tick(self, delta_s: float | None = None) -> None:
        device = self.device
        if device is None:
            return
        snapshot = device.get_snapshot()
        if snapshot is None:
            return
        self.update_pose(snapshot, delta_s)
        self.update_buttons(snapshot)

    def update_pose(self, snapshot: DeviceSnapshot, delta_s: float | None = None) -> None:
        head = self.head_source.get_head_sample()
        self.arm_model.set_head_orientation(head.quaternion)
        self.arm_model.set_head_position(head.position)
        self.arm_model.set_controller_orientation(snapshot.orientation_q())
        self.arm_model.update(delta_s)

        pose = self.arm_model.get_pose()
        ex, ey, ez = q_to_euler_xyz(pose.quaternion)
        self.transform_sink.set_rotation(
            (
                math.degrees(ex),
                math.degrees(ey),
                math.degrees(ez) + self.rotation_offset,
            )
        )
        p = pose.position
        self.transform_sink.set_position((float(p[0]), float(p[1]), float(p[2])))

    def update_buttons(self, snapshot: DeviceSnapshot) -> None:
        self.tracker.handle_trackpad_button(snapshot.button(0), snapshot.axes)
        self.tracker.handle_trackpad_axes(snapshot.axes)
