"""Orientation-only arm model.

Turns a 3DoF controller orientation plus the head pose into a plausible hand
position. The skeleton is a fixed chain head -> shoulder -> elbow -> wrist ->
controller whose segment offsets are empirically tuned for an adult arm.
Rotation of the controller is split between elbow and wrist; pointing the
controller up extends the arm toward the eyes, pointing it down retracts it.

Body-frame offsets are authored for the right hand in scene axes
(x right, y up, -z forward) and mirrored on x for the left hand.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..math3d.coords import vec_to_az_el_deg
from ..math3d.quaternion import (
    FORWARD,
    forward_angle,
    q_conj,
    q_identity,
    q_mul,
    q_nlerp,
    q_normalize,
    q_rotate_vec,
    q_slerp,
    q_yaw,
)
from .pose import Pose6D, identity_pose

logger = logging.getLogger(__name__)

_HANDS = {"left", "right"}


@dataclass(frozen=True)
class ArmModelParams:
    """Tunable constants of the arm model.

    head_shoulder_offset:
      Shoulder anchor relative to the head, meters.
    shoulder_elbow_offset:
      Elbow relative to the shoulder with the arm relaxed: forward and down.
    elbow_wrist_offset:
      Forearm vector in the elbow frame.
    wrist_controller_offset:
      Controller grip point in the wrist frame.
    arm_extension_offset:
      Extra reach applied twice (elbow and hand) at full extension.
    body_scale:
      Anthropometric scale on every offset; 1.0 is an adult of ~1.75 m.
    elbow_bend_ratio:
      Share of the controller rotation taken by the elbow (rest by the wrist).
    extension_ratio_weight:
      Additional wrist share at full extension.
    extension_min_pitch_deg / extension_max_pitch_deg:
      Controller pitch window mapped linearly onto extension ratio 0..1.
    min_angular_speed:
      rad/s. Faster controller rotation is treated as torso rotation and the
      body frame lags the head yaw instead of snapping to it.
    position_smoothing / orientation_smoothing:
      Temporal filter alpha in [0.01, 1]. Lower is smoother, 1 disables.
    nominal_dt:
      Frame time in seconds assumed when update() gets no dt.
    """

    head_shoulder_offset: tuple[float, float, float] = (0.155, -0.25, 0.0)
    shoulder_elbow_offset: tuple[float, float, float] = (0.0, -0.215, -0.15)
    elbow_wrist_offset: tuple[float, float, float] = (0.0, 0.0, -0.25)
    wrist_controller_offset: tuple[float, float, float] = (0.0, 0.0, 0.05)
    arm_extension_offset: tuple[float, float, float] = (-0.08, 0.14, 0.08)
    body_scale: float = 1.0
    elbow_bend_ratio: float = 0.4
    extension_ratio_weight: float = 0.4
    extension_min_pitch_deg: float = 11.0
    extension_max_pitch_deg: float = 50.0
    min_angular_speed: float = 0.61
    position_smoothing: float = 0.5
    orientation_smoothing: float = 1.0
    nominal_dt: float = 1.0 / 60.0


def _vec(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=np.float64).reshape(3)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


class OrientationArmModel:
    """Extrapolates a hand pose from head pose and controller orientation.

    Setters only cache samples; all work happens in :meth:`update`. Until the
    first update, :meth:`get_pose` returns the identity pose and
    :attr:`has_pose` is False.
    """

    def __init__(self, params: ArmModelParams | None = None, hand: str = "right"):
        self.params = params or ArmModelParams()
        self.set_hand(hand)

        self._alpha_p = float(_clamp(self.params.position_smoothing, 0.01, 1.0))
        self._alpha_q = float(_clamp(self.params.orientation_smoothing, 0.01, 1.0))

        self.reset()

    def reset(self) -> None:
        self._head_q = q_identity()
        self._head_p = np.zeros(3, dtype=np.float64)
        self._controller_q = q_identity()
        self._last_controller_q = q_identity()

        self._root_q = q_identity()
        self._elbow_p = np.zeros(3, dtype=np.float64)
        self._wrist_p = np.zeros(3, dtype=np.float64)
        self._extension_ratio = 0.0

        self._pose = identity_pose()
        self._has_pose = False

    def set_hand(self, hand: str) -> None:
        if hand not in _HANDS:
            raise ValueError(f"hand must be 'left' or 'right', got {hand!r}")
        self.hand = hand
        self._mirror = np.array(
            [-1.0 if hand == "left" else 1.0, 1.0, 1.0], dtype=np.float64
        )

    def set_head_orientation(self, q: np.ndarray) -> None:
        self._head_q = q_normalize(q)

    def set_head_position(self, p: np.ndarray) -> None:
        self._head_p = _vec(p).copy()

    def set_controller_orientation(self, q: np.ndarray) -> None:
        self._last_controller_q = self._controller_q
        self._controller_q = q_normalize(q)

    @property
    def has_pose(self) -> bool:
        return self._has_pose

    def _offset(self, values: Sequence[float]) -> np.ndarray:
        return _vec(values) * self._mirror * float(self.params.body_scale)

    def _update_root(self, dt: float) -> None:
        head_yaw_q = q_yaw(self._head_q)
        angle_delta = forward_angle(self._last_controller_q, self._controller_q)
        angular_speed = angle_delta / dt if dt > 0.0 else 0.0
        if self._has_pose and angular_speed > self.params.min_angular_speed:
            # Torso is turning with the controller: follow head yaw slowly.
            self._root_q = q_slerp(self._root_q, head_yaw_q, angle_delta / 10.0)
        else:
            self._root_q = head_yaw_q

    def _compute_extension_ratio(self) -> float:
        p = self.params
        _, pitch_deg = vec_to_az_el_deg(q_rotate_vec(self._controller_q, FORWARD))
        span = p.extension_max_pitch_deg - p.extension_min_pitch_deg
        if span <= 0.0:
            return 1.0 if pitch_deg >= p.extension_max_pitch_deg else 0.0
        return _clamp((pitch_deg - p.extension_min_pitch_deg) / span, 0.0, 1.0)

    def update(self, dt: float | None = None) -> None:
        p = self.params
        dt = p.nominal_dt if dt is None else float(dt)
        self._update_root(dt)

        ratio = self._compute_extension_ratio()
        self._extension_ratio = ratio
        extension = self._offset(p.arm_extension_offset) * ratio

        # Controller orientation in the yaw-only body frame.
        body_q = q_mul(q_conj(self._root_q), self._controller_q)

        shoulder = self._offset(p.head_shoulder_offset)
        self._elbow_p = shoulder + self._offset(p.shoulder_elbow_offset) + extension

        # Raising the controller moves more of the rotation into the wrist.
        total_deg = math.degrees(forward_angle(body_q, q_identity()))
        lerp_suppression = 1.0 - (total_deg / 180.0) ** 4
        lerp_value = lerp_suppression * (
            p.elbow_bend_ratio
            + (1.0 - p.elbow_bend_ratio) * ratio * p.extension_ratio_weight
        )
        wrist_q = q_slerp(q_identity(), body_q, lerp_value)
        elbow_q = q_mul(body_q, q_conj(wrist_q))

        forearm = self._offset(p.elbow_wrist_offset) + q_rotate_vec(
            wrist_q, self._offset(p.wrist_controller_offset)
        )
        self._wrist_p = q_rotate_vec(elbow_q, forearm) + self._elbow_p
        hand_body = self._wrist_p + extension

        raw_position = self._head_p + q_rotate_vec(self._root_q, hand_body)
        raw_orientation = self._controller_q

        if not self._has_pose:
            position = raw_position
            orientation = raw_orientation
        else:
            prev = self._pose
            position = prev.position + self._alpha_p * (raw_position - prev.position)
            orientation = q_nlerp(prev.quaternion, raw_orientation, self._alpha_q)

        self._pose = Pose6D(position=position, quaternion=q_normalize(orientation))
        if not self._has_pose:
            logger.debug("[ARM] first pose computed hand=%s", self.hand)
        self._has_pose = True

    def get_pose(self) -> Pose6D:
        return self._pose.copy()

    def get_forearm_length(self) -> float:
        return float(np.linalg.norm(self._offset(self.params.elbow_wrist_offset)))

    def get_elbow_position(self) -> np.ndarray:
        """Elbow in world space for the last update."""
        return self._head_p + q_rotate_vec(self._root_q, self._elbow_p)

    def get_extension_ratio(self) -> float:
        return self._extension_ratio
