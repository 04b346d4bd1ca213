"""Pose data structures shared by the arm model and the frame loop."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..math3d.quaternion import q_identity, q_normalize


@dataclass(slots=True)
class Pose6D:
    """Pose in world space.

    position:
      3D translation [x, y, z], meters.
    quaternion:
      Orientation quaternion [w, x, y, z], unit length.
    """

    position: np.ndarray
    quaternion: np.ndarray

    def copy(self) -> "Pose6D":
        return Pose6D(position=self.position.copy(), quaternion=self.quaternion.copy())


@dataclass(slots=True)
class HeadSample:
    """Camera/viewer pose supplied once per frame."""

    quaternion: np.ndarray
    position: np.ndarray

    def __post_init__(self) -> None:
        self.quaternion = q_normalize(self.quaternion)
        self.position = np.asarray(self.position, dtype=np.float64).reshape(3)


def identity_pose() -> Pose6D:
    return Pose6D(
        position=np.zeros(3, dtype=np.float64),
        quaternion=q_identity(),
    )
