"""Quaternion utilities for right-handed scene coordinates.

Quaternions are stored as ``[w, x, y, z]``. Devices and scene runtimes
report ``[x, y, z, w]``; convert with :func:`q_from_xyzw` on ingestion.

Scene axes: x right, y up, -z forward.
"""

from __future__ import annotations

import math

import numpy as np

FORWARD = np.array([0.0, 0.0, -1.0], dtype=np.float64)


def q_identity() -> np.ndarray:
    return np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)


def q_normalize(q: np.ndarray) -> np.ndarray:
    q = np.asarray(q, dtype=np.float64)
    n = float(np.linalg.norm(q))
    if n < 1e-12 or not math.isfinite(n):
        return q_identity()
    return q / n


def q_from_xyzw(values) -> np.ndarray:
    """Unit ``[w, x, y, z]`` from a device ``[x, y, z, w]`` sequence.

    Missing or malformed input falls back to identity.
    """
    if values is None:
        return q_identity()
    try:
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError):
        return q_identity()
    if arr.size != 4 or not np.isfinite(arr).all():
        return q_identity()
    return q_normalize(np.array([arr[3], arr[0], arr[1], arr[2]], dtype=np.float64))


def q_to_xyzw(q: np.ndarray) -> np.ndarray:
    return np.array([q[1], q[2], q[3], q[0]], dtype=np.float64)


def q_conj(q: np.ndarray) -> np.ndarray:
    return np.array([q[0], -q[1], -q[2], -q[3]], dtype=np.float64)


def q_mul(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array(
        [
            aw * bw - ax * bx - ay * by - az * bz,
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
        ],
        dtype=np.float64,
    )


def q_rotate_vec(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Rotate vector v by unit quaternion q: v' = q*(0,v)*q^{-1}."""
    q = q_normalize(q)
    vq = np.array([0.0, float(v[0]), float(v[1]), float(v[2])], dtype=np.float64)
    return q_mul(q_mul(q, vq), q_conj(q))[1:]


def axis_angle_to_q(axis: np.ndarray, angle_rad: float) -> np.ndarray:
    axis = np.asarray(axis, dtype=np.float64)
    axis = axis / (np.linalg.norm(axis) + 1e-12)
    s = math.sin(angle_rad / 2.0)
    return q_normalize(
        np.array(
            [math.cos(angle_rad / 2.0), axis[0] * s, axis[1] * s, axis[2] * s],
            dtype=np.float64,
        )
    )


def euler_yaw_pitch_roll_to_q(
    yaw_deg: float, pitch_deg: float, roll_deg: float
) -> np.ndarray:
    """
    Euler:
      yaw around +y, pitch around +x, roll around +z
    Composition: q = q_yaw * q_pitch * q_roll

    With -z forward, positive pitch raises the forward vector and positive
    yaw turns it to the left.
    """
    yaw = math.radians(yaw_deg)
    pitch = math.radians(pitch_deg)
    roll = math.radians(roll_deg)
    q_yaw = axis_angle_to_q(np.array([0.0, 1.0, 0.0]), yaw)
    q_pitch = axis_angle_to_q(np.array([1.0, 0.0, 0.0]), pitch)
    q_roll = axis_angle_to_q(np.array([0.0, 0.0, 1.0]), roll)
    return q_normalize(q_mul(q_mul(q_yaw, q_pitch), q_roll))


def q_to_rotmat(q: np.ndarray) -> np.ndarray:
    w, x, y, z = q_normalize(q)
    return np.array(
        [
            [1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - w * z), 2.0 * (x * z + w * y)],
            [2.0 * (x * y + w * z), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z - w * x)],
            [2.0 * (x * z - w * y), 2.0 * (y * z + w * x), 1.0 - 2.0 * (x * x + y * y)],
        ],
        dtype=np.float64,
    )


def q_to_euler_xyz(q: np.ndarray) -> tuple[float, float, float]:
    """Intrinsic X-Y-Z Euler angles in radians (scene-graph default order)."""
    m = q_to_rotmat(q)
    y = math.asin(max(-1.0, min(1.0, m[0, 2])))
    if abs(m[0, 2]) < 0.9999999:
        x = math.atan2(-m[1, 2], m[2, 2])
        z = math.atan2(-m[0, 1], m[0, 0])
    else:
        x = math.atan2(m[2, 1], m[1, 1])
        z = 0.0
    return x, y, z


def q_yaw(q: np.ndarray) -> np.ndarray:
    """Rotation about +y only, taken from the Y-X-Z Euler decomposition of q."""
    m = q_to_rotmat(q)
    if abs(m[1, 2]) < 0.9999999:
        yaw = math.atan2(m[0, 2], m[2, 2])
    else:
        yaw = math.atan2(-m[2, 0], m[0, 0])
    return axis_angle_to_q(np.array([0.0, 1.0, 0.0]), yaw)


def q_slerp(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    a = q_normalize(a)
    b = q_normalize(b)
    if t <= 0.0:
        return a
    if t >= 1.0:
        return b
    cos_half = float(np.dot(a, b))
    if cos_half < 0.0:
        b = -b
        cos_half = -cos_half
    if cos_half >= 1.0 - 1e-9:
        return q_normalize((1.0 - t) * a + t * b)
    half = math.acos(min(1.0, cos_half))
    sin_half = math.sin(half)
    wa = math.sin((1.0 - t) * half) / sin_half
    wb = math.sin(t * half) / sin_half
    return q_normalize(wa * a + wb * b)


def q_nlerp(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    """Sign-fixed normalized lerp, used for low-pass filtering."""
    if float(np.dot(a, b)) < 0.0:
        b = -b
    return q_normalize((1.0 - t) * a + t * b)


def forward_angle(a: np.ndarray, b: np.ndarray) -> float:
    """Angle in radians between the forward vectors of two orientations."""
    fa = q_rotate_vec(a, FORWARD)
    fb = q_rotate_vec(b, FORWARD)
    dotv = float(np.dot(fa, fb)) / (float(np.linalg.norm(fa) * np.linalg.norm(fb)) + 1e-12)
    return math.acos(max(-1.0, min(1.0, dotv)))
