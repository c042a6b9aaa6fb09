from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np
from scipy.spatial.transform import Rotation

X_AXIS = np.array([1.0, 0.0, 0.0])
Y_AXIS = np.array([0.0, 1.0, 0.0])
Z_AXIS = np.array([0.0, 0.0, 1.0])

_PARALLEL_EPS = 1e-12


def _as_vec3(value: Sequence[float]) -> np.ndarray:
    return np.asarray(value, dtype=float).reshape(3)


def safe_unit(v: Sequence[float]) -> Optional[np.ndarray]:
    """Return ``v`` scaled to unit length, or ``None`` for a zero vector."""

    vec = _as_vec3(v)
    length = float(np.linalg.norm(vec))
    if length <= 0.0 or not math.isfinite(length):
        return None
    return vec / length


def angle_between(a: Sequence[float], b: Sequence[float]) -> float:
    """Unsigned angle in radians; ``atan2`` keeps it accurate near 0 and pi."""

    va = _as_vec3(a)
    vb = _as_vec3(b)
    return math.atan2(float(np.linalg.norm(np.cross(va, vb))), float(np.dot(va, vb)))


def rotation_taking(
    source: Sequence[float],
    target: Sequence[float],
    *,
    half_turn_axis: Sequence[float],
) -> Optional[Rotation]:
    """Return the rotation about ``source x target`` that maps ``source`` onto ``target``'s direction.

    ``None`` means no rotation is needed: either vector is zero or they already
    point the same way. Opposite vectors have no unique perpendicular axis, so a
    half turn about ``half_turn_axis`` is used instead.
    """

    src = _as_vec3(source)
    dst = _as_vec3(target)
    src_len = float(np.linalg.norm(src))
    dst_len = float(np.linalg.norm(dst))
    if src_len <= 0.0 or dst_len <= 0.0:
        return None

    axis = np.cross(src, dst)
    axis_len = float(np.linalg.norm(axis))
    if axis_len <= _PARALLEL_EPS * src_len * dst_len:
        if float(np.dot(src, dst)) >= 0.0:
            return None
        turn_axis = safe_unit(half_turn_axis)
        if turn_axis is None:
            return None
        return Rotation.from_rotvec(math.pi * turn_axis)

    angle = angle_between(src, dst)
    return Rotation.from_rotvec(angle * axis / axis_len)


def row_norms(vectors: np.ndarray) -> np.ndarray:
    return np.sqrt(np.einsum("ij,ij->i", vectors, vectors))


__all__ = [
    "X_AXIS",
    "Y_AXIS",
    "Z_AXIS",
    "angle_between",
    "rotation_taking",
    "row_norms",
    "safe_unit",
]
