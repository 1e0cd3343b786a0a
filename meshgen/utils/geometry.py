"""
Canonical vector utilities for frame and tube computations.

This module provides the single source of truth for the small vector
operations shared by the curve, frame, and growth code.
"""

import numpy as np
from typing import Optional, Tuple


AXES = (
    np.array([1.0, 0.0, 0.0]),
    np.array([0.0, 1.0, 0.0]),
    np.array([0.0, 0.0, 1.0]),
)


def as_vec3(value) -> np.ndarray:
    """Convert a 3-sequence to a float64 array of shape (3,)."""
    arr = np.asarray(value, dtype=float).reshape(3)
    return arr.copy()


def normalize(v: np.ndarray, eps: float = 1e-10) -> Optional[np.ndarray]:
    """
    Return v scaled to unit length, or None if v is (numerically) zero.

    Returning None instead of a NaN vector lets callers pick their own
    fallback for degenerate input.
    """
    norm = float(np.linalg.norm(v))
    if norm <= eps:
        return None
    return v / norm


def lerp(a, b, t: float):
    """Linear interpolation between a and b (scalars or arrays)."""
    return a + (b - a) * t


def least_aligned_axis(v: np.ndarray) -> np.ndarray:
    """
    World axis with the smallest absolute component in v.

    Ties resolve toward the later axis (x, then y, then z), so a vector
    along +Y yields the Z axis.
    """
    mags = np.abs(v)
    best = 0
    smallest = np.inf
    for i in range(3):
        if mags[i] <= smallest:
            smallest = mags[i]
            best = i
    return AXES[best].copy()


def orthogonalize(v: np.ndarray, axis: np.ndarray, eps: float = 1e-10) -> Optional[np.ndarray]:
    """Gram-Schmidt v against unit axis and normalize; None if degenerate."""
    return normalize(v - np.dot(v, axis) * axis, eps)


def rotate_vector(
    v: np.ndarray,
    axis: np.ndarray,
    angle: float,
) -> np.ndarray:
    """Rotate vector v around unit axis by angle in radians (Rodrigues' formula)."""
    c = np.cos(angle)
    s = np.sin(angle)
    return v * c + np.cross(axis, v) * s + axis * np.dot(axis, v) * (1 - c)


def signed_angle(a: np.ndarray, b: np.ndarray, axis: np.ndarray) -> float:
    """Angle in radians from a to b, signed by the right-hand rule about axis."""
    angle = float(np.arccos(np.clip(np.dot(a, b), -1.0, 1.0)))
    if np.dot(axis, np.cross(a, b)) < 0.0:
        angle = -angle
    return angle


def point_to_segment_distance(
    point: np.ndarray,
    seg_start: np.ndarray,
    seg_end: np.ndarray,
) -> float:
    """
    Compute minimum distance from a point to a line segment.

    Parameters
    ----------
    point : np.ndarray
        Query point (shape (3,))
    seg_start, seg_end : np.ndarray
        Endpoints of segment (shape (3,))

    Returns
    -------
    float
        Minimum distance from point to segment
    """
    v = seg_end - seg_start
    length_sq = np.dot(v, v)

    if length_sq < 1e-10:
        return float(np.linalg.norm(point - seg_start))

    t = np.dot(point - seg_start, v) / length_sq
    t = np.clip(t, 0.0, 1.0)

    closest = seg_start + t * v
    return float(np.linalg.norm(point - closest))


def frame_matrix(tangent: np.ndarray, normal: np.ndarray, binormal: np.ndarray) -> np.ndarray:
    """Stack a frame as matrix columns (tangent, normal, binormal)."""
    return np.column_stack([tangent, normal, binormal])


def orthonormality_error(tangent: np.ndarray, normal: np.ndarray, binormal: np.ndarray) -> Tuple[float, float]:
    """
    Measure how far a frame is from a right-handed orthonormal basis.

    Returns
    -------
    ortho_error : float
        Max deviation of M^T M from identity
    handedness_error : float
        Norm of binormal - tangent x normal
    """
    m = frame_matrix(tangent, normal, binormal)
    ortho_error = float(np.max(np.abs(m.T @ m - np.eye(3))))
    handedness_error = float(np.linalg.norm(binormal - np.cross(tangent, normal)))
    return ortho_error, handedness_error


__all__ = [
    "AXES",
    "as_vec3",
    "normalize",
    "lerp",
    "least_aligned_axis",
    "orthogonalize",
    "rotate_vector",
    "signed_angle",
    "point_to_segment_distance",
    "frame_matrix",
    "orthonormality_error",
]
