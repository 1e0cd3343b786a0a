"""
Moving frames along parametric curves.

compute_frames samples a curve at uniform parameter steps and attaches an
orthonormal (tangent, normal, binormal) basis to every sample. Frames are
propagated by minimal rotation between successive tangents rather than by
the curvature-based Frenet formulas, which are undefined wherever the
curve is locally straight.

CONVENTIONS
-----------
Frames are right-handed: binormal = tangent x normal. Sampling is uniform
in the curve parameter, not in arc length.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging
import numpy as np

from pmg_policies import FramePolicy

from .curves import Curve
from ..utils.geometry import (
    as_vec3,
    least_aligned_axis,
    normalize,
    orthogonalize,
    rotate_vector,
    signed_angle,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Frame:
    """Orthonormal basis attached to a curve sample at parameter t."""
    tangent: np.ndarray
    normal: np.ndarray
    binormal: np.ndarray
    t: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tangent": self.tangent.tolist(),
            "normal": self.normal.tolist(),
            "binormal": self.binormal.tolist(),
            "t": self.t,
        }


def compute_frames(
    curve: Curve,
    subdivisions: int,
    initial_normal: Optional[Sequence[float]] = None,
    initial_binormal: Optional[Sequence[float]] = None,
    closed: bool = False,
    policy: Optional[FramePolicy] = None,
) -> List[Frame]:
    """
    Compute moving frames at u = i / subdivisions along a curve.

    Parameters
    ----------
    curve : Curve
        Curve to frame
    subdivisions : int
        Number of parameter steps N; N + 1 frames are returned
    initial_normal, initial_binormal : array-like, optional
        Orientation to seed frame 0 with. The normal is re-orthogonalized
        against the first tangent, so it only needs to be roughly
        perpendicular.
    closed : bool
        Distribute the twist between the last and first frame over the
        sequence so that frame N matches frame 0
    policy : FramePolicy, optional
        Transport method and numerical tolerances

    Returns
    -------
    List[Frame]
        N + 1 right-handed orthonormal frames
    """
    assert subdivisions >= 1, "subdivisions must be >= 1"
    if policy is None:
        policy = FramePolicy()
    eps = policy.epsilon

    params = [i / subdivisions for i in range(subdivisions + 1)]
    raw_tangents = [curve.tangent_at(u, policy.tangent_delta) for u in params]
    tangents, substituted = _repair_tangents(raw_tangents, eps)
    if substituted:
        logger.warning(
            f"Curve has {substituted} degenerate tangent sample(s) of "
            f"{len(params)}; substituted neighbouring tangents"
        )

    use_reflection = policy.transport == "double_reflection"
    positions = [curve.point_at(u) for u in params] if use_reflection else None

    normals = [_initial_normal(tangents[0], initial_normal, initial_binormal, eps)]

    for i in range(1, subdivisions + 1):
        t_prev = tangents[i - 1]
        t_curr = tangents[i]
        n_prev = normals[-1]

        if use_reflection:
            n_curr = _double_reflect(
                positions[i - 1], positions[i], t_prev, t_curr, n_prev, eps
            )
        else:
            axis = np.cross(t_prev, t_curr)
            axis_unit = normalize(axis, eps)
            if axis_unit is not None:
                angle = np.arccos(np.clip(np.dot(t_prev, t_curr), -1.0, 1.0))
                n_curr = rotate_vector(n_prev, axis_unit, angle)
            else:
                n_curr = n_prev.copy()

        # Ensure orthonormality
        n_ortho = orthogonalize(n_curr, t_curr, eps)
        if n_ortho is None:
            n_ortho = orthogonalize(least_aligned_axis(t_curr), t_curr, eps)
        normals.append(n_ortho)

    if closed:
        total = signed_angle(normals[0], normals[-1], tangents[0])
        step = -total / subdivisions
        for i in range(1, subdivisions + 1):
            normals[i] = rotate_vector(normals[i], tangents[i], step * i)

    frames = []
    for u, tangent, normal in zip(params, tangents, normals):
        frames.append(Frame(
            tangent=tangent,
            normal=normal,
            binormal=np.cross(tangent, normal),
            t=u,
        ))
    return frames


def _repair_tangents(raw: List[np.ndarray], eps: float) -> Tuple[List[np.ndarray], int]:
    """Replace zero tangents by the previous valid one (next valid for leading samples)."""
    units = [normalize(t, eps) for t in raw]
    first_valid = next((t for t in units if t is not None), None)
    if first_valid is None:
        first_valid = np.array([0.0, 1.0, 0.0])

    repaired = []
    substituted = 0
    last = first_valid
    for unit in units:
        if unit is None:
            substituted += 1
            repaired.append(last.copy())
        else:
            repaired.append(unit)
            last = unit
    return repaired, substituted


def _initial_normal(
    tangent: np.ndarray,
    normal: Optional[Sequence[float]],
    binormal: Optional[Sequence[float]],
    eps: float,
) -> np.ndarray:
    n0 = None
    if normal is not None:
        n0 = orthogonalize(as_vec3(normal), tangent, eps)
    if n0 is None and binormal is not None:
        b0 = orthogonalize(as_vec3(binormal), tangent, eps)
        if b0 is not None:
            n0 = np.cross(b0, tangent)
    if n0 is None:
        n0 = orthogonalize(least_aligned_axis(tangent), tangent, eps)
    return n0


def _double_reflect(
    x0: np.ndarray,
    x1: np.ndarray,
    t0: np.ndarray,
    t1: np.ndarray,
    r0: np.ndarray,
    eps: float,
) -> np.ndarray:
    """Rotation minimizing frame step (Wang et al. 2008): reflect across the chord, then across t."""
    v1 = x1 - x0
    c1 = float(np.dot(v1, v1))
    if c1 > eps:
        r_l = r0 - (2.0 / c1) * np.dot(v1, r0) * v1
        t_l = t0 - (2.0 / c1) * np.dot(v1, t0) * v1
    else:
        r_l = r0
        t_l = t0

    v2 = t1 - t_l
    c2 = float(np.dot(v2, v2))
    if c2 > eps:
        return r_l - (2.0 / c2) * np.dot(v2, r_l) * v2
    return r_l


__all__ = [
    "Frame",
    "compute_frames",
]
