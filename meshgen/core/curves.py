"""
Parametric curves that tubes and branches are swept along.

A Curve maps a normalized parameter u in [0, 1] to a 3D position. The
frame and tube code only ever talks to the Curve interface, so new curve
types plug in without touching either.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Sequence
import numpy as np

from ..utils.geometry import normalize


class Curve(ABC):
    """
    Immutable parametric curve defined by control points.

    Subclasses implement point_at; tangent_at defaults to the normalized
    central difference of point_at.
    """

    kind = "curve"

    def __init__(self, points: Sequence[Sequence[float]], closed: bool = False):
        pts = np.array(points, dtype=float)
        if pts.ndim != 2 or pts.shape[1] != 3:
            raise ValueError(f"Control points must have shape (n, 3), got {pts.shape}")
        pts.setflags(write=False)
        self._points = pts
        self._closed = bool(closed)

    @property
    def closed(self) -> bool:
        return self._closed

    def control_points(self) -> np.ndarray:
        """Return a copy of the control points, shape (n, 3)."""
        return self._points.copy()

    @abstractmethod
    def point_at(self, u: float) -> np.ndarray:
        """Position on the curve at u; u outside [0, 1] is clamped."""

    def tangent_at(self, u: float, delta: float = 1e-3) -> np.ndarray:
        """
        Unit tangent at u from a central difference of point_at.

        Open curves clamp the stencil to [0, 1]; closed curves wrap it.
        Returns the zero vector where the curve does not move, so callers
        can detect the degeneracy.
        """
        u = float(np.clip(u, 0.0, 1.0))
        u1 = u - delta
        u2 = u + delta
        if self._closed:
            u1 %= 1.0
            u2 %= 1.0
        else:
            u1 = max(u1, 0.0)
            u2 = min(u2, 1.0)
        diff = self.point_at(u2) - self.point_at(u1)
        unit = normalize(diff, 1e-12)
        if unit is None:
            return np.zeros(3)
        return unit

    def sample(self, subdivisions: int) -> np.ndarray:
        """Positions at u = i / subdivisions for i in 0..subdivisions, shape (n+1, 3)."""
        return np.array([
            self.point_at(i / subdivisions) for i in range(subdivisions + 1)
        ])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "points": self._points.tolist(),
            "closed": self._closed,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(points={self._points.tolist()}, closed={self._closed})"


class CatmullRomCurve(Curve):
    """
    Uniform Catmull-Rom spline through the control points.

    Each span between points i and i+1 is a cubic Hermite segment whose
    end tangents are tension * (p[i+1] - p[i-1]). Open curves extrapolate
    a phantom point beyond each end; closed curves wrap around.
    """

    kind = "catmull_rom"

    def __init__(
        self,
        points: Sequence[Sequence[float]],
        closed: bool = False,
        tension: float = 0.5,
    ):
        super().__init__(points, closed)
        minimum = 3 if closed else 2
        if len(self._points) < minimum:
            raise ValueError(
                f"CatmullRomCurve needs at least {minimum} points, got {len(self._points)}"
            )
        self.tension = float(tension)

    def _span(self, u: float):
        pts = self._points
        n = len(pts)
        spans = n if self._closed else n - 1
        p = spans * u
        i = int(np.floor(p))
        w = p - i

        if self._closed:
            i %= n
            p0 = pts[(i - 1) % n]
            p1 = pts[i]
            p2 = pts[(i + 1) % n]
            p3 = pts[(i + 2) % n]
            return p0, p1, p2, p3, w

        if i >= n - 1:
            i = n - 2
            w = 1.0
        p1 = pts[i]
        p2 = pts[i + 1]
        p0 = pts[i - 1] if i > 0 else 2.0 * pts[0] - pts[1]
        p3 = pts[i + 2] if i + 2 < n else 2.0 * pts[n - 1] - pts[n - 2]
        return p0, p1, p2, p3, w

    def point_at(self, u: float) -> np.ndarray:
        u = float(np.clip(u, 0.0, 1.0))
        p0, p1, p2, p3, w = self._span(u)

        t0 = self.tension * (p2 - p0)
        t1 = self.tension * (p3 - p1)
        c0 = p1
        c1 = t0
        c2 = -3.0 * p1 + 3.0 * p2 - 2.0 * t0 - t1
        c3 = 2.0 * p1 - 2.0 * p2 + t0 + t1
        return c0 + w * (c1 + w * (c2 + w * c3))

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["tension"] = self.tension
        return d


class CubicBezierCurve(Curve):
    """Cubic Bezier curve with exactly four control points (always open)."""

    kind = "bezier"

    def __init__(self, points: Sequence[Sequence[float]]):
        super().__init__(points, closed=False)
        if len(self._points) != 4:
            raise ValueError(f"CubicBezierCurve needs exactly 4 points, got {len(self._points)}")

    def point_at(self, u: float) -> np.ndarray:
        u = float(np.clip(u, 0.0, 1.0))
        s = 1.0 - u
        p0, p1, p2, p3 = self._points
        return (s ** 3) * p0 + 3.0 * (s ** 2) * u * p1 + 3.0 * s * (u ** 2) * p2 + (u ** 3) * p3


CURVE_TYPES = {
    CatmullRomCurve.kind: CatmullRomCurve,
    CubicBezierCurve.kind: CubicBezierCurve,
}


def curve_from_dict(d: Dict[str, Any]) -> Curve:
    """
    Build a curve from its dictionary form.

    {"type": "catmull_rom" | "bezier", "points": [[x, y, z], ...], "closed": bool}
    """
    kind = d.get("type", CatmullRomCurve.kind)
    if kind not in CURVE_TYPES:
        raise ValueError(f"Unknown curve type {kind!r}; expected one of {sorted(CURVE_TYPES)}")
    if kind == CubicBezierCurve.kind:
        return CubicBezierCurve(d["points"])
    return CatmullRomCurve(
        d["points"],
        closed=d.get("closed", False),
        tension=d.get("tension", 0.5),
    )


__all__ = [
    "Curve",
    "CatmullRomCurve",
    "CubicBezierCurve",
    "CURVE_TYPES",
    "curve_from_dict",
]
