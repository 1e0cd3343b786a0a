"""
Unified tube sweep primitive for creating tubular meshes along curves.

This module turns a sequence of oriented, sized cross-sections into a
ring-based triangle mesh. build_rings is the shared tessellator used by
both standalone tubes and tree branches; sweep_tube_along_curve wires a
single curve through the frame sequencer into it.

CONVENTIONS
-----------
Every ring has radial_segments + 1 vertices: the last one repeats the
first position with u = 1 so textures do not wrap across the seam.
Triangles wind counter-clockwise seen from outside the tube.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union
import logging
import numpy as np

from pmg_policies import OperationReport, TubePolicy

from ...core.curves import CatmullRomCurve, Curve
from ...core.frames import Frame, compute_frames
from ...core.mesh import MeshBuffers, MeshData, RadiusProfile

logger = logging.getLogger(__name__)

PI2 = 2.0 * np.pi


@dataclass(frozen=True, eq=False)
class RingSample:
    """Cross-section of a tube: center, orientation and radius."""
    position: np.ndarray
    frame: Frame
    radius: float


def build_rings(
    buffers: MeshBuffers,
    samples: Sequence[RingSample],
    radial_segments: int,
    v_coords: Sequence[float],
) -> int:
    """
    Append one vertex ring per sample and stitch consecutive rings together.

    Parameters
    ----------
    buffers : MeshBuffers
        Shared buffers; new vertices start at buffers.vertex_count
    samples : sequence of RingSample
        Cross-sections in order along the tube
    radial_segments : int
        Number of quads around the tube
    v_coords : sequence of float
        Longitudinal texture coordinate for each ring

    Returns
    -------
    int
        Index of the first vertex written (the ring block's offset)
    """
    assert radial_segments >= 3, "radial_segments must be >= 3"
    assert len(v_coords) == len(samples), "one v coordinate per ring"

    offset = buffers.vertex_count

    angles = [PI2 * j / radial_segments for j in range(radial_segments + 1)]
    cos_sin = [(np.cos(a), np.sin(a)) for a in angles]

    for sample, v in zip(samples, v_coords):
        frame = sample.frame
        n_vec = frame.normal
        b_vec = frame.binormal
        for j, (cos, sin) in enumerate(cos_sin):
            u = j / radial_segments
            normal = cos * n_vec + sin * b_vec
            normal = normal / np.linalg.norm(normal)
            buffers.add_vertex(
                sample.position + sample.radius * normal,
                normal,
                frame.tangent,
                (u, v),
            )

    stride = radial_segments + 1
    for j in range(1, len(samples)):
        for i in range(1, radial_segments + 1):
            a = offset + stride * (j - 1) + (i - 1)
            b = offset + stride * j + (i - 1)
            c = offset + stride * j + i
            d = offset + stride * (j - 1) + i

            buffers.add_triangle(a, d, b)
            buffers.add_triangle(b, d, c)

    return offset


def sweep_tube_along_curve(
    curve: Optional[Curve],
    policy: Optional[TubePolicy] = None,
) -> Tuple[MeshData, OperationReport]:
    """
    Create a tube mesh by sweeping a circular cross-section along a curve.

    Parameters
    ----------
    curve : Curve or None
        Centerline. None produces an empty mesh.
    policy : TubePolicy, optional
        Segment counts, radius profile and open/closed mode

    Returns
    -------
    mesh : MeshData
        Generated tube mesh
    report : OperationReport
        Report with mesh statistics and any warnings
    """
    if policy is None:
        policy = TubePolicy()

    report = OperationReport(
        operation="sweep_tube_along_curve",
        requested_policy=policy.to_dict(),
        effective_policy=policy.to_dict(),
    )

    if curve is None:
        report.add_warning("No curve supplied; produced an empty mesh")
        report.metadata.update(MeshData.empty().summary())
        return MeshData.empty(), report

    if policy.closed != curve.closed:
        report.add_warning(
            f"Tube closed={policy.closed} but {curve.kind} curve closed={curve.closed}; "
            f"the tube seam will not follow the curve"
        )
        logger.warning(report.warnings[-1])

    tubular = policy.tubular_segments
    end_radius = policy.end_radius if policy.end_radius is not None else policy.radius
    profile = RadiusProfile(policy.radius, end_radius)

    frames = compute_frames(
        curve,
        tubular,
        closed=policy.closed,
        policy=policy.frames,
    )

    samples = []
    for i in range(tubular):
        u = i / tubular
        samples.append(RingSample(curve.point_at(u), frames[i], profile.radius_at(u)))

    # closed tubes end on a copy of the first ring; open tubes on the curve end
    if policy.closed:
        samples.append(RingSample(samples[0].position, frames[0], samples[0].radius))
    else:
        samples.append(RingSample(curve.point_at(1.0), frames[tubular], profile.radius_at(1.0)))

    v_coords = [i / tubular for i in range(tubular + 1)]

    buffers = MeshBuffers()
    build_rings(buffers, samples, policy.radial_segments, v_coords)
    mesh = buffers.finalize()

    centers = np.array([s.position for s in samples])
    path_length = float(np.sum(np.linalg.norm(np.diff(centers, axis=0), axis=1)))
    radii = [s.radius for s in samples]

    report.metadata.update(mesh.summary())
    report.metadata.update({
        "curve_type": curve.kind,
        "ring_count": len(samples),
        "closed": policy.closed,
        "path_length": path_length,
        "min_radius": float(min(radii)),
        "max_radius": float(max(radii)),
    })

    logger.debug(
        f"Swept {curve.kind} tube: {mesh.vertex_count} vertices, "
        f"{mesh.triangle_count} triangles"
    )
    return mesh, report


def create_straight_tube(
    start: Union[Sequence[float], np.ndarray],
    end: Union[Sequence[float], np.ndarray],
    radius: float,
    radial_segments: int = 8,
    tubular_segments: int = 4,
) -> MeshData:
    """
    Create a straight open tube between two points.

    Convenience wrapper around sweep_tube_along_curve.
    """
    curve = CatmullRomCurve([start, end])
    policy = TubePolicy(
        tubular_segments=tubular_segments,
        radial_segments=radial_segments,
        radius=radius,
    )
    mesh, _ = sweep_tube_along_curve(curve, policy)
    return mesh


def create_tapered_tube(
    points: List[Sequence[float]],
    start_radius: float,
    end_radius: float,
    radial_segments: int = 8,
    tubular_segments: int = 20,
) -> MeshData:
    """
    Create an open tube through points whose radius tapers linearly.

    Convenience wrapper around sweep_tube_along_curve.
    """
    curve = CatmullRomCurve(points)
    policy = TubePolicy(
        tubular_segments=tubular_segments,
        radial_segments=radial_segments,
        radius=start_radius,
        end_radius=end_radius,
    )
    mesh, _ = sweep_tube_along_curve(curve, policy)
    return mesh


__all__ = [
    "RingSample",
    "build_rings",
    "sweep_tube_along_curve",
    "create_straight_tube",
    "create_tapered_tube",
]
