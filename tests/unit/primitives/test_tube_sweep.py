"""
Tests for the tube sweep primitive.

These tests cover:
- Vertex/index counts of open and closed tubes
- Seam duplication and texture coordinates
- Radius profile and ring placement
- Outward-facing winding
"""

import numpy as np
import pytest

from meshgen.core.curves import CatmullRomCurve, CubicBezierCurve
from meshgen.core.frames import Frame
from meshgen.core.mesh import MeshBuffers
from meshgen.ops.primitives.tube_sweep import (
    RingSample,
    build_rings,
    create_straight_tube,
    create_tapered_tube,
    sweep_tube_along_curve,
)
from pmg_policies import TubePolicy


WAVY = [(0.0, 0.0, 0.0), (1.0, 1.0, 0.5), (2.0, 0.0, 1.0), (3.0, 1.0, 0.0), (4.0, 0.5, 0.5)]
LOOP = [(1.0, 0.0, 0.0), (0.0, 1.0, 0.3), (-1.0, 0.0, 0.0), (0.0, -1.0, -0.3)]


class TestTubeTopology:
    """Counts and connectivity of swept tubes."""

    @pytest.mark.parametrize("tubular,radial", [(3, 3), (20, 8), (7, 12)])
    def test_open_tube_counts(self, tubular, radial):
        """Test that an open tube has (T+1)(R+1) vertices and 6TR indices."""
        policy = TubePolicy(tubular_segments=tubular, radial_segments=radial, radius=0.2)
        mesh, report = sweep_tube_along_curve(CatmullRomCurve(WAVY), policy)

        assert mesh.vertex_count == (tubular + 1) * (radial + 1)
        assert mesh.indices.size == 6 * tubular * radial
        assert mesh.normals.shape == (mesh.vertex_count, 3)
        assert mesh.tangents.shape == (mesh.vertex_count, 4)
        assert mesh.uvs.shape == (mesh.vertex_count, 2)
        assert report.success
        assert report.metadata["ring_count"] == tubular + 1

    def test_indices_in_range(self):
        """Test that every index refers to an existing vertex."""
        mesh, _ = sweep_tube_along_curve(CatmullRomCurve(WAVY), TubePolicy())

        assert mesh.triangles.min() == 0
        assert mesh.triangles.max() == mesh.vertex_count - 1

    def test_closed_tube_counts(self):
        """Test that a closed tube keeps the open-tube counts."""
        policy = TubePolicy(tubular_segments=16, radial_segments=6, closed=True)
        mesh, _ = sweep_tube_along_curve(CatmullRomCurve(LOOP, closed=True), policy)

        assert mesh.vertex_count == 17 * 7
        assert mesh.indices.size == 6 * 16 * 6

    def test_closed_last_ring_repeats_first(self):
        """Test that the last ring of a closed tube sits on the first with v = 1."""
        radial = 6
        policy = TubePolicy(tubular_segments=16, radial_segments=radial, closed=True)
        mesh, _ = sweep_tube_along_curve(CatmullRomCurve(LOOP, closed=True), policy)

        stride = radial + 1
        first = slice(0, stride)
        last = slice(mesh.vertex_count - stride, mesh.vertex_count)

        np.testing.assert_allclose(mesh.vertices[last], mesh.vertices[first], atol=1e-12)
        np.testing.assert_allclose(mesh.normals[last], mesh.normals[first], atol=1e-12)
        np.testing.assert_allclose(mesh.uvs[first, 1], 0.0)
        np.testing.assert_allclose(mesh.uvs[last, 1], 1.0)

    def test_seam_vertex_duplicated(self):
        """Test that each ring repeats its first vertex with u = 1."""
        radial = 8
        mesh, _ = sweep_tube_along_curve(
            CatmullRomCurve(WAVY), TubePolicy(tubular_segments=5, radial_segments=radial)
        )

        stride = radial + 1
        for ring in range(6):
            start = ring * stride
            end = start + radial
            np.testing.assert_allclose(mesh.vertices[end], mesh.vertices[start], atol=1e-12)
            assert mesh.uvs[start, 0] == 0.0
            assert mesh.uvs[end, 0] == 1.0

    def test_none_curve_gives_empty_mesh(self):
        """Test that a missing curve yields an empty mesh and a warning."""
        mesh, report = sweep_tube_along_curve(None, TubePolicy())

        assert mesh.is_empty()
        assert mesh.indices.size == 0
        assert report.success
        assert report.warnings

    def test_closed_tube_on_open_bezier_warns(self):
        """Test that closing a tube around an always-open Bezier curve is reported."""
        curve = CubicBezierCurve([(0, 0, 0), (1, 1, 0), (2, 0, 1), (3, 1, 1)])
        mesh, report = sweep_tube_along_curve(curve, TubePolicy(closed=True, tubular_segments=8))

        assert mesh.vertex_count == 9 * 9
        assert any("closed" in w for w in report.warnings)

    @pytest.mark.parametrize("closed", [False, True])
    def test_matching_closed_flags_do_not_warn(self, closed):
        curve = CatmullRomCurve(LOOP, closed=closed)
        _, report = sweep_tube_along_curve(curve, TubePolicy(closed=closed))

        assert report.warnings == []


class TestTubeAttributes:
    """Per-vertex attributes and geometry."""

    def test_normals_unit_and_tangent_w(self):
        """Test unit normals, unit tangents, and w = 0."""
        mesh, _ = sweep_tube_along_curve(CatmullRomCurve(WAVY), TubePolicy())

        np.testing.assert_allclose(np.linalg.norm(mesh.normals, axis=1), 1.0, atol=1e-9)
        np.testing.assert_allclose(np.linalg.norm(mesh.tangents[:, :3], axis=1), 1.0, atol=1e-9)
        assert np.all(mesh.tangents[:, 3] == 0.0)

    def test_vertices_on_ring_around_curve(self):
        """Test that vertex - radius * normal lands on the curve sample."""
        tubular, radial, radius = 10, 8, 0.3
        curve = CatmullRomCurve(WAVY)
        mesh, _ = sweep_tube_along_curve(
            curve, TubePolicy(tubular_segments=tubular, radial_segments=radial, radius=radius)
        )

        stride = radial + 1
        for k in range(mesh.vertex_count):
            ring = k // stride
            center = mesh.vertices[k] - radius * mesh.normals[k]
            np.testing.assert_allclose(center, curve.point_at(ring / tubular), atol=1e-9)

    def test_normals_perpendicular_to_tangent(self):
        """Test that vertex normals lie in the ring plane."""
        mesh, _ = sweep_tube_along_curve(CatmullRomCurve(WAVY), TubePolicy())

        dots = np.einsum("ij,ij->i", mesh.normals, mesh.tangents[:, :3])
        assert np.max(np.abs(dots)) < 1e-9

    def test_uv_ranges(self):
        """Test that u and v both span [0, 1]."""
        mesh, _ = sweep_tube_along_curve(CatmullRomCurve(WAVY), TubePolicy())

        assert mesh.uvs[:, 0].min() == 0.0
        assert mesh.uvs[:, 0].max() == 1.0
        assert mesh.uvs[:, 1].min() == 0.0
        assert mesh.uvs[:, 1].max() == 1.0

    def test_winding_faces_outward(self):
        """Test that triangle normals agree with the outward vertex normals."""
        mesh, _ = sweep_tube_along_curve(
            CatmullRomCurve([(0, 0, 0), (2, 0, 0)]),
            TubePolicy(tubular_segments=4, radial_segments=8, radius=0.5),
        )

        tri = mesh.vertices[mesh.triangles]
        face_normals = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
        outward = mesh.normals[mesh.triangles].sum(axis=1)

        assert np.all(np.einsum("ij,ij->i", face_normals, outward) > 0.0)

    def test_tapered_radius(self):
        """Test that ring radii interpolate from start to end radius."""
        tubular, radial = 4, 6
        mesh = create_tapered_tube(
            [(0, 0, 0), (0, 1, 0), (0, 2, 0)],
            start_radius=1.0,
            end_radius=0.5,
            radial_segments=radial,
            tubular_segments=tubular,
        )

        stride = radial + 1
        dist = np.hypot(mesh.vertices[:, 0], mesh.vertices[:, 2])
        for ring in range(tubular + 1):
            expected = 1.0 - 0.5 * ring / tubular
            np.testing.assert_allclose(dist[ring * stride:(ring + 1) * stride], expected, atol=1e-9)

    def test_report_metadata(self):
        """Test path length and radius range in the report."""
        policy = TubePolicy(tubular_segments=8, radius=0.4, end_radius=0.1)
        _, report = sweep_tube_along_curve(CatmullRomCurve([(0, 0, 0), (0, 0, 3)]), policy)

        assert report.metadata["curve_type"] == "catmull_rom"
        assert report.metadata["path_length"] == pytest.approx(3.0)
        assert report.metadata["min_radius"] == pytest.approx(0.1)
        assert report.metadata["max_radius"] == pytest.approx(0.4)


class TestBuildRings:
    """Tests for the shared ring tessellator."""

    def _samples(self, z_values):
        frame = Frame(
            tangent=np.array([0.0, 0.0, 1.0]),
            normal=np.array([1.0, 0.0, 0.0]),
            binormal=np.array([0.0, 1.0, 0.0]),
        )
        return [RingSample(np.array([0.0, 0.0, z]), frame, 1.0) for z in z_values]

    def test_offset_into_shared_buffers(self):
        """Test that a second block starts after the first and indexes only itself."""
        buffers = MeshBuffers()
        first = build_rings(buffers, self._samples([0, 1, 2]), 4, [0.0, 0.5, 1.0])
        second = build_rings(buffers, self._samples([5, 6]), 4, [0.0, 1.0])
        mesh = buffers.finalize()

        assert first == 0
        assert second == 15
        assert mesh.vertex_count == 15 + 10
        # first block: 2 ring gaps x 4 quads x 2 triangles
        second_tris = mesh.triangles[16:]
        assert len(second_tris) == 8
        assert second_tris.min() >= 15

    def test_ring_vertex_positions(self):
        """Test that vertex j sits at angle 2*pi*j/R in the normal/binormal plane."""
        buffers = MeshBuffers()
        build_rings(buffers, self._samples([0]), 4, [0.0])
        mesh = buffers.finalize()

        expected = [(1, 0, 0), (0, 1, 0), (-1, 0, 0), (0, -1, 0), (1, 0, 0)]
        np.testing.assert_allclose(mesh.vertices, expected, atol=1e-12)
        assert mesh.triangle_count == 0

    def test_samples_compare_without_error(self):
        """Test that ring samples holding arrays compare by identity instead of raising."""
        first, second = self._samples([0, 0])

        assert first == first
        assert first != second
        assert first in [second, first]

    def test_rejects_too_few_radial_segments(self):
        """Test the radial segment precondition."""
        with pytest.raises(AssertionError):
            build_rings(MeshBuffers(), self._samples([0, 1]), 2, [0.0, 1.0])


class TestConvenienceTubes:
    """Tests for create_straight_tube and trimesh conversion."""

    def test_straight_tube(self):
        """Test that a straight tube is a cylinder of the given radius."""
        mesh = create_straight_tube((0, 0, 0), (0, 0, 2), radius=0.25)

        assert mesh.vertex_count == 5 * 9
        np.testing.assert_allclose(np.hypot(mesh.vertices[:, 0], mesh.vertices[:, 1]), 0.25, atol=1e-9)
        assert mesh.vertices[:, 2].min() == pytest.approx(0.0)
        assert mesh.vertices[:, 2].max() == pytest.approx(2.0)

    def test_to_trimesh_keeps_vertex_order(self):
        """Test that the trimesh conversion does not merge seam vertices."""
        mesh = create_straight_tube((0, 0, 0), (1, 0, 0), radius=0.5)
        tm = mesh.to_trimesh()

        assert len(tm.vertices) == mesh.vertex_count
        assert len(tm.faces) == mesh.triangle_count
        np.testing.assert_allclose(tm.vertices, mesh.vertices)
