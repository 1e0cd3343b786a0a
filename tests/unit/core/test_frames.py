"""
Tests for moving-frame computation.

These tests cover:
- Orthonormality and handedness of every frame
- Seeding frame 0 with an incoming normal/binormal
- Twist correction on closed curves
- Degenerate (stationary) curve sections
"""

import logging

import pytest
import numpy as np

from meshgen.core.curves import CatmullRomCurve, Curve
from meshgen.core.frames import Frame, compute_frames
from meshgen.utils.geometry import orthonormality_error
from pmg_policies import FramePolicy


TOL = 1e-5

TRANSPORTS = ["rotation", "double_reflection"]


def helix_curve(turns=2.0, points=24, closed=False):
    """Catmull-Rom curve through points on a helix."""
    ts = np.linspace(0.0, turns * 2 * np.pi, points)
    return CatmullRomCurve(
        [(np.cos(t), 0.3 * t, np.sin(t)) for t in ts],
        closed=closed,
    )


def square_loop():
    """Closed, non-planar loop whose frames accumulate twist."""
    return CatmullRomCurve(
        [(0, 0, 0), (2, 0, 1), (2, 2, 0), (0, 2, 1), (-1, 1, 2)],
        closed=True,
    )


class PausingCurve(Curve):
    """Curve that sits still for the first half of its parameter range."""

    kind = "pausing"

    def __init__(self):
        super().__init__([(0, 0, 0), (0, 1, 0)])

    def point_at(self, u):
        u = float(np.clip(u, 0.0, 1.0))
        return np.array([0.0, max(u - 0.5, 0.0) * 2.0, 0.0])


def assert_orthonormal(frames, tol=TOL):
    for frame in frames:
        for vec in (frame.tangent, frame.normal, frame.binormal):
            assert np.all(np.isfinite(vec))
            assert abs(np.linalg.norm(vec) - 1.0) < tol
        ortho, handed = orthonormality_error(frame.tangent, frame.normal, frame.binormal)
        assert ortho < tol
        assert handed < tol


class TestFrameSequence:
    """Basic properties of compute_frames."""

    @pytest.mark.parametrize("transport", TRANSPORTS)
    def test_orthonormal_along_helix(self, transport):
        """Test that every frame along a helix is right-handed orthonormal."""
        frames = compute_frames(helix_curve(), 64, policy=FramePolicy(transport=transport))

        assert len(frames) == 65
        assert_orthonormal(frames)

    def test_frame_parameters(self):
        """Test that frames carry their uniform parameter values."""
        frames = compute_frames(helix_curve(), 8)

        assert [f.t for f in frames] == [i / 8 for i in range(9)]

    def test_tangents_follow_curve(self):
        """Test that frame tangents point along the curve."""
        curve = helix_curve()
        frames = compute_frames(curve, 16)

        for frame in frames:
            np.testing.assert_allclose(frame.tangent, curve.tangent_at(frame.t), atol=1e-9)

    @pytest.mark.parametrize("transport", TRANSPORTS)
    def test_straight_curve_has_no_twist(self, transport):
        """Test that a straight curve keeps one constant frame."""
        curve = CatmullRomCurve([(0, 0, 0), (0, 0, 5)])
        frames = compute_frames(curve, 10, policy=FramePolicy(transport=transport))

        for frame in frames:
            np.testing.assert_allclose(frame.normal, frames[0].normal, atol=1e-12)
            np.testing.assert_allclose(frame.binormal, frames[0].binormal, atol=1e-12)

    def test_default_normal_is_least_aligned_axis(self):
        """Test that frame 0 without a seed uses the axis least aligned with the tangent."""
        curve = CatmullRomCurve([(0, 0, 0), (3, 0, 0)])
        frames = compute_frames(curve, 4)

        np.testing.assert_allclose(frames[0].normal, [0.0, 0.0, 1.0], atol=1e-12)
        np.testing.assert_allclose(frames[0].binormal, [0.0, -1.0, 0.0], atol=1e-12)

    @pytest.mark.parametrize("transport", TRANSPORTS)
    def test_planar_curve_keeps_plane_normal(self, transport):
        """Test that a normal perpendicular to a planar curve is transported unchanged."""
        curve = CatmullRomCurve([(0, 0, 0), (1, 1, 0), (2, 0, 0), (3, 1, 0)])
        frames = compute_frames(
            curve, 30,
            initial_normal=(0, 0, 1),
            policy=FramePolicy(transport=transport),
        )

        for frame in frames:
            np.testing.assert_allclose(frame.normal, [0.0, 0.0, 1.0], atol=1e-9)


class TestInitialFrame:
    """Seeding frame 0 with an incoming orientation."""

    def test_seed_is_used_when_orthogonal(self):
        """Test that an orthogonal seed normal becomes normal 0."""
        curve = CatmullRomCurve([(0, 0, 0), (0, 1, 0)])
        frames = compute_frames(curve, 5, initial_normal=(1, 0, 0), initial_binormal=(0, 0, -1))

        np.testing.assert_allclose(frames[0].normal, [1.0, 0.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(frames[0].binormal, [0.0, 0.0, -1.0], atol=1e-12)

    def test_seed_is_orthogonalized(self):
        """Test that a skewed seed normal is projected off the tangent."""
        curve = CatmullRomCurve([(0, 0, 0), (0, 1, 0)])
        frames = compute_frames(curve, 5, initial_normal=(1, 1, 0))

        np.testing.assert_allclose(frames[0].normal, [1.0, 0.0, 0.0], atol=1e-12)
        assert_orthonormal(frames)

    def test_parallel_seed_falls_back_to_binormal(self):
        """Test that a seed normal along the tangent defers to the seed binormal."""
        curve = CatmullRomCurve([(0, 0, 0), (0, 1, 0)])
        frames = compute_frames(curve, 5, initial_normal=(0, 2, 0), initial_binormal=(0, 0, -1))

        np.testing.assert_allclose(frames[0].binormal, [0.0, 0.0, -1.0], atol=1e-12)
        np.testing.assert_allclose(frames[0].normal, [1.0, 0.0, 0.0], atol=1e-12)


class TestClosedFrames:
    """Twist correction for closed curves."""

    @pytest.mark.parametrize("transport", TRANSPORTS)
    def test_closed_sequence_closes(self, transport):
        """Test that the last frame of a closed curve matches the first."""
        frames = compute_frames(square_loop(), 48, closed=True, policy=FramePolicy(transport=transport))

        np.testing.assert_allclose(frames[-1].tangent, frames[0].tangent, atol=1e-4)
        np.testing.assert_allclose(frames[-1].normal, frames[0].normal, atol=1e-4)
        np.testing.assert_allclose(frames[-1].binormal, frames[0].binormal, atol=1e-4)
        assert_orthonormal(frames)

    def test_open_transport_leaves_twist(self):
        """Test that the same loop framed as open does not close by itself."""
        frames = compute_frames(square_loop(), 48, closed=False)

        assert np.linalg.norm(frames[-1].normal - frames[0].normal) > 1e-3


class TestDegenerateCurves:
    """Stationary curve sections must not produce NaN frames."""

    def test_stationary_section_reuses_tangent(self, caplog):
        """Test that zero tangents are replaced and reported."""
        with caplog.at_level(logging.WARNING, logger="meshgen.core.frames"):
            frames = compute_frames(PausingCurve(), 10)

        assert_orthonormal(frames)
        for frame in frames:
            np.testing.assert_allclose(frame.tangent, [0.0, 1.0, 0.0], atol=1e-9)
        assert "degenerate tangent" in caplog.text

    def test_fully_coincident_points(self, caplog):
        """Test that a curve collapsed to one point still yields valid frames."""
        curve = CatmullRomCurve([(2, 2, 2)] * 4)

        with caplog.at_level(logging.WARNING, logger="meshgen.core.frames"):
            frames = compute_frames(curve, 6, initial_normal=(1, 0, 0))

        assert len(frames) == 7
        assert_orthonormal(frames)
        assert "degenerate tangent" in caplog.text


class TestFrameValue:
    def test_frames_compare_without_error(self):
        """Test that frames holding arrays compare by identity instead of raising."""
        frames = compute_frames(CatmullRomCurve([(0, 0, 0), (0, 1, 0), (0, 2, 0)]), 2)
        copy = Frame(frames[0].tangent, frames[0].normal, frames[0].binormal, frames[0].t)

        assert frames[0] == frames[0]
        assert frames[0] != copy
        assert frames.index(frames[1]) == 1

    def test_to_dict(self):
        frame = compute_frames(CatmullRomCurve([(0, 0, 0), (0, 1, 0)]), 1)[1]
        data = frame.to_dict()

        assert data["t"] == 1.0
        np.testing.assert_allclose(data["tangent"], [0.0, 1.0, 0.0], atol=1e-9)
