"""Shared utilities for mesh generation."""

from .geometry import (
    normalize,
    lerp,
    least_aligned_axis,
    orthogonalize,
    rotate_vector,
    signed_angle,
    point_to_segment_distance,
    orthonormality_error,
)

__all__ = [
    "normalize",
    "lerp",
    "least_aligned_axis",
    "orthogonalize",
    "rotate_vector",
    "signed_angle",
    "point_to_segment_distance",
    "orthonormality_error",
]
