"""
Primitive shape operations for procedural meshes.

This module provides the tube tessellator shared by standalone tubes and
tree branches.
"""

from .tube_sweep import (
    RingSample,
    build_rings,
    sweep_tube_along_curve,
    create_straight_tube,
    create_tapered_tube,
)

__all__ = [
    "RingSample",
    "build_rings",
    "sweep_tube_along_curve",
    "create_straight_tube",
    "create_tapered_tube",
]
