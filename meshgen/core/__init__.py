"""Core data structures for procedural meshes."""

from .curves import Curve, CatmullRomCurve, CubicBezierCurve, curve_from_dict
from .frames import Frame, compute_frames
from .mesh import RadiusProfile, MeshData, MeshBuffers
from .random_stream import RandomStream
from .tree import Segment, Branch, BranchTree

__all__ = [
    "Curve",
    "CatmullRomCurve",
    "CubicBezierCurve",
    "curve_from_dict",
    "Frame",
    "compute_frames",
    "RadiusProfile",
    "MeshData",
    "MeshBuffers",
    "RandomStream",
    "Segment",
    "Branch",
    "BranchTree",
]
