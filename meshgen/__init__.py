"""
Procedural Mesh Generation - meshgen

This package generates triangle meshes procedurally: tubes swept along
parametric curves, and branching trees grown from a seeded random stream.

Main Entry Points:
    - generate_tube(): Sweep a tube along a Curve
    - generate_tree(): Grow a tree and synthesize its mesh
    - compute_frames(): Rotation-minimizing frames along a curve
    - grow_tree(): Branch growth without meshing

Example:
    >>> from meshgen import generate_tree, CatmullRomCurve, generate_tube
    >>> from pmg_policies import TreePolicy, TubePolicy
    >>>
    >>> result = generate_tree(TreePolicy(generations=4, random_seed=42))
    >>> result.mesh.vertex_count > 0
    True
    >>>
    >>> curve = CatmullRomCurve([(0, 0, 0), (1, 1, 0), (2, 0, 1), (3, 1, 1)])
    >>> mesh, report = generate_tube(curve, TubePolicy(tubular_segments=32))
"""

from .api import generate_tube, generate_tree, TreeResult
from .ops import (
    build_rings,
    sweep_tube_along_curve,
    grow_tree,
    synthesize_tree_mesh,
)
from .core import (
    Curve,
    CatmullRomCurve,
    CubicBezierCurve,
    Frame,
    compute_frames,
    MeshData,
    RadiusProfile,
    RandomStream,
    BranchTree,
)

__version__ = "0.1.0"

__all__ = [
    # High-level API
    "generate_tube",
    "generate_tree",
    "TreeResult",
    # Operations
    "build_rings",
    "sweep_tube_along_curve",
    "grow_tree",
    "synthesize_tree_mesh",
    # Core types
    "Curve",
    "CatmullRomCurve",
    "CubicBezierCurve",
    "Frame",
    "compute_frames",
    "MeshData",
    "RadiusProfile",
    "RandomStream",
    "BranchTree",
]
