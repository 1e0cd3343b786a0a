"""Operations: tube sweeping, branch growth and mesh synthesis."""

from .primitives import build_rings, sweep_tube_along_curve
from .growth import grow_tree, grow_branch
from .mesh import synthesize_tree_mesh, max_path_length

__all__ = [
    "build_rings",
    "sweep_tube_along_curve",
    "grow_tree",
    "grow_branch",
    "synthesize_tree_mesh",
    "max_path_length",
]
