"""High-level API for procedural tube and tree meshes."""

from .generate import generate_tube, generate_tree, TreeResult
from .export import make_run_dir, save_mesh, write_json, save_tree

__all__ = [
    "generate_tube",
    "generate_tree",
    "TreeResult",
    "make_run_dir",
    "save_mesh",
    "write_json",
    "save_tree",
]
