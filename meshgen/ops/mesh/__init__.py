"""
Mesh-level operations for branch trees.

This module provides synthesis of a single mesh from a grown tree.
"""

from .synthesis import (
    synthesize_tree_mesh,
    max_path_length,
)

__all__ = [
    "synthesize_tree_mesh",
    "max_path_length",
]
