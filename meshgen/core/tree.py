"""
Core branch tree data structures.

The tree is stored as an arena: BranchTree.branches holds every Branch and
branches refer to each other by integer index. The root is always index 0
and children are appended after their parent, so indices follow the
depth-first growth order.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional
import numpy as np

from .curves import Curve
from .frames import Frame
from .mesh import RadiusProfile


@dataclass(frozen=True, eq=False)
class Segment:
    """One sample along a branch's curve: a position and its frame."""
    frame: Frame
    position: np.ndarray

    def to_dict(self) -> dict:
        return {
            "position": self.position.tolist(),
            "frame": self.frame.to_dict(),
        }


@dataclass(eq=False)
class Branch:
    """
    Branch in a procedural tree.

    generation counts down to 0 at the leaves. offset is the distance along
    the trunk path from the root to this branch's start.
    """

    index: int
    parent: Optional[int]
    generation: int
    from_point: np.ndarray
    to_point: np.ndarray
    length: float
    from_radius: float
    to_radius: float
    offset: float
    curve: Curve
    segments: List[Segment] = field(default_factory=list)
    children: List[int] = field(default_factory=list)

    @property
    def radius_profile(self) -> RadiusProfile:
        return RadiusProfile(self.from_radius, self.to_radius)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def segment_count(self) -> int:
        return len(self.segments)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "index": self.index,
            "parent": self.parent,
            "generation": self.generation,
            "from_point": self.from_point.tolist(),
            "to_point": self.to_point.tolist(),
            "length": self.length,
            "from_radius": self.from_radius,
            "to_radius": self.to_radius,
            "offset": self.offset,
            "curve": self.curve.to_dict(),
            "segments": [s.to_dict() for s in self.segments],
            "children": list(self.children),
        }


class BranchTree:
    """
    Arena of branches forming a rooted tree.

    Parameters
    ----------
    metadata : dict, optional
        Tree metadata (policy, seed, etc.)
    """

    def __init__(self, metadata: Optional[Dict[str, Any]] = None):
        self.branches: List[Branch] = []
        self.metadata = metadata or {}

    def __len__(self) -> int:
        return len(self.branches)

    @property
    def root(self) -> Optional[Branch]:
        return self.branches[0] if self.branches else None

    def next_index(self) -> int:
        return len(self.branches)

    def add_branch(self, branch: Branch) -> int:
        """Add a branch and register it with its parent."""
        if branch.index != len(self.branches):
            raise ValueError(
                f"Branch index {branch.index} does not match arena slot {len(self.branches)}"
            )
        if branch.parent is not None:
            if not (0 <= branch.parent < len(self.branches)):
                raise ValueError(f"Parent branch {branch.parent} not in tree")
            self.branches[branch.parent].children.append(branch.index)
        self.branches.append(branch)
        return branch.index

    def get_branch(self, index: int) -> Branch:
        return self.branches[index]

    def traverse_post_order(self, index: int = 0) -> Iterator[Branch]:
        """Yield branches children-first, children in attachment order."""
        if not self.branches:
            return
        branch = self.branches[index]
        for child in branch.children:
            yield from self.traverse_post_order(child)
        yield branch

    def leaves(self) -> List[Branch]:
        return [b for b in self.branches if b.is_leaf]

    def depth(self) -> int:
        """Number of levels from the root to the deepest leaf (0 for an empty tree)."""
        if not self.branches:
            return 0
        levels = {0: 1}
        for branch in self.branches:
            for child in branch.children:
                levels[child] = levels[branch.index] + 1
        return max(levels.values())

    def to_graph(self):
        """
        Build a networkx DiGraph with parent -> child edges.

        Node keys are branch indices; node attributes carry generation,
        length, offset, radii and endpoints.
        """
        import networkx as nx

        graph = nx.DiGraph()
        for branch in self.branches:
            graph.add_node(
                branch.index,
                generation=branch.generation,
                length=branch.length,
                offset=branch.offset,
                from_radius=branch.from_radius,
                to_radius=branch.to_radius,
                from_point=tuple(branch.from_point.tolist()),
                to_point=tuple(branch.to_point.tolist()),
            )
        for branch in self.branches:
            for child in branch.children:
                graph.add_edge(branch.index, child)
        return graph

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "schema_version": "1.0",
            "branches": [b.to_dict() for b in self.branches],
            "metadata": self.metadata,
        }


__all__ = [
    "Segment",
    "Branch",
    "BranchTree",
]
