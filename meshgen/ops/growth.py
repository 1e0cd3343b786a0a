"""
Recursive stochastic branch growth.

grow_tree builds a BranchTree from a TreePolicy and a seeded RandomStream.
Each branch bends along a Catmull-Rom curve, is framed by the frame
sequencer, and spawns shorter, thinner children at its tip and at random
interior segments until generation 0 is reached.

RANDOM DRAW ORDER
-----------------
The order in which draws are consumed is part of the public contract:
for each branch, the angle about its normal, the angle about its binormal,
the two bend factors, then (if generation > 0) the branch count and, for
every child in attachment order, that child's attachment index (children
after the first) followed by the child's entire subtree, depth-first.
Changing this order changes every tree grown from a given seed.
"""

from typing import Optional, Sequence
import logging
import numpy as np
from scipy.spatial.transform import Rotation

from pmg_policies import TreePolicy

from ..core.curves import CatmullRomCurve
from ..core.frames import compute_frames
from ..core.random_stream import RandomStream
from ..core.tree import Branch, BranchTree, Segment
from ..utils.geometry import as_vec3, lerp

logger = logging.getLogger(__name__)

ROOT_ORIGIN = (0.0, 0.0, 0.0)
ROOT_TANGENT = (0.0, 1.0, 0.0)
ROOT_NORMAL = (1.0, 0.0, 0.0)
ROOT_BINORMAL = (0.0, 0.0, -1.0)


def grow_tree(
    policy: Optional[TreePolicy] = None,
    stream: Optional[RandomStream] = None,
) -> BranchTree:
    """
    Grow a complete branch tree.

    The root starts at the origin pointing up (+Y) with normal +X and
    binormal -Z. Its generation is policy.generations - 1 (never below 0),
    so policy.generations is the number of tree levels.

    Parameters
    ----------
    policy : TreePolicy, optional
        Growth parameters (defaults to TreePolicy())
    stream : RandomStream, optional
        Random source; a fresh stream seeded with policy.random_seed is
        used when omitted

    Returns
    -------
    BranchTree
        Tree whose root is branches[0]

    Examples
    --------
    >>> tree = grow_tree(TreePolicy(generations=3, random_seed=42))
    >>> tree.root.generation
    2
    """
    if policy is None:
        policy = TreePolicy()
    if stream is None:
        stream = RandomStream(policy.random_seed)

    tree = BranchTree(metadata={
        "random_seed": policy.random_seed,
        "generations": policy.generations,
        "root_generation": policy.root_generation,
    })

    grow_branch(
        tree,
        parent=None,
        generation=policy.root_generation,
        from_point=ROOT_ORIGIN,
        tangent=ROOT_TANGENT,
        normal=ROOT_NORMAL,
        binormal=ROOT_BINORMAL,
        length=policy.length,
        radius=policy.radius,
        offset=0.0,
        policy=policy,
        stream=stream,
    )

    tree.metadata["draw_count"] = stream.draw_count
    logger.debug(
        f"Grew tree with {len(tree)} branches, depth {tree.depth()}, "
        f"{stream.draw_count} random draws"
    )
    return tree


def grow_branch(
    tree: BranchTree,
    parent: Optional[int],
    generation: int,
    from_point: Sequence[float],
    tangent: Sequence[float],
    normal: Sequence[float],
    binormal: Sequence[float],
    length: float,
    radius: float,
    offset: float,
    policy: TreePolicy,
    stream: RandomStream,
) -> int:
    """
    Grow one branch and, recursively, all of its descendants.

    Parameters
    ----------
    tree : BranchTree
        Arena the branch and its descendants are added to
    parent : int or None
        Index of the parent branch (None for the root)
    generation : int
        Remaining levels below this branch; 0 grows a leaf
    from_point : array-like
        Attachment point
    tangent, normal, binormal : array-like
        Incoming frame at the attachment point
    length : float
        Branch length
    radius : float
        Radius at the attachment point
    offset : float
        Trunk distance from the root to from_point
    policy : TreePolicy
        Growth parameters
    stream : RandomStream
        Shared random source

    Returns
    -------
    int
        Index of the new branch in tree.branches
    """
    assert generation >= 0, "generation must be >= 0"

    from_point = as_vec3(from_point)
    tangent = as_vec3(tangent)
    normal = as_vec3(normal)
    binormal = as_vec3(binormal)

    to_radius = 0.0 if generation == 0 else radius * policy.radius_attenuation

    angle_normal = stream.range_float(policy.angle_min, policy.angle_max)
    angle_binormal = stream.range_float(policy.angle_min, policy.angle_max)
    rotation = (
        Rotation.from_rotvec(np.radians(angle_normal) * normal)
        * Rotation.from_rotvec(np.radians(angle_binormal) * binormal)
    )
    to_point = from_point + rotation.apply(tangent) * length

    curve = _build_branch_curve(from_point, to_point, normal, binormal, policy, stream)
    segments = _build_segments(curve, normal, binormal, policy)

    branch = Branch(
        index=tree.next_index(),
        parent=parent,
        generation=generation,
        from_point=from_point,
        to_point=to_point,
        length=length,
        from_radius=radius,
        to_radius=to_radius,
        offset=offset,
        curve=curve,
        segments=segments,
    )
    tree.add_branch(branch)

    if generation > 0:
        count = stream.range_int(policy.branch_count_min, policy.branch_count_max + 1)
        last = len(segments) - 1
        for i in range(count):
            # the first child continues the branch from its tip
            index = last if i == 0 else stream.range_int(1, last)
            ratio = index / last
            segment = segments[index]

            grow_branch(
                tree,
                parent=branch.index,
                generation=generation - 1,
                from_point=segment.position,
                tangent=segment.frame.tangent,
                normal=segment.frame.normal,
                binormal=segment.frame.binormal,
                length=length * lerp(1.0, policy.length_attenuation, ratio),
                radius=radius * lerp(1.0, policy.radius_attenuation, ratio),
                offset=offset + length,
                policy=policy,
                stream=stream,
            )

    return branch.index


def _build_branch_curve(
    from_point: np.ndarray,
    to_point: np.ndarray,
    normal: np.ndarray,
    binormal: np.ndarray,
    policy: TreePolicy,
    stream: RandomStream,
) -> CatmullRomCurve:
    """Four-point curve whose interior points are pushed sideways by a random bend."""
    chord = float(np.linalg.norm(to_point - from_point))
    bend_normal = stream.range_float(-policy.bend_degree, policy.bend_degree)
    bend_binormal = stream.range_float(-policy.bend_degree, policy.bend_degree)
    bend = chord * (normal * bend_normal + binormal * bend_binormal)

    return CatmullRomCurve([
        from_point,
        lerp(from_point, to_point, 0.25) + bend,
        lerp(from_point, to_point, 0.75) + bend,
        to_point,
    ])


def _build_segments(
    curve: CatmullRomCurve,
    normal: np.ndarray,
    binormal: np.ndarray,
    policy: TreePolicy,
) -> list:
    frames = compute_frames(
        curve,
        policy.height_segments,
        initial_normal=normal,
        initial_binormal=binormal,
        closed=False,
        policy=policy.frames,
    )
    n = len(frames)
    return [
        Segment(frame=frame, position=curve.point_at(i / (n - 1)))
        for i, frame in enumerate(frames)
    ]


__all__ = [
    "grow_tree",
    "grow_branch",
    "ROOT_ORIGIN",
    "ROOT_TANGENT",
    "ROOT_NORMAL",
    "ROOT_BINORMAL",
]
