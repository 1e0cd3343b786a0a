"""
Unified generation API for tubes and trees.

These are the validated entry points: each checks its policy with the
configuration layer, then runs the (assertion-guarded) core build.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import logging

from pmg_policies import (
    OperationReport,
    PolicyValidationError,
    TreePolicy,
    TubePolicy,
    validate_tree_policy,
    validate_tube_policy,
)

from ..core.curves import Curve
from ..core.mesh import MeshData
from ..core.random_stream import RandomStream
from ..core.tree import BranchTree
from ..ops.growth import grow_tree
from ..ops.mesh.synthesis import synthesize_tree_mesh
from ..ops.primitives.tube_sweep import sweep_tube_along_curve

logger = logging.getLogger(__name__)


@dataclass
class TreeResult:
    """Output of generate_tree."""
    mesh: MeshData
    tree: BranchTree
    report: OperationReport


def generate_tube(
    curve: Optional[Curve],
    policy: Optional[TubePolicy] = None,
) -> Tuple[MeshData, OperationReport]:
    """
    Sweep a tube along a curve.

    Parameters
    ----------
    curve : Curve or None
        Centerline; None yields an empty mesh
    policy : TubePolicy, optional
        Tube parameters

    Returns
    -------
    mesh : MeshData
    report : OperationReport

    Raises
    ------
    PolicyValidationError
        If the policy is out of range
    """
    if policy is None:
        policy = TubePolicy()

    errors = validate_tube_policy(policy)
    if errors:
        raise PolicyValidationError("TubePolicy", errors)

    return sweep_tube_along_curve(curve, policy)


def generate_tree(
    policy: Optional[TreePolicy] = None,
    seed: Optional[int] = None,
) -> TreeResult:
    """
    Grow a tree and synthesize its mesh.

    Parameters
    ----------
    policy : TreePolicy, optional
        Tree parameters
    seed : int, optional
        Overrides policy.random_seed

    Returns
    -------
    TreeResult
        Mesh, branch tree and synthesis report

    Raises
    ------
    PolicyValidationError
        If the policy is out of range
    """
    if policy is None:
        policy = TreePolicy()

    errors = validate_tree_policy(policy)
    if errors:
        raise PolicyValidationError("TreePolicy", errors)

    requested = policy.to_dict()
    if seed is not None:
        policy = TreePolicy.from_dict({**requested, "random_seed": seed})

    stream = RandomStream(policy.random_seed)
    tree = grow_tree(policy, stream)
    mesh, report = synthesize_tree_mesh(tree, policy)

    report.operation = "generate_tree"
    report.requested_policy = requested
    report.effective_policy = policy.to_dict()
    report.metadata["random_seed"] = policy.random_seed
    report.metadata["draw_count"] = stream.draw_count
    if policy.generations == 0:
        report.add_warning("generations=0 grows a single leaf branch, same as generations=1")

    logger.info(
        f"Generated tree (seed {policy.random_seed}): {len(tree)} branches, "
        f"{mesh.vertex_count} vertices"
    )
    return TreeResult(mesh=mesh, tree=tree, report=report)


__all__ = [
    "TreeResult",
    "generate_tube",
    "generate_tree",
]
