"""
Export utilities for generated meshes.

Every artifact of one generation lands in a run directory named after what
was generated ("tree", "tube", or "tree_20240101_120000" when timestamped).
Meshes are written through trimesh, so any format trimesh can export is
available; reports and branch trees are written as JSON.
"""

from typing import Optional, Dict, Any, Union
from pathlib import Path
import json
import time
import logging

from pmg_policies import OutputPolicy, OperationReport

from ..core.mesh import MeshData
from ..core.tree import BranchTree

logger = logging.getLogger(__name__)


def make_run_dir(
    output_policy: Optional[OutputPolicy] = None,
    run_name: Optional[str] = None,
    kind: str = "mesh",
) -> Path:
    """
    Create the directory one generation run writes into.

    Parameters
    ----------
    output_policy : OutputPolicy, optional
        Supplies output_dir and the naming convention
    run_name : str, optional
        Explicit directory name; wins over the naming convention
    kind : str
        What is being generated ("tree", "tube"); names the directory
        when run_name is not given

    Returns
    -------
    Path
        The created directory
    """
    if output_policy is None:
        output_policy = OutputPolicy()

    name = run_name or kind
    if not run_name and output_policy.naming_convention == "timestamped":
        name = f"{kind}_{time.strftime('%Y%m%d_%H%M%S')}"

    run_dir = Path(output_policy.output_dir) / name
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def _artifact_path(
    rel_path: str,
    output_policy: OutputPolicy,
    run_dir: Optional[Path],
) -> Path:
    if run_dir is None:
        run_dir = make_run_dir(output_policy)
    path = Path(run_dir) / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def save_mesh(
    mesh: MeshData,
    rel_path: str,
    output_policy: Optional[OutputPolicy] = None,
    run_dir: Optional[Path] = None,
) -> Path:
    """
    Save a mesh to file.

    The file type follows rel_path's suffix; a path without a suffix gets
    output_policy.file_format.

    Parameters
    ----------
    mesh : MeshData
        Mesh to save
    rel_path : str
        Relative path within run directory (e.g., "tree.obj")
    output_policy : OutputPolicy, optional
        Policy controlling format and location
    run_dir : Path, optional
        Run directory (created if not provided)

    Returns
    -------
    Path
        Path to the saved file
    """
    if output_policy is None:
        output_policy = OutputPolicy()

    if mesh.is_empty():
        raise ValueError("Cannot export an empty mesh")

    output_path = _artifact_path(rel_path, output_policy, run_dir)
    if not output_path.suffix:
        output_path = output_path.with_suffix(f".{output_policy.file_format}")

    # texture coordinates only survive in OBJ
    mesh.to_trimesh(include_uv=output_path.suffix == ".obj").export(str(output_path))
    logger.info(
        f"Saved mesh ({mesh.vertex_count} vertices, {mesh.triangle_count} triangles) "
        f"to {output_path}"
    )

    return output_path


def write_json(
    data: Union[Dict[str, Any], OperationReport],
    rel_path: str,
    output_policy: Optional[OutputPolicy] = None,
    run_dir: Optional[Path] = None,
) -> Path:
    """
    Write a report (or any JSON-able dict) next to the mesh it describes.

    Objects with a to_dict method are converted first; values json cannot
    encode are written as strings.
    """
    if output_policy is None:
        output_policy = OutputPolicy()

    if hasattr(data, "to_dict"):
        data = data.to_dict()

    output_path = _artifact_path(rel_path, output_policy, run_dir)
    output_path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    logger.info(f"Saved JSON to {output_path}")

    return output_path


def save_tree(
    tree: BranchTree,
    rel_path: str,
    output_policy: Optional[OutputPolicy] = None,
    run_dir: Optional[Path] = None,
) -> Path:
    """Save a branch tree (branches, curves and segment frames) as JSON."""
    return write_json(tree.to_dict(), rel_path, output_policy, run_dir)


__all__ = [
    "make_run_dir",
    "save_mesh",
    "write_json",
    "save_tree",
]
