"""
Generation policies for PMG.

This module contains all policy dataclasses used by the generation module.
All policies are JSON-serializable and support the "requested vs effective" pattern.

CONVENTIONS
-----------
Coordinates are right-handed with +Y up. Angles on policies are in DEGREES;
lengths and radii are in scene units.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any, List, Literal, Type, TypeVar, Union
import json
import logging

from .base import alias_fields, validate_policy, check_min, check_unit_interval

logger = logging.getLogger(__name__)

P = TypeVar("P")


# Field aliases for backward compatibility
TREE_ALIASES = {
    "branches_min": "branch_count_min",
    "branches_max": "branch_count_max",
    "seed": "random_seed",
}

TUBE_ALIASES = {
    "segments": "tubular_segments",
}


@dataclass
class FramePolicy:
    """
    Policy for moving-frame computation along a curve.

    JSON Schema:
    {
        "transport": "rotation" | "double_reflection",
        "tangent_delta": float (curve parameter),
        "epsilon": float
    }

    "rotation" rotates each normal by the minimal rotation taking one tangent
    onto the next (Rodrigues). "double_reflection" uses the rotation
    minimizing frame built from two reflections, which also accounts for the
    chord between samples.
    """
    transport: Literal["rotation", "double_reflection"] = "rotation"
    tangent_delta: float = 1e-3
    epsilon: float = 1e-10

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "FramePolicy":
        return FramePolicy(**{k: v for k, v in d.items() if k in FramePolicy.__dataclass_fields__})


@dataclass
class TubePolicy:
    """
    Policy for sweeping a tube along a single curve.

    JSON Schema:
    {
        "tubular_segments": int,
        "radial_segments": int,
        "radius": float,
        "end_radius": float | null,
        "closed": bool,
        "frames": FramePolicy
    }

    end_radius of null keeps the radius constant along the tube.
    """
    tubular_segments: int = 20
    radial_segments: int = 8
    radius: float = 0.5
    end_radius: Optional[float] = None
    closed: bool = False
    frames: FramePolicy = field(default_factory=FramePolicy)

    def __post_init__(self):
        if isinstance(self.frames, dict):
            self.frames = FramePolicy.from_dict(self.frames)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "TubePolicy":
        d = alias_fields(d, TUBE_ALIASES)
        return TubePolicy(**{k: v for k, v in d.items() if k in TubePolicy.__dataclass_fields__})


@dataclass
class TreePolicy:
    """
    Policy for recursive branch growth and tree meshing.

    JSON Schema:
    {
        "generations": int,
        "length": float,
        "radius": float,
        "length_attenuation": float (0-1],
        "radius_attenuation": float (0-1],
        "branch_count_min": int,
        "branch_count_max": int,
        "angle_min": float (degrees),
        "angle_max": float (degrees),
        "bend_degree": float,
        "height_segments": int,
        "radial_segments": int,
        "random_seed": int,
        "frames": FramePolicy
    }

    generations counts tree levels: 1 grows a single leaf branch, each
    additional generation adds one level of children.
    """
    generations: int = 5
    length: float = 1.0
    radius: float = 0.15
    length_attenuation: float = 0.86
    radius_attenuation: float = 0.7
    branch_count_min: int = 1
    branch_count_max: int = 3
    angle_min: float = -40.0
    angle_max: float = 40.0
    bend_degree: float = 0.1
    height_segments: int = 10
    radial_segments: int = 8
    random_seed: int = 0
    frames: FramePolicy = field(default_factory=FramePolicy)

    def __post_init__(self):
        if isinstance(self.frames, dict):
            self.frames = FramePolicy.from_dict(self.frames)

    @property
    def root_generation(self) -> int:
        """Generation number of the root branch (leaves are generation 0)."""
        return max(self.generations - 1, 0)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "TreePolicy":
        d = alias_fields(d, TREE_ALIASES)
        return TreePolicy(**{k: v for k, v in d.items() if k in TreePolicy.__dataclass_fields__})


@dataclass
class OutputPolicy:
    """
    Policy for output file generation.

    Controls output directory, mesh file format, and naming conventions.

    JSON Schema:
    {
        "output_dir": str,
        "file_format": "obj" | "stl" | "ply" | "glb",
        "naming_convention": "default" | "timestamped",
        "save_reports": bool
    }
    """
    output_dir: str = "./output"
    file_format: Literal["obj", "stl", "ply", "glb"] = "obj"
    naming_convention: Literal["default", "timestamped"] = "default"
    save_reports: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "OutputPolicy":
        return OutputPolicy(**{k: v for k, v in d.items() if k in OutputPolicy.__dataclass_fields__})


def _validate_frame_policy(policy: FramePolicy) -> List[str]:
    errors = []
    if policy.transport not in ("rotation", "double_reflection"):
        errors.append(f"frames.transport must be 'rotation' or 'double_reflection', got {policy.transport!r}")
    if not (0.0 < policy.tangent_delta < 0.5):
        errors.append(f"frames.tangent_delta must be in (0, 0.5), got {policy.tangent_delta}")
    if policy.epsilon <= 0.0:
        errors.append(f"frames.epsilon must be > 0, got {policy.epsilon}")
    return errors


def validate_tube_policy(policy: TubePolicy) -> List[str]:
    """
    Check a TubePolicy against the bounds the tessellator assumes.

    Returns
    -------
    List[str]
        Validation error messages (empty if valid)
    """
    errors = validate_policy(policy, ["tubular_segments", "radial_segments", "radius"])
    if errors:
        return errors

    check_min(errors, "tubular_segments", policy.tubular_segments, 3)
    check_min(errors, "radial_segments", policy.radial_segments, 3)
    if policy.radius <= 0.0:
        errors.append(f"radius must be > 0, got {policy.radius}")
    check_min(errors, "end_radius", policy.end_radius, 0.0)
    errors.extend(_validate_frame_policy(policy.frames))
    return errors


def validate_tree_policy(policy: TreePolicy) -> List[str]:
    """
    Check a TreePolicy against the bounds the branch grower assumes.

    Returns
    -------
    List[str]
        Validation error messages (empty if valid)
    """
    errors = validate_policy(policy, [
        "generations", "length", "radius", "height_segments", "radial_segments",
    ])
    if errors:
        return errors

    check_min(errors, "generations", policy.generations, 0)
    check_min(errors, "height_segments", policy.height_segments, 3)
    check_min(errors, "radial_segments", policy.radial_segments, 3)
    check_min(errors, "branch_count_min", policy.branch_count_min, 1)
    if policy.branch_count_max < policy.branch_count_min:
        errors.append(
            f"branch_count_max ({policy.branch_count_max}) must be >= "
            f"branch_count_min ({policy.branch_count_min})"
        )
    if policy.angle_max < policy.angle_min:
        errors.append(f"angle_max ({policy.angle_max}) must be >= angle_min ({policy.angle_min})")
    check_unit_interval(errors, "length_attenuation", policy.length_attenuation)
    check_unit_interval(errors, "radius_attenuation", policy.radius_attenuation)
    check_min(errors, "bend_degree", policy.bend_degree, 0.0)
    if policy.length <= 0.0:
        errors.append(f"length must be > 0, got {policy.length}")
    if policy.radius <= 0.0:
        errors.append(f"radius must be > 0, got {policy.radius}")
    errors.extend(_validate_frame_policy(policy.frames))
    return errors


def load_policy(path: Union[str, Path], policy_cls: Type[P]) -> P:
    """
    Load a policy from a JSON file.

    Parameters
    ----------
    path : str or Path
        JSON file holding the policy fields
    policy_cls : type
        Policy class exposing from_dict (e.g. TreePolicy)

    Returns
    -------
    Policy instance
    """
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"Policy file {path} must contain a JSON object")
    logger.debug(f"Loaded {policy_cls.__name__} from {path}")
    return policy_cls.from_dict(data)


__all__ = [
    "FramePolicy",
    "TubePolicy",
    "TreePolicy",
    "OutputPolicy",
    "validate_tube_policy",
    "validate_tree_policy",
    "load_policy",
]
