"""
PMG Policies - Centralized policy definitions for Procedural Mesh Generation.

This package provides all policy dataclasses used by the meshgen package.
All policies are JSON-serializable and support the "requested vs effective"
pattern for tracking runtime adjustments.

Usage:
    from pmg_policies import TreePolicy, TubePolicy, OperationReport
    from pmg_policies.generation import FramePolicy, load_policy
"""

from .base import (
    OperationReport,
    PolicyValidationError,
    validate_policy,
    coerce_vec3,
    alias_fields,
)

from .generation import (
    FramePolicy,
    TubePolicy,
    TreePolicy,
    OutputPolicy,
    validate_tube_policy,
    validate_tree_policy,
    load_policy,
)

__all__ = [
    # Base
    "OperationReport",
    "PolicyValidationError",
    "validate_policy",
    "coerce_vec3",
    "alias_fields",
    # Generation
    "FramePolicy",
    "TubePolicy",
    "TreePolicy",
    "OutputPolicy",
    "validate_tube_policy",
    "validate_tree_policy",
    "load_policy",
]
