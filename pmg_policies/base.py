"""
Base utilities for PMG policies.

This module provides shared helpers and the OperationReport dataclass
used across all policy-driven operations.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any, List, Tuple
import json


class PolicyValidationError(ValueError):
    """Raised by public entry points when a policy fails validation."""

    def __init__(self, policy_name: str, errors: List[str]):
        self.policy_name = policy_name
        self.errors = list(errors)
        super().__init__(f"Invalid {policy_name}: " + "; ".join(self.errors))


def validate_policy(policy: Any, required_fields: Optional[List[str]] = None) -> List[str]:
    """
    Validate a policy object.

    Parameters
    ----------
    policy : Any
        Policy dataclass instance to validate
    required_fields : List[str], optional
        List of field names that must be non-None

    Returns
    -------
    List[str]
        List of validation error messages (empty if valid)
    """
    errors = []

    if required_fields:
        for field_name in required_fields:
            if not hasattr(policy, field_name):
                errors.append(f"Missing required field: {field_name}")
            elif getattr(policy, field_name) is None:
                errors.append(f"Required field is None: {field_name}")

    return errors


def check_min(errors: List[str], name: str, value: Any, minimum: float) -> None:
    """Append an error if value is below minimum."""
    if value is not None and value < minimum:
        errors.append(f"{name} must be >= {minimum}, got {value}")


def check_unit_interval(errors: List[str], name: str, value: Any) -> None:
    """Append an error if value is outside the half-open interval (0, 1]."""
    if value is not None and not (0.0 < value <= 1.0):
        errors.append(f"{name} must be in (0, 1], got {value}")


def coerce_vec3(
    value: Any,
    default: Tuple[float, float, float] = (0.0, 0.0, 0.0)
) -> Tuple[float, float, float]:
    """
    Coerce a control point or direction to an (x, y, z) tuple.

    Accepts a sequence of at least 3 numbers, an "x,y,z" string (as typed
    on the command line), or a {"x", "y", "z"} dict. Anything else yields
    default.
    """
    if value is None:
        return default

    if isinstance(value, str):
        value = value.split(",")
    elif isinstance(value, dict):
        if not all(k in value for k in ("x", "y", "z")):
            return default
        value = [value["x"], value["y"], value["z"]]

    try:
        if len(value) < 3:
            return default
        return (float(value[0]), float(value[1]), float(value[2]))
    except (TypeError, ValueError):
        return default


def alias_fields(d: Dict[str, Any], aliases: Dict[str, str]) -> Dict[str, Any]:
    """
    Apply field aliases to a dictionary.

    This allows legacy field names to be mapped to canonical names.

    Parameters
    ----------
    d : dict
        Input dictionary
    aliases : dict
        Mapping of legacy_name -> canonical_name

    Returns
    -------
    dict
        Dictionary with aliases applied
    """
    result = d.copy()
    for legacy_name, canonical_name in aliases.items():
        if legacy_name in result and canonical_name not in result:
            result[canonical_name] = result.pop(legacy_name)
    return result


@dataclass
class OperationReport:
    """
    Standard report structure for all operations.

    Every operation returns a report with requested vs effective policy,
    warnings, and operation-specific metadata.

    The "requested vs effective" pattern allows tracking of runtime
    adjustments (e.g. a generation count clamped to the root generation).
    """
    operation: str = "unknown"
    success: bool = True
    requested_policy: Dict[str, Any] = field(default_factory=dict)
    effective_policy: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def add_error(self, message: str) -> None:
        """Add an error message and mark as failed."""
        self.errors.append(message)
        self.success = False

    def merge(self, other: "OperationReport") -> None:
        """Merge another report into this one."""
        self.warnings.extend(other.warnings)
        self.errors.extend(other.errors)
        if not other.success:
            self.success = False
        self.metadata.update(other.metadata)


__all__ = [
    "OperationReport",
    "PolicyValidationError",
    "validate_policy",
    "check_min",
    "check_unit_interval",
    "coerce_vec3",
    "alias_fields",
]
