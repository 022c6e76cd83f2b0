"""Capability contract, shared helpers and the capability registry."""

from fslint.capabilities.base import (
    Capability,
    CapabilityConfigError,
    CapabilityError,
    CapabilityExecutionError,
    CapabilityIOError,
    CapabilityNotApplicableError,
    ExternalDependencyError,
)
from fslint.capabilities.registry import CapabilityRegistry

__all__ = [
    "Capability",
    "CapabilityConfigError",
    "CapabilityError",
    "CapabilityExecutionError",
    "CapabilityIOError",
    "CapabilityNotApplicableError",
    "CapabilityRegistry",
    "ExternalDependencyError",
]
