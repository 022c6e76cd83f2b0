"""Capability contract for fslint.

A capability is one pluggable inspection unit. The scanner hands it a
ScanContext per file and expects exactly one Finding back, or a
CapabilityError when the check could not be performed.

Contract:
    - ``check`` may be called concurrently for different files. A capability
      that owns shared mutable state must guard it with its own lock.
    - ``check`` should depend only on the file identity, its content and the
      outside world at call time, otherwise cached findings can go stale.
    - "Nothing to report" is an Inactive or Skipped finding, never an error.
    - ``initialize`` runs once before any check and may reject configuration.
    - ``cleanup`` runs when the capability is disabled or discarded.

Example:
    >>> class SizeCapability(Capability):
    ...     @classmethod
    ...     def describe(cls) -> CapabilityDescriptor:
    ...         return CapabilityDescriptor("size", "0.1.0", "Flags big files")
    ...
    ...     def check(self, context: ScanContext) -> Finding:
    ...         if context.size > 1_000_000:
    ...             return Finding.alert(self.name, "Big file")
    ...         return Finding.inactive(self.name)
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from fslint.models import CapabilityDescriptor, Finding, ScanContext


class CapabilityError(Exception):
    """Base class for errors raised by a capability.

    Attributes:
        capability_name: Name of the capability that failed, if known.
    """

    kind = "Capability error"

    def __init__(self, message: str, capability_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.capability_name = capability_name

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class CapabilityIOError(CapabilityError):
    """Reading the file (or another resource) failed."""

    kind = "IO error"


class CapabilityConfigError(CapabilityError):
    """Configuration passed to ``initialize`` was rejected."""

    kind = "Capability configuration error"


class CapabilityExecutionError(CapabilityError):
    """The check could not be completed."""

    kind = "Capability execution error"


class CapabilityNotApplicableError(CapabilityError):
    """The capability cannot handle this input at all."""

    kind = "Capability not applicable"


class ExternalDependencyError(CapabilityError):
    """An external tool or service the capability relies on failed."""

    kind = "External dependency error"


class Capability(ABC):
    """Base class every inspection capability derives from."""

    @classmethod
    @abstractmethod
    def describe(cls) -> CapabilityDescriptor:
        """Return the registration metadata of this capability."""

    @abstractmethod
    def check(self, context: ScanContext) -> Finding:
        """Inspect one file and return exactly one Finding.

        Raises:
            CapabilityError: If the check could not be performed.
        """

    def initialize(self, config: Dict[str, str]) -> None:
        """Apply capability-specific configuration.

        Raises:
            CapabilityConfigError: If a value is malformed.
        """

    def cleanup(self) -> None:
        """Release capability-private state."""

    @property
    def name(self) -> str:
        return self.describe().name

    def _parse_int_option(self, config: Dict[str, str], key: str, current: int) -> int:
        """Read an integer option from ``config``, keeping ``current`` if absent."""
        if key not in config:
            return current
        try:
            return int(config[key])
        except (TypeError, ValueError) as e:
            raise CapabilityConfigError(f"Invalid {key}: {e}", self.name) from e
