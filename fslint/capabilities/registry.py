"""Capability registry and dispatcher.

The registry owns every registered capability, remembers which ones are
enabled, and runs the enabled ones against a ScanContext with error
isolation: a failing capability is logged and left out of the result, the
others still run.

Example:
    >>> registry = CapabilityRegistry()
    >>> registry.register(FileAgeCapability())
    >>> registry.enable("file-age")
    >>> findings = registry.run(context)
"""

import logging
import threading
from typing import Dict, List, Optional, Set

from fslint.models import CapabilityDescriptor, Finding, ScanContext

from .base import Capability, CapabilityError, CapabilityExecutionError

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """Holds capabilities in registration order and dispatches checks.

    Attributes:
        error_findings: When True, a failing capability contributes an
            Error-status Finding instead of being left out.
    """

    def __init__(self, error_findings: bool = False) -> None:
        """Initialize an empty registry.

        Args:
            error_findings: Replace failed checks with Error findings instead
                of omitting them. Defaults to False (omit and log).
        """
        self.error_findings = error_findings
        self._capabilities: Dict[str, Capability] = {}
        self._descriptors: Dict[str, CapabilityDescriptor] = {}
        self._order: List[str] = []
        self._enabled: Set[str] = set()
        self._errors: List[str] = []
        self._errors_lock = threading.Lock()

    def register(self, capability: Capability) -> CapabilityDescriptor:
        """Register a capability; enable it if its descriptor says so.

        Returns:
            The descriptor the capability was registered under.

        Raises:
            ValueError: If a capability with the same name is already registered.
        """
        descriptor = capability.describe()
        if descriptor.name in self._capabilities:
            raise ValueError(f"Capability already registered: {descriptor.name}")

        self._capabilities[descriptor.name] = capability
        self._descriptors[descriptor.name] = descriptor
        self._order.append(descriptor.name)
        if descriptor.enabled_by_default:
            self._enabled.add(descriptor.name)
        return descriptor

    def enable(self, name: str) -> bool:
        """Enable a registered capability.

        Returns:
            True if the capability is now enabled, False if it is unknown.
        """
        if name not in self._capabilities:
            self._record_error(f"Cannot enable unknown capability: {name}")
            return False
        self._enabled.add(name)
        return True

    def disable(self, name: str) -> None:
        """Disable a capability. Disabling twice is a no-op."""
        if name not in self._enabled:
            return
        self._enabled.discard(name)
        self._cleanup(name)

    def set_enabled(self, names: List[str]) -> None:
        """Replace the enabled set. Unknown names are reported and ignored."""
        requested: Set[str] = set()
        for name in names:
            if name in self._capabilities:
                requested.add(name)
            else:
                self._record_error(f"Cannot enable unknown capability: {name}")

        for name in self._order:
            if name in self._enabled and name not in requested:
                self._enabled.discard(name)
                self._cleanup(name)
        self._enabled |= requested

    def is_enabled(self, name: str) -> bool:
        return name in self._enabled

    def is_registered(self, name: str) -> bool:
        return name in self._capabilities

    def list_registered(self) -> List[str]:
        """Names of every registered capability, in registration order."""
        return list(self._order)

    def list_enabled(self) -> List[str]:
        """Names of enabled capabilities, in registration order."""
        return [name for name in self._order if name in self._enabled]

    def descriptors(self) -> List[CapabilityDescriptor]:
        return [self._descriptors[name] for name in self._order]

    def get(self, name: str) -> Optional[Capability]:
        return self._capabilities.get(name)

    def get_descriptor(self, name: str) -> Optional[CapabilityDescriptor]:
        return self._descriptors.get(name)

    def initialize_all(self, configs: Dict[str, Dict[str, str]]) -> Dict[str, str]:
        """Push per-capability configuration through ``initialize``.

        A rejected configuration is logged and reported; the capability stays
        registered and keeps its default behavior.

        Args:
            configs: Mapping of capability name to its string options.

        Returns:
            Mapping of capability name to error message for every failure.
        """
        failures: Dict[str, str] = {}
        for name in self._order:
            config = configs.get(name)
            if config is None:
                continue
            try:
                self._capabilities[name].initialize(dict(config))
            except CapabilityError as e:
                failures[name] = str(e)
                self._record_error(f"Capability '{name}' initialization failed: {e}")
            except Exception as e:
                failures[name] = str(e)
                logger.exception("Capability '%s' crashed during initialization", name)
                with self._errors_lock:
                    self._errors.append(f"Capability '{name}' initialization failed: {e}")
        return failures

    def cleanup_all(self) -> None:
        """Call ``cleanup`` on every registered capability."""
        for name in self._order:
            self._cleanup(name)

    def run(self, context: ScanContext) -> List[Finding]:
        """Run every enabled capability against one file.

        Findings come back in registration order. Capabilities that fail are
        absent from the list (or replaced with an Error finding when
        ``error_findings`` is set); they never stop the remaining ones.
        """
        findings: List[Finding] = []

        for name in self._order:
            if name not in self._enabled:
                continue
            capability = self._capabilities[name]
            try:
                finding = capability.check(context)
                if not isinstance(finding, Finding):
                    raise CapabilityExecutionError(
                        f"check() returned {type(finding).__name__}, expected Finding", name
                    )
                if finding.capability_name != name:
                    raise CapabilityExecutionError(
                        f"finding attributed to '{finding.capability_name}'", name
                    )
                findings.append(finding)
            except CapabilityError as e:
                self._record_error(f"Capability '{name}' error on {context.path}: {e}")
                if self.error_findings:
                    findings.append(self._error_finding(name, str(e)))
            except Exception as e:
                logger.exception("Capability '%s' crashed on %s", name, context.path)
                with self._errors_lock:
                    self._errors.append(f"Capability '{name}' crashed on {context.path}: {e}")
                if self.error_findings:
                    findings.append(self._error_finding(name, str(e)))

        return findings

    def get_errors(self) -> List[str]:
        """Get list of errors recorded by the registry."""
        with self._errors_lock:
            return self._errors.copy()

    def clear_errors(self) -> None:
        """Clear the list of accumulated errors."""
        with self._errors_lock:
            self._errors.clear()

    def take_errors(self) -> List[str]:
        """Return the accumulated errors and clear the list in one step."""
        with self._errors_lock:
            errors, self._errors = self._errors, []
        return errors

    def _cleanup(self, name: str) -> None:
        try:
            self._capabilities[name].cleanup()
        except Exception as e:
            self._record_error(f"Capability '{name}' cleanup failed: {e}")

    def _error_finding(self, name: str, message: str) -> Finding:
        return Finding.error(name, message).with_tags(["capability-error"])

    def _record_error(self, message: str) -> None:
        logger.warning(message)
        with self._errors_lock:
            self._errors.append(message)
