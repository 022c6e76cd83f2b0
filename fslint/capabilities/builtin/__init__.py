"""Built-in capabilities shipped with fslint."""

from typing import Optional

from fslint.capabilities.builtin.ai_detection import AiDetectionCapability
from fslint.capabilities.builtin.duplicate_finder import DuplicateFinderCapability
from fslint.capabilities.builtin.file_age import FileAgeCapability
from fslint.capabilities.builtin.git_status import GitStatusCapability
from fslint.capabilities.builtin.grouping import GroupingCapability
from fslint.capabilities.builtin.ocr_status import OcrStatusCapability
from fslint.capabilities.builtin.secret_scanner import SecretScannerCapability
from fslint.capabilities.builtin.version_detection import VersionDetectionCapability
from fslint.capabilities.registry import CapabilityRegistry

BUILTIN_CAPABILITIES = [
    GitStatusCapability,
    FileAgeCapability,
    GroupingCapability,
    VersionDetectionCapability,
    OcrStatusCapability,
    AiDetectionCapability,
    DuplicateFinderCapability,
    SecretScannerCapability,
]


def create_default_registry(registry: Optional[CapabilityRegistry] = None) -> CapabilityRegistry:
    """Register every built-in capability, in display order.

    Args:
        registry: Registry to fill. A new one is created when omitted.

    Returns:
        The filled registry. Capabilities with ``enabled_by_default`` are
        enabled.
    """
    if registry is None:
        registry = CapabilityRegistry()
    for capability_class in BUILTIN_CAPABILITIES:
        registry.register(capability_class())
    return registry


__all__ = [
    "BUILTIN_CAPABILITIES",
    "create_default_registry",
    "AiDetectionCapability",
    "DuplicateFinderCapability",
    "FileAgeCapability",
    "GitStatusCapability",
    "GroupingCapability",
    "OcrStatusCapability",
    "SecretScannerCapability",
    "VersionDetectionCapability",
]
