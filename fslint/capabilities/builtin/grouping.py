"""Grouping capability: identifies the family a file belongs to."""

from typing import List, Optional, Pattern, Tuple

from fslint.capabilities import helpers
from fslint.capabilities.base import Capability
from fslint.capabilities.helpers import Patterns
from fslint.models import CapabilityDescriptor, Finding, FindingStatus, ScanContext

# (pattern, group name, color, tag), evaluated in order; first match wins
GROUP_RULES: List[Tuple[Pattern[str], str, str, str]] = [
    (Patterns.NODE_MODULES, "Node Dependencies", "yellow", "dependencies"),
    (Patterns.DS_STORE, "macOS System File", "gray", "system"),
    (Patterns.TEMP_FILES, "Temporary File", "gray", "temp"),
    (Patterns.BUILD_ARTIFACTS, "Build Artifact", "blue", "build"),
    (Patterns.IMAGE_FILES, "Image File", "magenta", "media"),
    (Patterns.VIDEO_FILES, "Video File", "magenta", "media"),
    (Patterns.AUDIO_FILES, "Audio File", "magenta", "media"),
    (Patterns.DOCUMENT_FILES, "Document", "cyan", "document"),
    (Patterns.ARCHIVE_FILES, "Archive", "yellow", "archive"),
]


class GroupingCapability(Capability):
    """Tags files as dependencies, system files, media, documents and so on."""

    @classmethod
    def describe(cls) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            name="grouping",
            version="0.1.0",
            description="Identifies file groups: node_modules, .DS_Store, media sets, bundles",
            enabled_by_default=True,
            author="fslint contributors",
        )

    def detect_group(self, context: ScanContext) -> Optional[Tuple[str, str, str]]:
        """Return (group name, color, tag) for the file, or None.

        Patterns see the path relative to the scan root, so directories above
        the root never decide the group.
        """
        path = context.relative_path or context.path
        for pattern, group_name, color, tag in GROUP_RULES:
            if helpers.matches(path, pattern):
                return group_name, color, tag

        if helpers.is_hidden(context.path):
            return "Hidden File", "gray", "hidden"

        return None

    def check(self, context: ScanContext) -> Finding:
        group = self.detect_group(context)
        if group is None:
            return Finding.inactive(self.name)

        group_name, color, tag = group
        return (
            Finding(self.name, FindingStatus.ACTIVE, message=group_name, color=color)
            .with_tags(["group", tag])
            .with_metadata("group", group_name)
            .with_metadata("group_tag", tag)
        )
