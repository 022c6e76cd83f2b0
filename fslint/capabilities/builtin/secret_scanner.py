"""Secret scanner capability: looks for leaked credentials in text files."""

import re
from pathlib import Path
from typing import Dict, List, Pattern, Tuple

from fslint.capabilities import helpers
from fslint.capabilities.base import Capability, CapabilityIOError
from fslint.models import CapabilityDescriptor, Finding, FindingStatus, ScanContext

SECRET_PATTERNS: List[Tuple[str, Pattern[str]]] = [
    ("AWS Access Key", re.compile(r"AKIA[0-9A-Z]{16}")),
    ("Generic API Key", re.compile(r"api[_-]?key[\"']?\s*[:=]\s*[\"']?([a-zA-Z0-9]{32,})")),
    ("Generic Secret", re.compile(r"secret[\"']?\s*[:=]\s*[\"']?([a-zA-Z0-9]{32,})")),
    ("GitHub Token", re.compile(r"ghp_[a-zA-Z0-9]{36}")),
    ("GitHub OAuth", re.compile(r"gho_[a-zA-Z0-9]{36}")),
    ("Slack Token", re.compile(r"xox[baprs]-[0-9]{10,13}-[0-9]{10,13}-[a-zA-Z0-9]{24,}")),
    (
        "Slack Webhook",
        re.compile(
            r"https://hooks\.slack\.com/services/T[a-zA-Z0-9_]{8}/B[a-zA-Z0-9_]{8}/[a-zA-Z0-9_]{24}"
        ),
    ),
    ("Private Key", re.compile(r"-----BEGIN (RSA |EC |OPENSSH )?PRIVATE KEY-----")),
    ("JWT Token", re.compile(r"eyJ[a-zA-Z0-9_-]*\.eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*")),
    ("Password in code", re.compile(r"password[\"']?\s*[:=]\s*[\"']([^\s\"']{8,})")),
]

TEXT_EXTENSIONS = {
    "js", "ts", "py", "rb", "go", "java", "c", "cpp", "h", "hpp", "rs",
    "sh", "bash", "zsh", "yml", "yaml", "json", "toml", "env", "txt", "md",
    "config", "cfg", "conf", "properties",
}

DEFAULT_MAX_FILE_SIZE = 1024 * 1024


class SecretScannerCapability(Capability):
    """Scans source and config files for API keys, tokens and private keys.

    Attributes:
        max_file_size: Files larger than this many bytes are skipped.
    """

    def __init__(self, max_file_size: int = DEFAULT_MAX_FILE_SIZE) -> None:
        self.max_file_size = max_file_size

    @classmethod
    def describe(cls) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            name="secret-scanner",
            version="0.1.0",
            description="Scans for exposed secrets and API keys in source files",
            enabled_by_default=False,
            author="fslint contributors",
        )

    def should_scan_file(self, path: Path, size: int) -> bool:
        if size > self.max_file_size:
            return False
        return helpers.extension(path) in TEXT_EXTENSIONS

    def scan_content(self, content: str) -> List[Tuple[str, int]]:
        """Return (secret type, 1-based line number) for every hit."""
        hits: List[Tuple[str, int]] = []
        lines = content.splitlines()
        for secret_type, pattern in SECRET_PATTERNS:
            for line_number, line in enumerate(lines, start=1):
                if pattern.search(line):
                    hits.append((secret_type, line_number))
        return hits

    def check(self, context: ScanContext) -> Finding:
        if not self.should_scan_file(context.path, context.size):
            return Finding.skipped(self.name)

        try:
            content = context.path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise CapabilityIOError(f"Failed to read file: {e}", self.name) from e

        hits = self.scan_content(content)
        if not hits:
            return Finding.inactive(self.name)

        types = list(dict.fromkeys(secret_type for secret_type, _ in hits))
        lines = [str(line_number) for _, line_number in hits]
        return (
            Finding(
                self.name,
                FindingStatus.ERROR,
                message=f"{len(hits)} secret(s) found: {', '.join(types)}",
                color="red",
            )
            .with_tags(["security", "secrets"])
            .with_metadata("secret_count", len(hits))
            .with_metadata("secret_types", ", ".join(types))
            .with_metadata("lines", ", ".join(lines))
        )

    def initialize(self, config: Dict[str, str]) -> None:
        self.max_file_size = self._parse_int_option(config, "max_file_size", self.max_file_size)
