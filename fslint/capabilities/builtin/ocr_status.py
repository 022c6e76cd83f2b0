"""OCR status capability: tells whether a PDF carries a text layer."""

from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from fslint.capabilities import helpers
from fslint.capabilities.base import Capability
from fslint.models import CapabilityDescriptor, Finding, FindingStatus, ScanContext


def has_text_layer(path: Path) -> bool:
    """Return True if any page of the PDF yields extractable text.

    Pages are read in order and the scan stops at the first page with text,
    so searchable documents are decided after their first page.

    Raises:
        PdfReadError: If the file is not a readable PDF.
        OSError: If the file cannot be opened.
    """
    reader = PdfReader(path)
    for page in reader.pages:
        if (page.extract_text() or "").strip():
            return True
    return False


class OcrStatusCapability(Capability):
    """Checks whether PDFs have searchable text or still need OCR."""

    @classmethod
    def describe(cls) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            name="ocr-status",
            version="0.1.0",
            description="Checks if PDFs have searchable text (OCR status)",
            enabled_by_default=False,
            author="fslint contributors",
        )

    def check(self, context: ScanContext) -> Finding:
        if helpers.extension(context.path) != "pdf":
            return Finding.skipped(self.name)

        try:
            has_ocr = has_text_layer(context.path)
        except (PdfReadError, OSError):
            return Finding.skipped(self.name)

        if has_ocr:
            return (
                Finding(self.name, FindingStatus.ACTIVE, message="PDF with text layer", color="green")
                .with_tags(["pdf", "ocr"])
                .with_metadata("has_ocr", "true")
            )

        return (
            Finding(
                self.name,
                FindingStatus.ALERT,
                message="PDF without text (needs OCR)",
                color="yellow",
            )
            .with_tags(["pdf", "ocr"])
            .with_metadata("has_ocr", "false")
        )
