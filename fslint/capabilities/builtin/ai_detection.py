"""AI detection capability: flags images whose metadata names a generator.

Three sources are inspected, in this order:
- EXIF tags Software, ProcessingSoftware and Model.
- XMP creator fields (CreatorTool, dc:creator).
- PNG text chunks (tEXt, zTXt, iTXt), where tools such as Stable Diffusion
  web UIs store their generation parameters.

Images are opened with Pillow; only headers and metadata are read for JPEG
and WebP files.
"""

import re
from pathlib import Path
from typing import Iterator, Optional, Tuple

from PIL import Image

from fslint.capabilities import helpers
from fslint.capabilities.base import Capability
from fslint.models import CapabilityDescriptor, Finding, FindingStatus, ScanContext

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "webp"}

AI_MARKERS = (
    "stable diffusion",
    "midjourney",
    "dall-e",
    "dalle",
    "ai generated",
    "artificial intelligence",
    "generative",
)

# Software, ProcessingSoftware, Model
EXIF_TAGS = (0x0131, 0x000B, 0x0110)

# PNG text chunk keywords that only generators write
GENERATOR_KEYWORDS = {"parameters": "Stable Diffusion", "prompt": "ComfyUI"}

XMP_KEYS = ("xmp", "XML:com.adobe.xmp")

_XMP_CREATOR_PATTERNS = (
    re.compile(r'CreatorTool="([^"]+)"'),
    re.compile(r"<xmp:CreatorTool>([^<]+)</xmp:CreatorTool>"),
    re.compile(r"<dc:creator>.*?<rdf:li[^>]*>([^<]+)</rdf:li>", re.DOTALL),
)

# Pillow signals unreadable or hostile images with these
IMAGE_ERRORS = (OSError, SyntaxError, ValueError, Image.DecompressionBombError)


def _find_marker(text: str) -> Optional[str]:
    lowered = text.lower()
    for marker in AI_MARKERS:
        if marker in lowered:
            return text.strip()
    return None


def _as_text(value) -> str:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    return str(value).strip("\x00 ")


def exif_values(image: Image.Image) -> Iterator[str]:
    """Yield the generator-relevant EXIF tag values of an open image."""
    # Pillow decodes PNG pixel data to look for a late eXIf chunk
    if image.format == "PNG" and "exif" not in image.info:
        return
    exif = image.getexif()
    for tag in EXIF_TAGS:
        value = exif.get(tag)
        if value:
            yield _as_text(value)


def xmp_creators(image: Image.Image) -> Iterator[str]:
    """Yield creator fields from the XMP packet of an open image, if any."""
    for key in XMP_KEYS:
        packet = image.info.get(key)
        if not packet:
            continue
        text = _as_text(packet)
        for pattern in _XMP_CREATOR_PATTERNS:
            for match in pattern.finditer(text):
                yield match.group(1)


def png_text_chunks(image: Image.Image) -> Iterator[Tuple[str, str]]:
    """Yield (keyword, text) pairs from the text chunks Pillow decoded."""
    for keyword, value in image.info.items():
        if keyword in XMP_KEYS or not isinstance(value, str):
            continue
        yield keyword, value


class AiDetectionCapability(Capability):
    """Detects AI-generated images via EXIF tags and PNG metadata."""

    @classmethod
    def describe(cls) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            name="ai-detection",
            version="0.1.0",
            description="Detects AI-generated images via EXIF tags and PNG metadata",
            enabled_by_default=False,
            author="fslint contributors",
        )

    def check_exif_for_ai(self, image: Image.Image) -> Optional[str]:
        for value in exif_values(image):
            marker = _find_marker(value)
            if marker is not None:
                return marker
        return None

    def check_xmp_for_ai(self, image: Image.Image) -> Optional[str]:
        for creator in xmp_creators(image):
            marker = _find_marker(creator)
            if marker is not None:
                return marker
        return None

    def check_png_text_chunks(self, image: Image.Image) -> Optional[str]:
        for keyword, text in png_text_chunks(image):
            generator = GENERATOR_KEYWORDS.get(keyword.lower())
            if generator is not None:
                return generator
            marker = _find_marker(text)
            if marker is not None:
                return marker
        return None

    def detect(self, path: Path) -> Tuple[Optional[str], str]:
        """Return the generator named in the image metadata and where it was found.

        Raises:
            OSError: If the file cannot be opened or is not an image Pillow reads.
        """
        with Image.open(path) as image:
            ai_tool = self.check_exif_for_ai(image)
            if ai_tool is not None:
                return ai_tool, "exif"
            ai_tool = self.check_xmp_for_ai(image)
            if ai_tool is not None:
                return ai_tool, "xmp"
            if image.format == "PNG":
                ai_tool = self.check_png_text_chunks(image)
                if ai_tool is not None:
                    return ai_tool, "png_text"
        return None, ""

    def check(self, context: ScanContext) -> Finding:
        if helpers.extension(context.path) not in IMAGE_EXTENSIONS:
            return Finding.skipped(self.name)

        # Unreadable or corrupt images simply yield no detection
        try:
            ai_tool, method = self.detect(context.path)
        except IMAGE_ERRORS:
            ai_tool, method = None, ""

        if ai_tool is None:
            return Finding.inactive(self.name)

        return (
            Finding(
                self.name,
                FindingStatus.ALERT,
                message=f"AI-generated ({ai_tool})",
                color="magenta",
            )
            .with_tags(["ai", "generated"])
            .with_metadata("ai_tool", ai_tool)
            .with_metadata("detection_method", method)
        )
