"""
Job model for queued images awaiting detection.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ImageFormat(str, Enum):
    """Image formats accepted for detection."""
    PNG = "png"
    JPEG = "jpeg"

    @classmethod
    def from_mime_type(cls, mime_type: Optional[str]) -> Optional["ImageFormat"]:
        """Return the format for a MIME type such as ``image/png``, or None."""
        if not mime_type:
            return None
        essence = mime_type.split(";", 1)[0].strip().lower()
        if essence in ("image/jpeg", "image/jpg", "image/pjpeg"):
            return cls.JPEG
        if essence == "image/png":
            return cls.PNG
        return None

    def matches(self, data: bytes) -> bool:
        """Check that ``data`` starts with this format's signature."""
        if self is ImageFormat.PNG:
            return data[:8] == b"\x89PNG\r\n\x1a\n"
        return data[:3] == b"\xff\xd8\xff"


@dataclass(frozen=True)
class Job:
    """
    One queued image awaiting detection.

    Attributes:
        id: Unique job identifier (uuid4 string).
        image_location: Path to the staged input bytes.
        format: Declared image format.
        enqueued_at: Unix timestamp when the job was admitted.
    """
    id: str
    image_location: str
    format: ImageFormat
    enqueued_at: float = field(default_factory=time.time)

    @property
    def age(self) -> float:
        """Seconds since the job was admitted."""
        return time.time() - self.enqueued_at
