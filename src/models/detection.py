"""
Detection models for final, pixel-space detection results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple


@dataclass(frozen=True)
class Detection:
    """
    A single detection on the source image.

    Attributes:
        box: ``(x1, y1, x2, y2)`` in source-image pixel coordinates.
        confidence: Detector confidence in (0, 1].
    """
    box: Tuple[int, int, int, int]
    confidence: float

    def to_json(self) -> List[Any]:
        """Serialize as ``[[x1, y1, x2, y2], confidence]``."""
        return [list(self.box), float(self.confidence)]


def detections_to_json(detections: Sequence[Detection]) -> List[List[Any]]:
    """Serialize a detection result as a JSON-ready list."""
    return [d.to_json() for d in detections]
