"""
Inference engine interface.

Engines take a normalized ``[1, 3, H, W]`` float32 tensor and return the raw
detector output in normalized detector space. Postprocessing into pixel-space
detections happens outside the engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import numpy as np


@dataclass(frozen=True)
class RawDetectorOutput:
    """
    Raw detector tensors, aligned by candidate index.

    Attributes:
        confidences: ``[1, N, C]`` per-candidate class scores.
        boxes: ``[1, N, 4]`` per-candidate ``(x1, y1, x2, y2)`` in [0, 1].
    """
    confidences: np.ndarray
    boxes: np.ndarray


class InferenceEngine(Protocol):
    def infer(self, tensor: np.ndarray) -> RawDetectorOutput:
        ...
