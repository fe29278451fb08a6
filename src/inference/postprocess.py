"""
Turn raw detector output into final pixel-space detections.

Steps: validate the tensors, keep candidates whose positive-class confidence
exceeds the threshold, sort ascending, run greedy NMS, then remap the
surviving boxes onto the source image.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

from algorithms.geometry import ScoredBox, non_maximum_suppression
from algorithms.remap import RESIZE_FILL, map_boxes_to_pixels
from models.config import DetectorConfig
from models.detection import Detection
from ops.errors import MalformedOutput
from .backend import RawDetectorOutput


@dataclass(frozen=True)
class PostprocessConfig:
    conf_threshold: float = 0.5
    iou_threshold: float = 0.5
    positive_class_index: int = 1
    detector_ratio: float = 640 / 480
    resize_mode: str = RESIZE_FILL

    @classmethod
    def from_detector_config(cls, cfg: DetectorConfig) -> "PostprocessConfig":
        return cls(
            conf_threshold=cfg.conf_threshold,
            iou_threshold=cfg.iou_threshold,
            positive_class_index=cfg.positive_class_index,
            detector_ratio=cfg.input_ratio,
            resize_mode=cfg.resize_mode,
        )


class Postprocessor:
    def __init__(self, cfg: PostprocessConfig):
        self.cfg = cfg

    def select(self, raw: RawDetectorOutput) -> List[ScoredBox]:
        """Filter and suppress candidates; boxes stay in detector space."""
        scores, boxes = self._validate(raw)

        candidates: List[ScoredBox] = [
            (tuple(float(v) for v in box), float(score))
            for box, score in zip(boxes, scores)
            if score > self.cfg.conf_threshold
        ]
        candidates.sort(key=lambda c: c[1])
        return non_maximum_suppression(candidates, self.cfg.iou_threshold)

    def process(
        self,
        raw: RawDetectorOutput,
        image_width: int,
        image_height: int,
    ) -> List[Detection]:
        """
        Produce pixel-space detections for a source image of the given size.

        Raises:
            MalformedOutput: Shapes disagree, or a score or coordinate is NaN or inf.
        """
        selected = self.select(raw)
        mapped = map_boxes_to_pixels(
            selected,
            image_width,
            image_height,
            self.cfg.detector_ratio,
            self.cfg.resize_mode,
        )
        return [Detection(box=box, confidence=conf) for box, conf in mapped]

    def _validate(self, raw: RawDetectorOutput):
        confidences = np.asarray(raw.confidences, dtype=np.float32)
        boxes = np.asarray(raw.boxes, dtype=np.float32)

        if confidences.ndim != 3 or confidences.shape[0] != 1:
            raise MalformedOutput(
                f"confidence tensor must be [1, N, C], got {list(confidences.shape)}"
            )
        if boxes.size % 4 != 0:
            raise MalformedOutput(
                f"box tensor size {boxes.size} is not a multiple of 4"
            )
        boxes = boxes.reshape(-1, 4)

        num_candidates, num_classes = confidences.shape[1], confidences.shape[2]
        if boxes.shape[0] != num_candidates:
            raise MalformedOutput(
                f"{boxes.shape[0]} boxes for {num_candidates} confidence rows"
            )
        if not 0 <= self.cfg.positive_class_index < num_classes:
            raise MalformedOutput(
                f"positive class index {self.cfg.positive_class_index} "
                f"out of range for {num_classes} classes"
            )

        scores = confidences[0, :, self.cfg.positive_class_index]
        if not np.isfinite(scores).all():
            raise MalformedOutput("detector returned non-finite confidences")
        if not np.isfinite(boxes).all():
            raise MalformedOutput("detector returned non-finite box coordinates")
        return scores, boxes
