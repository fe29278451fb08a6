"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import cv2
import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from inference.backend import RawDetectorOutput  # noqa: E402


class FakeEngine:
    """
    Inference engine returning canned output and recording calls.

    ``outputs`` hands out one result per call, in order; otherwise every call
    returns ``output``.
    """

    def __init__(self, output=None, error=None, outputs=None):
        self.output = output
        self.error = error
        self.outputs = list(outputs or [])
        self.calls = []

    def infer(self, tensor):
        self.calls.append(tensor)
        if self.error is not None:
            raise self.error
        if self.outputs:
            return self.outputs.pop(0)
        return self.output


def make_raw_output(candidates, num_classes=2, positive_index=1):
    """Build detector tensors from ``[(box, confidence), ...]``."""
    n = len(candidates)
    confidences = np.zeros((1, n, num_classes), dtype=np.float32)
    boxes = np.zeros((1, n, 4), dtype=np.float32)
    for i, (box, conf) in enumerate(candidates):
        confidences[0, i, positive_index] = conf
        confidences[0, i, 0] = 1.0 - conf
        boxes[0, i] = box
    return RawDetectorOutput(confidences=confidences, boxes=boxes)


def encode_image(width=64, height=48, ext=".png", color=(0, 128, 255)):
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :] = color
    ok, buf = cv2.imencode(ext, image)
    assert ok
    return buf.tobytes()


@pytest.fixture
def png_bytes():
    return encode_image(ext=".png")


@pytest.fixture
def jpeg_bytes():
    return encode_image(ext=".jpg")


@pytest.fixture
def storage_dirs(tmp_path):
    staging = tmp_path / "staging"
    results = tmp_path / "results"
    return str(staging), str(results)


@pytest.fixture
def valid_config(tmp_path):
    """Return a valid configuration dictionary."""
    return {
        "queue": {"capacity": 10000},
        "scheduler": {"poll_interval_ms": 10},
        "detector": {
            "model_path": "models/test.onnx",
            "num_threads": 1,
            "input_width": 640,
            "input_height": 480,
            "conf_threshold": 0.5,
            "iou_threshold": 0.5,
            "positive_class_index": 1,
            "mean": [0.485, 0.456, 0.406],
            "std": [0.229, 0.224, 0.225],
            "resize_mode": "fill",
        },
        "storage": {
            "staging_dir": str(tmp_path / "staging"),
            "results_dir": str(tmp_path / "results"),
        },
        "server": {"host": "127.0.0.1", "port": 8082},
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
