"""
Tests for turning raw detector tensors into pixel-space detections.
"""

import numpy as np
import pytest

from inference.backend import RawDetectorOutput
from inference.postprocess import PostprocessConfig, Postprocessor
from models.config import DetectorConfig
from models.detection import Detection
from ops.errors import InferenceFailure, MalformedOutput
from conftest import make_raw_output


@pytest.fixture
def postprocessor():
    return Postprocessor(PostprocessConfig(detector_ratio=1.0))


class TestConfidenceFilter:
    def test_threshold_is_exclusive(self, postprocessor):
        raw = make_raw_output([
            ((0.0, 0.0, 0.25, 0.25), 0.5),
            ((0.5, 0.5, 0.75, 0.75), 0.51),
        ])
        detections = postprocessor.process(raw, 100, 100)
        assert len(detections) == 1
        assert detections[0].box == (50, 50, 75, 75)
        assert detections[0].confidence == pytest.approx(0.51)

    def test_nothing_above_threshold(self, postprocessor):
        raw = make_raw_output([((0.0, 0.0, 0.5, 0.5), 0.1)])
        assert postprocessor.process(raw, 100, 100) == []

    def test_empty_output(self, postprocessor):
        raw = RawDetectorOutput(
            confidences=np.zeros((1, 0, 2), dtype=np.float32),
            boxes=np.zeros((1, 0, 4), dtype=np.float32),
        )
        assert postprocessor.process(raw, 100, 100) == []

    def test_uses_positive_class_column(self):
        confidences = np.array([[[0.9, 0.2, 0.1]]], dtype=np.float32)
        boxes = np.array([[[0.0, 0.0, 0.5, 0.5]]], dtype=np.float32)
        raw = RawDetectorOutput(confidences=confidences, boxes=boxes)

        assert Postprocessor(PostprocessConfig(detector_ratio=1.0)).process(raw, 10, 10) == []
        kept = Postprocessor(
            PostprocessConfig(detector_ratio=1.0, positive_class_index=0)
        ).process(raw, 10, 10)
        assert len(kept) == 1


class TestSuppression:
    def test_overlapping_candidates_keep_most_confident(self, postprocessor):
        raw = make_raw_output([
            ((0.0, 0.0, 0.5, 0.5), 0.6),
            ((0.0, 0.0, 0.5, 0.5), 0.9),
            ((0.5, 0.5, 1.0, 1.0), 0.75),
        ])
        detections = postprocessor.process(raw, 100, 100)
        assert [d.box for d in detections] == [(0, 0, 50, 50), (50, 50, 100, 100)]
        assert detections[0].confidence == pytest.approx(0.9)
        assert detections[1].confidence == pytest.approx(0.75)

    def test_select_stays_in_detector_space(self, postprocessor):
        raw = make_raw_output([((0.25, 0.25, 0.75, 0.75), 0.8)])
        selected = postprocessor.select(raw)
        assert selected == [((0.25, 0.25, 0.75, 0.75), pytest.approx(0.8))]


class TestRemapping:
    def test_boxes_land_in_source_pixels(self):
        post = Postprocessor(PostprocessConfig(detector_ratio=1.0))
        raw = make_raw_output([((0.0, 0.0, 1.0, 1.0), 0.8)])
        detections = post.process(raw, 200, 100)
        assert detections == [Detection(box=(50, 0, 150, 100), confidence=pytest.approx(0.8))]

    def test_from_detector_config(self):
        cfg = DetectorConfig(
            input_width=320,
            input_height=160,
            conf_threshold=0.3,
            iou_threshold=0.4,
            resize_mode="stretch",
        )
        post_cfg = PostprocessConfig.from_detector_config(cfg)
        assert post_cfg.detector_ratio == 2.0
        assert post_cfg.conf_threshold == 0.3
        assert post_cfg.iou_threshold == 0.4
        assert post_cfg.resize_mode == "stretch"


class TestMalformedOutput:
    @pytest.mark.parametrize("value", [np.nan, np.inf, -np.inf])
    def test_non_finite_confidence(self, postprocessor, value):
        raw = make_raw_output([((0.0, 0.0, 0.5, 0.5), 0.8)])
        raw.confidences[0, 0, 1] = value
        with pytest.raises(MalformedOutput):
            postprocessor.process(raw, 100, 100)

    @pytest.mark.parametrize("value", [np.nan, np.inf, -np.inf])
    def test_non_finite_box_coordinate(self, postprocessor, value):
        raw = make_raw_output([((0.0, 0.0, 0.5, 0.5), 0.8)])
        raw.boxes[0, 0, 2] = value
        with pytest.raises(MalformedOutput):
            postprocessor.process(raw, 100, 100)

    def test_is_an_inference_failure(self):
        assert issubclass(MalformedOutput, InferenceFailure)

    def test_candidate_count_mismatch(self, postprocessor):
        raw = RawDetectorOutput(
            confidences=np.full((1, 3, 2), 0.9, dtype=np.float32),
            boxes=np.zeros((1, 2, 4), dtype=np.float32),
        )
        with pytest.raises(MalformedOutput):
            postprocessor.process(raw, 100, 100)

    def test_box_size_not_multiple_of_four(self, postprocessor):
        raw = RawDetectorOutput(
            confidences=np.full((1, 1, 2), 0.9, dtype=np.float32),
            boxes=np.zeros((1, 1, 3), dtype=np.float32),
        )
        with pytest.raises(MalformedOutput):
            postprocessor.process(raw, 100, 100)

    def test_wrong_confidence_rank(self, postprocessor):
        raw = RawDetectorOutput(
            confidences=np.full((3, 2), 0.9, dtype=np.float32),
            boxes=np.zeros((1, 3, 4), dtype=np.float32),
        )
        with pytest.raises(MalformedOutput):
            postprocessor.process(raw, 100, 100)

    def test_positive_index_out_of_range(self):
        post = Postprocessor(PostprocessConfig(detector_ratio=1.0, positive_class_index=5))
        raw = make_raw_output([((0.0, 0.0, 0.5, 0.5), 0.8)])
        with pytest.raises(MalformedOutput):
            post.process(raw, 100, 100)
