"""
ONNX Runtime inference backend.

Runs an object detector that outputs two tensors: per-candidate class
scores and per-candidate normalized boxes.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ops.errors import InferenceFailure
from .backend import InferenceEngine, RawDetectorOutput


@dataclass(frozen=True)
class OnnxConfig:
    model_path: str
    num_threads: int = 1


class OnnxDetector(InferenceEngine):
    """
    Detector backed by an onnxruntime InferenceSession.

    The session is treated as a single logical resource: calls are serialized
    behind a lock even though only the scheduler thread uses it today.
    """

    def __init__(self, cfg: OnnxConfig, session: Optional[object] = None):
        self.cfg = cfg
        self._lock = threading.Lock()
        if session is None:
            session = self._create_session(cfg)
        self._session = session
        self._input_name = self._session.get_inputs()[0].name

    @staticmethod
    def _create_session(cfg: OnnxConfig):
        try:
            import onnxruntime as ort  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "onnxruntime is not installed. Install with `pip install onnxruntime`."
            ) from e

        start = time.time()
        options = ort.SessionOptions()
        options.graph_optimization_level = ort.GraphOptimizationLevel.ORT_DISABLE_ALL
        options.intra_op_num_threads = int(cfg.num_threads)
        session = ort.InferenceSession(
            cfg.model_path,
            sess_options=options,
            providers=["CPUExecutionProvider"],
        )
        logging.info(
            f"ONNX session for {cfg.model_path} ready in {time.time() - start:.2f}s"
        )
        return session

    def infer(self, tensor: np.ndarray) -> RawDetectorOutput:
        """
        Run the detector once.

        Raises:
            InferenceFailure: The session failed or returned fewer than two outputs.
        """
        start = time.time()
        try:
            with self._lock:
                outputs = self._session.run(None, {self._input_name: tensor})
        except Exception as e:
            raise InferenceFailure(f"inference failed: {e}") from e

        if outputs is None or len(outputs) < 2:
            raise InferenceFailure("detector returned fewer than two outputs")

        logging.debug(f"Inference took {(time.time() - start) * 1000:.1f}ms")
        return RawDetectorOutput(
            confidences=np.asarray(outputs[0], dtype=np.float32),
            boxes=np.asarray(outputs[1], dtype=np.float32),
        )
