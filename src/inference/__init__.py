"""
Inference engines and detector output postprocessing.
"""

from .backend import InferenceEngine, RawDetectorOutput
from .postprocess import PostprocessConfig, Postprocessor

__all__ = ["InferenceEngine", "RawDetectorOutput", "PostprocessConfig", "Postprocessor"]
