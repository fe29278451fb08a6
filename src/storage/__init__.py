"""
Staging area for uploads and the per-job result sink.
"""

from .results import ResultSink
from .staging import StagingArea

__all__ = ["ResultSink", "StagingArea"]
