"""
Error taxonomy for the detection pipeline.

Per-job failures derive from JobFailure: the scheduler logs them, cleans up the
staged input and moves on. CleanupFailure is the only fatal error and must
unwind out of the scheduler loop.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for all pipeline errors."""


class JobFailure(PipelineError):
    """A single job could not be processed. Never retried."""


class DecodeFailure(JobFailure):
    """Staged bytes could not be read or decoded as the declared format."""


class InferenceFailure(JobFailure):
    """The inference engine failed or returned unusable output."""


class MalformedOutput(InferenceFailure):
    """Detector output has the wrong shape or contains NaN confidences."""


class WriteFailure(JobFailure):
    """The detection result could not be persisted."""


class CleanupFailure(PipelineError):
    """A staged input file could not be removed. Fatal."""
