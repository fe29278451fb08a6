"""
Typed models for the detection queue service.
"""

from .job import Job, ImageFormat
from .detection import Detection, detections_to_json
from .config import (
    Config,
    QueueConfig,
    SchedulerConfig,
    DetectorConfig,
    StorageConfig,
    ServerConfig,
)

__all__ = [
    # Jobs
    "Job",
    "ImageFormat",
    # Detection
    "Detection",
    "detections_to_json",
    # Config
    "Config",
    "QueueConfig",
    "SchedulerConfig",
    "DetectorConfig",
    "StorageConfig",
    "ServerConfig",
]
