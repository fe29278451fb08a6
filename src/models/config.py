"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

DEFAULT_MEAN = [0.485, 0.456, 0.406]
DEFAULT_STD = [0.229, 0.224, 0.225]


@dataclass
class QueueConfig:
    """Job queue configuration."""
    capacity: int = 10000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "QueueConfig":
        return cls(capacity=d.get("capacity", 10000))

    def to_dict(self) -> Dict[str, Any]:
        return {"capacity": self.capacity}


@dataclass
class SchedulerConfig:
    """Scheduler configuration."""
    poll_interval_ms: float = 10.0

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SchedulerConfig":
        return cls(poll_interval_ms=d.get("poll_interval_ms", 10.0))

    def to_dict(self) -> Dict[str, Any]:
        return {"poll_interval_ms": self.poll_interval_ms}


@dataclass
class DetectorConfig:
    """
    Detector configuration.

    Attributes:
        model_path: Path to the ONNX model file.
        num_threads: Intra-op threads for the inference session.
        input_width: Detector input width in pixels.
        input_height: Detector input height in pixels.
        conf_threshold: Candidates must score strictly above this.
        iou_threshold: NMS suppresses candidates overlapping above this.
        positive_class_index: Column of the positive class in the score tensor.
        mean: Per-channel normalization mean (RGB).
        std: Per-channel normalization std (RGB).
        resize_mode: "fill" (center crop) or "stretch".
    """
    model_path: str = ""
    num_threads: int = 1
    input_width: int = 640
    input_height: int = 480
    conf_threshold: float = 0.5
    iou_threshold: float = 0.5
    positive_class_index: int = 1
    mean: List[float] = field(default_factory=lambda: list(DEFAULT_MEAN))
    std: List[float] = field(default_factory=lambda: list(DEFAULT_STD))
    resize_mode: str = "fill"

    @property
    def input_ratio(self) -> float:
        return self.input_width / self.input_height

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectorConfig":
        return cls(
            model_path=d.get("model_path", ""),
            num_threads=d.get("num_threads", 1),
            input_width=d.get("input_width", 640),
            input_height=d.get("input_height", 480),
            conf_threshold=d.get("conf_threshold", 0.5),
            iou_threshold=d.get("iou_threshold", 0.5),
            positive_class_index=d.get("positive_class_index", 1),
            mean=list(d.get("mean", DEFAULT_MEAN)),
            std=list(d.get("std", DEFAULT_STD)),
            resize_mode=d.get("resize_mode", "fill"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model_path": self.model_path,
            "num_threads": self.num_threads,
            "input_width": self.input_width,
            "input_height": self.input_height,
            "conf_threshold": self.conf_threshold,
            "iou_threshold": self.iou_threshold,
            "positive_class_index": self.positive_class_index,
            "mean": self.mean,
            "std": self.std,
            "resize_mode": self.resize_mode,
        }


@dataclass
class StorageConfig:
    """Storage configuration."""
    staging_dir: str = "data/staging"
    results_dir: str = "results"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StorageConfig":
        return cls(
            staging_dir=d.get("staging_dir", "data/staging"),
            results_dir=d.get("results_dir", "results"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "staging_dir": self.staging_dir,
            "results_dir": self.results_dir,
        }


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 8082
    max_upload_bytes: int = 20 * 1024 * 1024

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ServerConfig":
        return cls(
            host=d.get("host", "127.0.0.1"),
            port=d.get("port", 8082),
            max_upload_bytes=d.get("max_upload_bytes", 20 * 1024 * 1024),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "max_upload_bytes": self.max_upload_bytes,
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    queue: QueueConfig = field(default_factory=QueueConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_path: str = "logs/detection_queue.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            queue=QueueConfig.from_dict(d.get("queue", {}) or {}),
            scheduler=SchedulerConfig.from_dict(d.get("scheduler", {}) or {}),
            detector=DetectorConfig.from_dict(d.get("detector", {}) or {}),
            storage=StorageConfig.from_dict(d.get("storage", {}) or {}),
            server=ServerConfig.from_dict(d.get("server", {}) or {}),
            log_path=d.get("log_path", "logs/detection_queue.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or passing to existing code)."""
        return {
            "queue": self.queue.to_dict(),
            "scheduler": self.scheduler.to_dict(),
            "detector": self.detector.to_dict(),
            "storage": self.storage.to_dict(),
            "server": self.server.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
