from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from jobs.queue import JobQueue
from models.config import Config
from storage.results import ResultSink
from storage.staging import StagingArea


@dataclass
class RuntimeContext:
    """Holds runtime state and service references; avoids global singletons."""

    config: Config
    queue: JobQueue
    staging: StagingArea
    sink: ResultSink
    scheduler: Any = None
    start_time: float = field(default_factory=time.time)

    @classmethod
    def from_config(cls, config: Config) -> "RuntimeContext":
        return cls(
            config=config,
            queue=JobQueue(capacity=config.queue.capacity),
            staging=StagingArea(config.storage.staging_dir),
            sink=ResultSink(config.storage.results_dir),
        )

    def get_system_stats_copy(self) -> Dict[str, Any]:
        stats: Dict[str, Any] = {
            "uptime_seconds": int(time.time() - self.start_time),
            "queue_length": len(self.queue),
            "queue_capacity": self.queue.capacity,
            "queue_full": self.queue.is_full(),
        }
        scheduler_stats: Optional[Any] = getattr(self.scheduler, "stats", None)
        if scheduler_stats is not None:
            stats["scheduler"] = scheduler_stats.to_dict()
            stats["scheduler_running"] = bool(getattr(self.scheduler, "running", False))
        return stats
