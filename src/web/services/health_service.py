from __future__ import annotations

import os
import platform
import shutil
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from runtime.context import RuntimeContext


@dataclass
class HealthService:
    ctx: RuntimeContext

    def get_health_summary(self) -> Dict[str, Any]:
        stats = self.ctx.get_system_stats_copy()
        cfg = self.ctx.config
        running = stats.get("scheduler_running", False)
        return {
            "status": "running" if running else "stopped",
            "timestamp": time.time(),
            "platform": platform.platform(),
            "python": platform.python_version(),
            "model_path": cfg.detector.model_path or None,
            "staging_dir": cfg.storage.staging_dir,
            "results_dir": cfg.storage.results_dir,
            "disk": self.disk_usage(cfg.storage.staging_dir),
            **stats,
        }

    @staticmethod
    def disk_usage(path: Optional[str] = None) -> Dict[str, Any]:
        """
        Lightweight disk stats for the staging/results volume.
        """
        target = path if path and os.path.exists(path) else "."
        try:
            usage = shutil.disk_usage(target)
            used = usage.total - usage.free
            pct_free = (usage.free / usage.total * 100) if usage.total else None
            return {
                "total_bytes": usage.total,
                "used_bytes": used,
                "free_bytes": usage.free,
                "pct_free": pct_free,
            }
        except OSError:
            return {
                "total_bytes": None,
                "used_bytes": None,
                "free_bytes": None,
                "pct_free": None,
                "error": "disk_usage_failed",
            }
