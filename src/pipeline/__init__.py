"""
Pipeline module for the detection queue service.

The scheduler is the single consumer of the job queue:
- Drains pending jobs on a fixed cadence
- Decodes and normalizes each staged image
- Runs inference and postprocessing
- Writes results and removes staged inputs
"""

from .scheduler import (
    DetectionScheduler,
    PipelineConfig,
    SchedulerStats,
    create_scheduler_from_config,
)

__all__ = [
    "DetectionScheduler",
    "PipelineConfig",
    "SchedulerStats",
    "create_scheduler_from_config",
]
