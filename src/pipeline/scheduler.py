"""
Detection scheduler: the single consumer of the job queue.

Each tick drains the queue and runs every drained job to completion, one at a
time: decode, resize, normalize, infer, postprocess, write the result, remove
the staged input. A failing job is logged and dropped without blocking the
jobs behind it. Failing to remove a staged input is fatal and stops the
scheduler.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional

from algorithms.remap import RESIZE_FILL
from imaging.preprocess import prepare_input, read_image
from inference.backend import InferenceEngine
from inference.postprocess import PostprocessConfig, Postprocessor
from jobs.queue import JobQueue
from models.config import DEFAULT_MEAN, DEFAULT_STD, Config
from models.detection import Detection
from models.job import Job
from ops.errors import (
    CleanupFailure,
    DecodeFailure,
    InferenceFailure,
    JobFailure,
)
from storage.results import ResultSink
from storage.staging import StagingArea


@dataclass
class PipelineConfig:
    """
    Configuration for the detection scheduler.

    Attributes:
        poll_interval: Seconds between ticks when the queue stays empty.
        input_width: Detector input width in pixels.
        input_height: Detector input height in pixels.
        mean: Per-channel normalization mean (RGB).
        std: Per-channel normalization std (RGB).
        resize_mode: "fill" or "stretch"; must match the postprocessor.
    """
    poll_interval: float = 0.01
    input_width: int = 640
    input_height: int = 480
    mean: List[float] = field(default_factory=lambda: list(DEFAULT_MEAN))
    std: List[float] = field(default_factory=lambda: list(DEFAULT_STD))
    resize_mode: str = RESIZE_FILL


@dataclass
class SchedulerStats:
    """Runtime statistics for the scheduler."""
    ticks: int = 0
    jobs_processed: int = 0
    jobs_failed: int = 0
    start_time: float = field(default_factory=time.time)
    last_tick_time: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "ticks": self.ticks,
            "jobs_processed": self.jobs_processed,
            "jobs_failed": self.jobs_failed,
            "start_time": self.start_time,
            "last_tick_time": self.last_tick_time,
        }


class DetectionScheduler:
    """
    Polls the job queue and processes drained jobs sequentially.

    The inference engine is only ever called from the thread running the
    scheduler, one job at a time.

    Example:
        scheduler = DetectionScheduler(queue, engine, postprocessor, staging, sink, config)
        threading.Thread(target=scheduler.run, daemon=True).start()
    """

    def __init__(
        self,
        queue: JobQueue,
        engine: InferenceEngine,
        postprocessor: Postprocessor,
        staging: StagingArea,
        sink: ResultSink,
        config: PipelineConfig,
    ):
        self.queue = queue
        self.engine = engine
        self.postprocessor = postprocessor
        self.staging = staging
        self.sink = sink
        self.config = config
        self.stats = SchedulerStats()
        self._stop_event = threading.Event()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def run(self) -> None:
        """
        Run the polling loop until stopped.

        Raises:
            CleanupFailure: A staged input could not be removed.
        """
        self._running = True
        self._stop_event.clear()
        self.stats = SchedulerStats()
        logging.info(
            f"Scheduler started: poll_interval={self.config.poll_interval * 1000:.0f}ms"
        )

        try:
            while not self._stop_event.is_set():
                self.queue.wait_for_jobs(timeout=self.config.poll_interval)
                if self._stop_event.is_set():
                    break
                self.run_once()
        except CleanupFailure as e:
            logging.critical(f"[FATAL] {e}")
            raise
        except KeyboardInterrupt:
            logging.info("Scheduler interrupted by user")
        finally:
            self._running = False
            logging.info(
                f"Scheduler stopped: processed={self.stats.jobs_processed}, "
                f"failed={self.stats.jobs_failed}"
            )

    def stop(self) -> None:
        """Signal the scheduler to stop after the current tick."""
        self._stop_event.set()

    def run_once(self) -> int:
        """
        Drain the queue and process every drained job.

        Returns the number of jobs that produced a result.
        """
        jobs = self.queue.drain()
        self.stats.ticks += 1
        self.stats.last_tick_time = time.time()

        succeeded = 0
        for job in jobs:
            if self._process_job(job):
                succeeded += 1
        if jobs:
            logging.debug(f"Tick processed {succeeded}/{len(jobs)} jobs")
        return succeeded

    def _process_job(self, job: Job) -> bool:
        waited = job.age
        start = time.time()
        ok = False
        try:
            detections = self._detect(job)
            self.sink.write(job.id, detections)
            ok = True
        except JobFailure as e:
            logging.warning(f"Job {job.id} dropped ({type(e).__name__}): {e}")

        if ok:
            self.stats.jobs_processed += 1
            logging.info(
                f"Job {job.id}: {len(detections)} detections in "
                f"{(time.time() - start) * 1000:.1f}ms (queued {waited:.3f}s)"
            )
        else:
            self.stats.jobs_failed += 1

        self.staging.remove(job.image_location)
        return ok

    def _detect(self, job: Job) -> List[Detection]:
        image = read_image(job.image_location, job.format)
        image_h, image_w = image.shape[:2]

        try:
            tensor = prepare_input(
                image,
                (self.config.input_width, self.config.input_height),
                self.config.mean,
                self.config.std,
                self.config.resize_mode,
            )
        except Exception as e:
            raise DecodeFailure(f"unable to prepare image: {e}") from e

        try:
            raw = self.engine.infer(tensor)
        except JobFailure:
            raise
        except Exception as e:
            raise InferenceFailure(f"inference failed: {e}") from e

        return self.postprocessor.process(raw, image_w, image_h)


def create_scheduler_from_config(
    config: Config,
    queue: JobQueue,
    engine: InferenceEngine,
    staging: StagingArea,
    sink: ResultSink,
) -> DetectionScheduler:
    """Factory function to create a DetectionScheduler from the typed config."""
    detector_cfg = config.detector
    pipeline_config = PipelineConfig(
        poll_interval=config.scheduler.poll_interval,
        input_width=detector_cfg.input_width,
        input_height=detector_cfg.input_height,
        mean=list(detector_cfg.mean),
        std=list(detector_cfg.std),
        resize_mode=detector_cfg.resize_mode,
    )
    postprocessor = Postprocessor(PostprocessConfig.from_detector_config(detector_cfg))
    return DetectionScheduler(queue, engine, postprocessor, staging, sink, pipeline_config)
