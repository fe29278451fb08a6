"""
Result sink: one JSON file of detections per job.
"""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Sequence

from models.detection import Detection, detections_to_json
from ops.errors import WriteFailure

_JOB_ID_RE = re.compile(r"^[A-Za-z0-9-]+$")


class ResultSink:
    """
    Writes detection results as ``<results_dir>/<job_id>.json``.

    Each file holds a JSON array of ``[[x1, y1, x2, y2], confidence]`` entries.
    """

    def __init__(self, results_dir: str):
        self.results_dir = results_dir
        os.makedirs(results_dir, exist_ok=True)

    def path_for(self, job_id: str) -> str:
        if not _JOB_ID_RE.match(job_id):
            raise ValueError(f"Invalid job id: {job_id!r}")
        return os.path.join(self.results_dir, f"{job_id}.json")

    def write(self, job_id: str, detections: Sequence[Detection]) -> str:
        """
        Persist the detections for a job and return the file path.

        The file is written to a temporary name and renamed into place so
        readers never observe a partial result.

        Raises:
            WriteFailure: The result could not be written.
        """
        path = self.path_for(job_id)
        tmp_path = path + ".tmp"
        try:
            with open(tmp_path, "w") as f:
                json.dump(detections_to_json(detections), f)
                f.flush()
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            try:
                os.remove(tmp_path)
            except OSError:
                pass
            raise WriteFailure(f"unable to write result for {job_id}: {e}") from e
        logging.debug(f"Wrote {len(detections)} detections to {path}")
        return path

    def exists(self, job_id: str) -> bool:
        try:
            return os.path.exists(self.path_for(job_id))
        except ValueError:
            return False
