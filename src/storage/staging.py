"""
Staging area for uploaded images awaiting detection.
"""

from __future__ import annotations

import logging
import os
import tempfile

from ops.errors import CleanupFailure


class StagingArea:
    """
    Directory holding uploaded bytes until the scheduler has processed them.

    Files are removed after processing whether the job succeeded or not. A
    file that cannot be removed raises CleanupFailure.
    """

    def __init__(self, staging_dir: str):
        self.staging_dir = staging_dir
        os.makedirs(staging_dir, exist_ok=True)

    def stage(self, data: bytes, suffix: str = "") -> str:
        """Write ``data`` to a new file in the staging directory and return its path."""
        fd, path = tempfile.mkstemp(prefix="upload-", suffix=suffix, dir=self.staging_dir)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except OSError:
            try:
                os.unlink(path)
            except OSError:
                pass
            raise
        return path

    def remove(self, path: str) -> None:
        """
        Remove a staged file.

        Raises:
            CleanupFailure: The file could not be removed.
        """
        logging.debug(f"Deleting staged file {path}")
        try:
            os.remove(path)
        except OSError as e:
            raise CleanupFailure(f"unable to remove staged file {path}: {e}") from e

    def discard(self, path: str) -> None:
        """Best-effort removal for uploads that were never admitted."""
        try:
            os.remove(path)
        except OSError as e:
            logging.warning(f"Unable to discard staged file {path}: {e}")
