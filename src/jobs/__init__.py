"""
Job admission and queueing.
"""

from .queue import JobQueue, DEFAULT_CAPACITY

__all__ = ["JobQueue", "DEFAULT_CAPACITY"]
