"""Logging setup and the pipeline error taxonomy."""
