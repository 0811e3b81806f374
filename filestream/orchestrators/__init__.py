"""Orchestration layer.

This module contains high-level workflow orchestrators that wire the engine
together from settings and run stored pipelines over a directory.
"""

from filestream.orchestrators.batch import BatchRun

__all__ = [
    "BatchRun",
]
