"""Batch enhancement pipeline: the enhancer and its progress tracker."""

from src.pipeline.batch_enhancer import BatchEnhancer
from src.pipeline.progress_tracker import ProgressTracker

__all__ = [
    "BatchEnhancer",
    "ProgressTracker",
]
