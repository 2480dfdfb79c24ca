"""
Windowed sequence preparation for sequence-to-one time series forecasting.

- data.normalizers: reversible min-max / standard scaling (Normalizer)
- data.windowing: sliding (window, next-step target) pairs (make_windows)
- data.splitters: chronological train/validation/test splits (split)
- pipeline: configuration-driven orchestration (SequencePipeline)
"""

from .data.normalizers import Normalizer, ScalingParams
from .data.splitters import ChronologicalSplitter, split
from .data.windowing import SequenceWindower, make_windows
from .pipeline import PipelineConfig, SequencePipeline, load_pipeline_config

__version__ = "0.1.0"

__all__ = [
    "Normalizer",
    "ScalingParams",
    "SequenceWindower",
    "make_windows",
    "ChronologicalSplitter",
    "split",
    "PipelineConfig",
    "SequencePipeline",
    "load_pipeline_config",
]
