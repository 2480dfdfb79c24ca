"""
End-to-end sequence preparation: validate, normalize, window, split.

Typical use:

    config = load_pipeline_config(overrides={"windowing": {"seq_length": 60}})
    prepared = SequencePipeline(config).run(prices_df)
    X_train, y_train = prepared.train
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import logging

import numpy as np
import pandas as pd

from .data.normalizers import SCALER_KINDS, Normalizer, ScalingParams, invert_scaling
from .data.splitters import ChronologicalSplitter, compute_split_sizes
from .data.structs import DatasetSplit, WindowedDataset
from .data.validators import SeriesValidator
from .data.windowing import count_windows, make_windows
from .utils.config_manager import ConfigManager
from .utils.error_handling import ConfigurationError, RecoveryContext, SequencePrepError

logger = logging.getLogger(__name__)

FIT_RANGES = ("train", "all")
PIPELINE_SCHEMA = "pipeline_config_schema.json"


@dataclass
class PipelineConfig:
    """Settings for one sequence preparation run."""
    feature_columns: List[str]
    seq_length: int
    target_column: Optional[str] = None
    test_fraction: float = 0.2
    val_fraction: float = 0.2
    scaler_kind: str = "minmax"
    feature_range: Tuple[float, float] = (0.0, 1.0)
    fit_on: str = "train"

    def __post_init__(self):
        if not self.feature_columns:
            raise ConfigurationError("feature_columns must name at least one column")
        if self.target_column is not None and self.target_column not in self.feature_columns:
            raise ConfigurationError(
                f"target_column '{self.target_column}' must be one of the feature columns"
            )
        if self.scaler_kind not in SCALER_KINDS:
            raise ConfigurationError(f"Unknown scaler kind: {self.scaler_kind}")
        if self.fit_on not in FIT_RANGES:
            raise ConfigurationError(f"fit_on must be one of {list(FIT_RANGES)}, got {self.fit_on}")
        self.feature_range = tuple(self.feature_range)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "PipelineConfig":
        """Build from the nested layout of pipeline_config.yaml."""
        data = config.get("data", {})
        normalization = config.get("normalization", {})
        windowing = config.get("windowing", {})
        splitting = config.get("splitting", {})

        try:
            return cls(
                feature_columns=list(data["feature_columns"]),
                seq_length=windowing["seq_length"],
                target_column=data.get("target_column"),
                test_fraction=splitting.get("test_fraction", 0.2),
                val_fraction=splitting.get("val_fraction", 0.2),
                scaler_kind=normalization.get("kind", "minmax"),
                feature_range=tuple(normalization.get("feature_range", (0.0, 1.0))),
                fit_on=normalization.get("fit_on", "train"),
            )
        except KeyError as e:
            raise ConfigurationError(f"Missing required configuration key: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the nested layout of pipeline_config.yaml."""
        return {
            "data": {
                "feature_columns": list(self.feature_columns),
                "target_column": self.target_column,
            },
            "normalization": {
                "kind": self.scaler_kind,
                "feature_range": list(self.feature_range),
                "fit_on": self.fit_on,
            },
            "windowing": {"seq_length": self.seq_length},
            "splitting": {
                "test_fraction": self.test_fraction,
                "val_fraction": self.val_fraction,
            },
        }


def load_pipeline_config(
    config_dir: Optional[str] = None,
    config_name: str = "pipeline_config.yaml",
    overrides: Optional[Dict[str, Any]] = None,
) -> PipelineConfig:
    """
    Load, merge and schema-validate a pipeline configuration.

    Args:
        config_dir: Directory holding the config and a schemas/ subdirectory
        config_name: Config file name
        overrides: Nested values merged over the file's contents

    Returns:
        PipelineConfig
    """
    manager = ConfigManager(config_dir=config_dir)
    config = manager.load_config(config_name)
    if overrides:
        config = manager.merge_configs(config, overrides)
    manager.validate_config(config, PIPELINE_SCHEMA)
    return PipelineConfig.from_dict(config)


@dataclass
class PreparedSequences:
    """Output of a pipeline run, ready for a training loop."""
    split: DatasetSplit
    scaling_params: ScalingParams
    target_column: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def train(self) -> WindowedDataset:
        return self.split.train

    @property
    def val(self) -> WindowedDataset:
        return self.split.val

    @property
    def test(self) -> WindowedDataset:
        return self.split.test

    def inverse_transform_targets(self, values) -> np.ndarray:
        """Map scaled targets or predictions back to original units."""
        params = self.scaling_params
        if self.target_column is not None:
            params = params.subset(self.target_column)
        return invert_scaling(np.asarray(values, dtype=float), params)


class SequencePipeline:
    """Runs validation, normalization, windowing and chronological splitting."""

    def __init__(
        self,
        config: PipelineConfig,
        run_id: Optional[str] = None,
        split_dir: Optional[str] = None,
    ):
        self.config = config
        self.run_id = run_id or datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        self.validator = SeriesValidator()
        self.splitter = ChronologicalSplitter(save_dir=split_dir)

    def run(self, data: pd.DataFrame) -> PreparedSequences:
        """
        Prepare train/validation/test windows from a raw table.

        Failures are logged with their recovery context and re-raised.
        """
        try:
            return self._run(data)
        except SequencePrepError as e:
            context = RecoveryContext.from_exception(self.run_id, e)
            logger.error(
                f"Sequence preparation run {self.run_id} failed: {e}",
                extra={"props": context.to_dict()},
            )
            raise

    def _run(self, data: pd.DataFrame) -> PreparedSequences:
        cfg = self.config
        self.validator.ensure_valid(data, cfg.feature_columns)
        frame = data[cfg.feature_columns]

        n_windows = count_windows(len(frame), cfg.seq_length)
        n_train, _, _ = compute_split_sizes(n_windows, cfg.test_fraction, cfg.val_fraction)

        if cfg.fit_on == "train":
            # Last training target sits at row n_train + seq_length - 1.
            fit_rows = frame.iloc[:n_train + cfg.seq_length]
        else:
            fit_rows = frame

        normalizer = Normalizer(kind=cfg.scaler_kind, feature_range=cfg.feature_range)
        normalizer.fit(fit_rows)
        normalized = normalizer.transform(frame)

        windows = make_windows(normalized, cfg.seq_length, target_column=cfg.target_column)
        split = self.splitter.split(windows, cfg.test_fraction, cfg.val_fraction)

        if self.splitter.save_dir:
            self.splitter.save_split_indices(split.indices, self.run_id)

        metadata = {
            "run_id": self.run_id,
            "n_observations": len(frame),
            "n_windows": len(windows),
            "fit_rows": len(fit_rows),
            "train_samples": len(split.train),
            "val_samples": len(split.val),
            "test_samples": len(split.test),
            "config": cfg.to_dict(),
        }
        logger.info(
            f"Prepared {len(windows)} windows for run {self.run_id}",
            extra={"props": {k: v for k, v in metadata.items() if k != "config"}},
        )

        return PreparedSequences(
            split=split,
            scaling_params=normalizer.params,
            target_column=cfg.target_column,
            metadata=metadata,
        )
