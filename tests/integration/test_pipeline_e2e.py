import logging

import pytest
import pandas as pd
import numpy as np

from seqprep.data.normalizers import Normalizer
from seqprep.data.splitters import ChronologicalSplitter, split
from seqprep.data.windowing import make_windows
from seqprep.pipeline import PipelineConfig, SequencePipeline, load_pipeline_config
from seqprep.utils.error_handling import InsufficientDataError, InvalidSeriesError


def test_three_call_flow(ten_step_series):
    """
    The caller-facing flow:
    1. Normalizer.fit_transform
    2. make_windows
    3. split
    """
    normalizer = Normalizer()
    normalized = normalizer.fit_transform(np.array(ten_step_series, dtype=float))

    inputs, targets = make_windows(normalized, seq_length=3)
    train, val, test = split((inputs, targets), test_fraction=0.2, val_fraction=0.2)

    assert len(train[0]) == 5 and len(val[0]) == 1 and len(test[0]) == 1
    np.testing.assert_allclose(normalizer.inverse_transform(test[1]), [10.0])
    np.testing.assert_allclose(normalizer.inverse_transform(val[0][0]), [6.0, 7.0, 8.0])


def test_pipeline_end_to_end(sample_prices_df, config_dir, tmp_path):
    config = load_pipeline_config(
        config_dir=config_dir,
        overrides={
            "data": {"feature_columns": ["open", "close"], "target_column": "close"},
            "windowing": {"seq_length": 10},
        },
    )
    pipeline = SequencePipeline(config, run_id="e2e", split_dir=str(tmp_path))
    prepared = pipeline.run(sample_prices_df)

    # 120 rows -> 110 windows -> test 22, val round(88 * 0.2) = 18, train 70
    assert prepared.metadata["n_windows"] == 110
    assert (len(prepared.train), len(prepared.val), len(prepared.test)) == (70, 18, 22)
    assert prepared.train.inputs.shape == (70, 10, 2)
    assert prepared.train.targets.shape == (70,)

    # Scaler saw only the rows feeding training windows
    assert prepared.metadata["fit_rows"] == 80
    expected_max = sample_prices_df["close"].iloc[:80].max()
    assert prepared.scaling_params.subset("close").data_max == (expected_max,)

    # Targets invert back to the raw close prices
    restored = prepared.inverse_transform_targets(prepared.test.targets)
    np.testing.assert_allclose(restored, sample_prices_df["close"].iloc[-22:].to_numpy())

    is_valid, issues = ChronologicalSplitter().validate_no_leakage(
        pd.Index(list(prepared.train.target_index) + list(prepared.val.target_index)
                 + list(prepared.test.target_index)),
        prepared.split.indices,
    )
    assert is_valid, issues

    saved = ChronologicalSplitter(save_dir=str(tmp_path)).load_split_indices("e2e")
    assert saved.test_indices == prepared.split.indices.test_indices


def test_fit_on_all_uses_whole_series(sample_prices_df):
    config = PipelineConfig(feature_columns=["close"], seq_length=5, fit_on="all")
    prepared = SequencePipeline(config).run(sample_prices_df)

    assert prepared.metadata["fit_rows"] == len(sample_prices_df)
    assert prepared.scaling_params.data_max == (sample_prices_df["close"].max(),)
    # Full-vector targets when no target column is configured
    assert prepared.train.targets.shape == (len(prepared.train), 1)


def test_failed_run_logs_context_and_reraises(sample_prices_df, caplog):
    config = PipelineConfig(feature_columns=["close"], seq_length=500)
    pipeline = SequencePipeline(config, run_id="too_short")

    with caplog.at_level(logging.ERROR, logger="seqprep.pipeline"):
        with pytest.raises(InsufficientDataError):
            pipeline.run(sample_prices_df)

    record = caplog.records[-1]
    assert "too_short" in record.getMessage()
    assert record.props["exception_type"] == "InsufficientDataError"


def test_invalid_input_rejected_before_fitting(sample_prices_df):
    df = sample_prices_df.copy()
    df.iloc[5, df.columns.get_loc("close")] = np.nan
    config = PipelineConfig(feature_columns=["close"], seq_length=5)

    with pytest.raises(InvalidSeriesError, match="missing value"):
        SequencePipeline(config).run(df)
