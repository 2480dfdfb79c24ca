"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest
import pandas as pd
import numpy as np

REPO_CONFIG_DIR = Path(__file__).resolve().parents[1] / "seqprep" / "config"


@pytest.fixture
def ten_step_series():
    """The integers 1..10, the worked example used throughout the docs."""
    return [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]


@pytest.fixture
def sample_prices_df():
    """Daily OHLCV-like table with a DatetimeIndex."""
    dates = pd.date_range(start="2023-01-01", periods=120, freq="D")
    np.random.seed(42)
    close = 100 + np.cumsum(np.random.normal(0, 1, 120))
    return pd.DataFrame({
        "timestamp": dates,
        "open": close + np.random.normal(0, 0.5, 120),
        "close": close,
        "volume": np.random.uniform(1000, 10000, 120),
    }).set_index("timestamp")


@pytest.fixture
def config_dir():
    """The default config directory shipped with the package."""
    return str(REPO_CONFIG_DIR)
