
# 01_sequence_preparation.py
import marimo

__generated_with = "0.1.0"
app = marimo.App(width="medium")

@app.cell
def __():
    import marimo as mo
    from pathlib import Path
    import pandas as pd
    import numpy as np
    import sys

    # Add project root to path
    project_root = Path(__file__).parent.parent.resolve()
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

    from seqprep.pipeline import SequencePipeline, load_pipeline_config
    from seqprep.utils.logging_config import setup_logging

    setup_logging(log_level="INFO", log_dir=str(project_root / "logs"))

    mo.md("# Sequence Preparation: Scaling, Windowing, Chronological Split")
    return Path, SequencePipeline, load_pipeline_config, mo, np, pd, project_root


@app.cell
def __(mo):
    mo.md("## 1. Configuration & Data")
    return


@app.cell
def __(load_pipeline_config, project_root):
    config = load_pipeline_config(
        config_dir=str(project_root / "seqprep" / "config"),
        overrides={"windowing": {"seq_length": 30}},
    )
    config
    return config,


@app.cell
def __(np, pd):
    # Synthetic daily closes stand in for a loaded price table.
    rng = np.random.default_rng(7)
    dates = pd.date_range("2019-01-01", periods=1000, freq="B")
    prices = pd.DataFrame(
        {"close": 100 * np.exp(np.cumsum(rng.normal(0.0003, 0.01, len(dates))))},
        index=dates,
    )
    prices.tail()
    return prices,


@app.cell
def __(mo):
    mo.md("## 2. Prepare Windows")
    return


@app.cell
def __(SequencePipeline, config, prices):
    prepared = SequencePipeline(config).run(prices)
    prepared.metadata
    return prepared,


@app.cell
def __(mo, prepared):
    X_train, y_train = prepared.train
    X_val, y_val = prepared.val
    X_test, y_test = prepared.test

    mo.md(
        f"""
        | split | inputs | targets | first target | last target |
        |---|---|---|---|---|
        | train | {X_train.shape} | {y_train.shape} | {prepared.train.target_index[0].date()} | {prepared.train.target_index[-1].date()} |
        | val | {X_val.shape} | {y_val.shape} | {prepared.val.target_index[0].date()} | {prepared.val.target_index[-1].date()} |
        | test | {X_test.shape} | {y_test.shape} | {prepared.test.target_index[0].date()} | {prepared.test.target_index[-1].date()} |
        """
    )
    return X_test, X_train, X_val, y_test, y_train, y_val


@app.cell
def __(mo, prepared, prices, y_test):
    restored = prepared.inverse_transform_targets(y_test)
    max_error = abs(restored - prices["close"].iloc[-len(y_test):].to_numpy()).max()
    mo.md(f"Max round-trip error on test targets: **{max_error:.2e}**")
    return max_error, restored


if __name__ == "__main__":
    app.run()
