"""
JSON serialization helpers that understand numpy and pandas scalars.
"""

import json
import logging
from pathlib import Path
from typing import Any, Union
from datetime import datetime
import pandas as pd
import numpy as np

logger = logging.getLogger(__name__)


class NumpyJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles datetime, numpy and pandas index types."""
    def default(self, obj):
        if isinstance(obj, (datetime, pd.Timestamp)):
            return obj.isoformat()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, pd.Index):
            return [v if isinstance(v, (str, int, float)) else self.default(v) for v in obj]
        return super().default(obj)


def save_json(data: Any, path: Union[str, Path], **kwargs) -> Path:
    """Save data to JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(data, f, cls=NumpyJSONEncoder, indent=2, **kwargs)
    logger.debug(f"Saved JSON to {path}")
    return path


def load_json(path: Union[str, Path]) -> Any:
    """Load data from JSON."""
    with open(path, 'r') as f:
        return json.load(f)
