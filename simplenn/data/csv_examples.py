"""Training examples read from a CSV file."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd

from .clusters import examples_from_arrays
from .registry import DatasetSpec, register_dataset


@register_dataset("csv")
def load_csv_examples(
    *,
    csv_path: str | Path | None = None,
    target_cols: Sequence[str] | str = ("target",),
    **_: object,
) -> DatasetSpec:
    """Every column not listed in ``target_cols`` becomes an input."""

    if csv_path is None:
        raise ValueError("The csv dataset requires a csv_path option")
    path = Path(csv_path)
    targets = [target_cols] if isinstance(target_cols, str) else list(target_cols)
    df = pd.read_csv(path)
    missing = [col for col in targets if col not in df.columns]
    if missing:
        raise KeyError(f"Target column(s) {missing!r} not found in CSV")
    y = df[targets].to_numpy(dtype=np.float64)
    X = df.drop(columns=targets).to_numpy(dtype=np.float64)
    if X.shape[1] == 0:
        raise ValueError(f"{path} has no input columns besides {targets!r}")

    provenance = {
        "type": "csv",
        "path": str(path),
        "target_cols": targets,
        "input_cols": [col for col in df.columns if col not in targets],
        "rows": int(X.shape[0]),
    }
    return DatasetSpec(
        name="csv",
        examples=tuple(examples_from_arrays(X, y)),
        d_in=int(X.shape[1]),
        d_out=int(y.shape[1]),
        provenance=provenance,
    )


__all__ = ["load_csv_examples"]
