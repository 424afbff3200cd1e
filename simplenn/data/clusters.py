"""Pure in-memory labelled point clusters."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from ..core.types import TrainingExample
from .registry import DatasetSpec, register_dataset

LOW_LABEL = 0.0
HIGH_LABEL = 1.0


def make_two_clusters(
    points_per_cluster: int = 10,
    low: float = -2.0,
    high: float = 2.0,
    *,
    spread: float = 0.0,
    seed: int = 0,
) -> List[TrainingExample]:
    """Points around ``(low, low)`` labelled 0.0 followed by points around ``(high, high)`` labelled 1.0.

    With ``spread == 0`` every point of a cluster sits exactly on its centre.
    """

    if points_per_cluster <= 0:
        raise ValueError(f"points_per_cluster must be positive, got {points_per_cluster}")
    rng = np.random.default_rng(seed)
    examples: List[TrainingExample] = []
    for centre, label in ((low, LOW_LABEL), (high, HIGH_LABEL)):
        points = np.full((points_per_cluster, 2), centre, dtype=np.float64)
        if spread > 0:
            points = points + spread * rng.standard_normal(points.shape)
        examples.extend(TrainingExample(inputs=p, targets=[label]) for p in points)
    return examples


@register_dataset("two_clusters")
def load_two_clusters(
    *,
    points_per_cluster: int = 10,
    low: float = -2.0,
    high: float = 2.0,
    spread: float = 0.0,
    seed: int = 0,
    **_: object,
) -> DatasetSpec:
    examples = make_two_clusters(points_per_cluster, low, high, spread=spread, seed=seed)
    provenance = {
        "type": "two_clusters",
        "points_per_cluster": points_per_cluster,
        "low": low,
        "high": high,
        "spread": spread,
        "seed": seed,
    }
    return DatasetSpec(
        name="two_clusters",
        examples=tuple(examples),
        d_in=2,
        d_out=1,
        provenance=provenance,
    )


def examples_from_arrays(
    inputs: Sequence[Sequence[float]], targets: Sequence[Sequence[float]]
) -> List[TrainingExample]:
    """Pair rows of ``inputs`` with rows of ``targets``."""

    if len(inputs) != len(targets):
        raise ValueError(f"Got {len(inputs)} input rows but {len(targets)} target rows")
    return [TrainingExample(inputs=x, targets=y) for x, y in zip(inputs, targets)]


__all__ = [
    "HIGH_LABEL",
    "LOW_LABEL",
    "examples_from_arrays",
    "load_two_clusters",
    "make_two_clusters",
]
