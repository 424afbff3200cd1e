"""Quadratic cost of network outputs."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..core.network import Network, feed_forward
from ..core.types import Array, DimensionMismatchError, TrainingExample


def quadratic_cost(desired: Array, actual: Array) -> float:
    """Return ``0.5 * sum((desired - actual) ** 2)``."""

    desired = np.asarray(desired, dtype=np.float64).reshape(-1)
    actual = np.asarray(actual, dtype=np.float64).reshape(-1)
    if desired.shape != actual.shape:
        raise DimensionMismatchError(
            "Desired and actual outputs must have the same length",
            expected=desired.shape[0],
            actual=actual.shape[0],
        )
    diff = desired - actual
    return float(np.sum(np.square(diff)) / 2.0)


def cost_single_example(network: Network, example: TrainingExample) -> float:
    """Feed ``example`` forward and score it with :func:`quadratic_cost`."""

    if example.targets.shape[0] != network.sizes[-1]:
        raise DimensionMismatchError(
            "Desired output length must match the output layer size",
            expected=network.sizes[-1],
            actual=example.targets.shape[0],
        )
    return quadratic_cost(example.targets, feed_forward(network, example.inputs))


def cost_over_dataset(network: Network, examples: Sequence[TrainingExample]) -> float:
    """Mean per-example cost over ``examples``."""

    if not examples:
        raise ValueError("Cannot compute the cost of an empty dataset")
    total = sum(cost_single_example(network, example) for example in examples)
    return total / len(examples)


__all__ = ["cost_over_dataset", "cost_single_example", "quadratic_cost"]
