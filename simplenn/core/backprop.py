"""Backpropagation of output errors through a captured forward pass."""

from __future__ import annotations

from typing import List

import numpy as np

from .activations import sigmoid_prime
from .network import Network
from .types import Array, DimensionMismatchError, ErrorVectors, FeedForwardIntermediates


def output_error(activations: Array, targets: Array, z: Array) -> Array:
    """``(a_out - y) * sigmoid'(z_out)`` for the output layer."""

    return (activations - targets) * sigmoid_prime(z)


def hidden_error(next_weights: Array, next_error: Array, z: Array) -> Array:
    """``(W_next^T @ delta_next) * sigmoid'(z)`` for a hidden layer."""

    return (next_weights.T @ next_error) * sigmoid_prime(z)


def backprop(
    network: Network, intermediates: FeedForwardIntermediates, targets: Array
) -> ErrorVectors:
    """Return one error vector per parameterised layer, aligned with ``network.weights``.

    Errors are computed from the output layer backwards using the weighted
    sums stored in ``intermediates``; ``network`` is only read.
    """

    targets = np.asarray(targets, dtype=np.float64).reshape(-1)
    if targets.shape[0] != network.sizes[-1]:
        raise DimensionMismatchError(
            "Desired output length must match the output layer size",
            expected=network.sizes[-1],
            actual=targets.shape[0],
        )
    if len(intermediates.layers) != len(network.weights):
        raise ValueError(
            f"Captured {len(intermediates.layers)} layers for a network with "
            f"{len(network.weights)} parameterised layers"
        )

    last = len(network.weights) - 1
    errors: List[Array] = [np.empty(0)] * (last + 1)
    output = intermediates.layers[last]
    errors[last] = output_error(output.a, targets, output.z)
    for idx in reversed(range(last)):
        errors[idx] = hidden_error(
            network.weights[idx + 1], errors[idx + 1], intermediates.layers[idx].z
        )
    return tuple(errors)


__all__ = ["backprop", "hidden_error", "output_error"]
