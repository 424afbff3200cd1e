"""Turn per-example error vectors into batch-averaged parameter gradients."""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from .network import Network
from .types import ErrorVectors, FeedForwardIntermediates, Gradient, LayerGradient

ExampleTrace = Tuple[FeedForwardIntermediates, ErrorVectors]


def aggregate_gradients(network: Network, batch: Sequence[ExampleTrace]) -> Gradient:
    """Average ``delta_i a_{i-1}^T`` and ``delta_i`` over every example in ``batch``.

    ``batch`` must hold the whole training set; there is no sampling.
    """

    if not batch:
        raise ValueError("Cannot aggregate gradients over an empty batch")
    count = len(batch)
    layers: List[LayerGradient] = []
    for idx in range(len(network.weights)):
        out_dim, in_dim = network.weight_shape(idx)
        weight_sum = np.zeros((out_dim, in_dim), dtype=np.float64)
        bias_sum = np.zeros(out_dim, dtype=np.float64)
        for intermediates, errors in batch:
            delta = errors[idx]
            weight_sum += np.outer(delta, intermediates.previous_activation(idx))
            bias_sum += delta
        weight_sum /= count
        bias_sum /= count
        layers.append(LayerGradient(weights=weight_sum, biases=bias_sum))
    return tuple(layers)


__all__ = ["ExampleTrace", "aggregate_gradients"]
