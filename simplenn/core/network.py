"""Fully-connected sigmoid network and its forward pass."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from .activations import sigmoid
from .types import (
    Array,
    DimensionMismatchError,
    FeedForwardIntermediates,
    Gradient,
    LayerActivation,
)


def weighted_sum(weights: Array, biases: Array, previous: Array) -> Array:
    """Return ``z = W @ a_prev + b`` for one layer."""

    return weights @ previous + biases


def _frozen(values: Array) -> Array:
    array = np.array(values, dtype=np.float64)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class Network:
    """Layer sizes plus one weight matrix and bias vector per layer step.

    ``weights[i]`` has shape ``(sizes[i + 1], sizes[i])`` and ``biases[i]``
    has length ``sizes[i + 1]``; index 0 is the first hidden layer.  Instances
    are immutable: training replaces the network instead of editing it.
    """

    sizes: Tuple[int, ...]
    weights: Tuple[Array, ...]
    biases: Tuple[Array, ...]

    def __post_init__(self) -> None:
        sizes = tuple(int(size) for size in self.sizes)
        if len(sizes) < 2:
            raise ValueError("A network needs at least an input and an output layer")
        if any(size <= 0 for size in sizes):
            raise ValueError(f"Layer sizes must be positive, got {list(sizes)}")
        weights = tuple(_frozen(w) for w in self.weights)
        biases = tuple(_frozen(b) for b in self.biases)
        if len(weights) != len(sizes) - 1 or len(biases) != len(sizes) - 1:
            raise ValueError(
                f"Expected {len(sizes) - 1} weight matrices and bias vectors, "
                f"got {len(weights)} and {len(biases)}"
            )
        for idx, (W, b) in enumerate(zip(weights, biases)):
            expected = (sizes[idx + 1], sizes[idx])
            if W.shape != expected:
                raise ValueError(f"weights[{idx}] has shape {W.shape}, expected {expected}")
            if b.shape != (sizes[idx + 1],):
                raise ValueError(
                    f"biases[{idx}] has shape {b.shape}, expected ({sizes[idx + 1]},)"
                )
        object.__setattr__(self, "sizes", sizes)
        object.__setattr__(self, "weights", weights)
        object.__setattr__(self, "biases", biases)

    @classmethod
    def random(
        cls,
        sizes: Sequence[int],
        seed: int = 0,
        *,
        mean: float = 0.0,
        std: float = 1.0,
    ) -> "Network":
        """Draw every weight and bias from ``N(mean, std)``."""

        rng = np.random.default_rng(seed)
        dims = [int(size) for size in sizes]
        biases: List[Array] = []
        weights: List[Array] = []
        for out_dim in dims[1:]:
            biases.append(rng.normal(mean, std, size=out_dim))
        for in_dim, out_dim in zip(dims[:-1], dims[1:]):
            weights.append(rng.normal(mean, std, size=(out_dim, in_dim)))
        return cls(sizes=tuple(dims), weights=tuple(weights), biases=tuple(biases))

    @classmethod
    def from_parameters(
        cls,
        weights: Sequence[Sequence[Sequence[float]] | Array],
        biases: Sequence[Sequence[float] | Array],
    ) -> "Network":
        """Build a network from explicit parameters, inferring the layer sizes."""

        matrices = [np.array(w, dtype=np.float64, ndmin=2) for w in weights]
        if not matrices:
            raise ValueError("At least one weight matrix is required")
        sizes = [matrices[0].shape[1]] + [W.shape[0] for W in matrices]
        return cls(
            sizes=tuple(sizes),
            weights=tuple(matrices),
            biases=tuple(np.array(b, dtype=np.float64).reshape(-1) for b in biases),
        )

    @property
    def num_layers(self) -> int:
        return len(self.sizes)

    def weight_shape(self, index: int) -> Tuple[int, int]:
        """Shape of ``weights[index]``."""

        if not 0 <= index < len(self.weights):
            raise IndexError(f"No weight matrix at index {index}")
        return self.sizes[index + 1], self.sizes[index]

    def parameter_count(self) -> int:
        return int(sum(W.size + b.size for W, b in zip(self.weights, self.biases)))

    def apply_gradient(self, gradient: Gradient, learning_rate: float) -> "Network":
        """Return a new network moved ``learning_rate`` against ``gradient``."""

        if len(gradient) != len(self.weights):
            raise ValueError(
                f"Gradient has {len(gradient)} layers, network has {len(self.weights)}"
            )
        weights = []
        biases = []
        for W, b, layer in zip(self.weights, self.biases, gradient):
            weights.append(W - learning_rate * layer.weights)
            biases.append(b - learning_rate * layer.biases)
        return Network(sizes=self.sizes, weights=tuple(weights), biases=tuple(biases))


def _check_inputs(network: Network, inputs: Array) -> Array:
    vector = np.asarray(inputs, dtype=np.float64).reshape(-1)
    if vector.shape[0] != network.sizes[0]:
        raise DimensionMismatchError(
            "Input length must match the input layer size",
            expected=network.sizes[0],
            actual=vector.shape[0],
        )
    return vector


def feed_forward(network: Network, inputs: Array) -> Array:
    """Propagate ``inputs`` through ``network`` and return the output activations."""

    a = _check_inputs(network, inputs)
    for W, b in zip(network.weights, network.biases):
        a = sigmoid(weighted_sum(W, b, a))
    return a


def feed_forward_capturing(network: Network, inputs: Array) -> FeedForwardIntermediates:
    """Like :func:`feed_forward` but keep every weighted sum and activation."""

    first = _frozen(_check_inputs(network, inputs))
    a = first
    layers: List[LayerActivation] = []
    for W, b in zip(network.weights, network.biases):
        z = weighted_sum(W, b, a)
        a = sigmoid(z)
        layers.append(LayerActivation(z=z, a=a))
    return FeedForwardIntermediates(inputs=first, layers=tuple(layers))


# ----------------------------------------------------------------------------
# Flat parameter vectors


def unroll_parameters(network: Network) -> Array:
    """Flatten the parameters: layer 0 weights (row-major), layer 0 biases, layer 1 ..."""

    chunks: List[Array] = []
    for W, b in zip(network.weights, network.biases):
        chunks.append(W.reshape(-1))
        chunks.append(b)
    return np.concatenate(chunks)


def unroll_gradient(gradient: Gradient) -> Array:
    """Flatten ``gradient`` with the ordering of :func:`unroll_parameters`."""

    chunks: List[Array] = []
    for layer in gradient:
        chunks.append(np.asarray(layer.weights, dtype=np.float64).reshape(-1))
        chunks.append(np.asarray(layer.biases, dtype=np.float64).reshape(-1))
    return np.concatenate(chunks)


def reshape_parameters(sizes: Sequence[int], theta: Array) -> Network:
    """Inverse of :func:`unroll_parameters` for a network with ``sizes``."""

    dims = [int(size) for size in sizes]
    flat = np.asarray(theta, dtype=np.float64).reshape(-1)
    expected = sum(out_dim * in_dim + out_dim for in_dim, out_dim in zip(dims[:-1], dims[1:]))
    if flat.shape[0] != expected:
        raise ValueError(
            f"Parameter vector has {flat.shape[0]} values, layer sizes {dims} need {expected}"
        )
    weights: List[Array] = []
    biases: List[Array] = []
    ptr = 0
    for in_dim, out_dim in zip(dims[:-1], dims[1:]):
        weights.append(flat[ptr : ptr + out_dim * in_dim].reshape(out_dim, in_dim))
        ptr += out_dim * in_dim
        biases.append(flat[ptr : ptr + out_dim])
        ptr += out_dim
    return Network(sizes=tuple(dims), weights=tuple(weights), biases=tuple(biases))


__all__ = [
    "Network",
    "feed_forward",
    "feed_forward_capturing",
    "reshape_parameters",
    "unroll_gradient",
    "unroll_parameters",
    "weighted_sum",
]
