"""Core typing contracts for simplenn."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

Array = np.ndarray


class DimensionMismatchError(ValueError):
    """Raised when a vector length does not match the layer it is fed to."""

    def __init__(self, message: str, *, expected: int, actual: int) -> None:
        super().__init__(f"{message} (expected {expected}, got {actual})")
        self.expected = expected
        self.actual = actual


def as_vector(values: Sequence[float] | Array) -> Array:
    """Return ``values`` as a read-only, one dimensional float64 array."""

    vector = np.array(values, dtype=np.float64).reshape(-1)
    vector.setflags(write=False)
    return vector


@dataclass(frozen=True)
class TrainingExample:
    """An input vector paired with the output the network should produce."""

    inputs: Array
    targets: Array

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", as_vector(self.inputs))
        object.__setattr__(self, "targets", as_vector(self.targets))


@dataclass(frozen=True)
class LayerActivation:
    """Weighted sum ``z`` and activation ``a`` of one parameterised layer."""

    z: Array
    a: Array


@dataclass(frozen=True)
class FeedForwardIntermediates:
    """Values captured by a forward pass, aligned with the weight matrices.

    ``layers[i]`` belongs to the layer fed by ``weights[i]``.  The input layer
    has no weighted sum, so its activation is carried separately in ``inputs``.
    """

    inputs: Array
    layers: Tuple[LayerActivation, ...]

    def previous_activation(self, index: int) -> Array:
        """Return the activation that feeds the layer at ``index``."""

        if index == 0:
            return self.inputs
        return self.layers[index - 1].a

    @property
    def output(self) -> Array:
        return self.layers[-1].a


ErrorVectors = Tuple[Array, ...]


@dataclass(frozen=True)
class LayerGradient:
    """Mean partial derivatives of the cost for one layer's parameters."""

    weights: Array
    biases: Array


Gradient = Tuple[LayerGradient, ...]


__all__ = [
    "Array",
    "DimensionMismatchError",
    "ErrorVectors",
    "FeedForwardIntermediates",
    "Gradient",
    "LayerActivation",
    "LayerGradient",
    "TrainingExample",
    "as_vector",
]
