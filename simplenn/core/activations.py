"""Activation utilities for simplenn."""

from __future__ import annotations

import numpy as np

from .types import Array


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid ``1 / (1 + e^-x)`` elementwise."""

    return 1.0 / (1.0 + np.exp(-x))


def sigmoid_prime(z: Array) -> Array:
    """Return the derivative of :func:`sigmoid` evaluated at ``z``."""

    s = sigmoid(z)
    return s * (1.0 - s)
