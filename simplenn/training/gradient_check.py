"""
Finite-difference verification of the backpropagation gradient.

Every parameter theta_i is nudged by +/- epsilon and the mean dataset cost is
re-evaluated, giving the centred difference

    dC/dtheta_i ~= (C(theta_i + eps) - C(theta_i - eps)) / (2 * eps)

The approximation is compared with the analytic gradient two ways: the raw
Euclidean distance between the flattened gradients, and that distance divided
by the sum of their lengths.  Both must stay within ``epsilon ** 2``.

This costs two full passes over the dataset per parameter, so it is meant for
verifying the implementation, not for routine training.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..core.network import Network, reshape_parameters, unroll_gradient, unroll_parameters
from ..core.types import Array, Gradient, TrainingExample
from .losses import cost_over_dataset

GRADIENT_CHECK_EPSILON = 1e-4


@dataclass(frozen=True)
class GradientCheckReport:
    distance: float
    normalized_distance: float
    tolerance: float

    @property
    def passed(self) -> bool:
        return self.distance <= self.tolerance and self.normalized_distance <= self.tolerance


def approximate_gradient(
    network: Network,
    examples: Sequence[TrainingExample],
    epsilon: float = GRADIENT_CHECK_EPSILON,
) -> Array:
    """Central-difference estimate of the cost gradient, ordered like :func:`unroll_parameters`."""

    theta = unroll_parameters(network).copy()
    approx = np.zeros_like(theta)
    for i in range(theta.size):
        original = theta[i]

        theta[i] = original + epsilon
        cost_plus = cost_over_dataset(reshape_parameters(network.sizes, theta), examples)

        theta[i] = original - epsilon
        cost_minus = cost_over_dataset(reshape_parameters(network.sizes, theta), examples)

        theta[i] = original
        approx[i] = (cost_plus - cost_minus) / (2.0 * epsilon)
    return approx


def compare_gradients(approx: Array, analytic: Array, tolerance: float) -> GradientCheckReport:
    approx = np.asarray(approx, dtype=np.float64)
    analytic = np.asarray(analytic, dtype=np.float64)
    if approx.shape != analytic.shape:
        raise ValueError(
            f"Gradient vectors differ in length: {approx.shape[0]} vs {analytic.shape[0]}"
        )
    distance = float(np.linalg.norm(approx - analytic))
    scale = float(np.linalg.norm(approx) + np.linalg.norm(analytic))
    normalized = distance / scale if scale > 0.0 else 0.0
    return GradientCheckReport(
        distance=distance, normalized_distance=normalized, tolerance=tolerance
    )


def check_gradient(
    network: Network,
    examples: Sequence[TrainingExample],
    gradient: Gradient,
    epsilon: float = GRADIENT_CHECK_EPSILON,
) -> GradientCheckReport:
    """Compare ``gradient`` with a finite-difference estimate over ``examples``."""

    approx = approximate_gradient(network, examples, epsilon)
    return compare_gradients(approx, unroll_gradient(gradient), tolerance=epsilon * epsilon)


__all__ = [
    "GRADIENT_CHECK_EPSILON",
    "GradientCheckReport",
    "approximate_gradient",
    "check_gradient",
    "compare_gradients",
]
