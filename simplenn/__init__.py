"""simplenn public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.backprop import backprop
from .core.gradients import aggregate_gradients
from .core.network import (
    Network,
    feed_forward,
    feed_forward_capturing,
    reshape_parameters,
    unroll_gradient,
    unroll_parameters,
)
from .core.types import DimensionMismatchError, TrainingExample
from .training.gradient_check import check_gradient
from .training.losses import cost_over_dataset, cost_single_example, quadratic_cost
from .training.outcomes import Completed, CostIncreased, DimensionMismatch, FailedGradientCheck
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import CheckOptions, Trainer

__all__ = [
    "CheckOptions",
    "Completed",
    "CostIncreased",
    "DimensionMismatch",
    "DimensionMismatchError",
    "FailedGradientCheck",
    "Network",
    "Trainer",
    "TrainingExample",
    "activations",
    "aggregate_gradients",
    "backprop",
    "check_gradient",
    "cost_over_dataset",
    "cost_single_example",
    "feed_forward",
    "feed_forward_capturing",
    "load_preset",
    "presets",
    "quadratic_cost",
    "reshape_parameters",
    "run_pipeline",
    "types",
    "unroll_gradient",
    "unroll_parameters",
]
