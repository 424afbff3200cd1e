"""Result values returned by :meth:`simplenn.training.trainer.Trainer.run`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Completed:
    """Every configured epoch ran."""

    initial_cost: float
    final_cost: float
    epochs: int

    ok = True

    def describe(self) -> str:
        return (
            f"cost across the training set went from {self.initial_cost} "
            f"to {self.final_cost} after {self.epochs} epochs"
        )


@dataclass(frozen=True)
class DimensionMismatch:
    """A training example does not fit the network's input or output layer."""

    message: str
    example_index: int
    expected: int
    actual: int

    ok = False

    def describe(self) -> str:
        return (
            f"training example {self.example_index}: {self.message} "
            f"(expected {self.expected}, got {self.actual})"
        )


@dataclass(frozen=True)
class FailedGradientCheck:
    """Backprop disagreed with the finite-difference gradient."""

    distance: float
    normalized_distance: float
    tolerance: float
    epoch: int

    ok = False

    def describe(self) -> str:
        return (
            f"failed gradient check on epoch {self.epoch}: distance {self.distance}, "
            f"normalized distance {self.normalized_distance}, tolerance {self.tolerance}"
        )


@dataclass(frozen=True)
class CostIncreased:
    """The mean cost rose between two consecutive epochs."""

    previous: float
    current: float
    epoch: int

    ok = False

    def describe(self) -> str:
        return f"cost increased from {self.previous} to {self.current} on epoch {self.epoch}"


TrainingOutcome = Union[Completed, DimensionMismatch, FailedGradientCheck, CostIncreased]


__all__ = [
    "Completed",
    "CostIncreased",
    "DimensionMismatch",
    "FailedGradientCheck",
    "TrainingOutcome",
]
