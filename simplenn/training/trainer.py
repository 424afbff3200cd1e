"""Full-batch gradient descent training loop for simplenn."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence

from ..core.backprop import backprop
from ..core.gradients import ExampleTrace, aggregate_gradients
from ..core.network import Network, feed_forward_capturing
from ..core.types import TrainingExample
from .gradient_check import check_gradient
from .losses import cost_over_dataset
from .outcomes import (
    Completed,
    CostIncreased,
    DimensionMismatch,
    FailedGradientCheck,
    TrainingOutcome,
)


@dataclass(frozen=True)
class CheckOptions:
    """Optional invariant checks; both slow every epoch down considerably."""

    gradient_checking: bool = False
    cost_decreasing_check: bool = False

    @classmethod
    def no_checks(cls) -> "CheckOptions":
        return cls()

    @classmethod
    def all_checks(cls) -> "CheckOptions":
        return cls(gradient_checking=True, cost_decreasing_check=True)


class Trainer:
    """Train a :class:`Network` for a fixed number of full-batch epochs.

    The trainer owns the network for the duration of :meth:`run` and swaps in
    a freshly updated copy once per epoch, after the gradient for the whole
    training set has been aggregated.  Epoch 0 reports the initial cost.
    """

    def __init__(
        self,
        network: Network,
        learning_rate: float,
        checks: CheckOptions | None = None,
        callbacks: Sequence[object] | None = None,
        *,
        log_every: int = 1,
    ) -> None:
        if learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {learning_rate}")
        if log_every < 1:
            raise ValueError(f"log_every must be at least 1, got {log_every}")
        self.network = network
        self.learning_rate = float(learning_rate)
        self.checks = checks or CheckOptions.no_checks()
        self.callbacks = list(callbacks or [])
        self.log_every = int(log_every)

    def run(self, examples: Iterable[TrainingExample], epochs: int) -> TrainingOutcome:
        if epochs < 0:
            raise ValueError(f"epochs must be non-negative, got {epochs}")
        dataset = list(examples)
        if not dataset:
            raise ValueError("Training requires at least one example")

        mismatch = self._validate(dataset)
        if mismatch is not None:
            return mismatch

        initial_cost = cost_over_dataset(self.network, dataset)
        self._emit(0, {"cost": initial_cost})
        previous_cost = initial_cost
        final_cost = initial_cost

        for epoch in range(1, epochs + 1):
            traces = self._collect(dataset)
            gradient = aggregate_gradients(self.network, traces)
            del traces

            metrics: Dict[str, float] = {}
            if self.checks.gradient_checking:
                report = check_gradient(self.network, dataset, gradient)
                metrics["gradient_distance"] = report.distance
                metrics["gradient_normalized_distance"] = report.normalized_distance
                if not report.passed:
                    self._emit(epoch, metrics)
                    return FailedGradientCheck(
                        distance=report.distance,
                        normalized_distance=report.normalized_distance,
                        tolerance=report.tolerance,
                        epoch=epoch,
                    )

            self.network = self.network.apply_gradient(gradient, self.learning_rate)

            if self.checks.cost_decreasing_check:
                cost = cost_over_dataset(self.network, dataset)
                metrics["cost"] = cost
                if cost > previous_cost:
                    self._emit(epoch, metrics)
                    return CostIncreased(previous=previous_cost, current=cost, epoch=epoch)
                previous_cost = cost

            if epoch == epochs or epoch % self.log_every == 0:
                if "cost" not in metrics:
                    metrics["cost"] = cost_over_dataset(self.network, dataset)
                self._emit(epoch, metrics)
            if epoch == epochs:
                final_cost = metrics["cost"]

        return Completed(initial_cost=initial_cost, final_cost=final_cost, epochs=epochs)

    # ------------------------------------------------------------------
    # Internal helpers

    def _validate(self, dataset: Sequence[TrainingExample]) -> DimensionMismatch | None:
        n_in = self.network.sizes[0]
        n_out = self.network.sizes[-1]
        for idx, example in enumerate(dataset):
            if example.inputs.shape[0] != n_in:
                return DimensionMismatch(
                    message="input length must match the input layer size",
                    example_index=idx,
                    expected=n_in,
                    actual=int(example.inputs.shape[0]),
                )
            if example.targets.shape[0] != n_out:
                return DimensionMismatch(
                    message="desired output length must match the output layer size",
                    example_index=idx,
                    expected=n_out,
                    actual=int(example.targets.shape[0]),
                )
        return None

    def _collect(self, dataset: Sequence[TrainingExample]) -> List[ExampleTrace]:
        traces: List[ExampleTrace] = []
        for example in dataset:
            intermediates = feed_forward_capturing(self.network, example.inputs)
            errors = backprop(self.network, intermediates, example.targets)
            traces.append((intermediates, errors))
        return traces

    def _emit(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["CheckOptions", "Trainer"]
