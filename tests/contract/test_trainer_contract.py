import numpy as np
import pytest

from simplenn.core.network import Network
from simplenn.core.types import LayerGradient, TrainingExample
from simplenn.data import make_two_clusters
from simplenn.reporting.metrics import MetricsCapture
from simplenn.training import trainer as trainer_module
from simplenn.training.losses import cost_over_dataset
from simplenn.training.outcomes import (
    Completed,
    CostIncreased,
    DimensionMismatch,
    FailedGradientCheck,
)
from simplenn.training.trainer import CheckOptions, Trainer


def _fixed_network() -> Network:
    return Network.from_parameters(
        weights=[[[0.2, 0.2], [0.4, 0.4], [0.6, 0.6]], [[0.5, 0.5, 0.5]]],
        biases=[[0.1, 0.1, 0.1], [0.1]],
    )


def test_check_options_defaults():
    assert CheckOptions() == CheckOptions.no_checks()
    assert not CheckOptions().gradient_checking
    assert not CheckOptions().cost_decreasing_check
    assert CheckOptions.all_checks() == CheckOptions(True, True)


def test_trainer_completes_with_all_checks():
    examples = make_two_clusters(points_per_cluster=3)
    trainer = Trainer(_fixed_network(), 0.9, CheckOptions.all_checks())
    outcome = trainer.run(examples, epochs=5)

    assert isinstance(outcome, Completed)
    assert outcome.ok
    assert outcome.epochs == 5
    assert outcome.final_cost < outcome.initial_cost
    assert outcome.final_cost == pytest.approx(cost_over_dataset(trainer.network, examples))


def test_trainer_replaces_network_instead_of_mutating():
    original = _fixed_network()
    weights_before = [W.copy() for W in original.weights]
    trainer = Trainer(original, 0.9)
    trainer.run(make_two_clusters(points_per_cluster=2), epochs=3)

    assert trainer.network is not original
    for W, W_before in zip(original.weights, weights_before):
        np.testing.assert_array_equal(W, W_before)
    assert not np.array_equal(trainer.network.weights[0], weights_before[0])


def test_zero_epochs_leaves_network_alone():
    network = _fixed_network()
    trainer = Trainer(network, 0.9)
    outcome = trainer.run(make_two_clusters(points_per_cluster=2), epochs=0)
    assert isinstance(outcome, Completed)
    assert outcome.initial_cost == outcome.final_cost
    assert trainer.network is network


def test_training_is_deterministic():
    examples = make_two_clusters(points_per_cluster=2)
    first = Trainer(Network.random([2, 3, 1], seed=7), 0.9).run(examples, epochs=20)
    second = Trainer(Network.random([2, 3, 1], seed=7), 0.9).run(examples, epochs=20)
    assert first == second


def test_input_dimension_mismatch_is_reported():
    examples = [
        TrainingExample(inputs=[1.0, 1.0], targets=[1.0]),
        TrainingExample(inputs=[1.0, 1.0, 1.0], targets=[1.0]),
    ]
    capture = MetricsCapture()
    outcome = Trainer(_fixed_network(), 0.9, callbacks=[capture]).run(examples, epochs=3)

    assert isinstance(outcome, DimensionMismatch)
    assert not outcome.ok
    assert outcome.example_index == 1
    assert (outcome.expected, outcome.actual) == (2, 3)
    assert capture.history == []


def test_target_dimension_mismatch_is_reported():
    examples = [TrainingExample(inputs=[1.0, 1.0], targets=[1.0, 0.0])]
    outcome = Trainer(_fixed_network(), 0.9).run(examples, epochs=3)
    assert isinstance(outcome, DimensionMismatch)
    assert (outcome.expected, outcome.actual) == (1, 2)
    assert "example 0" in outcome.describe()


def test_cost_increase_aborts_training():
    examples = make_two_clusters(points_per_cluster=2)
    checks = CheckOptions(cost_decreasing_check=True)
    outcome = Trainer(_fixed_network(), 1000.0, checks).run(examples, epochs=10)

    assert isinstance(outcome, CostIncreased)
    assert outcome.epoch == 1
    assert outcome.current > outcome.previous
    assert "epoch 1" in outcome.describe()


def test_cost_increase_ignored_without_check():
    examples = make_two_clusters(points_per_cluster=2)
    outcome = Trainer(_fixed_network(), 1000.0).run(examples, epochs=3)
    assert isinstance(outcome, Completed)


def test_failed_gradient_check_aborts_training(monkeypatch):
    real_aggregate = trainer_module.aggregate_gradients

    def skewed_aggregate(network, batch):
        gradient = real_aggregate(network, batch)
        return tuple(
            LayerGradient(weights=layer.weights * 2.0, biases=layer.biases) for layer in gradient
        )

    monkeypatch.setattr(trainer_module, "aggregate_gradients", skewed_aggregate)
    network = _fixed_network()
    trainer = Trainer(network, 0.9, CheckOptions(gradient_checking=True))
    outcome = trainer.run(make_two_clusters(points_per_cluster=2), epochs=5)

    assert isinstance(outcome, FailedGradientCheck)
    assert outcome.epoch == 1
    assert outcome.distance > outcome.tolerance
    assert outcome.tolerance == pytest.approx(1e-8)
    # The bad gradient is never applied.
    assert trainer.network is network


def test_callbacks_follow_log_every():
    capture = MetricsCapture()
    seen = []
    trainer = Trainer(
        _fixed_network(),
        0.9,
        callbacks=[capture, lambda epoch, metrics: seen.append(epoch)],
        log_every=3,
    )
    outcome = trainer.run(make_two_clusters(points_per_cluster=2), epochs=7)

    assert [epoch for epoch, _ in capture.history] == [0, 3, 6, 7]
    assert seen == [0, 3, 6, 7]
    assert capture.costs[0] == pytest.approx(outcome.initial_cost)
    assert capture.costs[-1] == pytest.approx(outcome.final_cost)


def test_gradient_distances_are_reported():
    capture = MetricsCapture()
    Trainer(_fixed_network(), 0.9, CheckOptions.all_checks(), callbacks=[capture]).run(
        make_two_clusters(points_per_cluster=2), epochs=2
    )
    _, metrics = capture.history[-1]
    assert metrics["gradient_distance"] <= 1e-8
    assert metrics["gradient_normalized_distance"] <= 1e-8
    assert "cost" in metrics


def test_cost_is_non_increasing_with_check_enabled():
    capture = MetricsCapture()
    outcome = Trainer(
        _fixed_network(),
        0.9,
        CheckOptions(cost_decreasing_check=True),
        callbacks=[capture],
    ).run(make_two_clusters(), epochs=200)

    assert isinstance(outcome, Completed)
    costs = capture.costs
    assert all(b <= a for a, b in zip(costs, costs[1:]))


@pytest.mark.parametrize(
    "kwargs",
    [{"learning_rate": 0.0}, {"learning_rate": -1.0}, {"learning_rate": 0.9, "log_every": 0}],
)
def test_trainer_rejects_bad_settings(kwargs):
    with pytest.raises(ValueError):
        Trainer(_fixed_network(), **kwargs)


def test_run_rejects_bad_arguments():
    trainer = Trainer(_fixed_network(), 0.9)
    with pytest.raises(ValueError):
        trainer.run([], epochs=1)
    with pytest.raises(ValueError):
        trainer.run(make_two_clusters(points_per_cluster=1), epochs=-1)
