"""Command line entry point for simplenn training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

import numpy as np

from simplenn.core.network import Network, feed_forward
from simplenn.training import pipelines


def _format_result(result: pipelines.RunResult) -> str:
    payload = {
        "outcome": type(result.outcome).__name__,
        "run_dir": result.run_dir,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "summary": result.summary_path,
    }
    if result.predictions:
        payload["predictions"] = result.predictions
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="two-clusters-fixed",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--epochs", type=int, help="Override the number of training epochs")
    parser.add_argument("--learning-rate", type=float, help="Override the learning rate")
    parser.add_argument("--seed", type=int, help="Seed for random weight initialisation")
    parser.add_argument("--run-dir", help="Directory for metrics and manifests")
    parser.add_argument(
        "--gradient-check",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Verify backprop against finite differences every epoch (slow)",
    )
    parser.add_argument(
        "--cost-check",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Abort if the mean cost increases between epochs",
    )
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write a cost curve with matplotlib"
    )
    parser.add_argument(
        "--demo", action="store_true", help="Print one forward pass of a fixed 3-2 network and exit"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def run_demo() -> np.ndarray:
    network = Network.from_parameters(
        weights=[[[0.5, 0.5, 0.5], [1.0, 1.0, 1.0]]],
        biases=[[0.1, 0.1]],
    )
    outputs = feed_forward(network, np.array([0.0, 0.5, 1.0]))
    print(f"outputs: {outputs.tolist()}")
    return outputs


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    if args.demo:
        run_demo()
        raise SystemExit(0)

    config = pipelines.load_preset(args.preset)
    if args.config:
        override = pipelines.read_config_file(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = pipelines.merge_config(config, override)
    config = json.loads(json.dumps(config))

    train_cfg = config.setdefault("train", {})
    if args.epochs is not None:
        train_cfg["epochs"] = int(args.epochs)
    if args.learning_rate is not None:
        train_cfg["learning_rate"] = float(args.learning_rate)
    if args.run_dir:
        train_cfg["run_dir"] = args.run_dir
    if args.gradient_check is not None:
        train_cfg["gradient_checking"] = bool(args.gradient_check)
    if args.cost_check is not None:
        train_cfg["cost_decreasing_check"] = bool(args.cost_check)
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    if args.seed is not None:
        config.setdefault("model", {})["seed"] = int(args.seed)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    try:
        result = pipelines.run_pipeline(config)
    except pipelines.TrainingAborted as exc:
        print(_format_result(exc.result))
        raise SystemExit(f"training aborted: {exc}") from None
    print(_format_result(result))


if __name__ == "__main__":
    main()
