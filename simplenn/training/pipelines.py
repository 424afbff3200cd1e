"""Pipeline assembly: config mapping -> dataset, network, trainer and artifacts."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import numpy as np

from ..core.network import Network, feed_forward
from ..data import get_dataset
from ..data.registry import DatasetSpec
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink, MetricsCapture
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .outcomes import TrainingOutcome
from .trainer import CheckOptions, Trainer

_TWO_CLUSTERS = {"name": "two_clusters", "options": {"points_per_cluster": 10}}
_CLUSTER_PROBES = [[2.0, 2.0], [-2.0, -2.0]]

_PRESETS: Dict[str, Mapping[str, object]] = {
    "two-clusters-fixed": {
        "data": _TWO_CLUSTERS,
        "model": {
            "sizes": [2, 3, 1],
            "init": "fixed",
            "weights": [[[0.2, 0.2], [0.4, 0.4], [0.6, 0.6]], [[0.5, 0.5, 0.5]]],
            "biases": [[0.1, 0.1, 0.1], [0.1]],
        },
        "train": {
            "epochs": 2000,
            "learning_rate": 0.9,
            "gradient_checking": True,
            "cost_decreasing_check": True,
            "log_every": 10,
            "probes": _CLUSTER_PROBES,
            "run_dir": "runs/two-clusters-fixed",
            "enable_plots": False,
        },
    },
    "two-clusters-random": {
        "data": _TWO_CLUSTERS,
        "model": {"sizes": [2, 3, 1], "init": "random", "seed": 0},
        "train": {
            "epochs": 7000,
            "learning_rate": 0.9,
            "cost_decreasing_check": True,
            "log_every": 50,
            "probes": _CLUSTER_PROBES,
            "run_dir": "runs/two-clusters-random",
            "enable_plots": False,
        },
    },
    "two-clusters-deep": {
        "data": _TWO_CLUSTERS,
        "model": {"sizes": [2, 16, 16, 1], "init": "random", "seed": 0},
        "train": {
            "epochs": 2500,
            "learning_rate": 0.9,
            "cost_decreasing_check": True,
            "log_every": 25,
            "probes": _CLUSTER_PROBES,
            "run_dir": "runs/two-clusters-deep",
            "enable_plots": False,
        },
    },
    "gradient-check-smoke": {
        "data": {"name": "two_clusters", "options": {"points_per_cluster": 2}},
        "model": {"sizes": [2, 3, 1], "init": "random", "seed": 3, "std": 0.5},
        "train": {
            "epochs": 5,
            "learning_rate": 0.5,
            "gradient_checking": True,
            "cost_decreasing_check": True,
            "run_dir": "runs/gradient-check-smoke",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`run_pipeline`."""

    outcome: TrainingOutcome
    network: Network
    run_dir: str
    metrics_path: str
    manifest_path: str
    summary_path: str
    predictions: List[Dict[str, List[float]]] = field(default_factory=list)


class TrainingAborted(RuntimeError):
    """Raised by :func:`run_pipeline` when training stopped on a failed check."""

    def __init__(self, result: RunResult) -> None:
        super().__init__(result.outcome.describe())
        self.result = result
        self.outcome = result.outcome


def read_config_file(path: Path) -> Mapping[str, object]:
    """Load a JSON or YAML mapping from ``path``."""

    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        presets: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = read_config_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                presets[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = presets
    cache = _FILE_PRESETS_CACHE or {}
    return {name: deepcopy(cfg) for name, cfg in cache.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def merge_config(base: Mapping[str, object], override: Mapping[str, object]) -> Dict[str, object]:
    """Recursively merge ``override`` into a copy of ``base``."""

    merged: Dict[str, object] = deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_config(merged[key], value)  # type: ignore[arg-type]
        else:
            merged[key] = deepcopy(value)
    return merged


def build_network(model_cfg: Mapping[str, object], dataset: DatasetSpec) -> Network:
    """Create the network described by the ``model`` config section."""

    init = str(model_cfg.get("init", "random"))
    if init == "fixed":
        if "weights" not in model_cfg or "biases" not in model_cfg:
            raise KeyError("Fixed initialisation requires `weights` and `biases` in the model config")
        network = Network.from_parameters(model_cfg["weights"], model_cfg["biases"])  # type: ignore[arg-type]
        if "sizes" in model_cfg and list(model_cfg["sizes"]) != list(network.sizes):  # type: ignore[call-overload]
            raise ValueError(
                f"Configured sizes {list(model_cfg['sizes'])} do not match the "  # type: ignore[call-overload]
                f"explicit parameters {list(network.sizes)}"
            )
        return network
    if init == "random":
        sizes = model_cfg.get("sizes")
        if sizes is None:
            hidden = [int(h) for h in model_cfg.get("hidden", [])]  # type: ignore[union-attr]
            sizes = [dataset.d_in, *hidden, dataset.d_out]
        return Network.random(
            [int(s) for s in sizes],  # type: ignore[union-attr]
            seed=int(model_cfg.get("seed", 0)),
            mean=float(model_cfg.get("mean", 0.0)),
            std=float(model_cfg.get("std", 1.0)),
        )
    raise ValueError(f"Unknown init: {init}")


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Train according to ``config`` and write the run artifacts.

    Raises :class:`TrainingAborted` when the trainer stopped on a failed
    check; the artifacts gathered up to that point are still written.
    """

    missing = {"data", "model", "train"} - set(config)
    if missing:
        raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    dataset = get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    network = build_network(model_cfg, dataset)
    probes = _check_probes(network, train_cfg.get("probes", []))  # type: ignore[arg-type]
    checks = CheckOptions(
        gradient_checking=bool(train_cfg.get("gradient_checking", False)),
        cost_decreasing_check=bool(train_cfg.get("cost_decreasing_check", False)),
    )
    epochs = int(train_cfg.get("epochs", 1))
    learning_rate = float(train_cfg.get("learning_rate", 0.9))
    seed = model_cfg.get("seed")

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        examples=len(dataset),
        sizes=network.sizes,
        param_count=network.parameter_count(),
        epochs=epochs,
        learning_rate=learning_rate,
        checks=checks,
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=int(seed) if seed is not None else None)
    csv_sink = CsvSink(run_dir / "metrics.csv")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    capture = MetricsCapture()
    trainer = Trainer(
        network,
        learning_rate,
        checks,
        callbacks=[jsonl, csv_sink, plots, capture],
        log_every=int(train_cfg.get("log_every", 1)),
    )

    start = time.perf_counter()
    outcome = trainer.run(dataset.examples, epochs)
    elapsed = time.perf_counter() - start
    plots.close()

    predictions = _probe(trainer.network, probes)
    if predictions:
        (run_dir / "predictions.json").write_text(json.dumps(predictions, indent=2))

    safe_config = json.loads(json.dumps(config))
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset.provenance,
        outcome=_outcome_record(outcome, elapsed),
    )
    summary_path = write_summary(jsonl.path, run_dir / "summary.json")

    print(("Finished" if outcome.ok else "Aborted") + f": {outcome.describe()}")

    result = RunResult(
        outcome=outcome,
        network=trainer.network,
        run_dir=str(run_dir),
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
        predictions=predictions,
    )
    if not outcome.ok:
        raise TrainingAborted(result)
    return result


def _check_probes(
    network: Network, probes: Sequence[Sequence[float]]
) -> List[List[float]]:
    """Reject probe inputs that do not fit the input layer before any training runs."""

    checked: List[List[float]] = []
    for idx, inputs in enumerate(probes):
        values = [float(x) for x in inputs]
        if len(values) != network.sizes[0]:
            raise ValueError(
                f"Probe {idx} has {len(values)} inputs but the input layer has "
                f"{network.sizes[0]} units"
            )
        checked.append(values)
    return checked


def _probe(network: Network, probes: Sequence[Sequence[float]]) -> List[Dict[str, List[float]]]:
    results = []
    for inputs in probes:
        output = feed_forward(network, np.asarray(inputs, dtype=np.float64))
        results.append({"inputs": [float(x) for x in inputs], "outputs": output.tolist()})
    return results


def _outcome_record(outcome: TrainingOutcome, elapsed: float) -> Dict[str, object]:
    record: Dict[str, object] = {"type": type(outcome).__name__, "ok": outcome.ok}
    record.update(asdict(outcome))
    record["elapsed_seconds"] = round(elapsed, 3)
    return record


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _print_startup_summary(
    *,
    dataset_name: str,
    examples: int,
    sizes: Sequence[int],
    param_count: int,
    epochs: int,
    learning_rate: float,
    checks: CheckOptions,
) -> None:
    print("=== simplenn run ===")
    print(f"Dataset        : {dataset_name} ({examples} examples)")
    print(f"Layer sizes    : {list(sizes)}")
    print(f"Parameters     : {param_count}")
    print(f"Epochs         : {epochs}")
    print(f"Learning rate  : {learning_rate}")
    print(f"Gradient check : {'on' if checks.gradient_checking else 'off'}")
    print(f"Cost check     : {'on' if checks.cost_decreasing_check else 'off'}")
    print("====================")


__all__ = [
    "RunResult",
    "TrainingAborted",
    "build_network",
    "load_preset",
    "merge_config",
    "presets",
    "read_config_file",
    "run_pipeline",
]
