import csv
import json
from pathlib import Path

import pytest

from simplenn.data import get_dataset
from simplenn.training import pipelines
from simplenn.training.outcomes import Completed, CostIncreased


def _smoke_config(run_dir: Path, **train) -> dict:
    config = pipelines.load_preset("two-clusters-fixed")
    config = pipelines.merge_config(
        config,
        {
            "data": {"options": {"points_per_cluster": 2}},
            "train": {"epochs": 20, "gradient_checking": False, "run_dir": str(run_dir)},
        },
    )
    config["train"].update(train)
    return config


def test_pipeline_produces_artifacts(tmp_path, capsys):
    run_dir = tmp_path / "run"
    result = pipelines.run_pipeline(_smoke_config(run_dir))

    assert isinstance(result.outcome, Completed)
    assert result.run_dir == str(run_dir)
    for name in ("metrics.jsonl", "metrics.csv", "manifest.json", "summary.json", "config.json"):
        assert (run_dir / name).exists(), name

    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert [r["epoch"] for r in records] == [0, 10, 20]
    assert all("cost" in r and "sha" in r and "seed" in r for r in records)

    with (run_dir / "metrics.csv").open() as handle:
        rows = list(csv.DictReader(handle))
    assert [int(row["epoch"]) for row in rows] == [0, 10, 20]

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["outcome"]["type"] == "Completed"
    assert manifest["outcome"]["ok"] is True
    assert manifest["dataset"]["type"] == "two_clusters"
    assert manifest["config"]["train"]["epochs"] == 20

    summary = json.loads(Path(result.summary_path).read_text())
    assert summary["last_epoch"] == 20
    assert summary["metrics"]["cost"]["last"] == pytest.approx(result.outcome.final_cost)

    predictions = json.loads((run_dir / "predictions.json").read_text())
    assert [p["inputs"] for p in predictions] == [[2.0, 2.0], [-2.0, -2.0]]
    assert predictions == result.predictions

    out = capsys.readouterr().out
    assert "=== simplenn run ===" in out
    assert "Finished:" in out


def test_pipeline_raises_on_failed_check(tmp_path):
    config = _smoke_config(tmp_path / "run", learning_rate=1000.0, cost_decreasing_check=True)
    with pytest.raises(pipelines.TrainingAborted) as excinfo:
        pipelines.run_pipeline(config)

    aborted = excinfo.value
    assert isinstance(aborted.outcome, CostIncreased)
    manifest = json.loads(Path(aborted.result.manifest_path).read_text())
    assert manifest["outcome"]["type"] == "CostIncreased"
    assert manifest["outcome"]["ok"] is False
    assert manifest["outcome"]["epoch"] == 1


def test_pipeline_requires_all_sections(tmp_path):
    with pytest.raises(KeyError):
        pipelines.run_pipeline({"data": {"name": "two_clusters"}, "model": {}})


def _csv_override(tmp_path: Path, **train) -> dict:
    csv_path = tmp_path / "points.csv"
    csv_path.write_text("a,b,c,target\n0,0,0,0\n1,1,1,1\n0.1,0,0.2,0\n0.9,1,0.8,1\n")
    override = {
        "data": {"name": "csv", "options": {"csv_path": str(csv_path)}},
        "model": {"sizes": [3, 2, 1]},
        "train": {
            "epochs": 3,
            "cost_decreasing_check": False,
            "run_dir": str(tmp_path / "run"),
            **train,
        },
    }
    return pipelines.merge_config(pipelines.load_preset("two-clusters-random"), override)


def test_pipeline_rejects_probes_wider_than_input_layer(tmp_path):
    config = _csv_override(tmp_path)
    assert config["train"]["probes"] == [[2.0, 2.0], [-2.0, -2.0]]

    with pytest.raises(ValueError, match="Probe 0 has 2 inputs"):
        pipelines.run_pipeline(config)
    assert not (tmp_path / "run").exists()


def test_pipeline_probes_match_csv_inputs(tmp_path):
    config = _csv_override(tmp_path, probes=[[1.0, 1.0, 1.0]])
    result = pipelines.run_pipeline(config)

    assert [p["inputs"] for p in result.predictions] == [[1.0, 1.0, 1.0]]
    assert len(result.predictions[0]["outputs"]) == 1
    assert Path(result.manifest_path).exists()
    assert Path(result.summary_path).exists()


def test_gradient_check_smoke_preset(tmp_path):
    config = pipelines.load_preset("gradient-check-smoke")
    config["train"]["run_dir"] = str(tmp_path / "smoke")
    result = pipelines.run_pipeline(config)
    assert isinstance(result.outcome, Completed)
    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert all(r["gradient_distance"] <= 1e-8 for r in records if "gradient_distance" in r)


def test_presets_include_builtin_and_file_presets():
    names = set(pipelines.presets())
    assert {
        "two-clusters-fixed",
        "two-clusters-random",
        "two-clusters-deep",
        "gradient-check-smoke",
        "two-clusters-noisy",
    } <= names
    noisy = pipelines.load_preset("two-clusters-noisy")
    assert noisy["data"]["options"]["spread"] == 0.5


def test_load_preset_returns_copies():
    first = pipelines.load_preset("two-clusters-fixed")
    first["train"]["epochs"] = 1
    assert pipelines.load_preset("two-clusters-fixed")["train"]["epochs"] == 2000


def test_load_unknown_preset():
    with pytest.raises(KeyError, match="Unknown preset"):
        pipelines.load_preset("does-not-exist")


def test_merge_config_is_recursive():
    base = {"train": {"epochs": 5, "learning_rate": 0.9}, "model": {"sizes": [2, 1]}}
    merged = pipelines.merge_config(base, {"train": {"epochs": 7}, "model": {"sizes": [2, 4, 1]}})
    assert merged == {"train": {"epochs": 7, "learning_rate": 0.9}, "model": {"sizes": [2, 4, 1]}}
    assert base["train"]["epochs"] == 5


def test_read_config_file(tmp_path):
    json_path = tmp_path / "cfg.json"
    json_path.write_text(json.dumps({"train": {"epochs": 3}}))
    assert pipelines.read_config_file(json_path) == {"train": {"epochs": 3}}

    yaml_path = tmp_path / "cfg.yaml"
    yaml_path.write_text("train:\n  epochs: 4\n")
    assert pipelines.read_config_file(yaml_path) == {"train": {"epochs": 4}}

    with pytest.raises(ValueError):
        pipelines.read_config_file(tmp_path / "cfg.toml")


def test_build_network_variants():
    dataset = get_dataset("two_clusters", points_per_cluster=1)

    hidden = pipelines.build_network({"init": "random", "hidden": [4], "seed": 2}, dataset)
    assert hidden.sizes == (2, 4, 1)

    fixed = pipelines.build_network(pipelines.load_preset("two-clusters-fixed")["model"], dataset)
    assert fixed.weights[1].tolist() == [[0.5, 0.5, 0.5]]

    with pytest.raises(ValueError):
        pipelines.build_network(
            {"init": "fixed", "sizes": [2, 4, 1], "weights": [[[0.1, 0.1]]], "biases": [[0.0]]},
            dataset,
        )
    with pytest.raises(KeyError):
        pipelines.build_network({"init": "fixed"}, dataset)
    with pytest.raises(ValueError):
        pipelines.build_network({"init": "xavier"}, dataset)
