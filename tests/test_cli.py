"""Tests for the cluster_embeddings command-line driver."""

import importlib.util
import json
from pathlib import Path

import numpy as np
import pytest

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "cluster_embeddings.py"


@pytest.fixture
def cli():
    spec = importlib.util.spec_from_file_location("cluster_embeddings", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def vectors_csv(tmp_path):
    path = tmp_path / "keywords.csv"
    path.write_text(
        "neural net,0,0\n"
        "deep learning,0,1\n"
        "backprop,1,0\n"
        "gpu,10,10\n"
        "tpu,10,11\n"
        "asic,11,10\n"
    )
    return path


class TestMain:

    def test_writes_results(self, cli, vectors_csv, tmp_path, capsys):
        out_dir = tmp_path / "out"
        cli.main([str(vectors_csv), "--out-dir", str(out_dir)])

        payload = json.loads((out_dir / "clusters.json").read_text())
        assert payload["n_clusters"] == 2
        assert payload["converged"] is True
        assert payload["clusters"][0]["keywords"] == ["neural net", "deep learning", "backprop"]
        assert payload["clusters"][1]["id"] == 2

        config = json.loads((out_dir / "config.json").read_text())
        assert config["n_items"] == 6
        assert config["params"]["damping"] == 0.5
        assert (out_dir / "cluster_sizes.csv").exists()
        assert "[done] 2 clusters" in capsys.readouterr().out

    def test_label_file_overrides_csv_labels(self, cli, tmp_path):
        vectors = tmp_path / "vectors.csv"
        vectors.write_text("0,0\n0,1\n")
        labels = tmp_path / "labels.txt"
        labels.write_text("alpha\nbeta\n")
        out_dir = tmp_path / "out"

        cli.main([str(vectors), "--labels", str(labels), "--out-dir", str(out_dir)])

        payload = json.loads((out_dir / "clusters.json").read_text())
        keywords = [kw for group in payload["clusters"] for kw in group["keywords"]]
        assert sorted(keywords) == ["alpha", "beta"]

    def test_sweep_and_plot(self, cli, vectors_csv, tmp_path):
        out_dir = tmp_path / "out"
        cli.main(
            [
                str(vectors_csv),
                "--out-dir",
                str(out_dir),
                "--sweep-quantile",
                "0.1",
                "--sweep-quantile",
                "0.9",
                "--plot",
            ]
        )
        grid = (out_dir / "preference_grid.csv").read_text().splitlines()
        assert grid[0].startswith("preference,input_preference,damping")
        assert grid[0].endswith("ari_to_ref,ami_to_ref")
        assert len(grid) == 4
        assert (out_dir / "cluster_scatter.png").exists()
        assert (out_dir / "similarity_heatmap.png").exists()

    def test_precomputed_plot_writes_heatmap_only(self, cli, tmp_path):
        matrix = tmp_path / "similarity.npy"
        np.save(matrix, np.array([[0.0, -1.0, -9.0], [-1.0, 0.0, -9.0], [-9.0, -9.0, 0.0]]))
        out_dir = tmp_path / "out"

        cli.main([str(matrix), "--metric", "precomputed", "--plot", "--out-dir", str(out_dir)])

        assert (out_dir / "similarity_heatmap.png").exists()
        assert not (out_dir / "cluster_scatter.png").exists()

    def test_invalid_damping(self, cli, vectors_csv, tmp_path):
        with pytest.raises(ValueError, match="damping"):
            cli.main([str(vectors_csv), "--damping", "1.0", "--out-dir", str(tmp_path / "out")])
