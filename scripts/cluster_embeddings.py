#!/usr/bin/env python3
from __future__ import annotations

import argparse
import datetime as _dt
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from apengine.clustering.affinity import cluster  # noqa: E402
from apengine.config import METRICS, AffinityPropagationConfig  # noqa: E402
from apengine.data_io import FeatureMatrix, load_item_labels, load_matrix  # noqa: E402
from apengine.hyperparam import preference_grid, run_ap_grid  # noqa: E402
from apengine.keywords import label_clusters  # noqa: E402
from apengine.metrics import cluster_sizes  # noqa: E402
from apengine.similarity import build_similarity_matrix  # noqa: E402


DEFAULT_OUT_DIR = REPO_ROOT / "Results" / "clusters"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Cluster exported item vectors with affinity propagation."
    )
    parser.add_argument(
        "matrix",
        type=Path,
        help="Item vectors (.csv or .npy), or a similarity matrix with --metric precomputed.",
    )
    parser.add_argument(
        "--key",
        default=None,
        help="Dictionary key when the .npy file stores several arrays.",
    )
    parser.add_argument(
        "--labels",
        type=Path,
        default=None,
        help="Text file with one item label per line.",
    )
    parser.add_argument(
        "--metric",
        choices=METRICS,
        default="euclidean",
        help="Affinity metric (default: euclidean).",
    )
    parser.add_argument(
        "--damping",
        type=float,
        default=0.5,
        help="Damping factor in [0.5, 1) (default: 0.5).",
    )
    parser.add_argument(
        "--max-iter",
        type=int,
        default=200,
        help="Iteration budget (default: 200).",
    )
    parser.add_argument(
        "--convergence-iter",
        type=int,
        default=15,
        help="Stable iterations required to stop early (default: 15).",
    )
    parser.add_argument(
        "--preference",
        type=float,
        default=None,
        help="Explicit preference. Defaults to the median similarity.",
    )
    parser.add_argument(
        "--sweep-quantile",
        action="append",
        type=float,
        dest="sweep_quantiles",
        help="Also sweep preferences at this similarity quantile (can be repeated).",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=DEFAULT_OUT_DIR,
        help="Directory for results (default: Results/clusters).",
    )
    parser.add_argument(
        "--plot",
        action="store_true",
        help="Write a similarity heatmap and, for vector input, a 2D scatter of the clustering.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(argv)


def load_inputs(args: argparse.Namespace) -> FeatureMatrix:
    """Load vectors and attach labels when a label file is given."""
    data = load_matrix(args.matrix, key=args.key)
    if args.labels is not None:
        data = data.with_labels(load_item_labels(args.labels))
    return data


def write_sweep(
    similarity: np.ndarray,
    config: AffinityPropagationConfig,
    quantiles: Sequence[float],
    target_dir: Path,
    *,
    reference_labels: Optional[np.ndarray] = None,
) -> None:
    """Run a preference sweep and store its summary, scored against the main run."""
    preferences = preference_grid(similarity, quantiles=quantiles)
    grid = run_ap_grid(
        similarity,
        preferences=preferences,
        dampings=[config.damping],
        metric="precomputed",
        max_iterations=config.max_iterations,
        convergence_window=config.convergence_window,
        reference_labels=reference_labels,
    )
    grid.records.to_csv(target_dir / "preference_grid.csv", index=False)
    print(f"  [sweep] {len(preferences)} preferences -> preference_grid.csv")


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    data = load_inputs(args)
    config = AffinityPropagationConfig(
        metric=args.metric,
        damping=args.damping,
        max_iterations=args.max_iter,
        convergence_window=args.convergence_iter,
        preference=args.preference,
    )

    target_dir = Path(args.out_dir)
    target_dir.mkdir(parents=True, exist_ok=True)

    run_config = {
        "matrix": str(args.matrix),
        "n_items": data.n_items,
        "params": config.to_dict(),
        "timestamp": _dt.datetime.now().isoformat(),
    }
    (target_dir / "config.json").write_text(json.dumps(run_config, indent=2))

    print(f"[run]  {args.matrix.name}  (n={data.n_items}, metric={config.metric})")
    result = cluster(data, config)

    grouped = label_clusters(result, data.labels_or_indices())
    payload = {
        "n_clusters": result.n_clusters,
        "n_iter": result.n_iter,
        "converged": result.converged,
        "degenerate": result.degenerate,
        "preference": result.preference if isinstance(result.preference, float) else result.preference.tolist(),
        "clusters": [
            dict(group.to_payload(), exemplar=group.exemplar) for group in grouped
        ],
    }
    (target_dir / "clusters.json").write_text(json.dumps(payload, indent=2, ensure_ascii=False))
    cluster_sizes(result).to_csv(target_dir / "cluster_sizes.csv", index=False)

    status = "converged" if result.converged else "exhausted"
    print(f"  [done] {result.n_clusters} clusters after {result.n_iter} iterations ({status})")

    similarity = None
    if args.sweep_quantiles or args.plot:
        similarity = build_similarity_matrix(data, metric=config.metric)

    if args.sweep_quantiles:
        if data.n_items < 2:
            print("  [skip] preference sweep needs at least two items")
        else:
            write_sweep(
                similarity,
                config,
                args.sweep_quantiles,
                target_dir,
                reference_labels=result.labels,
            )

    if args.plot and data.n_items > 0:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from apengine.plots import cluster_scatter_2d, similarity_heatmap

        fig = similarity_heatmap(similarity, result.labels, title=args.matrix.stem)
        fig.savefig(target_dir / "similarity_heatmap.png", dpi=150)
        plt.close(fig)
        print("  [plot] similarity_heatmap.png")

        if args.metric != "precomputed":
            fig = cluster_scatter_2d(
                data.values,
                result.labels,
                exemplars=None if result.degenerate else result.exemplars,
                title=args.matrix.stem,
            )
            fig.savefig(target_dir / "cluster_scatter.png", dpi=150)
            plt.close(fig)
            print("  [plot] cluster_scatter.png")


if __name__ == "__main__":
    main()
