#!/usr/bin/env python
"""
Compare sampling strategies inside resampling against an external test set.

For each strategy (original, down, up, SMOTE, ROSE, ...) the script reports
the resampled metric estimate, the test-set estimate with its confidence
interval, and the absolute gap between the two.

Usage:
    python scripts/run_comparison.py
    python scripts/run_comparison.py --seed 7 --n-jobs -2
    python scripts/run_comparison.py --csv data/credit.csv --label-column default

Results saved to experiments/comparison_{timestamp}/.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from subsample_cv.config import ExperimentConfig, SimulationConfig
from subsample_cv.data import ImbalancedGenerator, load_csv, train_test_split_dataset
from subsample_cv.experiments import run_imbalance_study


def main():
    parser = argparse.ArgumentParser(
        description="Compare sampling strategies inside resampling against a test set"
    )
    parser.add_argument(
        "--config", type=str, help="Experiment YAML (default: configs/experiment.yaml)"
    )
    parser.add_argument(
        "--csv", type=str, help="Load data from CSV instead of simulating it"
    )
    parser.add_argument(
        "--label-column", type=str, default="y", help="Label column of the CSV"
    )
    parser.add_argument(
        "--seed", type=int, help="Random seed for scheme and simulation (overrides config)"
    )
    parser.add_argument(
        "--n-jobs", type=int, help="Parallel workers (overrides config)"
    )
    parser.add_argument(
        "--output-dir", type=str, help="Output directory (default: experiments/comparison_{timestamp})"
    )
    parser.add_argument(
        "--no-progress", action="store_true", help="Disable the progress bar"
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO", help="Logging level"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    exp_cfg = ExperimentConfig.from_yaml(args.config)
    sim_cfg = SimulationConfig.from_yaml()

    # CLI overrides
    updates = {}
    if args.seed is not None:
        updates["scheme"] = exp_cfg.scheme.model_copy(update={"seed": args.seed})
        sim_cfg = sim_cfg.model_copy(update={"random_seed": args.seed})
    if args.n_jobs is not None:
        updates["n_jobs"] = args.n_jobs
    if updates:
        exp_cfg = exp_cfg.model_copy(update=updates)

    if args.csv:
        dataset = load_csv(args.csv, label_column=args.label_column)
        train, test = train_test_split_dataset(
            dataset, test_fraction=exp_cfg.test_fraction, random_seed=exp_cfg.scheme.seed
        )
        source = args.csv
    else:
        train, test = ImbalancedGenerator(sim_cfg).generate_train_test()
        source = "simulated"

    if args.output_dir:
        exp_dir = Path(args.output_dir)
    else:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        exp_dir = PROJECT_ROOT / "experiments" / f"comparison_{timestamp}"
    exp_dir.mkdir(parents=True, exist_ok=True)

    print("=" * 70)
    print("Sampling comparison")
    print("=" * 70)
    print(f"  Output: {exp_dir}")
    print(f"  Data: {source} (train {train.class_counts}, test {test.class_counts})")
    print(f"  Scheme: {exp_cfg.scheme.kind}, {exp_cfg.scheme.n_partitions} partitions")
    print(f"  Strategies: {[s.display_name for s in exp_cfg.sampling]}")
    print(f"  Model: {exp_cfg.model}, metric: {exp_cfg.metric}")
    print("=" * 70)

    result = run_imbalance_study(train, test, exp_cfg, show_progress=not args.no_progress)

    for stem, frame in result.to_frames().items():
        frame.to_csv(exp_dir / f"{stem}.csv", index=False)

    with open(exp_dir / "config.json", "w") as f:
        json.dump(
            {
                "experiment": exp_cfg.model_dump(mode="json"),
                "simulation": sim_cfg.model_dump(mode="json") if not args.csv else None,
                "source": source,
                "final_failures": result.final_failures,
            },
            f,
            indent=2,
        )

    comparison = result.comparison.to_frame()
    print()
    print(comparison[["strategy", "resampled", "test_estimate", "abs_diff", "n_failed"]]
          .to_string(index=False, float_format="%.4f"))
    if result.comparison.largest_gap is not None:
        print(f"\nLargest gap: {result.comparison.largest_gap}")
    print(f"\nResults saved to {exp_dir}")


if __name__ == "__main__":
    main()
