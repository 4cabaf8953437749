# ====================================================================================================
# Where this fits - Deterministic Ferry Simulation Runner
#
# Runs one simulated operating day (or a baseline vs reservations comparison) and writes the
# evidence to disk.
#
# What it takes in:
# - A preset scenario name (`src/ferry_sim/scenarios.py`) or a JSON config file
# - A fixed `seed` (the determinism lever)
# - An output directory (where all artifacts are written)
# - Optional overrides JSON (validated/merged via `src/ferry_sim/overrides.py`)
#
# What it produces:
# - `vehicles.csv` (one row per vehicle, served or left in the queue)
# - `vessels.csv` (utilization and trips per vessel)
# - `hourly.csv` (arrivals, boardings and mean wait per hour of arrival)
# - `metadata.json` (scenario, seed, timestamp, git_commit, config_used, summary, queue parameters)
# - `plots/*.png` and `run.log`
#
# With `--compare`, a `baseline/` and a `with_reservations/` bundle are written plus
# `comparison.json` and `comparison.csv`.
# ====================================================================================================

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from subprocess import DEVNULL, CalledProcessError, check_output

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd


ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from src.ferry_sim import (
    SCENARIO_NAMES,
    SimulationResult,
    apply_overrides,
    compare_results,
    config_from_dict,
    config_to_dict,
    get_scenario,
    hourly_profile,
    queue_parameters,
    run_comparison,
    run_simulation,
    vehicles_to_dataframe,
    vessels_to_dataframe,
)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate one operating day of the ferry terminal.")
    parser.add_argument("--scenario", choices=SCENARIO_NAMES, default="baseline")
    # Same code + same config + same seed gives the same day, which is what makes the
    # baseline vs reservations comparison fair.
    parser.add_argument("--seed", type=int, required=True)
    parser.add_argument("--out", required=True, help="Output directory path.")
    parser.add_argument("--config", help="Optional JSON base config path.")
    parser.add_argument("--override", help="Optional JSON overrides path.")
    parser.add_argument(
        "--compare",
        action="store_true",
        help="Run the day without reservations and with --reservation-rate, then compare.",
    )
    parser.add_argument("--reservation-rate", type=float, default=0.3)
    return parser.parse_args(argv)


def get_git_commit(root: Path) -> str | None:
    try:
        return check_output(["git", "rev-parse", "HEAD"], cwd=root, stderr=DEVNULL).decode().strip()
    except (CalledProcessError, FileNotFoundError):
        return None


def plot_histogram(df: pd.DataFrame, column: str, title: str, xlabel: str, out_path: Path) -> bool:
    if df.empty or column not in df.columns:
        return False
    series = df[column].dropna()
    if series.empty:
        return False
    plt.figure(figsize=(10, 5))
    plt.hist(series, bins=30, edgecolor="black", alpha=0.8)
    plt.title(title)
    plt.xlabel(xlabel)
    plt.ylabel("Count")
    plt.tight_layout()
    plt.savefig(out_path, dpi=150)
    plt.close()
    return True


def plot_hourly(profile: pd.DataFrame, out_path: Path) -> bool:
    if profile.empty:
        return False
    fig, ax_count = plt.subplots(figsize=(10, 5))
    ax_count.bar(profile["arrival_hour"], profile["arrivals"], color="tab:blue", alpha=0.6, label="Arrivals")
    ax_count.bar(profile["arrival_hour"], profile["unserved"], color="tab:red", alpha=0.6, label="Unserved")
    ax_count.set_xlabel("Hour of arrival")
    ax_count.set_ylabel("Vehicles")
    ax_wait = ax_count.twinx()
    ax_wait.plot(profile["arrival_hour"], profile["mean_wait"], color="black", marker="o", label="Mean wait")
    ax_wait.set_ylabel("Mean wait (minutes)")
    ax_count.legend(loc="upper left")
    ax_wait.legend(loc="upper right")
    ax_count.set_title("Arrivals and Waiting Time by Hour")
    fig.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)
    return True


def _load_json(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def _build_config_dict(args: argparse.Namespace) -> dict:
    if args.config:
        base_config = _load_json(Path(args.config))
    else:
        base_config = config_to_dict(get_scenario(args.scenario))

    if args.override:
        overrides = _load_json(Path(args.override))
        base_config = apply_overrides(base_config, overrides)

    return base_config


def _make_logger(out_dir: Path) -> logging.Logger:
    log_path = out_dir / "run.log"
    logger = logging.getLogger(f"ferry_run_{out_dir.name}")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    handler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(handler)
    logger.addHandler(logging.StreamHandler(sys.stdout))
    return logger


def _close_logger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def write_artifacts(result: SimulationResult, config_dict: dict, seed: int, out_dir: Path, logger) -> dict:
    plots_dir = out_dir / "plots"
    plots_dir.mkdir(parents=True, exist_ok=True)

    vehicles_df = vehicles_to_dataframe(result.processed + result.backlog)
    vehicles_path = out_dir / "vehicles.csv"
    vehicles_df.to_csv(vehicles_path, index=False)
    logger.info("Wrote %s vehicle rows to %s", len(vehicles_df), vehicles_path)

    vessels_path = out_dir / "vessels.csv"
    vessels_to_dataframe(result).to_csv(vessels_path, index=False)
    logger.info("Wrote vessel usage to %s", vessels_path)

    profile = hourly_profile(result)
    hourly_path = out_dir / "hourly.csv"
    profile.to_csv(hourly_path, index=False)
    logger.info("Wrote hourly profile to %s", hourly_path)

    wait_plot = plots_dir / "wait_time_hist.png"
    if plot_histogram(vehicles_df, "wait_time", "Waiting Time Distribution", "Minutes waiting", wait_plot):
        logger.info("Saved plot %s", wait_plot)
    else:
        logger.warning("Skipped wait_time plot (no vehicles boarded).")

    hourly_plot = plots_dir / "hourly_profile.png"
    if plot_hourly(profile, hourly_plot):
        logger.info("Saved plot %s", hourly_plot)
    else:
        logger.warning("Skipped hourly plot (no arrivals).")

    config = config_from_dict(config_dict)
    metadata = {
        "scenario_name": config.name,
        "scenario_description": config.description,
        "seed": seed,
        "timestamp_utc": datetime.now(timezone.utc).replace(microsecond=0).isoformat(),
        "git_commit": get_git_commit(ROOT),
        "outputs": {
            "vehicles_csv": str(vehicles_path.as_posix()),
            "vessels_csv": str(vessels_path.as_posix()),
            "hourly_csv": str(hourly_path.as_posix()),
            "plots_dir": str(plots_dir.as_posix()),
        },
        "queue_parameters": queue_parameters(config),
        "summary": result.to_dict(),
        "config_used": config_dict,
    }
    metadata_path = out_dir / "metadata.json"
    metadata_path.write_text(json.dumps(metadata, indent=2), encoding="utf-8")
    logger.info("Wrote metadata to %s", metadata_path)
    return metadata


def run_demo(config_dict: dict, seed: int, out_dir: Path) -> dict:
    config = config_from_dict(config_dict)
    out_dir.mkdir(parents=True, exist_ok=True)
    logger = _make_logger(out_dir)
    try:
        logger.info("Starting run: scenario=%s seed=%s", config.name, seed)
        logger.info("Description: %s", config.description)

        result = run_simulation(config, seed=seed)
        logger.info(
            "Completed simulation: %s arrivals, %s processed, %s unserved, mean wait %.2f min.",
            result.total_arrivals,
            result.processed_count,
            result.backlog_count,
            result.mean_wait,
        )
        metadata = write_artifacts(result, config_dict, seed, out_dir, logger)
        logger.info("Run complete.")
        return metadata
    finally:
        _close_logger(logger)


def run_compare(config_dict: dict, reservation_rate: float, seed: int, out_dir: Path) -> dict:
    config = config_from_dict(config_dict)
    out_dir.mkdir(parents=True, exist_ok=True)
    logger = _make_logger(out_dir)
    try:
        logger.info(
            "Starting comparison: scenario=%s seed=%s reservation_rate=%s",
            config.name,
            seed,
            reservation_rate,
        )
        comparison_result = run_comparison(config, reservation_rate, seed=seed)

        for label, result in (
            ("baseline", comparison_result.baseline),
            ("with_reservations", comparison_result.with_reservations),
        ):
            bundle_dir = out_dir / label
            bundle_dir.mkdir(parents=True, exist_ok=True)
            bundle_config = dict(config_dict)
            bundle_config["reservation_rate"] = 0.0 if label == "baseline" else reservation_rate
            write_artifacts(result, bundle_config, seed, bundle_dir, logger)

        comparison, comparison_df = compare_results(
            comparison_result.baseline, comparison_result.with_reservations
        )
        (out_dir / "comparison.json").write_text(json.dumps(comparison, indent=2), encoding="utf-8")
        comparison_df.to_csv(out_dir / "comparison.csv", index=False)

        improvement = comparison_result.improvement
        logger.info(
            "Wait reduction %.2f%%, utilization delta %.2f points.",
            improvement["wait_reduction_percent"],
            improvement["utilization_delta"],
        )
        return comparison
    finally:
        _close_logger(logger)


def main(argv=None) -> int:
    args = parse_args(argv)
    config_dict = _build_config_dict(args)
    out_dir = Path(args.out)
    if args.compare:
        run_compare(config_dict, args.reservation_rate, seed=args.seed, out_dir=out_dir)
    else:
        run_demo(config_dict, seed=args.seed, out_dir=out_dir)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
