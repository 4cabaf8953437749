# ====================================================================================================
# Compare: baseline vs after
#
# - Inputs: two `SimulationResult`s, usually the no-reservation day and the reservation day from
#   `run_comparison(...)`.
# - Outputs:
#   1) `comparison` dict: JSON-friendly payload written to comparison.json
#   2) `comparison_df`: tabular view written to comparison.csv
#
# Waits have long tails at the peaks, so median + p90/p95 are reported alongside the mean.
# ====================================================================================================

from __future__ import annotations

from typing import Dict, List, Tuple

import pandas as pd

from .metrics import SimulationResult, compute_improvement, vehicles_to_dataframe


COMPARE_METRICS = [
    "wait_time",
    "queue_wait",
    "system_time",
]

HEADLINE_FIELDS = [
    "processed_count",
    "backlog_count",
    "mean_wait",
    "mean_wait_reserved",
    "mean_wait_unreserved",
    "mean_queue_length",
    "mean_utilization",
    "total_trips",
]


def _series_stats(series: pd.Series) -> Dict[str, float | None]:
    values = series.dropna()
    if values.empty:
        return {"mean": None, "median": None, "p90": None, "p95": None}
    return {
        "mean": float(values.mean()),
        "median": float(values.median()),
        "p90": float(values.quantile(0.90)),
        "p95": float(values.quantile(0.95)),
    }


def _delta(after: float | None, base: float | None) -> float | None:
    if after is None or base is None:
        return None
    return after - base


def compare_results(
    baseline: SimulationResult, after: SimulationResult
) -> Tuple[Dict[str, object], pd.DataFrame]:
    baseline_df = vehicles_to_dataframe(baseline.processed)
    after_df = vehicles_to_dataframe(after.processed)

    rows: List[dict] = []
    for metric in COMPARE_METRICS:
        base_stats = _series_stats(baseline_df[metric]) if metric in baseline_df.columns else {}
        after_stats = _series_stats(after_df[metric]) if metric in after_df.columns else {}
        row = {"metric": metric}
        for stat in ("mean", "median", "p90", "p95"):
            row[f"baseline_{stat}"] = base_stats.get(stat)
            row[f"after_{stat}"] = after_stats.get(stat)
            row[f"delta_{stat}"] = _delta(after_stats.get(stat), base_stats.get(stat))
        rows.append(row)

    headline = {
        name: {
            "baseline": getattr(baseline, name),
            "after": getattr(after, name),
            "delta": getattr(after, name) - getattr(baseline, name),
        }
        for name in HEADLINE_FIELDS
    }

    comparison_df = pd.DataFrame(rows)
    comparison = {
        "baseline_scenario": baseline.scenario,
        "after_scenario": after.scenario,
        "baseline_rows": int(len(baseline_df)),
        "after_rows": int(len(after_df)),
        "improvement": compute_improvement(baseline, after),
        "headline": headline,
        "metrics": rows,
    }
    return comparison, comparison_df
