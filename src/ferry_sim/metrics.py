from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .entities import Vehicle, Vessel
from .scenarios import SimulationConfig


@dataclass(frozen=True)
class VesselUsage:
    vessel_id: int
    utilization_pct: float
    trips: int
    busy_mins: float
    failures: int
    maintenance_count: int
    final_state: str


@dataclass(frozen=True)
class SimulationResult:
    scenario: str
    seed: Optional[int]
    window_mins: float
    elapsed_hours: float
    total_arrivals: int
    processed_count: int
    backlog_count: int
    mean_wait: float
    mean_wait_reserved: float
    mean_wait_unreserved: float
    mean_queue_length: float
    max_queue_length: int
    total_trips: int
    mean_utilization: float
    vessels: List[VesselUsage]
    maintenance: Dict[str, float]
    processed: List[Vehicle] = field(repr=False)
    backlog: List[Vehicle] = field(repr=False)
    events: List[dict] = field(default_factory=list, repr=False)

    def to_dict(self) -> dict:
        """JSON-ready summary (vehicle lists and the event log are left out)."""
        return {
            "scenario": self.scenario,
            "seed": self.seed,
            "window_mins": self.window_mins,
            "elapsed_hours": self.elapsed_hours,
            "total_arrivals": self.total_arrivals,
            "processed_count": self.processed_count,
            "backlog_count": self.backlog_count,
            "mean_wait": self.mean_wait,
            "mean_wait_reserved": self.mean_wait_reserved,
            "mean_wait_unreserved": self.mean_wait_unreserved,
            "mean_queue_length": self.mean_queue_length,
            "max_queue_length": self.max_queue_length,
            "total_trips": self.total_trips,
            "mean_utilization": self.mean_utilization,
            "vessels": [asdict(v) for v in self.vessels],
            "maintenance": dict(self.maintenance),
        }


@dataclass(frozen=True)
class ComparisonResult:
    baseline: SimulationResult
    with_reservations: SimulationResult
    improvement: Dict[str, float]

    def to_dict(self) -> dict:
        return {
            "baseline": self.baseline.to_dict(),
            "with_reservations": self.with_reservations.to_dict(),
            "improvement": dict(self.improvement),
        }


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        return 0.0
    return float(sum(values) / len(values))


def utilization_pct(busy_mins: float, window_mins: float) -> float:
    if window_mins <= 0:
        return 0.0
    return min(100.0, busy_mins / window_mins * 100.0)


def vessel_usage(vessel: Vessel, window_mins: float) -> VesselUsage:
    return VesselUsage(
        vessel_id=vessel.id,
        utilization_pct=utilization_pct(vessel.busy_mins, window_mins),
        trips=vessel.trips_completed,
        busy_mins=vessel.busy_mins,
        failures=vessel.failures,
        maintenance_count=vessel.maintenance_count,
        final_state=vessel.state.value,
    )


def maintenance_summary(events: List[dict], config: SimulationConfig) -> Dict[str, float]:
    """Downtime from maintenance and failure events, clipped to the end of the operating window."""
    maintenance_mins = 0.0
    failure_mins = 0.0
    maintenance_events = 0
    failure_events = 0
    for event in events:
        if event["type"] not in ("maintenance_start", "failure"):
            continue
        down = max(0.0, min(event["until"], config.window_end_mins) - event["time"])
        if event["type"] == "maintenance_start":
            maintenance_events += 1
            maintenance_mins += down
        else:
            failure_events += 1
            failure_mins += down

    fleet_mins = config.window_mins * config.num_vessels
    downtime = maintenance_mins + failure_mins
    return {
        "maintenance_events": maintenance_events,
        "failure_events": failure_events,
        "maintenance_hours": maintenance_mins / 60.0,
        "failure_hours": failure_mins / 60.0,
        "downtime_hours": downtime / 60.0,
        "unavailability_pct": downtime / fleet_mins * 100.0 if fleet_mins > 0 else 0.0,
    }


def summarize(
    config: SimulationConfig,
    seed: Optional[int],
    vessels: List[Vessel],
    processed: List[Vehicle],
    backlog: List[Vehicle],
    total_arrivals: int,
    queue_samples: List[int],
    events: List[dict],
    keep_events: bool = True,
) -> SimulationResult:
    usages = [vessel_usage(v, config.window_mins) for v in vessels]
    return SimulationResult(
        scenario=config.name,
        seed=seed,
        window_mins=config.window_mins,
        elapsed_hours=config.operating_hours,
        total_arrivals=total_arrivals,
        processed_count=len(processed),
        backlog_count=len(backlog),
        mean_wait=_mean(v.wait_time for v in processed),
        mean_wait_reserved=_mean(v.wait_time for v in processed if v.reserved),
        mean_wait_unreserved=_mean(v.wait_time for v in processed if not v.reserved),
        mean_queue_length=_mean(queue_samples),
        max_queue_length=max(queue_samples, default=0),
        total_trips=sum(v.trips_completed for v in vessels),
        mean_utilization=_mean(u.utilization_pct for u in usages),
        vessels=usages,
        maintenance=maintenance_summary(events, config),
        processed=list(processed),
        backlog=list(backlog),
        events=list(events) if keep_events else [],
    )


def compute_improvement(baseline: SimulationResult, after: SimulationResult) -> Dict[str, float]:
    base_wait = max(0.0, baseline.mean_wait)
    after_wait = max(0.0, after.mean_wait)
    reduction = (base_wait - after_wait) / base_wait * 100.0 if base_wait > 0 else 0.0
    return {
        "wait_reduction_percent": reduction,
        "utilization_delta": after.mean_utilization - baseline.mean_utilization,
    }


def _safe_diff(df: pd.DataFrame, new_col: str, end_col: str, start_col: str) -> None:
    if end_col in df.columns and start_col in df.columns:
        df[new_col] = (df[end_col] - df[start_col]).clip(lower=0)


def vehicles_to_dataframe(vehicles: List[Vehicle]) -> pd.DataFrame:
    if not vehicles:
        return pd.DataFrame()

    df = pd.DataFrame([v.to_record() for v in vehicles])
    df["boarding_time"] = df["boarding_time"].astype(float)
    df["disembark_time"] = df["disembark_time"].astype(float)

    _safe_diff(df, "queue_wait", "boarding_time", "arrival_time")
    _safe_diff(df, "system_time", "disembark_time", "arrival_time")
    df["arrival_hour"] = (df["arrival_time"] // 60).astype(int)

    return df


def vessels_to_dataframe(result: SimulationResult) -> pd.DataFrame:
    if not result.vessels:
        return pd.DataFrame()
    return pd.DataFrame([asdict(v) for v in result.vessels])


def hourly_profile(result: SimulationResult) -> pd.DataFrame:
    """Arrivals, boardings, backlog and mean wait per hour of arrival."""
    df = vehicles_to_dataframe(result.processed + result.backlog)
    if df.empty:
        return pd.DataFrame(columns=["arrival_hour", "arrivals", "boarded", "unserved", "mean_wait"])

    df["boarded"] = df["boarding_time"].notna()
    grouped = df.groupby("arrival_hour")
    profile = pd.DataFrame(
        {
            "arrivals": grouped.size(),
            "boarded": grouped["boarded"].sum(),
        }
    )
    profile["unserved"] = profile["arrivals"] - profile["boarded"]
    boarded = df[df["boarded"]]
    profile["mean_wait"] = boarded.groupby("arrival_hour")["wait_time"].mean()
    profile["mean_wait"] = profile["mean_wait"].fillna(0.0)
    return profile.reset_index()


def queue_parameters(config: SimulationConfig) -> Dict[str, float]:
    """Nominal M/M/c inputs for a config (lambda, c, service time and the offered load)."""
    lam = config.daily_volume / config.operating_hours if config.operating_hours > 0 else 0.0
    departures_per_hour = 60.0 / config.step_mins if config.step_mins > 0 else 0.0
    hourly_capacity = config.num_vessels * config.vessel_capacity * departures_per_hour
    return {
        "arrival_rate_per_hour": lam,
        "peak_arrival_rate_per_hour": lam * config.peak_multiplier,
        "servers": config.num_vessels,
        "capacity_per_server": config.vessel_capacity,
        "service_time_mins": config.service_time_mins,
        "hourly_capacity": hourly_capacity,
        "offered_load": lam / hourly_capacity if hourly_capacity > 0 else 0.0,
    }
