# ====================================================================================================
# Ferry Scenarios: the configuration layer for one simulated operating day
#
# Where this module sits:
# - Every run starts from a `SimulationConfig`. The clock, arrival generator, dispatcher and
#   maintenance controller all read from it and never write to it.
#
# How configs are built:
# - `get_scenario(...)` returns a curated preset (baseline, reservations, peak_spread).
# - Callers that need different knobs use `dataclasses.replace(...)` or go through the dict form
#   (`config_to_dict` -> `apply_overrides` -> `config_from_dict`). The defaults are never mutated.
#
# Times are minutes since midnight, so 06:00 is 360 and 22:00 is 1320.
# ====================================================================================================

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import List, Tuple

from .errors import ConfigurationError


MINUTES_PER_DAY = 24 * 60

POLICY_PRIORITY = "priority"
POLICY_PEAK_SPREAD = "peak_spread"
RESERVATION_POLICIES = (POLICY_PRIORITY, POLICY_PEAK_SPREAD)


def _default_peaks() -> List[Tuple[float, float]]:
    return [(7 * 60, 9 * 60), (17 * 60, 19 * 60)]


# ----------------------------------------------------------------------------------------------------
# SimulationConfig
# Purpose (simple): Single, immutable configuration object for one simulated day.
# Inputs: Field values (fleet, operating window, demand, service times, reliability, reservations)
# Outputs: A frozen dataclass instance consumed by the engine
# Notes:
# - `frozen=True` keeps baseline and reservation runs comparable: neither can leak changes into
#   the other.
# - Only `crossing_mins` drives vessel occupancy. Embark/disembark times feed `queue_parameters`.
# ----------------------------------------------------------------------------------------------------
@dataclass(frozen=True)
class SimulationConfig:
    # Identity (useful for metadata/logs).
    name: str = "baseline"
    description: str = "Four vessels, 50 vehicles each, hourly departures from 06:00 to 22:00."

    # Fleet (the servers, c).
    num_vessels: int = 4
    vessel_capacity: int = 50

    # Clock: departures every `step_mins` over [window_start_mins, window_end_mins).
    step_mins: float = 60.0
    window_start_mins: float = 6 * 60.0
    window_end_mins: float = 22 * 60.0

    # Demand (the arrival process, lambda).
    daily_volume: int = 1200
    peak_windows: List[Tuple[float, float]] = field(default_factory=_default_peaks)
    peak_multiplier: float = 2.5
    jitter_min: float = 0.8
    jitter_max: float = 1.2
    car_ratio: float = 0.8

    # Service times (mu). Disembarkation is given in seconds.
    embark_mins: float = 15.0
    crossing_mins: float = 80.0
    disembark_secs: float = 15.0

    # Reliability: scheduled maintenance and stochastic failures.
    maintenance_interval_days: float = 30.0
    maintenance_duration_mins: float = 4 * 60.0
    failure_prob_per_step: float = 0.05
    failure_downtime_mins: float = 30.0

    # Reservations.
    reservation_rate: float = 0.3
    reservation_policy: str = POLICY_PRIORITY
    peak_penalty_enabled: bool = True
    peak_penalty_min: float = 15.0
    peak_penalty_max: float = 35.0

    @property
    def window_mins(self) -> float:
        return self.window_end_mins - self.window_start_mins

    @property
    def operating_hours(self) -> float:
        return self.window_mins / 60.0

    @property
    def maintenance_interval_mins(self) -> float:
        return self.maintenance_interval_days * MINUTES_PER_DAY

    @property
    def service_time_mins(self) -> float:
        return self.embark_mins + self.crossing_mins + self.disembark_secs / 60.0


# Stable list of config keys (kept in dataclass order) used for overrides and metadata.
CONFIG_KEYS = tuple(SimulationConfig.__dataclass_fields__.keys())  # pylint: disable=no-member


def _check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be within [0, 1], got {value}.")


def _check_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ConfigurationError(f"{name} must be >= 0, got {value}.")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_count(name: str, value) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an int, got {value!r}.")
    if value <= 0:
        raise ConfigurationError(f"{name} must be > 0.")


def validate_config(config: SimulationConfig) -> None:
    """Reject configs that would produce degenerate metrics instead of running them."""
    _check_count("num_vessels", config.num_vessels)
    _check_count("vessel_capacity", config.vessel_capacity)
    if config.step_mins <= 0:
        raise ConfigurationError("step_mins must be > 0.")
    if config.window_end_mins <= config.window_start_mins:
        raise ConfigurationError("Operating window end must be after its start.")

    _check_non_negative("daily_volume", config.daily_volume)
    _check_non_negative("peak_multiplier", config.peak_multiplier)
    _check_non_negative("jitter_min", config.jitter_min)
    if config.jitter_min > config.jitter_max:
        raise ConfigurationError("jitter_min must not exceed jitter_max.")

    _check_probability("car_ratio", config.car_ratio)
    _check_probability("failure_prob_per_step", config.failure_prob_per_step)
    _check_probability("reservation_rate", config.reservation_rate)

    for name in (
        "embark_mins",
        "crossing_mins",
        "disembark_secs",
        "maintenance_interval_days",
        "maintenance_duration_mins",
        "failure_downtime_mins",
        "peak_penalty_min",
    ):
        _check_non_negative(name, getattr(config, name))
    if config.peak_penalty_min > config.peak_penalty_max:
        raise ConfigurationError("peak_penalty_min must not exceed peak_penalty_max.")

    if config.reservation_policy not in RESERVATION_POLICIES:
        raise ConfigurationError(
            f"Unknown reservation_policy: {config.reservation_policy!r} "
            f"(expected one of {', '.join(RESERVATION_POLICIES)})."
        )

    for window in config.peak_windows:
        if not isinstance(window, (list, tuple)) or len(window) != 2:
            raise ConfigurationError(f"Peak window must be a (start, end) pair, got {window!r}.")
        start, end = window
        if not (_is_number(start) and _is_number(end)):
            raise ConfigurationError(f"Peak window bounds must be numbers, got {window!r}.")
        if end <= start:
            raise ConfigurationError(f"Peak window end must be after its start, got {window!r}.")


def config_to_dict(config: SimulationConfig) -> dict:
    data = asdict(config)
    data["peak_windows"] = [list(window) for window in config.peak_windows]
    return data


def config_from_dict(data: dict) -> SimulationConfig:
    """Inverse of `config_to_dict`; JSON lists for peak windows become tuples again."""
    unknown = sorted(set(data) - set(CONFIG_KEYS))
    if unknown:
        raise ConfigurationError(f"Unknown config keys: {', '.join(unknown)}")
    values = dict(data)
    if "peak_windows" in values:
        values["peak_windows"] = [
            tuple(window) if isinstance(window, (list, tuple)) else window
            for window in values["peak_windows"]
        ]
    return SimulationConfig(**values)


# ----------------------------------------------------------------------------------------------------
# get_scenario
# Purpose (simple): Controlled entrypoint for selecting a curated preset by name.
# Inputs: `name` ("baseline", "reservations" or "peak_spread")
# Outputs: SimulationConfig
# - baseline: nobody reserves, so the single queue is plain FIFO.
# - reservations: 30% reserve and board ahead of walk-up traffic.
# - peak_spread: 30% reserve and are assumed to move out of the peaks; boarding stays FIFO.
# ----------------------------------------------------------------------------------------------------
def get_scenario(name: str) -> SimulationConfig:
    name = name.lower().strip()
    base = SimulationConfig()
    if name == "baseline":
        return replace(base, reservation_rate=0.0)
    if name == "reservations":
        return replace(
            base,
            name="reservations",
            description="Baseline demand with 30% of vehicles holding a priority reservation.",
            reservation_rate=0.3,
            reservation_policy=POLICY_PRIORITY,
        )
    if name == "peak_spread":
        return replace(
            base,
            name="peak_spread",
            description=(
                "Baseline demand where the reserved 30% is shifted out of the peak windows; "
                "boarding is first come, first served."
            ),
            reservation_rate=0.3,
            reservation_policy=POLICY_PEAK_SPREAD,
        )
    raise ConfigurationError(f"Unknown scenario: {name}")


SCENARIO_NAMES = ("baseline", "reservations", "peak_spread")
