from __future__ import annotations

import math
from typing import List

from .entities import CAR, TRUCK, Vehicle
from .scenarios import POLICY_PEAK_SPREAD, SimulationConfig
from .streams import RandomStreams


def is_peak(config: SimulationConfig, t_min: float) -> bool:
    return any(start <= t_min < end for start, end in config.peak_windows)


def peak_multiplier(config: SimulationConfig, t_min: float) -> float:
    if not is_peak(config, t_min):
        return 1.0
    multiplier = float(config.peak_multiplier)
    if config.reservation_policy == POLICY_PEAK_SPREAD:
        # Reserved traffic is booked outside the peak, so only the walk-up share of the excess remains.
        multiplier = 1.0 + (multiplier - 1.0) * (1.0 - config.reservation_rate)
    return multiplier


def base_rate_per_step(config: SimulationConfig) -> float:
    return config.daily_volume / config.operating_hours * (config.step_mins / 60.0)


def arrival_count(expected: float) -> int:
    """Round half up, so 2.5 expected arrivals means 3 vehicles."""
    return int(math.floor(expected + 0.5))


def sample_vehicle_class(config: SimulationConfig, streams: RandomStreams) -> str:
    return CAR if streams.arrivals.random() < config.car_ratio else TRUCK


def sample_wait_penalty(config: SimulationConfig, streams: RandomStreams) -> float:
    return float(streams.reservations.uniform(config.peak_penalty_min, config.peak_penalty_max))


def generate_arrivals(
    config: SimulationConfig,
    now: float,
    streams: RandomStreams,
    first_index: int,
) -> List[Vehicle]:
    """Create the vehicles arriving during the step that starts at `now`.

    Arrival instants fall uniformly in [now, now + step). Vehicles come back in generation order;
    the dispatcher does the ordering.
    """
    peak = is_peak(config, now)
    jitter = streams.jitter.uniform(config.jitter_min, config.jitter_max)
    expected = base_rate_per_step(config) * peak_multiplier(config, now) * jitter
    count = arrival_count(expected)

    vehicles: List[Vehicle] = []
    for offset in range(count):
        arrival_time = now + float(streams.arrivals.uniform(0.0, config.step_mins))
        vehicle_class = sample_vehicle_class(config, streams)
        reserved = bool(streams.reservations.random() < config.reservation_rate)

        penalty = 0.0
        if config.peak_penalty_enabled and peak and not reserved:
            penalty = sample_wait_penalty(config, streams)

        vehicles.append(
            Vehicle(
                id=f"V{first_index + offset:05d}",
                vehicle_class=vehicle_class,
                arrival_time=arrival_time,
                reserved=reserved,
                wait_penalty=penalty,
            )
        )
    return vehicles
