import sys
from dataclasses import replace
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from src.ferry_sim import SimulationConfig
from src.ferry_sim.arrivals import (
    arrival_count,
    base_rate_per_step,
    generate_arrivals,
    is_peak,
    peak_multiplier,
)
from src.ferry_sim.streams import make_streams


def _flat(**changes) -> SimulationConfig:
    # No jitter, so arrival counts are exact.
    return replace(SimulationConfig(), jitter_min=1.0, jitter_max=1.0, **changes)


def test_base_rate_scales_with_step():
    assert base_rate_per_step(SimulationConfig()) == pytest.approx(75.0)
    assert base_rate_per_step(replace(SimulationConfig(), step_mins=30)) == pytest.approx(37.5)


def test_peak_windows_are_half_open():
    config = SimulationConfig()
    assert not is_peak(config, 419.0)
    assert is_peak(config, 420.0)
    assert is_peak(config, 539.9)
    assert not is_peak(config, 540.0)
    assert is_peak(config, 1020.0)
    assert peak_multiplier(config, 480.0) == 2.5
    assert peak_multiplier(config, 600.0) == 1.0


def test_peak_spread_thins_only_the_excess():
    config = replace(SimulationConfig(), reservation_policy="peak_spread", reservation_rate=0.3)
    assert peak_multiplier(config, 480.0) == pytest.approx(2.05)
    assert peak_multiplier(config, 600.0) == 1.0


def test_arrival_count_rounds_half_up():
    assert arrival_count(0.0) == 0
    assert arrival_count(2.49) == 2
    assert arrival_count(2.5) == 3
    assert arrival_count(187.5) == 188


def test_off_peak_step_generates_base_rate():
    config = _flat()
    vehicles = generate_arrivals(config, 360.0, make_streams(1), first_index=1)
    assert len(vehicles) == 75
    assert [v.id for v in vehicles[:3]] == ["V00001", "V00002", "V00003"]
    assert all(360.0 <= v.arrival_time < 420.0 for v in vehicles)
    assert all(v.boarding_time is None and v.disembark_time is None for v in vehicles)


def test_peak_step_multiplies_arrivals():
    config = _flat()
    vehicles = generate_arrivals(config, 420.0, make_streams(1), first_index=76)
    assert len(vehicles) == 188
    assert vehicles[0].id == "V00076"


def test_jitter_stays_in_band():
    config = SimulationConfig()
    for seed in range(20):
        count = len(generate_arrivals(config, 600.0, make_streams(seed), first_index=1))
        assert 60 <= count <= 90


def test_class_split_follows_car_ratio():
    streams = make_streams(3)
    cars = generate_arrivals(_flat(car_ratio=1.0), 600.0, streams, first_index=1)
    trucks = generate_arrivals(_flat(car_ratio=0.0), 600.0, streams, first_index=1)
    assert {v.vehicle_class for v in cars} == {"car"}
    assert {v.vehicle_class for v in trucks} == {"truck"}


def test_unreserved_peak_arrivals_carry_a_wait_penalty():
    config = _flat(reservation_rate=0.0)
    peak = generate_arrivals(config, 420.0, make_streams(5), first_index=1)
    assert all(15.0 <= v.wait_penalty <= 35.0 for v in peak)
    off_peak = generate_arrivals(config, 600.0, make_streams(5), first_index=1)
    assert all(v.wait_penalty == 0.0 for v in off_peak)


def test_reserved_arrivals_are_never_penalised():
    config = _flat(reservation_rate=1.0)
    vehicles = generate_arrivals(config, 420.0, make_streams(5), first_index=1)
    assert all(v.reserved for v in vehicles)
    assert all(v.wait_penalty == 0.0 for v in vehicles)


def test_penalty_can_be_disabled():
    config = _flat(reservation_rate=0.0, peak_penalty_enabled=False)
    vehicles = generate_arrivals(config, 420.0, make_streams(5), first_index=1)
    assert all(v.wait_penalty == 0.0 for v in vehicles)


def test_zero_volume_generates_nothing():
    vehicles = generate_arrivals(replace(SimulationConfig(), daily_volume=0), 420.0, make_streams(1), 1)
    assert vehicles == []


def test_reservation_rate_does_not_move_arrivals():
    low = generate_arrivals(_flat(reservation_rate=0.0), 420.0, make_streams(9), first_index=1)
    high = generate_arrivals(_flat(reservation_rate=0.6), 420.0, make_streams(9), first_index=1)
    assert [v.arrival_time for v in low] == [v.arrival_time for v in high]
    assert [v.vehicle_class for v in low] == [v.vehicle_class for v in high]
