from __future__ import annotations

from typing import Callable, List

from .entities import Vessel, VesselState
from .scenarios import SimulationConfig
from .streams import RandomStreams


RecordEvent = Callable[..., None]


def recover(vessel: Vessel, now: float, config: SimulationConfig, record_event: RecordEvent) -> None:
    if not vessel.is_down or vessel.unavailable_until is None or now < vessel.unavailable_until:
        return

    if vessel.state is VesselState.MAINTENANCE:
        vessel.next_maintenance_due = now + config.maintenance_interval_mins
        record_event(now, "maintenance_end", vessel_id=vessel.id)
    else:
        record_event(now, "recovery", vessel_id=vessel.id)

    vessel.state = VesselState.AVAILABLE
    vessel.unavailable_until = None


def start_maintenance(
    vessel: Vessel, now: float, config: SimulationConfig, record_event: RecordEvent
) -> bool:
    # Only an available vessel can start maintenance; a failed one picks it up after recovery.
    if vessel.state is not VesselState.AVAILABLE or now < vessel.next_maintenance_due:
        return False
    vessel.state = VesselState.MAINTENANCE
    vessel.maintenance_started_at = now
    vessel.unavailable_until = now + config.maintenance_duration_mins
    vessel.maintenance_count += 1
    record_event(now, "maintenance_start", vessel_id=vessel.id, until=vessel.unavailable_until)
    return True


def draw_failure(
    vessel: Vessel,
    now: float,
    config: SimulationConfig,
    streams: RandomStreams,
    record_event: RecordEvent,
) -> bool:
    if vessel.state is not VesselState.AVAILABLE:
        return False
    if streams.failures.random() >= config.failure_prob_per_step:
        return False
    vessel.state = VesselState.FAILED
    vessel.unavailable_until = now + config.failure_downtime_mins
    vessel.failures += 1
    record_event(now, "failure", vessel_id=vessel.id, until=vessel.unavailable_until)
    return True


def update_availability(
    vessels: List[Vessel],
    now: float,
    config: SimulationConfig,
    streams: RandomStreams,
    record_event: RecordEvent,
) -> None:
    """Recoveries first, then scheduled maintenance, then one failure draw per available vessel."""
    for vessel in vessels:
        recover(vessel, now, config, record_event)
    for vessel in vessels:
        start_maintenance(vessel, now, config, record_event)
    for vessel in vessels:
        draw_failure(vessel, now, config, streams, record_event)
