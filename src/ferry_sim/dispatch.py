from __future__ import annotations

from typing import Callable, List

from .entities import Vehicle, Vessel, VesselState
from .scenarios import POLICY_PRIORITY, SimulationConfig


RecordEvent = Callable[..., None]


def select_ready(queue: List[Vehicle], now: float) -> List[Vehicle]:
    return [v for v in queue if v.arrival_time <= now]


def order_for_boarding(ready: List[Vehicle], policy: str) -> List[Vehicle]:
    # Stable sort: within each reservation class the earliest arrival boards first.
    if policy == POLICY_PRIORITY:
        return sorted(ready, key=lambda v: (not v.reserved, v.arrival_time))
    return sorted(ready, key=lambda v: v.arrival_time)


def board(vessel: Vessel, vehicles: List[Vehicle], now: float) -> int:
    space = vessel.capacity - len(vessel.onboard)
    boarding = vehicles[:space]
    if boarding:
        vessel.state = VesselState.CROSSING
    for vehicle in boarding:
        vehicle.boarding_time = now
        vehicle.wait_time = max(0.0, now - vehicle.arrival_time) + vehicle.wait_penalty
        vehicle.vessel_id = vessel.id
        vessel.onboard.append(vehicle)
    return len(boarding)


def cross(vessel: Vessel, now: float, crossing_mins: float) -> List[Vehicle]:
    """Sail and disembark the whole batch; the vessel is free again at the next tick."""
    disembark_time = now + crossing_mins
    for vehicle in vessel.onboard:
        vehicle.disembark_time = disembark_time
    landed = list(vessel.onboard)
    vessel.onboard.clear()
    vessel.trips_completed += 1
    vessel.busy_mins += crossing_mins
    vessel.state = VesselState.AVAILABLE
    return landed


def dispatch(
    vessels: List[Vessel],
    queue: List[Vehicle],
    processed: List[Vehicle],
    now: float,
    config: SimulationConfig,
    record_event: RecordEvent,
) -> int:
    """Load every idle vessel from the pending queue. Returns the number of vehicles boarded."""
    boarded_total = 0
    for vessel in vessels:
        if not vessel.is_idle:
            continue

        ready = order_for_boarding(select_ready(queue, now), config.reservation_policy)
        if not ready:
            break

        selected = ready[: vessel.capacity]
        boarded = board(vessel, selected, now)
        taken = {id(v) for v in selected[:boarded]}
        queue[:] = [v for v in queue if id(v) not in taken]

        landed = cross(vessel, now, config.crossing_mins)
        processed.extend(landed)
        boarded_total += boarded
        record_event(
            now,
            "departure",
            vessel_id=vessel.id,
            vehicles=boarded,
            reserved=sum(1 for v in landed if v.reserved),
            disembark_time=now + config.crossing_mins,
        )
    return boarded_total
