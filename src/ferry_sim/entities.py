from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


CAR = "car"
TRUCK = "truck"
VEHICLE_CLASSES = (CAR, TRUCK)


class VesselState(str, Enum):
    AVAILABLE = "available"
    CROSSING = "crossing"
    MAINTENANCE = "maintenance"
    FAILED = "failed"


@dataclass
class Vehicle:
    """One arriving customer. Times are minutes since midnight."""

    id: str
    vehicle_class: str
    arrival_time: float
    reserved: bool = False
    wait_penalty: float = 0.0
    boarding_time: Optional[float] = None
    disembark_time: Optional[float] = None
    wait_time: float = 0.0
    vessel_id: Optional[int] = None

    @property
    def queue_wait(self) -> float:
        if self.boarding_time is None:
            return 0.0
        return max(0.0, self.boarding_time - self.arrival_time)

    def to_record(self) -> dict:
        return {
            "vehicle_id": self.id,
            "vehicle_class": self.vehicle_class,
            "reserved": self.reserved,
            "arrival_time": self.arrival_time,
            "wait_penalty": self.wait_penalty,
            "boarding_time": self.boarding_time,
            "disembark_time": self.disembark_time,
            "wait_time": self.wait_time,
            "vessel_id": self.vessel_id,
        }


@dataclass
class Vessel:
    """A server: loads up to `capacity` vehicles per crossing."""

    id: int
    capacity: int
    next_maintenance_due: float
    state: VesselState = VesselState.AVAILABLE
    onboard: List[Vehicle] = field(default_factory=list)
    trips_completed: int = 0
    busy_mins: float = 0.0
    maintenance_started_at: Optional[float] = None
    unavailable_until: Optional[float] = None
    failures: int = 0
    maintenance_count: int = 0

    @property
    def is_idle(self) -> bool:
        return self.state is VesselState.AVAILABLE and not self.onboard

    @property
    def is_down(self) -> bool:
        return self.state in (VesselState.MAINTENANCE, VesselState.FAILED)


def build_fleet(num_vessels: int, capacity: int, first_maintenance_due: float) -> List[Vessel]:
    return [
        Vessel(id=i + 1, capacity=capacity, next_maintenance_due=first_maintenance_due)
        for i in range(num_vessels)
    ]
