from .compare import compare_results
from .entities import Vehicle, Vessel, VesselState
from .errors import ConfigurationError
from .metrics import (
    ComparisonResult,
    SimulationResult,
    VesselUsage,
    hourly_profile,
    queue_parameters,
    vehicles_to_dataframe,
    vessels_to_dataframe,
)
from .model import run, run_comparison, run_simulation
from .overrides import apply_overrides
from .scenarios import (
    CONFIG_KEYS,
    SCENARIO_NAMES,
    SimulationConfig,
    config_from_dict,
    config_to_dict,
    get_scenario,
    validate_config,
)

__all__ = [
    "CONFIG_KEYS",
    "SCENARIO_NAMES",
    "ComparisonResult",
    "ConfigurationError",
    "SimulationConfig",
    "SimulationResult",
    "Vehicle",
    "Vessel",
    "VesselState",
    "VesselUsage",
    "apply_overrides",
    "compare_results",
    "config_from_dict",
    "config_to_dict",
    "get_scenario",
    "hourly_profile",
    "queue_parameters",
    "run",
    "run_comparison",
    "run_simulation",
    "validate_config",
    "vehicles_to_dataframe",
    "vessels_to_dataframe",
]
