import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from src.ferry_sim import ConfigurationError, apply_overrides, config_from_dict, config_to_dict, get_scenario


def test_apply_overrides_rejects_unknown_key():
    base = config_to_dict(get_scenario("baseline"))
    with pytest.raises(ValueError):
        apply_overrides(base, {"unknown_key": 1})


def test_apply_overrides_enforces_bounds():
    base = config_to_dict(get_scenario("baseline"))
    with pytest.raises(ConfigurationError):
        apply_overrides(base, {"num_vessels": 0})


def test_apply_overrides_type_check():
    base = config_to_dict(get_scenario("baseline"))
    with pytest.raises(ConfigurationError):
        apply_overrides(base, {"vessel_capacity": "50"})
    with pytest.raises(ConfigurationError):
        apply_overrides(base, {"peak_multiplier": True})
    with pytest.raises(ConfigurationError):
        apply_overrides(base, {"peak_windows": [[420, 540, 600]]})


def test_apply_overrides_leaves_base_untouched():
    base = config_to_dict(get_scenario("baseline"))
    merged = apply_overrides(base, {"num_vessels": 6, "step_mins": 30})
    assert merged["num_vessels"] == 6
    assert merged["step_mins"] == 30
    assert base["num_vessels"] == 4
    assert base["step_mins"] == 60.0


def test_overridden_peaks_round_trip_into_config():
    base = config_to_dict(get_scenario("baseline"))
    merged = apply_overrides(base, {"peak_windows": [[480, 600]]})
    config = config_from_dict(merged)
    assert config.peak_windows == [(480, 600)]


def test_merged_overrides_must_still_describe_a_runnable_day():
    base = config_to_dict(get_scenario("baseline"))
    with pytest.raises(ConfigurationError):
        apply_overrides(base, {"vessel_capacity": 50.5})
    with pytest.raises(ConfigurationError):
        apply_overrides(base, {"jitter_min": 1.5})
    with pytest.raises(ConfigurationError):
        apply_overrides(base, {"peak_windows": [["07:00", "09:00"]]})
