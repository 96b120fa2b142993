"""Tests for configuration parsing and validation."""

import copy
import json
from datetime import datetime, timezone

import numpy as np
import pytest
from numpy.testing import assert_allclose

from surveyor.config import (
    CollisionWith,
    GeometryConfig,
    GncConfig,
    MaxDuration,
    SimulationConfig,
    SubsystemKind,
    SurveyorConfig,
    TVCConfig,
    ThrusterConfig,
    default_config,
    default_config_dict,
    parse_epoch,
)
from surveyor.exceptions import ConfigurationError


def config_dict() -> dict:
    return copy.deepcopy(default_config_dict())


# =============================================================================
# Document Parsing
# =============================================================================

class TestSurveyorConfig:
    """Whole-document parsing."""

    def test_default_config(self):
        config = default_config()
        assert config.simulation.sim_rate_hz == 100.0
        assert config.gnc.update_rate_hz == 10.0
        assert config.gnc.guidance_mode == "Detumble"
        assert config.gnc.use_differential_thrust and not config.gnc.use_rcs
        assert config.gnc.base_thrust == 295.0
        assert [b.name for b in config.universe.bodies] == ["Moon"]
        assert [s.kind for s in config.spacecraft.subsystems] == [
            SubsystemKind.PROPULSION,
            SubsystemKind.RCS,
            SubsystemKind.IMU,
            SubsystemKind.STAR_TRACKER,
            SubsystemKind.STAR_SENSOR,
        ]

    def test_stopping_conditions(self):
        conditions = default_config().simulation.stopping_conditions
        assert conditions == [MaxDuration(seconds=100.0), CollisionWith(body="Moon")]

    def test_from_json_roundtrip_of_defaults(self):
        config = SurveyorConfig.from_json(json.dumps(default_config_dict()))
        assert config.spacecraft.mass == 1000.0
        assert_allclose(config.spacecraft.inertia, np.diag([400.0, 400.0, 300.0]))

    def test_from_file(self, tmp_path):
        path = tmp_path / "lander.json"
        path.write_text(json.dumps(default_config_dict()))
        assert SurveyorConfig.from_file(path).gnc.kd == 400.0

    def test_malformed_json(self):
        with pytest.raises(ConfigurationError, match="Malformed"):
            SurveyorConfig.from_json("{not json")

    def test_missing_spacecraft(self):
        with pytest.raises(ConfigurationError, match="spacecraft"):
            SurveyorConfig.from_dict({"simulation": {}})

    def test_sections_default(self):
        data = {"spacecraft": config_dict()["spacecraft"]}
        config = SurveyorConfig.from_dict(data)
        assert config.gnc.guidance_mode == "Idle"
        assert config.simulation.stopping_conditions == [MaxDuration(seconds=100.0)]


class TestSpacecraftConfig:
    """Subsystem list validation."""

    def test_duplicate_subsystem_kind(self):
        data = config_dict()
        data["spacecraft"]["subsystems"].append({"type": "Imu", "units": [{"geometry": {}}]})
        with pytest.raises(ConfigurationError, match="At most one Imu"):
            SurveyorConfig.from_dict(data)

    def test_unknown_subsystem_type(self):
        data = config_dict()
        data["spacecraft"]["subsystems"].append({"type": "Radar"})
        with pytest.raises(ConfigurationError, match="Unknown subsystem type"):
            SurveyorConfig.from_dict(data)

    def test_bad_inertia_shape(self):
        data = config_dict()
        data["spacecraft"]["inertia"] = [1.0, 2.0, 3.0]
        with pytest.raises(ConfigurationError, match="Inertia"):
            SurveyorConfig.from_dict(data)

    def test_initial_attitude_normalised(self):
        data = config_dict()
        data["spacecraft"]["initial_state"]["q_i2b"] = [2.0, 0.0, 0.0, 0.0]
        config = SurveyorConfig.from_dict(data)
        assert_allclose(config.spacecraft.initial_state.q_i2b, [1.0, 0.0, 0.0, 0.0])

    def test_subsystems_of(self):
        spacecraft = default_config().spacecraft
        (rcs,) = spacecraft.subsystems_of(SubsystemKind.RCS)
        assert len(rcs.thrusters) == 6


class TestComponentConfig:
    """Mounting, thruster and servo records."""

    def test_zero_mount_quaternion(self):
        with pytest.raises(ConfigurationError, match="non-zero"):
            GeometryConfig(q_cf2b=np.zeros(4))

    def test_tvc_axis_normalised(self):
        tvc = TVCConfig(axis_cf=np.array([0.0, 2.0, 0.0]), max_deflection=0.1)
        assert_allclose(tvc.axis_cf, [0.0, 1.0, 0.0])

    def test_tvc_rejects_bad_limits(self):
        with pytest.raises(ConfigurationError):
            TVCConfig(axis_cf=np.array([1.0, 0.0, 0.0]), max_deflection=0.0)
        with pytest.raises(ConfigurationError):
            TVCConfig(axis_cf=np.array([1.0, 0.0, 0.0]), max_deflection=0.1, slew_rate=-1.0)

    def test_thrust_range(self):
        with pytest.raises(ConfigurationError, match="min_thrust"):
            ThrusterConfig(geometry=GeometryConfig(), min_thrust=500.0, max_thrust=460.0)

    def test_engine_tvc_parsed(self):
        (propulsion,) = default_config().spacecraft.subsystems_of(SubsystemKind.PROPULSION)
        assert propulsion.engines[0].tvc is not None
        assert propulsion.engines[0].tvc.max_deflection == pytest.approx(np.radians(6.0))
        assert propulsion.engines[1].tvc is None

    def test_missing_required_field(self):
        data = config_dict()
        del data["spacecraft"]["subsystems"][0]["engines"][0]["max_thrust"]
        with pytest.raises(ConfigurationError, match="max_thrust"):
            SurveyorConfig.from_dict(data)

    def test_wrong_vector_length(self):
        data = config_dict()
        data["spacecraft"]["initial_state"]["position"] = [1.0, 2.0]
        with pytest.raises(ConfigurationError, match="3 elements"):
            SurveyorConfig.from_dict(data)


# =============================================================================
# Simulation and GNC Sections
# =============================================================================

class TestSimulationAndGnc:
    """Run-control and GNC parameters."""

    def test_time_acceleration_range(self):
        with pytest.raises(ConfigurationError):
            SimulationConfig(time_acceleration=500.0)
        with pytest.raises(ConfigurationError):
            SimulationConfig(min_time_acceleration=10.0, max_time_acceleration=1.0)

    def test_unknown_stopping_condition(self):
        data = config_dict()
        data["simulation"]["stopping_conditions"] = [{"type": "Landed"}]
        with pytest.raises(ConfigurationError, match="stopping condition"):
            SurveyorConfig.from_dict(data)

    def test_initial_guidance_mode(self):
        with pytest.raises(ConfigurationError, match="guidance_mode"):
            GncConfig(guidance_mode="Pointing")
        with pytest.raises(ConfigurationError, match="guidance_mode"):
            GncConfig.from_dict({"guidance_mode": "Hover"})
        assert GncConfig.from_dict({"guidance_mode": "Manual"}).guidance_mode == "Manual"

    def test_gains_validated(self):
        with pytest.raises(ConfigurationError):
            GncConfig(kp=-1.0)
        with pytest.raises(ConfigurationError):
            GncConfig(max_torque=0.0)

    def test_staleness_limit(self):
        assert GncConfig.from_dict({}).staleness_limit_s is None
        assert GncConfig.from_dict({"staleness_limit_s": 2}).staleness_limit_s == 2.0

    def test_bad_number(self):
        with pytest.raises(ConfigurationError, match="must be a number"):
            GncConfig.from_dict({"kp": "fast"})


class TestParseEpoch:
    """ISO-8601 epoch parsing."""

    def test_zulu(self):
        assert parse_epoch("2020-01-01T00:00:00Z") == datetime(2020, 1, 1, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        assert parse_epoch("2020-01-01T12:00:00").tzinfo == timezone.utc

    def test_offset_converted(self):
        assert parse_epoch("2020-01-01T02:00:00+02:00") == datetime(2020, 1, 1, tzinfo=timezone.utc)

    def test_invalid(self):
        with pytest.raises(ConfigurationError, match="Invalid epoch"):
            parse_epoch("yesterday")
