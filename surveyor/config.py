"""Configuration records for the lander simulation.

The whole simulation is described by one JSON document that is parsed once at
startup into the dataclasses below. Vectors are JSON arrays, quaternions are
scalar-first ``[w, x, y, z]`` arrays, and everything is SI unless a field name
says otherwise (``*_deg``).

Example:
    >>> from surveyor.config import SurveyorConfig, default_config
    >>>
    >>> config = SurveyorConfig.from_file("lander.json")
    >>> config.simulation.sim_rate_hz
    100.0
    >>>
    >>> # Built-in Surveyor-like lander in a 100 km lunar orbit
    >>> config = default_config()
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from surveyor.exceptions import ConfigurationError

# Moon constants
MU_MOON = 4.9048695e12  # m^3/s^2
R_MOON = 1737.4e3  # m

DEFAULT_EPOCH = "2020-01-01T00:00:00Z"
INITIAL_GUIDANCE_MODES = frozenset({"Idle", "Manual", "Detumble"})


# =============================================================================
# Parsing Helpers
# =============================================================================


@beartype
def parse_epoch(text: str) -> datetime:
    """Parse an ISO-8601 epoch string into an aware UTC datetime.

    A trailing ``Z`` is accepted; naive timestamps are taken to be UTC.
    """
    try:
        epoch = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ConfigurationError(f"Invalid epoch string: {text!r}") from exc
    if epoch.tzinfo is None:
        epoch = epoch.replace(tzinfo=timezone.utc)
    return epoch.astimezone(timezone.utc)


def _vector(data: dict[str, Any], key: str, size: int, default: list[float] | None = None) -> NDArray[np.float64]:
    if key not in data:
        if default is None:
            raise ConfigurationError(f"Missing required field '{key}'")
        return np.array(default, dtype=np.float64)
    arr = np.asarray(data[key], dtype=np.float64)
    if arr.shape != (size,):
        raise ConfigurationError(f"Field '{key}' must have {size} elements, got shape {arr.shape}")
    return arr


def _number(data: dict[str, Any], key: str, default: float | None = None) -> float:
    if key not in data:
        if default is None:
            raise ConfigurationError(f"Missing required field '{key}'")
        return float(default)
    try:
        return float(data[key])
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Field '{key}' must be a number, got {data[key]!r}") from exc


def _unit_quaternion(q: NDArray[np.float64], what: str) -> NDArray[np.float64]:
    norm = np.linalg.norm(q)
    if not np.isfinite(norm) or norm < 1e-12:
        raise ConfigurationError(f"{what} quaternion must be non-zero, got {q}")
    return q / norm


# =============================================================================
# Component Records
# =============================================================================


@beartype
@dataclass
class GeometryConfig:
    """Mounting of a component on the spacecraft.

    Attributes:
        q_cf2b: Component-frame to body-frame quaternion (scalar-first)
        cf_offset_com_b: Component origin relative to the center of mass,
            body frame [m]
    """
    q_cf2b: NDArray[np.float64] = field(default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0]))
    cf_offset_com_b: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        if self.q_cf2b.shape != (4,):
            raise ConfigurationError(f"q_cf2b must be shape (4,), got {self.q_cf2b.shape}")
        if self.cf_offset_com_b.shape != (3,):
            raise ConfigurationError(f"cf_offset_com_b must be shape (3,), got {self.cf_offset_com_b.shape}")
        self.q_cf2b = _unit_quaternion(self.q_cf2b, "Mount")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeometryConfig":
        return cls(
            q_cf2b=_vector(data, "q_cf2b", 4, [1.0, 0.0, 0.0, 0.0]),
            cf_offset_com_b=_vector(data, "cf_offset_com_b", 3, [0.0, 0.0, 0.0]),
        )


@beartype
@dataclass
class TVCConfig:
    """Single-axis thrust vector control servo.

    Attributes:
        axis_cf: Rotation axis in the component frame
        max_deflection: Maximum gimbal angle magnitude [rad]
        slew_rate: Maximum servo rate [rad/s], None for an ideal servo
    """
    axis_cf: NDArray[np.float64]
    max_deflection: float
    slew_rate: float | None = None

    def __post_init__(self) -> None:
        if self.axis_cf.shape != (3,):
            raise ConfigurationError(f"TVC axis must be shape (3,), got {self.axis_cf.shape}")
        norm = np.linalg.norm(self.axis_cf)
        if norm < 1e-12:
            raise ConfigurationError("TVC axis must be non-zero")
        self.axis_cf = self.axis_cf / norm
        if self.max_deflection <= 0:
            raise ConfigurationError(f"TVC max_deflection must be positive, got {self.max_deflection}")
        if self.slew_rate is not None and self.slew_rate <= 0:
            raise ConfigurationError(f"TVC slew_rate must be positive, got {self.slew_rate}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TVCConfig":
        slew_rate = data.get("slew_rate")
        return cls(
            axis_cf=_vector(data, "axis_cf", 3),
            max_deflection=_number(data, "max_deflection"),
            slew_rate=None if slew_rate is None else float(slew_rate),
        )


@beartype
@dataclass
class ThrusterConfig:
    """A thruster (RCS jet or vernier engine) with an optional TVC servo.

    Thrust acts along the component +Z axis.

    Attributes:
        geometry: Mounting geometry
        min_thrust: Minimum thrust [N]
        max_thrust: Maximum thrust [N]
        tvc: Optional single-axis gimbal
    """
    geometry: GeometryConfig
    min_thrust: float
    max_thrust: float
    tvc: TVCConfig | None = None

    def __post_init__(self) -> None:
        if self.max_thrust <= 0:
            raise ConfigurationError(f"max_thrust must be positive, got {self.max_thrust}")
        if not 0.0 <= self.min_thrust <= self.max_thrust:
            raise ConfigurationError(
                f"min_thrust must be within [0, max_thrust], got {self.min_thrust} (max {self.max_thrust})"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ThrusterConfig":
        tvc = data.get("tvc")
        return cls(
            geometry=GeometryConfig.from_dict(data.get("geometry", {})),
            min_thrust=_number(data, "min_thrust", 0.0),
            max_thrust=_number(data, "max_thrust"),
            tvc=None if tvc is None else TVCConfig.from_dict(tvc),
        )


@beartype
@dataclass
class ImuConfig:
    geometry: GeometryConfig = field(default_factory=GeometryConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImuConfig":
        return cls(geometry=GeometryConfig.from_dict(data.get("geometry", {})))


@beartype
@dataclass
class StarTrackerConfig:
    geometry: GeometryConfig = field(default_factory=GeometryConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StarTrackerConfig":
        return cls(geometry=GeometryConfig.from_dict(data.get("geometry", {})))


@beartype
@dataclass
class StarSensorConfig:
    """Single-star sensor with boresight along component +Z.

    Attributes:
        name: Name of the tracked star
        geometry: Mounting geometry
        fov_deg: Field of view half-angle [deg]
        ra_deg: Right ascension of the star [deg]
        dec_deg: Declination of the star [deg]
    """
    name: str
    geometry: GeometryConfig
    fov_deg: float
    ra_deg: float
    dec_deg: float

    def __post_init__(self) -> None:
        if not 0.0 < self.fov_deg <= 180.0:
            raise ConfigurationError(f"fov_deg must be in (0, 180], got {self.fov_deg}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StarSensorConfig":
        return cls(
            name=str(data.get("name", "")),
            geometry=GeometryConfig.from_dict(data.get("geometry", {})),
            fov_deg=_number(data, "fov_deg"),
            ra_deg=_number(data, "ra_deg"),
            dec_deg=_number(data, "dec_deg"),
        )


# =============================================================================
# Subsystem Records
# =============================================================================


class SubsystemKind(Enum):
    """Closed set of spacecraft subsystem types."""
    PROPULSION = "Propulsion"
    RCS = "Rcs"
    IMU = "Imu"
    STAR_TRACKER = "StarTracker"
    STAR_SENSOR = "StarSensor"


@beartype
@dataclass
class PropulsionConfig:
    engines: list[ThrusterConfig]
    kind: SubsystemKind = SubsystemKind.PROPULSION


@beartype
@dataclass
class RcsConfig:
    thrusters: list[ThrusterConfig]
    kind: SubsystemKind = SubsystemKind.RCS


@beartype
@dataclass
class ImuSubsystemConfig:
    units: list[ImuConfig]
    kind: SubsystemKind = SubsystemKind.IMU


@beartype
@dataclass
class StarTrackerSubsystemConfig:
    units: list[StarTrackerConfig]
    kind: SubsystemKind = SubsystemKind.STAR_TRACKER


@beartype
@dataclass
class StarSensorSubsystemConfig:
    units: list[StarSensorConfig]
    kind: SubsystemKind = SubsystemKind.STAR_SENSOR


SubsystemConfig = (
    PropulsionConfig
    | RcsConfig
    | ImuSubsystemConfig
    | StarTrackerSubsystemConfig
    | StarSensorSubsystemConfig
)


@beartype
def subsystem_from_dict(data: dict[str, Any]) -> SubsystemConfig:
    """Parse one entry of the spacecraft ``subsystems`` list.

    The entry's ``type`` field selects the subsystem kind.
    """
    try:
        kind = SubsystemKind(data.get("type"))
    except ValueError as exc:
        raise ConfigurationError(f"Unknown subsystem type: {data.get('type')!r}") from exc

    if kind == SubsystemKind.PROPULSION:
        return PropulsionConfig(engines=[ThrusterConfig.from_dict(d) for d in data.get("engines", [])])
    elif kind == SubsystemKind.RCS:
        return RcsConfig(thrusters=[ThrusterConfig.from_dict(d) for d in data.get("thrusters", [])])
    elif kind == SubsystemKind.IMU:
        return ImuSubsystemConfig(units=[ImuConfig.from_dict(d) for d in data.get("units", [])])
    elif kind == SubsystemKind.STAR_TRACKER:
        return StarTrackerSubsystemConfig(units=[StarTrackerConfig.from_dict(d) for d in data.get("units", [])])
    elif kind == SubsystemKind.STAR_SENSOR:
        return StarSensorSubsystemConfig(units=[StarSensorConfig.from_dict(d) for d in data.get("units", [])])
    else:
        raise ConfigurationError(f"Unknown subsystem type: {kind}")


# =============================================================================
# Spacecraft
# =============================================================================


@beartype
@dataclass
class InitialState:
    """Dynamics state at the start epoch.

    Attributes:
        epoch: Start epoch (UTC)
        position: Inertial position [m]
        velocity: Inertial velocity [m/s]
        q_i2b: Inertial-to-body quaternion (scalar-first)
        omega_b: Body rates [rad/s]
    """
    epoch: datetime = field(default_factory=lambda: parse_epoch(DEFAULT_EPOCH))
    position: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    velocity: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    q_i2b: NDArray[np.float64] = field(default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0]))
    omega_b: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        if self.position.shape != (3,):
            raise ConfigurationError(f"Position must be shape (3,), got {self.position.shape}")
        if self.velocity.shape != (3,):
            raise ConfigurationError(f"Velocity must be shape (3,), got {self.velocity.shape}")
        if self.q_i2b.shape != (4,):
            raise ConfigurationError(f"Quaternion must be shape (4,), got {self.q_i2b.shape}")
        if self.omega_b.shape != (3,):
            raise ConfigurationError(f"Body rate must be shape (3,), got {self.omega_b.shape}")
        self.q_i2b = _unit_quaternion(self.q_i2b, "Initial attitude")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InitialState":
        return cls(
            epoch=parse_epoch(str(data.get("time", DEFAULT_EPOCH))),
            position=_vector(data, "position", 3),
            velocity=_vector(data, "velocity", 3),
            q_i2b=_vector(data, "q_i2b", 4, [1.0, 0.0, 0.0, 0.0]),
            omega_b=_vector(data, "omega_b", 3, [0.0, 0.0, 0.0]),
        )


@beartype
@dataclass
class SpacecraftConfig:
    """Mass properties, initial state and subsystem list.

    Attributes:
        mass: Spacecraft mass [kg]
        inertia: 3x3 inertia tensor about the center of mass, body frame [kg*m^2]
        initial_state: Dynamics state at the start epoch
        subsystems: Ordered subsystem records
    """
    mass: float
    inertia: NDArray[np.float64]
    initial_state: InitialState
    subsystems: list[SubsystemConfig] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.inertia.shape != (3, 3):
            raise ConfigurationError(f"Inertia must be shape (3, 3), got {self.inertia.shape}")
        kinds = [s.kind for s in self.subsystems]
        for kind in set(kinds):
            if kinds.count(kind) > 1:
                raise ConfigurationError(f"At most one {kind.value} subsystem is allowed")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpacecraftConfig":
        inertia = np.asarray(data.get("inertia", np.eye(3).tolist()), dtype=np.float64)
        return cls(
            mass=_number(data, "mass"),
            inertia=inertia,
            initial_state=InitialState.from_dict(data.get("initial_state", {})),
            subsystems=[subsystem_from_dict(d) for d in data.get("subsystems", [])],
        )

    def subsystems_of(self, kind: SubsystemKind) -> list[SubsystemConfig]:
        """All subsystem records of one kind, in configuration order."""
        return [s for s in self.subsystems if s.kind == kind]


# =============================================================================
# Universe
# =============================================================================


@beartype
@dataclass
class CelestialBodyConfig:
    """A point-mass gravitating body.

    Attributes:
        name: Body name (used by CollisionWith stopping conditions)
        mu: Gravitational parameter [m^3/s^2]
        radius: Mean radius [m]
        position: Fixed inertial position [m], used without an ephemeris
        velocity: Fixed inertial velocity [m/s], used without an ephemeris
        ephemeris_path: Optional Parquet/CSV ephemeris table
    """
    name: str
    mu: float
    radius: float
    position: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    velocity: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    ephemeris_path: str | None = None

    def __post_init__(self) -> None:
        if self.mu <= 0:
            raise ConfigurationError(f"{self.name}: mu must be positive, got {self.mu}")
        if self.radius < 0:
            raise ConfigurationError(f"{self.name}: radius must be non-negative, got {self.radius}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CelestialBodyConfig":
        path = data.get("ephemeris_path")
        return cls(
            name=str(data["name"]),
            mu=_number(data, "mu"),
            radius=_number(data, "radius", 0.0),
            position=_vector(data, "position", 3, [0.0, 0.0, 0.0]),
            velocity=_vector(data, "velocity", 3, [0.0, 0.0, 0.0]),
            ephemeris_path=None if path is None else str(path),
        )


@beartype
@dataclass
class UniverseConfig:
    bodies: list[CelestialBodyConfig] = field(default_factory=list)

    def __post_init__(self) -> None:
        names = [b.name for b in self.bodies]
        if len(names) != len(set(names)):
            raise ConfigurationError(f"Celestial body names must be unique, got {names}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UniverseConfig":
        return cls(bodies=[CelestialBodyConfig.from_dict(d) for d in data.get("bodies", [])])


# =============================================================================
# Simulation and GNC
# =============================================================================


@beartype
@dataclass(frozen=True)
class MaxDuration:
    """Stop once the elapsed simulation time reaches ``seconds``."""
    seconds: float


@beartype
@dataclass(frozen=True)
class CollisionWith:
    """Stop once the spacecraft is within the radius of the named body."""
    body: str


StoppingCondition = MaxDuration | CollisionWith


@beartype
def stopping_condition_from_dict(data: dict[str, Any]) -> StoppingCondition:
    kind = data.get("type")
    if kind == "MaxDuration":
        return MaxDuration(seconds=_number(data, "seconds"))
    elif kind == "CollisionWith":
        return CollisionWith(body=str(data["body"]))
    else:
        raise ConfigurationError(f"Unknown stopping condition: {kind!r}")


@beartype
@dataclass
class SimulationConfig:
    """Scheduler and run-control parameters.

    Attributes:
        sim_rate_hz: Physics integration rate [Hz]
        time_acceleration: Simulated seconds per wall-clock second
        min_time_acceleration: Lower clamp for rate commands
        max_time_acceleration: Upper clamp for rate commands
        stopping_conditions: Conditions ending the run
    """
    sim_rate_hz: float = 100.0
    time_acceleration: float = 1.0
    min_time_acceleration: float = 0.1
    max_time_acceleration: float = 100.0
    stopping_conditions: list[StoppingCondition] = field(
        default_factory=lambda: [MaxDuration(seconds=100.0)]
    )

    def __post_init__(self) -> None:
        if self.sim_rate_hz <= 0:
            raise ConfigurationError(f"sim_rate_hz must be positive, got {self.sim_rate_hz}")
        if not 0 < self.min_time_acceleration <= self.max_time_acceleration:
            raise ConfigurationError(
                f"Invalid time acceleration range [{self.min_time_acceleration}, {self.max_time_acceleration}]"
            )
        if not self.min_time_acceleration <= self.time_acceleration <= self.max_time_acceleration:
            raise ConfigurationError(
                f"time_acceleration {self.time_acceleration} outside "
                f"[{self.min_time_acceleration}, {self.max_time_acceleration}]"
            )

    @property
    def dt(self) -> float:
        """Physics step [s]."""
        return 1.0 / self.sim_rate_hz

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SimulationConfig":
        conditions = data.get("stopping_conditions")
        return cls(
            sim_rate_hz=_number(data, "sim_rate_hz", 100.0),
            time_acceleration=_number(data, "time_acceleration", 1.0),
            min_time_acceleration=_number(data, "min_time_acceleration", 0.1),
            max_time_acceleration=_number(data, "max_time_acceleration", 100.0),
            stopping_conditions=(
                [MaxDuration(seconds=100.0)] if conditions is None
                else [stopping_condition_from_dict(c) for c in conditions]
            ),
        )


@beartype
@dataclass
class GncConfig:
    """Flight software parameters.

    Attributes:
        update_rate_hz: Discrete GNC rate [Hz]
        use_rcs: Enable the RCS allocator
        use_tvc: Enable the TVC allocator
        use_differential_thrust: Enable the vernier allocator
        kp: Attitude error gain [N*m/rad]
        kd: Body rate gain [N*m*s/rad]
        max_torque: Torque request magnitude limit [N*m]
        base_thrust: Initial engine base thrust [N]
        guidance_mode: Guidance mode at power-on (Idle, Manual or Detumble)
        staleness_limit_s: Sensor slots older than this are invalidated,
            None disables the check
    """
    update_rate_hz: float = 10.0
    use_rcs: bool = True
    use_tvc: bool = False
    use_differential_thrust: bool = False
    kp: float = 100.0
    kd: float = 400.0
    max_torque: float = 20.0
    base_thrust: float = 0.0
    guidance_mode: str = "Idle"
    staleness_limit_s: float | None = None

    def __post_init__(self) -> None:
        if self.update_rate_hz <= 0:
            raise ConfigurationError(f"update_rate_hz must be positive, got {self.update_rate_hz}")
        if self.kp < 0 or self.kd < 0:
            raise ConfigurationError(f"Gains must be non-negative, got kp={self.kp}, kd={self.kd}")
        if self.max_torque <= 0:
            raise ConfigurationError(f"max_torque must be positive, got {self.max_torque}")
        if self.base_thrust < 0:
            raise ConfigurationError(f"base_thrust must be non-negative, got {self.base_thrust}")
        if self.guidance_mode not in INITIAL_GUIDANCE_MODES:
            raise ConfigurationError(
                f"guidance_mode must be one of {sorted(INITIAL_GUIDANCE_MODES)}, got {self.guidance_mode!r}"
            )
        if self.staleness_limit_s is not None and self.staleness_limit_s <= 0:
            raise ConfigurationError(f"staleness_limit_s must be positive, got {self.staleness_limit_s}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GncConfig":
        staleness = data.get("staleness_limit_s")
        return cls(
            update_rate_hz=_number(data, "update_rate_hz", 10.0),
            use_rcs=bool(data.get("use_rcs", True)),
            use_tvc=bool(data.get("use_tvc", False)),
            use_differential_thrust=bool(data.get("use_differential_thrust", False)),
            kp=_number(data, "kp", 100.0),
            kd=_number(data, "kd", 400.0),
            max_torque=_number(data, "max_torque", 20.0),
            base_thrust=_number(data, "base_thrust", 0.0),
            guidance_mode=str(data.get("guidance_mode", "Idle")),
            staleness_limit_s=None if staleness is None else float(staleness),
        )


# =============================================================================
# Top-level Document
# =============================================================================


@beartype
@dataclass
class SurveyorConfig:
    """Complete simulation configuration document."""
    simulation: SimulationConfig
    gnc: GncConfig
    universe: UniverseConfig
    spacecraft: SpacecraftConfig

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SurveyorConfig":
        if "spacecraft" not in data:
            raise ConfigurationError("Missing required section 'spacecraft'")
        return cls(
            simulation=SimulationConfig.from_dict(data.get("simulation", {})),
            gnc=GncConfig.from_dict(data.get("gnc", {})),
            universe=UniverseConfig.from_dict(data.get("universe", {})),
            spacecraft=SpacecraftConfig.from_dict(data["spacecraft"]),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "SurveyorConfig":
        """Deserialize from JSON."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Malformed configuration document: {exc}") from exc
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str | Path) -> "SurveyorConfig":
        """Load from a JSON file."""
        return cls.from_json(Path(path).read_text())


# =============================================================================
# Built-in Lander
# =============================================================================


def _ring(radius: float, z: float, angles_deg: list[float]) -> list[list[float]]:
    return [
        [radius * np.cos(np.radians(a)), radius * np.sin(np.radians(a)), z]
        for a in angles_deg
    ]


def default_config_dict() -> dict[str, Any]:
    """Surveyor-like lander in a 100 km circular lunar orbit, as a JSON-ready dict.

    Three vernier engines sit 120 deg apart below the center of mass, the first
    one on a roll gimbal. Six cold-gas jets sit on the landing legs, one firing
    along body +Z and one tangentially at each leg.

    Attitude is flown on the verniers: differential thrust about a 295 N base
    (mid-range, so both signs of differential fit inside the throttle range)
    for pitch and yaw, the gimbal for roll. The jets only fire one way and the
    duty cycle keeps just the magnitude of each allocated thrust, so RCS
    allocation is left off.
    """
    leg_angles = [0.0, 120.0, 240.0]
    r0 = R_MOON + 100e3
    v0 = float(np.sqrt(MU_MOON / r0))

    engines = []
    for i, offset in enumerate(_ring(0.6, -0.5, leg_angles)):
        engine: dict[str, Any] = {
            "geometry": {"q_cf2b": [1.0, 0.0, 0.0, 0.0], "cf_offset_com_b": offset},
            "min_thrust": 130.0,
            "max_thrust": 460.0,
        }
        if i == 0:
            engine["tvc"] = {"axis_cf": [1.0, 0.0, 0.0], "max_deflection": float(np.radians(6.0)), "slew_rate": 1.0}
        engines.append(engine)

    jets = []
    for angle, offset in zip(leg_angles, _ring(1.5, 0.0, leg_angles)):
        a = np.radians(angle)
        # +Z firing jet
        jets.append({
            "geometry": {"q_cf2b": [1.0, 0.0, 0.0, 0.0], "cf_offset_com_b": offset},
            "min_thrust": 0.0,
            "max_thrust": 10.0,
        })
        # Tangential jet: component +Z rotated onto the local tangent
        tangent = np.array([-np.sin(a), np.cos(a), 0.0])
        axis = np.cross([0.0, 0.0, 1.0], tangent)
        axis = axis / np.linalg.norm(axis)
        half = np.pi / 4
        jets.append({
            "geometry": {
                "q_cf2b": [float(np.cos(half)), *[float(x) for x in np.sin(half) * axis]],
                "cf_offset_com_b": offset,
            },
            "min_thrust": 0.0,
            "max_thrust": 10.0,
        })

    return {
        "simulation": {
            "sim_rate_hz": 100.0,
            "time_acceleration": 1.0,
            "min_time_acceleration": 0.1,
            "max_time_acceleration": 100.0,
            "stopping_conditions": [
                {"type": "MaxDuration", "seconds": 100.0},
                {"type": "CollisionWith", "body": "Moon"},
            ],
        },
        "gnc": {
            "update_rate_hz": 10.0,
            "use_rcs": False,
            "use_tvc": False,
            "use_differential_thrust": True,
            "kp": 100.0,
            "kd": 400.0,
            "max_torque": 20.0,
            "base_thrust": 295.0,
            "guidance_mode": "Detumble",
        },
        "universe": {
            "bodies": [{"name": "Moon", "mu": MU_MOON, "radius": R_MOON}],
        },
        "spacecraft": {
            "mass": 1000.0,
            "inertia": [[400.0, 0.0, 0.0], [0.0, 400.0, 0.0], [0.0, 0.0, 300.0]],
            "initial_state": {
                "time": DEFAULT_EPOCH,
                "position": [r0, 0.0, 0.0],
                "velocity": [0.0, v0, 0.0],
                "q_i2b": [1.0, 0.0, 0.0, 0.0],
                "omega_b": [0.01, -0.02, 0.005],
            },
            "subsystems": [
                {"type": "Propulsion", "engines": engines},
                {"type": "Rcs", "thrusters": jets},
                {"type": "Imu", "units": [{"geometry": {}}]},
                {"type": "StarTracker", "units": [{"geometry": {}}]},
                {
                    "type": "StarSensor",
                    "units": [{
                        "name": "Canopus",
                        "geometry": {"q_cf2b": [1.0, 0.0, 0.0, 0.0]},
                        "fov_deg": 22.5,
                        "ra_deg": 95.988,
                        "dec_deg": -52.696,
                    }],
                },
            ],
        },
    }


def default_config() -> SurveyorConfig:
    """Built-in Surveyor-like lander configuration."""
    return SurveyorConfig.from_dict(default_config_dict())
