"""Multi-body point-mass gravity for lander simulation.

Each celestial body contributes F = -mu / |r_rel|^3 * r_rel * mass with
r_rel = r_sc - r_body. Body positions come from an ephemeris once per physics
tick and are propagated linearly with the body velocity to the RK4 stage time.
The per-body kernel is numba-compiled.

Example:
    >>> from surveyor.environment import Universe
    >>>
    >>> universe = Universe.from_config(config.universe)
    >>> universe.update(epoch, time=0.0)
    >>> g = universe.acceleration(position, time=0.0)  # [gx, gy, gz] in m/s^2
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

import numpy as np
from beartype import beartype
from numba import njit
from numpy.typing import NDArray

from surveyor.config import MU_MOON, R_MOON, CelestialBodyConfig, UniverseConfig
from surveyor.dynamics.rigid_body import OrbitalDynamicsInputs, SpacecraftProperties
from surveyor.dynamics.state import SpacecraftState, quaternion_to_dcm
from surveyor.environment.ephemeris import Ephemeris, StaticEphemeris, TabulatedEphemeris
from surveyor.exceptions import ConfigurationError, EphemerisLookupError

logger = logging.getLogger(__name__)


# =============================================================================
# Numba-Optimized Core Functions
# =============================================================================


@njit(cache=True, fastmath=True)
def _point_mass_gravity(
    x: float, y: float, z: float,
    mu: float,
) -> tuple[float, float, float]:
    """Numba-optimized point-mass gravity.

    g = -mu/|r|^3 * r
    """
    r_sq = x*x + y*y + z*z
    r = np.sqrt(r_sq)

    if r < 1.0:  # Avoid singularity at the body center
        r = 1.0
        r_sq = 1.0

    g_over_r = mu / (r_sq * r)

    return (-g_over_r * x, -g_over_r * y, -g_over_r * z)


@beartype
def point_mass_acceleration(r_rel: NDArray[np.float64], mu: float) -> NDArray[np.float64]:
    """Gravitational acceleration of a point mass.

    Args:
        r_rel: Position relative to the body center [m]
        mu: Gravitational parameter [m^3/s^2]

    Returns:
        Acceleration vector [m/s^2]
    """
    gx, gy, gz = _point_mass_gravity(float(r_rel[0]), float(r_rel[1]), float(r_rel[2]), mu)
    return np.array([gx, gy, gz])


# =============================================================================
# Celestial Bodies
# =============================================================================


@beartype
@dataclass
class CelestialBody:
    """A gravitating body and its latest ephemeris state.

    Attributes:
        name: Body name
        mu: Gravitational parameter [m^3/s^2]
        radius: Mean radius [m]
        ephemeris: Source of position and velocity
        position: Inertial position at the last update [m]
        velocity: Inertial velocity at the last update [m/s]
        available: False when the last ephemeris lookup failed
    """
    name: str
    mu: float
    radius: float
    ephemeris: Ephemeris
    position: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    velocity: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    available: bool = True

    @classmethod
    def from_config(cls, config: CelestialBodyConfig) -> "CelestialBody":
        if config.ephemeris_path is not None:
            ephemeris: Ephemeris = TabulatedEphemeris.from_file(config.ephemeris_path)
        else:
            ephemeris = StaticEphemeris(config.position, config.velocity)
        return cls(
            name=config.name,
            mu=config.mu,
            radius=config.radius,
            ephemeris=ephemeris,
            position=config.position.copy(),
            velocity=config.velocity.copy(),
        )

    def position_at(self, dt: float) -> NDArray[np.float64]:
        """Position ``dt`` seconds after the last update [m]."""
        return self.position + self.velocity * dt


# =============================================================================
# Universe
# =============================================================================


@beartype
class Universe:
    """Collection of celestial bodies acting on the spacecraft.

    Implements the dynamics-contributor interface, adding the total gravity
    force (rotated into the body frame) at every derivative evaluation.

    Example:
        >>> universe = Universe([CelestialBody("Moon", MU_MOON, R_MOON, StaticEphemeris())])
        >>> universe.update(epoch, time=0.0)
    """

    def __init__(self, bodies: list[CelestialBody]) -> None:
        self.bodies = bodies
        self.time = 0.0
        self._by_name = {b.name: b for b in bodies}

    @classmethod
    def from_config(cls, config: UniverseConfig) -> "Universe":
        return cls([CelestialBody.from_config(b) for b in config.bodies])

    @classmethod
    def moon_only(cls) -> "Universe":
        """The Moon fixed at the inertial origin."""
        return cls([CelestialBody("Moon", MU_MOON, R_MOON, StaticEphemeris())])

    def body(self, name: str) -> CelestialBody:
        """Look up a body by name."""
        try:
            return self._by_name[name]
        except KeyError:
            raise ConfigurationError(f"Unknown celestial body: {name!r}") from None

    def update(self, epoch: datetime, time: float) -> None:
        """Refresh every body's position from its ephemeris.

        A failed lookup marks the body unavailable until the next successful
        update; its gravity is skipped meanwhile.

        Args:
            epoch: Current simulation epoch
            time: Elapsed simulation time matching ``epoch`` [s]
        """
        self.time = time
        for body in self.bodies:
            try:
                position, velocity = body.ephemeris.state_at(epoch)
            except EphemerisLookupError as exc:
                if body.available:
                    logger.warning("Skipping gravity of %s: %s", body.name, exc)
                body.available = False
                continue
            if not body.available:
                logger.info("Gravity of %s available again at %s", body.name, epoch.isoformat())
            body.position = position
            body.velocity = velocity
            body.available = True

    def acceleration(self, position: NDArray[np.float64], time: float) -> NDArray[np.float64]:
        """Total gravitational acceleration at an inertial position.

        Args:
            position: Spacecraft inertial position [m]
            time: Elapsed simulation time, used to propagate body positions [s]

        Returns:
            Acceleration in the inertial frame [m/s^2]
        """
        dt = time - self.time
        total = np.zeros(3)
        for body in self.bodies:
            if not body.available:
                continue
            total += point_mass_acceleration(position - body.position_at(dt), body.mu)
        return total

    def update_dynamics(
        self,
        state: SpacecraftState,
        properties: SpacecraftProperties,
        inputs: OrbitalDynamicsInputs,
    ) -> None:
        """Add the gravity force, in the body frame, to ``inputs``."""
        force_i = self.acceleration(state.position, state.time) * properties.mass
        inputs.add(force_b=quaternion_to_dcm(state.quaternion) @ force_i)

    def altitude(self, name: str, position: NDArray[np.float64]) -> float:
        """Height above the named body's mean radius [m]."""
        body = self.body(name)
        return float(np.linalg.norm(position - body.position)) - body.radius
