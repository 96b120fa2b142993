"""Control allocation.

The allocator hands the full torque request, unchanged, to every enabled
downstream allocator. Nothing is split between them: RCS, TVC and the vernier
differential/gimbal allocator each map the whole request on their own.

Example:
    >>> allocator = ControlAllocator.from_config(gnc_config, spacecraft_config)
    >>> output = allocator.allocate(torque_b, base_thrust=300.0)
    >>> duty_cycles = output.rcs_duty_cycles
"""

import logging
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np
from numpy.typing import NDArray

from flight.control.rcs import RCSController
from flight.control.tvc import TVCController
from flight.control.vernier import VernierAttitudeController, VernierOutput
from surveyor.config import GncConfig, SpacecraftConfig, SubsystemKind, ThrusterConfig
from surveyor.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ControlAllocatorConfig:
    """Which allocators receive the torque request."""
    use_rcs: bool = True
    use_tvc: bool = False
    use_differential_thrust: bool = False

    @classmethod
    def from_gnc(cls, gnc: GncConfig) -> "ControlAllocatorConfig":
        return cls(
            use_rcs=gnc.use_rcs,
            use_tvc=gnc.use_tvc,
            use_differential_thrust=gnc.use_differential_thrust,
        )


class AllocatorOutput(NamedTuple):
    """Commands from every enabled allocator (None when disabled)."""
    rcs_duty_cycles: NDArray[np.float64] | None
    tvc_angles: NDArray[np.float64] | None
    vernier: VernierOutput | None


def _thrusters(config: SpacecraftConfig, kind: SubsystemKind) -> list[ThrusterConfig]:
    thrusters = []
    for subsystem in config.subsystems_of(kind):
        if kind == SubsystemKind.PROPULSION:
            thrusters.extend(subsystem.engines)
        else:
            thrusters.extend(subsystem.thrusters)
    return thrusters


class ControlAllocator:
    """Fans a torque request out to the enabled allocators."""

    def __init__(
        self,
        config: ControlAllocatorConfig,
        rcs: RCSController | None = None,
        tvc: TVCController | None = None,
        vernier: VernierAttitudeController | None = None,
    ) -> None:
        if config.use_rcs and rcs is None:
            raise ConfigurationError("use_rcs is set but no RCS allocator was given")
        if config.use_tvc and tvc is None:
            raise ConfigurationError("use_tvc is set but no TVC allocator was given")
        if config.use_differential_thrust and vernier is None:
            raise ConfigurationError("use_differential_thrust is set but no vernier allocator was given")
        self.config = config
        self.rcs = rcs
        self.tvc = tvc
        self.vernier = vernier

    @classmethod
    def from_config(cls, gnc: GncConfig, spacecraft: SpacecraftConfig) -> "ControlAllocator":
        """Build the enabled allocators from the thruster geometry.

        Raises:
            ConfigurationError: If an enabled allocator has no hardware or a
                distribution matrix lacks the required rank
        """
        config = ControlAllocatorConfig.from_gnc(gnc)
        engines = _thrusters(spacecraft, SubsystemKind.PROPULSION)
        jets = _thrusters(spacecraft, SubsystemKind.RCS)

        rcs = RCSController.from_thrusters(jets) if config.use_rcs else None
        tvc = TVCController.from_engines(engines) if config.use_tvc else None
        vernier = VernierAttitudeController.from_engines(engines) if config.use_differential_thrust else None
        logger.info(
            "Control allocation: rcs=%s tvc=%s differential_thrust=%s",
            config.use_rcs, config.use_tvc, config.use_differential_thrust,
        )
        return cls(config, rcs=rcs, tvc=tvc, vernier=vernier)

    def allocate(self, torque_b: NDArray[np.float64], base_thrust: float = 0.0) -> AllocatorOutput:
        """Map a body torque request [N*m] through every enabled allocator."""
        rcs = self.rcs.allocate(torque_b) if self.config.use_rcs else None
        tvc = self.tvc.allocate(torque_b) if self.config.use_tvc else None
        vernier = self.vernier.allocate(torque_b, base_thrust) if self.config.use_differential_thrust else None
        return AllocatorOutput(rcs_duty_cycles=rcs, tvc_angles=tvc, vernier=vernier)

    def reset(self) -> None:
        if self.tvc is not None:
            self.tvc.reset()
        if self.vernier is not None:
            self.vernier.reset()
