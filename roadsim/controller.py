#!/usr/bin/env python3
"""
roadsim/controller.py
=====================
Car-following controllers.

A :class:`VehicleController` turns a vehicle's own speed, its top speed,
the gap to its front vehicle and that vehicle's speed into the next
``(speed, position)`` pair.  The law is selected once, at construction,
from the closed :class:`VehicleControllerType` set:

* ``AUTONOMOUS``: Intelligent Driver Model (Treiber et al., 2000).
* ``HUMAN``: Gipps model (Gipps, 1981) with a driver reaction time.

Controllers are stateless policy objects: one instance is shared by
every vehicle of a given type and may be used for any number of vehicles
within the same tick.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Optional, Tuple

from roadsim.errors import InvalidParameter
from roadsim.profile import DriverParameters, load_profile

if TYPE_CHECKING:
    from roadsim.vehicle import Vehicle

log = logging.getLogger(__name__)

# Gaps below this are treated as this (m); keeps the IDM interaction term finite.
_MIN_GAP_M: float = 0.01


class VehicleControllerType(Enum):
    """Car-following law families."""

    AUTONOMOUS = "autonomous"
    HUMAN = "human"


# A law maps (params, speed, desired speed, gap, leader speed, dt) to the new speed.
_Law = Callable[[DriverParameters, float, float, float, float, float], float]


def idm_acceleration(
    params: DriverParameters,
    speed: float,
    desired_speed: float,
    gap: float,
    leader_speed: float,
) -> float:
    """Intelligent Driver Model acceleration (m/s²).

    ``s* = s0 + v*T + v*dv / (2*sqrt(a*b))`` is floored at zero so a
    faster leader never makes the follower brake.  With an infinite gap
    only the free-road term remains.
    """
    a = params.max_acceleration
    free_road = 1.0 - (abs(speed) / desired_speed) ** params.acceleration_exponent
    if math.isinf(gap):
        return a * free_road

    approach_rate = speed - leader_speed
    optimal_spacing = (
        params.min_gap
        + speed * params.time_headway
        + (speed * approach_rate) / (2.0 * math.sqrt(a * params.comfortable_deceleration))
    )
    optimal_spacing = max(optimal_spacing, 0.0)
    interaction = (optimal_spacing / max(gap, _MIN_GAP_M)) ** 2
    return a * (free_road - interaction)


def _idm_speed(
    params: DriverParameters,
    speed: float,
    desired_speed: float,
    gap: float,
    leader_speed: float,
    dt: float,
) -> float:
    acc = idm_acceleration(params, speed, desired_speed, gap, leader_speed)
    # prevent negative velocity
    return max(speed + acc * dt, 0.0)


def gipps_safe_speed(
    params: DriverParameters,
    speed: float,
    desired_speed: float,
    gap: float,
    leader_speed: float,
) -> float:
    """Gipps target speed one reaction time ahead (m/s).

    Minimum of the free-flow speed and the speed from which the driver
    can still stop behind a leader braking at the same comfortable rate.
    """
    tau = params.reaction_time
    a = params.max_acceleration
    b = params.comfortable_deceleration

    ratio = max(speed, 0.0) / desired_speed
    v_acc = speed + 2.5 * a * tau * (1.0 - ratio) * math.sqrt(0.025 + ratio)
    if math.isinf(gap):
        return max(v_acc, 0.0)

    radicand = (b * tau) ** 2 + b * (
        2.0 * (gap - params.min_gap) - speed * tau + leader_speed ** 2 / b
    )
    v_dec = -b * tau + math.sqrt(radicand) if radicand > 0 else 0.0
    return max(min(v_acc, v_dec), 0.0)


def _gipps_speed(
    params: DriverParameters,
    speed: float,
    desired_speed: float,
    gap: float,
    leader_speed: float,
    dt: float,
) -> float:
    target = gipps_safe_speed(params, speed, desired_speed, gap, leader_speed)
    if target < speed:
        return target
    # acceleration is spread over the reaction time
    return speed + (target - speed) * min(1.0, dt / params.reaction_time)


_LAWS: Dict[VehicleControllerType, _Law] = {
    VehicleControllerType.AUTONOMOUS: _idm_speed,
    VehicleControllerType.HUMAN: _gipps_speed,
}


class VehicleController:
    """Car-following policy shared by every vehicle of one type.

    Parameters
    ----------
    controller_type : VehicleControllerType
        Which law to apply.
    profile : str or None
        Profile resource (e.g. ``"regular.xml"``) whose driver section
        supplies the parameters.
    parameters : DriverParameters or None
        Explicit parameters; take precedence over *profile*.
    """

    def __init__(
        self,
        controller_type: VehicleControllerType,
        profile: Optional[str] = None,
        parameters: Optional[DriverParameters] = None,
    ) -> None:
        if not isinstance(controller_type, VehicleControllerType):
            raise InvalidParameter(f"unknown controller type: {controller_type!r}")
        if parameters is None:
            parameters = load_profile(profile).driver if profile else DriverParameters()
        self._type = controller_type
        self._params = parameters
        self._law = _LAWS[controller_type]
        log.debug("Controller %s created with %s", controller_type.name, parameters)

    @property
    def controller_type(self) -> VehicleControllerType:
        return self._type

    @property
    def parameters(self) -> DriverParameters:
        return self._params

    def compute(self, vehicle: "Vehicle", dt: float) -> Tuple[float, float]:
        """Next ``(speed, position)`` of *vehicle* after *dt* seconds.

        Reads the vehicle and its leader as they are now and mutates
        nothing.  The position uses the mean of old and new speed.
        """
        if not dt > 0 or math.isinf(dt):
            raise InvalidParameter(f"dt must be a positive finite number, got {dt!r}")

        leader = vehicle.front_vehicle
        gap = vehicle.front_distance()
        leader_speed = leader.speed if leader is not None else 0.0
        desired_speed = min(self._params.desired_speed, vehicle.max_speed)

        speed = vehicle.speed
        new_speed = self._law(self._params, speed, desired_speed, gap, leader_speed, dt)
        new_speed = max(-vehicle.max_speed, min(vehicle.max_speed, new_speed))
        position = vehicle.position + 0.5 * (speed + new_speed) * dt
        return new_speed, position

    def update(self, vehicle: "Vehicle", dt: float) -> None:
        """Compute and commit the next state of *vehicle*."""
        vehicle.commit(*self.compute(vehicle, dt))

    def __repr__(self) -> str:
        return f"VehicleController({self._type.name}, {self._params})"
