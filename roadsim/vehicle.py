#!/usr/bin/env python3
"""
roadsim/vehicle.py
==================
Kinematic state of a single vehicle on the road reference line.

A :class:`Vehicle` carries an immutable length / top speed pair, a
signed position along the road and a speed that is always clamped to
``[-max_speed, +max_speed]``.  Each vehicle may follow one front vehicle
(its leader) through a non-owning weak reference; the gap to that
leader drives the car-following law of the vehicle's controller.
"""

from __future__ import annotations

import itertools
import math
import weakref
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

from roadsim.errors import InvalidParameter
from roadsim.profile import load_profile

if TYPE_CHECKING:
    from roadsim.controller import VehicleController


_id_counter = itertools.count()


def _next_vehicle_id() -> str:
    return f"VEH_{next(_id_counter):03d}"


def _check_positive(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be a number, got {value!r}") from None
    if not value > 0 or math.isinf(value):
        raise InvalidParameter(f"{name} must be a positive finite number, got {value!r}")
    return value


@dataclass(frozen=True)
class VehicleSnapshot:
    """Read-only copy of a vehicle's state, handed to tick observers."""

    id: str
    position: float
    speed: float
    length: float
    max_speed: float
    front_id: Optional[str]
    front_distance: float

    def as_dict(self) -> dict:
        """Serialisable mapping of every field."""
        return {
            "id": self.id,
            "position": self.position,
            "speed": self.speed,
            "length": self.length,
            "max_speed": self.max_speed,
            "front_id": self.front_id,
            "front_distance": self.front_distance,
        }


class Vehicle:
    """A vehicle moving along the road reference line.

    Parameters
    ----------
    length : float
        Physical length in metres, > 0.
    max_speed : float
        Top speed in m/s, > 0.  Speed is clamped to ``±max_speed``.
    controller : VehicleController or None
        Car-following policy; may be shared by many vehicles.
    vehicle_id : str or None
        Label used by logs and recorders (``VEH_000`` … when omitted).
    position, speed : float
        Initial state.

    Raises
    ------
    InvalidParameter
        If *length* or *max_speed* is not a positive finite number.
    """

    def __init__(
        self,
        length: float,
        max_speed: float,
        controller: Optional["VehicleController"] = None,
        vehicle_id: Optional[str] = None,
        position: float = 0.0,
        speed: float = 0.0,
    ) -> None:
        self._length = _check_positive("length", length)
        self._max_speed = _check_positive("max_speed", max_speed)
        self.id = vehicle_id or _next_vehicle_id()
        self.controller = controller
        self._position = 0.0
        self._speed = 0.0
        self._front_ref: Optional[weakref.ReferenceType] = None

        self.set_position(position)
        self.set_speed(speed)

    @classmethod
    def from_profile(
        cls,
        profile: str,
        controller: Optional["VehicleController"] = None,
        **kwargs,
    ) -> "Vehicle":
        """Build a vehicle whose length and top speed come from *profile*."""
        p = load_profile(profile)
        return cls(p.length, p.max_speed, controller=controller, **kwargs)

    # ── immutable physical data ───────────────────────────────────────────
    @property
    def length(self) -> float:
        return self._length

    @property
    def max_speed(self) -> float:
        return self._max_speed

    # ── kinematic state ───────────────────────────────────────────────────
    @property
    def position(self) -> float:
        return self._position

    @position.setter
    def position(self, value: float) -> None:
        self.set_position(value)

    def set_position(self, position: float) -> None:
        """Store *position* as-is; any signed value is accepted."""
        self._position = float(position)

    @property
    def speed(self) -> float:
        return self._speed

    @speed.setter
    def speed(self, value: float) -> None:
        self.set_speed(value)

    def set_speed(self, speed: float) -> None:
        """Store *speed* clamped to ``[-max_speed, +max_speed]``."""
        self._speed = max(-self._max_speed, min(self._max_speed, float(speed)))

    # ── following link ────────────────────────────────────────────────────
    @property
    def front_vehicle(self) -> Optional["Vehicle"]:
        """The leader, or None if unset (or no longer alive)."""
        if self._front_ref is None:
            return None
        return self._front_ref()

    @front_vehicle.setter
    def front_vehicle(self, other: Optional["Vehicle"]) -> None:
        self.set_front_vehicle(other)

    def set_front_vehicle(self, other: Optional["Vehicle"]) -> None:
        """Follow *other*; ``None`` clears the link.  *other* is not modified."""
        if other is None:
            self._front_ref = None
            return
        if other is self:
            raise InvalidParameter(f"{self.id} cannot be its own front vehicle")
        self._front_ref = weakref.ref(other)

    def front_distance(self) -> float:
        """Gap between the leader's rear and this vehicle's front.

        Positions are vehicle centres, so half of each length is removed
        from the centre-to-centre distance.  Returns ``inf`` when there
        is no leader; may be negative when the two overlap.
        """
        leader = self.front_vehicle
        if leader is None:
            return math.inf
        return leader.position - self._position - (self._length + leader.length) / 2

    # ── simulation ────────────────────────────────────────────────────────
    def next_state(self, dt: float) -> Tuple[float, float]:
        """Return ``(speed, position)`` after *dt* seconds without committing.

        Without a controller the vehicle coasts at constant speed.
        """
        if self.controller is None:
            return self._speed, self._position + self._speed * dt
        return self.controller.compute(self, dt)

    def commit(self, speed: float, position: float) -> None:
        self.set_speed(speed)
        self.set_position(position)

    def update(self, dt: float) -> None:
        """Advance one step of *dt* seconds."""
        self.commit(*self.next_state(dt))

    def snapshot(self) -> VehicleSnapshot:
        leader = self.front_vehicle
        return VehicleSnapshot(
            id=self.id,
            position=self._position,
            speed=self._speed,
            length=self._length,
            max_speed=self._max_speed,
            front_id=leader.id if leader is not None else None,
            front_distance=self.front_distance(),
        )

    def __repr__(self) -> str:
        front = self.front_vehicle
        return (
            f"Vehicle(id={self.id!r}, position={self._position:.3f}, "
            f"speed={self._speed:.3f}, length={self._length}, "
            f"max_speed={self._max_speed}, front={front.id if front else None!r})"
        )
