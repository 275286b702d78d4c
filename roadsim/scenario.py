#!/usr/bin/env python3
"""
roadsim/scenario.py
===================
Scenario glue: builds the vehicle column for a scenario, wires the
front-vehicle chain and hands everything to a :class:`SimulationClock`.

:class:`Simulation` also owns the display scale (px/m) and caches the
latest tick snapshot for readers on other threads.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, List, Mapping, Optional, Tuple

from roadsim import config
from roadsim.clock import SimulationClock, TickListener
from roadsim.controller import VehicleController, VehicleControllerType
from roadsim.errors import InvalidParameter
from roadsim.fleet import Fleet
from roadsim.units import meters_to_pixels, pixels_to_meters
from roadsim.vehicle import Vehicle, VehicleSnapshot

log = logging.getLogger("roadsim.scenario")

Observer = Callable[[Tuple[VehicleSnapshot, ...], float], None]


class ScenarioType(Enum):
    """Predefined road scenarios.

    Each member carries its display scale (px/m), the default vehicle
    profile, the spawn spacing between vehicle centres (m) and the
    initial speed of spawned vehicles (m/s).
    """

    HIGHWAY = ("highway", config.DEFAULT_SCALE, config.DEFAULT_PROFILE, 60.0, 25.0)
    CITY = ("city", 6.0, config.DEFAULT_PROFILE, 20.0, 10.0)
    TRAFFIC_JAM = ("traffic_jam", 8.0, config.DEFAULT_PROFILE, 8.0, 0.0)

    def __init__(
        self, label: str, scale: float, profile: str, spacing: float, initial_speed: float
    ) -> None:
        self.label = label
        self.scale = scale
        self.profile = profile
        self.spacing = spacing
        self.initial_speed = initial_speed

    @classmethod
    def from_name(cls, name: str) -> "ScenarioType":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            valid = ", ".join(m.name for m in cls)
            raise InvalidParameter(f"unknown scenario {name!r} (expected one of {valid})") from None


def generate_traffic(
    controllers: Mapping[VehicleControllerType, int],
    scenario: ScenarioType = ScenarioType.HIGHWAY,
    profile: Optional[str] = None,
) -> Fleet:
    """Create the vehicles of a scenario as a single column.

    Parameters
    ----------
    controllers : mapping
        Number of vehicles per controller type.  One controller instance
        is shared by all vehicles of a type.
    scenario : ScenarioType
        Supplies spacing, initial speed and the default profile.
    profile : str or None
        Profile overriding the scenario's default.

    Returns
    -------
    Fleet
        Vehicles ordered head first.  The head sits at
        ``(n - 1) * spacing``, the tail at 0, and every vehicle follows
        the one before it.  Ids are ``<SCENARIO>_000``, ``<SCENARIO>_001``,
        ... so they never collide with auto-assigned ``VEH_`` ids.
    """
    profile = profile or scenario.profile
    for controller_type, count in controllers.items():
        if count < 0:
            raise InvalidParameter(f"negative vehicle count for {controller_type.name}: {count}")

    total = sum(controllers.values())
    head_position = (total - 1) * scenario.spacing
    fleet = Fleet()

    for controller_type, count in controllers.items():
        if count == 0:
            continue
        controller = VehicleController(controller_type, profile=profile)
        for _ in range(count):
            index = len(fleet)
            vehicle = Vehicle.from_profile(
                profile,
                controller,
                vehicle_id=f"{scenario.name}_{index:03d}",
                position=head_position - index * scenario.spacing,
                speed=scenario.initial_speed,
            )
            fleet.add(vehicle)
            if index > 0:
                fleet.link(index, index - 1)

    log.info(
        "Generated %d vehicles for %s (%s)",
        total,
        scenario.label,
        ", ".join(f"{t.name}={n}" for t, n in controllers.items()),
    )
    return fleet


class Simulation:
    """One simulation session: fleet, clock and display scale.

    Parameters
    ----------
    scenario : ScenarioType
        Scenario to build.
    controllers : mapping or None
        Vehicles per controller type; defaults from :mod:`roadsim.config`.
    profile : str or None
        Vehicle profile overriding the scenario default.
    update_rate_ms, default_delta : float
        Forwarded to :class:`SimulationClock`.
    """

    def __init__(
        self,
        scenario: ScenarioType = ScenarioType.HIGHWAY,
        controllers: Optional[Mapping[VehicleControllerType, int]] = None,
        profile: Optional[str] = None,
        update_rate_ms: float = config.UPDATE_RATE_MS,
        default_delta: float = config.DEFAULT_DELTA,
    ) -> None:
        if controllers is None:
            controllers = {
                VehicleControllerType.AUTONOMOUS: config.DEFAULT_AUTONOMOUS_COUNT,
                VehicleControllerType.HUMAN: config.DEFAULT_HUMAN_COUNT,
            }
        self.scenario = scenario
        self.scale = scenario.scale
        self.fleet = generate_traffic(controllers, scenario, profile)
        self.fleet.validate()
        self.clock = SimulationClock(
            self.fleet, update_rate_ms=update_rate_ms, default_delta=default_delta
        )

        self._lock = threading.Lock()
        self._latest: Tuple[VehicleSnapshot, ...] = tuple(self.fleet.snapshots())
        self._observers_lock = threading.Lock()
        self._observers: List[Tuple[Observer, TickListener]] = []
        self.clock.add_listener(self._cache_snapshots)

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self) -> None:
        self.clock.start()

    def stop(self) -> None:
        self.clock.stop()

    def set_delta(self, delta: float) -> None:
        self.clock.set_delta(delta)

    # ── Observers ─────────────────────────────────────────────────────────────

    def add_observer(self, observer: Observer) -> None:
        """Call ``observer(snapshots, scale)`` after every tick.

        The same observer may be added more than once; it is then called
        once per registration.
        """
        def listener(snapshots: Tuple[VehicleSnapshot, ...]) -> None:
            observer(snapshots, self.scale)

        with self._observers_lock:
            self._observers.append((observer, listener))
        self.clock.add_listener(listener)

    def remove_observer(self, observer: Observer) -> None:
        """Remove the first registration equal to *observer*.

        Matching uses ``==``, so ``remove_observer(obj.method)`` finds a
        registration made with another access of the same bound method.
        """
        with self._observers_lock:
            for i, (registered, listener) in enumerate(self._observers):
                if registered == observer:
                    del self._observers[i]
                    break
            else:
                raise InvalidParameter(f"observer {observer!r} is not registered")
        self.clock.remove_listener(listener)

    def _cache_snapshots(self, snapshots: Tuple[VehicleSnapshot, ...]) -> None:
        with self._lock:
            self._latest = snapshots

    def latest(self) -> List[VehicleSnapshot]:
        """Vehicle state after the most recent tick."""
        with self._lock:
            return list(self._latest)

    # ── Unit conversion at this session's scale ──────────────────────────────

    def meters_to_pixels(self, m: float) -> int:
        return meters_to_pixels(self.scale, m)

    def pixels_to_meters(self, px: float) -> float:
        return pixels_to_meters(self.scale, px)
