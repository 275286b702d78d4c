#!/usr/bin/env python3
"""
roadsim/profile.py
==================
Vehicle and driver profiles loaded from XML resources.

A profile describes one kind of vehicle (its physical length and top
speed) together with the driver parameters its car-following law uses.
Bundled profiles live in ``roadsim/profiles/``::

    <profile name="regular">
        <vehicle length="4.5" maxSpeed="50.0"/>
        <driver desiredSpeed="33.3" timeHeadway="1.5" minGap="2.0"
                maxAcceleration="1.0" comfortableDeceleration="1.5"
                reactionTime="1.0" accelerationExponent="4.0"/>
    </profile>

The ``driver`` element and each of its attributes are optional; missing
values fall back to :class:`DriverParameters` defaults.
"""

from __future__ import annotations

import logging
import math
import os
import threading
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field, fields
from typing import Dict, Optional

from roadsim.errors import InvalidParameter, ProfileError

log = logging.getLogger(__name__)

PROFILE_DIR: str = os.path.join(os.path.dirname(os.path.abspath(__file__)), "profiles")

# XML attribute name → DriverParameters field
_DRIVER_ATTRS: Dict[str, str] = {
    "desiredSpeed": "desired_speed",
    "timeHeadway": "time_headway",
    "minGap": "min_gap",
    "maxAcceleration": "max_acceleration",
    "comfortableDeceleration": "comfortable_deceleration",
    "reactionTime": "reaction_time",
    "accelerationExponent": "acceleration_exponent",
}

_cache: Dict[str, "VehicleProfile"] = {}
_cache_lock = threading.Lock()


@dataclass(frozen=True)
class DriverParameters:
    """Immutable bag of car-following parameters.

    Shared by every vehicle driven by the same controller.
    """

    desired_speed: float = 33.3
    """Speed the driver seeks on a free road (m/s)."""

    time_headway: float = 1.5
    """Desired time gap to the front vehicle (s)."""

    min_gap: float = 2.0
    """Bumper-to-bumper gap kept at standstill (m)."""

    max_acceleration: float = 1.0
    """Maximum acceleration (m/s²)."""

    comfortable_deceleration: float = 1.5
    """Comfortable braking rate, positive (m/s²)."""

    reaction_time: float = 1.0
    """Driver reaction time (s), used by the human-like law."""

    acceleration_exponent: float = 4.0
    """Free-road acceleration exponent of the IDM."""

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidParameter(f"{f.name} must be a finite number, got {value!r}")
            if f.name == "min_gap":
                if value < 0:
                    raise InvalidParameter(f"min_gap must be >= 0, got {value!r}")
            elif value <= 0:
                raise InvalidParameter(f"{f.name} must be > 0, got {value!r}")


@dataclass(frozen=True)
class VehicleProfile:
    """A named vehicle type: physical data plus its driver parameters."""

    name: str
    length: float
    max_speed: float
    driver: DriverParameters = field(default_factory=DriverParameters)


def resolve_profile_path(name: str) -> str:
    """Map a profile name to a file path.

    Bare names (``"regular.xml"`` or ``"regular"``) resolve against
    :data:`PROFILE_DIR`; anything else is treated as a filesystem path.
    """
    candidate = name if name.endswith(".xml") else f"{name}.xml"
    bundled = os.path.join(PROFILE_DIR, candidate)
    if os.path.basename(candidate) == candidate and os.path.isfile(bundled):
        return bundled
    return os.path.abspath(name)


def _parse_float(element: ET.Element, attr: str, source: str) -> float:
    raw = element.get(attr)
    if raw is None:
        raise ProfileError(f"{source}: <{element.tag}> is missing '{attr}'")
    try:
        return float(raw)
    except ValueError:
        raise ProfileError(f"{source}: '{attr}' is not a number: {raw!r}") from None


def _parse_profile(path: str) -> VehicleProfile:
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as exc:
        raise ProfileError(f"{path}: malformed XML ({exc})") from exc

    vehicle = root.find("vehicle")
    if vehicle is None:
        raise ProfileError(f"{path}: missing <vehicle> element")
    length = _parse_float(vehicle, "length", path)
    max_speed = _parse_float(vehicle, "maxSpeed", path)

    driver_kwargs: Dict[str, float] = {}
    driver = root.find("driver")
    if driver is not None:
        for attr, field_name in _DRIVER_ATTRS.items():
            if driver.get(attr) is not None:
                driver_kwargs[field_name] = _parse_float(driver, attr, path)
    try:
        params = DriverParameters(**driver_kwargs)
    except InvalidParameter as exc:
        raise ProfileError(f"{path}: {exc}") from exc

    name = root.get("name") or os.path.splitext(os.path.basename(path))[0]
    return VehicleProfile(name=name, length=length, max_speed=max_speed, driver=params)


def load_profile(name: str) -> VehicleProfile:
    """Load (and cache) the profile identified by *name*.

    Raises
    ------
    ProfileError
        If the file does not exist or cannot be parsed.
    """
    path = resolve_profile_path(name)
    with _cache_lock:
        cached = _cache.get(path)
    if cached is not None:
        return cached

    if not os.path.isfile(path):
        raise ProfileError(f"profile not found: {name!r} (looked in {path})")

    profile = _parse_profile(path)
    log.info("Loaded profile %s from %s", profile.name, path)
    with _cache_lock:
        _cache[path] = profile
    return profile


def clear_cache(name: Optional[str] = None) -> None:
    """Forget cached profiles (all of them, or only *name*)."""
    with _cache_lock:
        if name is None:
            _cache.clear()
        else:
            _cache.pop(resolve_profile_path(name), None)
