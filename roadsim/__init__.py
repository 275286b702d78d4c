"""
roadsim: one-dimensional car-following simulation
=================================================

Modules
-------
vehicle
    :class:`Vehicle` kinematic state and front-vehicle link.
fleet
    :class:`Fleet` owning collection with index-based chain wiring.
controller
    :class:`VehicleController` car-following laws (IDM, Gipps).
clock
    :class:`SimulationClock` fixed-rate background tick loop.
profile
    XML vehicle / driver profiles.
scenario
    :class:`ScenarioType`, :func:`generate_traffic` and :class:`Simulation`.
observers
    :class:`LogObserver` and :class:`TrajectoryRecorder`.
units
    Speed and pixel conversion helpers.
"""

from .errors import InvalidParameter, InvalidState, ProfileError, RoadSimError
from .vehicle import Vehicle, VehicleSnapshot
from .fleet import Fleet
from .profile import DriverParameters, VehicleProfile, load_profile
from .controller import VehicleController, VehicleControllerType
from .clock import ClockState, SimulationClock
from .scenario import ScenarioType, Simulation, generate_traffic
from .observers import LogObserver, TrajectoryRecorder
from .units import kph_to_mps, meters_to_pixels, mps_to_kph, pixels_to_meters

__all__ = [
    "RoadSimError",
    "InvalidParameter",
    "InvalidState",
    "ProfileError",
    "Vehicle",
    "VehicleSnapshot",
    "Fleet",
    "DriverParameters",
    "VehicleProfile",
    "load_profile",
    "VehicleController",
    "VehicleControllerType",
    "ClockState",
    "SimulationClock",
    "ScenarioType",
    "Simulation",
    "generate_traffic",
    "LogObserver",
    "TrajectoryRecorder",
    "mps_to_kph",
    "kph_to_mps",
    "meters_to_pixels",
    "pixels_to_meters",
]
