#!/usr/bin/env python3
"""
Tests for XML profile loading.
"""

from __future__ import annotations

import os
import tempfile
import unittest

from roadsim import profile as profile_mod
from roadsim.errors import InvalidParameter, ProfileError
from roadsim.profile import DriverParameters, load_profile, resolve_profile_path


class DriverParametersTests(unittest.TestCase):
    def test_defaults(self) -> None:
        params = DriverParameters()
        self.assertEqual(params.desired_speed, 33.3)
        self.assertEqual(params.time_headway, 1.5)
        self.assertEqual(params.min_gap, 2.0)
        self.assertEqual(params.acceleration_exponent, 4.0)

    def test_frozen(self) -> None:
        with self.assertRaises(AttributeError):
            DriverParameters().desired_speed = 10.0

    def test_validation(self) -> None:
        DriverParameters(min_gap=0.0)
        for kwargs in (
            {"desired_speed": 0.0},
            {"time_headway": -1.0},
            {"min_gap": -0.5},
            {"max_acceleration": float("nan")},
            {"reaction_time": float("inf")},
            {"comfortable_deceleration": "1.5"},
        ):
            with self.assertRaises(InvalidParameter, msg=repr(kwargs)):
                DriverParameters(**kwargs)


class LoadProfileTests(unittest.TestCase):
    def setUp(self) -> None:
        profile_mod.clear_cache()
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.addCleanup(profile_mod.clear_cache)

    def _write(self, name: str, content: str) -> str:
        path = os.path.join(self._tmp.name, name)
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(content)
        return path

    def test_bundled_profiles(self) -> None:
        regular = load_profile("regular.xml")
        self.assertEqual(regular.name, "regular")
        self.assertEqual(regular.length, 4.5)
        self.assertEqual(regular.max_speed, 50.0)
        self.assertEqual(regular.driver, DriverParameters())

        truck = load_profile("truck")
        self.assertEqual(truck.length, 12.0)
        self.assertEqual(truck.driver.reaction_time, 1.2)

        sport = load_profile("sport.xml")
        self.assertEqual(sport.driver.time_headway, 1.0)

    def test_profiles_are_cached(self) -> None:
        self.assertIs(load_profile("regular.xml"), load_profile("regular"))
        first = load_profile("regular.xml")
        profile_mod.clear_cache("regular.xml")
        self.assertIsNot(load_profile("regular.xml"), first)

    def test_resolve_bundled_name(self) -> None:
        path = resolve_profile_path("regular")
        self.assertEqual(path, os.path.join(profile_mod.PROFILE_DIR, "regular.xml"))

    def test_missing_profile(self) -> None:
        with self.assertRaises(ProfileError):
            load_profile("no_such_vehicle.xml")

    def test_file_path_and_optional_driver(self) -> None:
        path = self._write("bus.xml", '<profile><vehicle length="12" maxSpeed="25"/></profile>')
        bus = load_profile(path)
        self.assertEqual(bus.name, "bus")
        self.assertEqual(bus.length, 12.0)
        self.assertEqual(bus.driver, DriverParameters())

    def test_partial_driver_section(self) -> None:
        path = self._write(
            "slow.xml",
            '<profile name="slow"><vehicle length="4" maxSpeed="30"/>'
            '<driver desiredSpeed="15" reactionTime="2.0"/></profile>',
        )
        slow = load_profile(path)
        self.assertEqual(slow.driver.desired_speed, 15.0)
        self.assertEqual(slow.driver.reaction_time, 2.0)
        self.assertEqual(slow.driver.time_headway, DriverParameters().time_headway)

    def test_malformed_xml(self) -> None:
        path = self._write("broken.xml", "<profile><vehicle length='4'")
        with self.assertRaises(ProfileError):
            load_profile(path)

    def test_missing_vehicle_element(self) -> None:
        path = self._write("empty.xml", "<profile/>")
        with self.assertRaises(ProfileError):
            load_profile(path)

    def test_missing_attribute(self) -> None:
        path = self._write("short.xml", '<profile><vehicle length="4"/></profile>')
        with self.assertRaisesRegex(ProfileError, "maxSpeed"):
            load_profile(path)

    def test_non_numeric_attribute(self) -> None:
        path = self._write("bad.xml", '<profile><vehicle length="long" maxSpeed="30"/></profile>')
        with self.assertRaisesRegex(ProfileError, "length"):
            load_profile(path)

    def test_invalid_driver_value(self) -> None:
        path = self._write(
            "reckless.xml",
            '<profile><vehicle length="4" maxSpeed="30"/><driver timeHeadway="0"/></profile>',
        )
        with self.assertRaises(ProfileError):
            load_profile(path)

    def test_profile_error_is_an_invalid_parameter(self) -> None:
        with self.assertRaises(InvalidParameter):
            load_profile("no_such_vehicle.xml")


if __name__ == "__main__":
    unittest.main()
