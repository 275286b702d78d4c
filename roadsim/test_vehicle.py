#!/usr/bin/env python3
"""
Unit tests for the vehicle state model and the front-vehicle link.
"""

from __future__ import annotations

import gc
import math
import unittest

from roadsim.errors import InvalidParameter
from roadsim.vehicle import Vehicle


class VehicleStateTests(unittest.TestCase):
    def test_position(self) -> None:
        vehicle = Vehicle(1.6, 145.2)
        vehicle.set_position(10.5)
        self.assertEqual(vehicle.position, 10.5)

    def test_negative_position_is_not_clamped(self) -> None:
        vehicle = Vehicle(1.6, 145.2)
        vehicle.position = -3000.25
        self.assertEqual(vehicle.position, -3000.25)

    def test_speed(self) -> None:
        vehicle = Vehicle(1.6, 145.2)
        vehicle.set_speed(63.5)
        self.assertEqual(vehicle.speed, 63.5)

    def test_length_and_max_speed(self) -> None:
        vehicle = Vehicle(1.6, 145.2)
        self.assertEqual(vehicle.length, 1.6)
        self.assertEqual(vehicle.max_speed, 145.2)

    def test_length_and_max_speed_are_read_only(self) -> None:
        vehicle = Vehicle(1.6, 145.2)
        with self.assertRaises(AttributeError):
            vehicle.length = 3.0
        with self.assertRaises(AttributeError):
            vehicle.max_speed = 10.0

    def test_speed_should_not_exceed_max_speed(self) -> None:
        vehicle = Vehicle(1.6, 145.2)
        vehicle.set_speed(250)
        self.assertEqual(vehicle.speed, 145.2)

    def test_negative_speed_should_not_exceed_max_speed(self) -> None:
        vehicle = Vehicle(1.6, 145.2)
        vehicle.set_speed(-250)
        self.assertEqual(vehicle.speed, -145.2)

    def test_speed_property_setter_clamps(self) -> None:
        vehicle = Vehicle(1.6, 145.2)
        vehicle.speed = 1000.0
        self.assertEqual(vehicle.speed, 145.2)

    def test_initial_speed_is_clamped(self) -> None:
        vehicle = Vehicle(4.0, 20.0, speed=35.0)
        self.assertEqual(vehicle.speed, 20.0)

    def test_set_speed_is_idempotent(self) -> None:
        for s in (250.0, -250.0, 63.5, 0.0, 145.2):
            once = Vehicle(1.6, 145.2)
            once.set_speed(s)
            twice = Vehicle(1.6, 145.2)
            twice.set_speed(s)
            twice.set_speed(s)
            self.assertEqual(once.speed, twice.speed, msg=f"s={s}")

    def test_invalid_construction(self) -> None:
        for length, max_speed in (
            (0.0, 10.0),
            (-1.0, 10.0),
            (4.0, 0.0),
            (4.0, -5.0),
            (math.nan, 10.0),
            (4.0, math.inf),
            ("long", 10.0),
        ):
            with self.assertRaises(InvalidParameter, msg=f"{length!r}, {max_speed!r}"):
                Vehicle(length, max_speed)

    def test_invalid_parameter_is_a_value_error(self) -> None:
        with self.assertRaises(ValueError):
            Vehicle(0.0, 10.0)

    def test_generated_ids_are_unique(self) -> None:
        ids = {Vehicle(4.0, 30.0).id for _ in range(5)}
        self.assertEqual(len(ids), 5)
        self.assertEqual(Vehicle(4.0, 30.0, vehicle_id="CAR_A").id, "CAR_A")

    def test_from_profile(self) -> None:
        vehicle = Vehicle.from_profile("regular.xml", position=12.0)
        self.assertEqual(vehicle.length, 4.5)
        self.assertEqual(vehicle.max_speed, 50.0)
        self.assertEqual(vehicle.position, 12.0)
        self.assertIsNone(vehicle.controller)


class FollowingLinkTests(unittest.TestCase):
    def test_front_vehicle(self) -> None:
        vehicle = Vehicle(1.6, 145.2)
        vehicle2 = Vehicle(1.6, 145.2)

        vehicle.set_front_vehicle(vehicle2)
        self.assertIs(vehicle.front_vehicle, vehicle2)
        self.assertIsNone(vehicle2.front_vehicle)

    def test_front_distance(self) -> None:
        vehicle = Vehicle(1.6, 145.2)
        vehicle.set_position(50)
        vehicle2 = Vehicle(1.7, 145.2)
        vehicle2.set_position(120)
        vehicle.set_front_vehicle(vehicle2)
        self.assertAlmostEqual(vehicle.front_distance(), 68.35, places=9)

    def test_front_distance_should_be_infinite_if_there_isnt_front_vehicle(self) -> None:
        vehicle = Vehicle(1.6, 145.2)
        self.assertEqual(vehicle.front_distance(), math.inf)

    def test_front_distance_may_be_negative(self) -> None:
        follower = Vehicle(4.0, 30.0, position=10.0)
        leader = Vehicle(4.0, 30.0, position=12.0)
        follower.set_front_vehicle(leader)
        self.assertAlmostEqual(follower.front_distance(), -2.0)

    def test_clearing_the_link(self) -> None:
        follower = Vehicle(4.0, 30.0)
        leader = Vehicle(4.0, 30.0, position=50.0)
        follower.front_vehicle = leader
        follower.set_front_vehicle(None)
        self.assertIsNone(follower.front_vehicle)
        self.assertEqual(follower.front_distance(), math.inf)

    def test_link_does_not_modify_leader(self) -> None:
        follower = Vehicle(4.0, 30.0)
        leader = Vehicle(4.0, 30.0, position=50.0, speed=12.0)
        other = Vehicle(4.0, 30.0, position=90.0)
        leader.set_front_vehicle(other)

        follower.set_front_vehicle(leader)
        self.assertIs(leader.front_vehicle, other)
        self.assertEqual(leader.position, 50.0)
        self.assertEqual(leader.speed, 12.0)

    def test_vehicle_cannot_follow_itself(self) -> None:
        vehicle = Vehicle(4.0, 30.0)
        with self.assertRaises(InvalidParameter):
            vehicle.set_front_vehicle(vehicle)
        self.assertIsNone(vehicle.front_vehicle)

    def test_link_does_not_keep_leader_alive(self) -> None:
        follower = Vehicle(4.0, 30.0)
        leader = Vehicle(4.0, 30.0, position=50.0)
        follower.set_front_vehicle(leader)
        del leader
        gc.collect()
        self.assertIsNone(follower.front_vehicle)
        self.assertEqual(follower.front_distance(), math.inf)


class VehicleStepTests(unittest.TestCase):
    def test_update_without_controller_coasts(self) -> None:
        vehicle = Vehicle(4.0, 30.0, position=5.0, speed=10.0)
        vehicle.update(0.5)
        self.assertAlmostEqual(vehicle.position, 10.0)
        self.assertEqual(vehicle.speed, 10.0)

    def test_next_state_does_not_commit(self) -> None:
        vehicle = Vehicle(4.0, 30.0, position=5.0, speed=10.0)
        speed, position = vehicle.next_state(1.0)
        self.assertEqual((speed, position), (10.0, 15.0))
        self.assertEqual(vehicle.position, 5.0)

    def test_commit_clamps_speed(self) -> None:
        vehicle = Vehicle(4.0, 30.0)
        vehicle.commit(99.0, 7.0)
        self.assertEqual(vehicle.speed, 30.0)
        self.assertEqual(vehicle.position, 7.0)

    def test_snapshot(self) -> None:
        follower = Vehicle(4.0, 30.0, vehicle_id="F", position=0.0, speed=3.0)
        leader = Vehicle(4.0, 30.0, vehicle_id="L", position=24.0)
        follower.set_front_vehicle(leader)

        snap = follower.snapshot()
        self.assertEqual(snap.id, "F")
        self.assertEqual(snap.front_id, "L")
        self.assertAlmostEqual(snap.front_distance, 20.0)
        self.assertEqual(snap.as_dict()["speed"], 3.0)
        self.assertIsNone(leader.snapshot().front_id)
        with self.assertRaises(AttributeError):
            snap.position = 1.0


if __name__ == "__main__":
    unittest.main()
