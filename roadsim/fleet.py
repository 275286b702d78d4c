#!/usr/bin/env python3
"""
roadsim/fleet.py
================
Owning collection of the vehicles in one simulation session.

Vehicles are stored in insertion order and addressed by their integer
index.  The front-vehicle chain can be wired by index with
:meth:`Fleet.link`, and checked for cycles with :meth:`Fleet.find_cycle`
before a run starts.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Set

from roadsim.errors import InvalidParameter, InvalidState
from roadsim.vehicle import Vehicle, VehicleSnapshot

log = logging.getLogger(__name__)


class Fleet:
    """Arena of :class:`~roadsim.vehicle.Vehicle` objects.

    The fleet holds the only strong references to its vehicles; the
    front-vehicle links between them are weak.
    """

    def __init__(self, vehicles: Iterable[Vehicle] = ()) -> None:
        self._vehicles: List[Vehicle] = []
        self._index_by_id: Dict[int, int] = {}
        self._ids: Set[str] = set()
        for vehicle in vehicles:
            self.add(vehicle)

    # ── collection protocol ───────────────────────────────────────────────
    def __len__(self) -> int:
        return len(self._vehicles)

    def __iter__(self) -> Iterator[Vehicle]:
        return iter(list(self._vehicles))

    def __getitem__(self, index: int) -> Vehicle:
        return self._vehicles[index]

    def add(self, vehicle: Vehicle) -> int:
        """Append *vehicle* and return its index.

        Raises InvalidParameter if *vehicle*, or another vehicle with the
        same id, is already in the fleet.
        """
        if id(vehicle) in self._index_by_id:
            raise InvalidParameter(f"{vehicle.id} is already in the fleet")
        if vehicle.id in self._ids:
            raise InvalidParameter(f"another vehicle already uses id {vehicle.id!r}")
        index = len(self._vehicles)
        self._vehicles.append(vehicle)
        self._index_by_id[id(vehicle)] = index
        self._ids.add(vehicle.id)
        return index

    def index_of(self, vehicle: Vehicle) -> int:
        try:
            return self._index_by_id[id(vehicle)]
        except KeyError:
            raise InvalidParameter(f"{vehicle.id} is not in the fleet") from None

    def _checked(self, index: int) -> Vehicle:
        if not 0 <= index < len(self._vehicles):
            raise InvalidParameter(f"vehicle index {index} out of range (0..{len(self) - 1})")
        return self._vehicles[index]

    # ── front-vehicle chain ───────────────────────────────────────────────
    def link(self, follower: int, leader: int) -> None:
        """Make vehicle *leader* the front vehicle of vehicle *follower*."""
        if follower == leader:
            raise InvalidParameter(f"vehicle {follower} cannot follow itself")
        self._checked(follower).set_front_vehicle(self._checked(leader))
        log.debug("link %s -> %s", self._vehicles[follower].id, self._vehicles[leader].id)

    def unlink(self, follower: int) -> None:
        self._checked(follower).set_front_vehicle(None)

    def front_index(self, index: int) -> Optional[int]:
        """Index of the front vehicle of vehicle *index*, or None."""
        leader = self._checked(index).front_vehicle
        if leader is None:
            return None
        return self._index_by_id.get(id(leader))

    def find_cycle(self) -> List[int]:
        """Indices forming a front-vehicle cycle, or ``[]`` if the chain is acyclic."""
        done: set = set()
        for start in range(len(self._vehicles)):
            path: List[int] = []
            on_path: Dict[int, int] = {}
            node: Optional[int] = start
            while node is not None and node not in done:
                if node in on_path:
                    return path[on_path[node]:]
                on_path[node] = len(path)
                path.append(node)
                node = self.front_index(node)
            done.update(path)
        return []

    def validate(self) -> None:
        """Raise :class:`InvalidState` if the front-vehicle chain has a cycle."""
        cycle = self.find_cycle()
        if cycle:
            ids = " -> ".join(self._vehicles[i].id for i in cycle)
            raise InvalidState(f"front-vehicle cycle: {ids}")

    # ── views ─────────────────────────────────────────────────────────────
    def snapshots(self) -> List[VehicleSnapshot]:
        return [vehicle.snapshot() for vehicle in self._vehicles]
