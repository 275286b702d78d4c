#!/usr/bin/env python3
"""
roadsim/clock.py
================
Fixed-rate simulation clock running in a background thread.

Every tick advances all vehicles by ``delta`` simulated seconds and then
notifies the registered listeners once with a snapshot of the whole
collection.  The wall-clock cadence (``update_rate_ms``) is independent
of ``delta``.

Public API
----------
* ``start()`` / ``stop()``     → STOPPED ⇄ RUNNING
* ``tick()``                   → one synchronous update pass
* ``set_delta(d)``             → change the step size, remembering the old one
* ``add_listener(fn)`` / ``remove_listener(fn)``
"""

from __future__ import annotations

import logging
import math
import threading
import time
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from roadsim import config
from roadsim.errors import InvalidParameter, InvalidState
from roadsim.vehicle import Vehicle, VehicleSnapshot

log = logging.getLogger("roadsim.clock")

TickListener = Callable[[Tuple[VehicleSnapshot, ...]], None]


class ClockState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"


def _positive_finite(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be a number, got {value!r}") from None
    if not value > 0 or math.isinf(value):
        raise InvalidParameter(f"{name} must be a positive finite number, got {value!r}")
    return value


class SimulationClock:
    """Lock-step scheduler for a vehicle collection.

    Parameters
    ----------
    vehicles : iterable of Vehicle
        The collection to advance.  It is re-read at every tick, so a
        :class:`~roadsim.fleet.Fleet` or a list may grow between ticks.
    update_rate_ms : float
        Wall-clock period between two tick starts.
    default_delta : float
        Initial value of ``delta`` (and of ``prev_delta``).
    """

    def __init__(
        self,
        vehicles: Iterable[Vehicle],
        update_rate_ms: float = config.UPDATE_RATE_MS,
        default_delta: float = config.DEFAULT_DELTA,
    ) -> None:
        self._vehicles = vehicles
        self._update_rate_ms = _positive_finite("update_rate_ms", update_rate_ms)
        self._default_delta = _positive_finite("default_delta", default_delta)

        self._delta_lock = threading.Lock()
        self._delta = self._default_delta
        self._prev_delta = self._default_delta

        # Serialises update passes: ticks never overlap.
        self._tick_lock = threading.Lock()
        self._tick_count = 0
        self._simulated_time = 0.0

        self._listeners_lock = threading.Lock()
        self._listeners: List[TickListener] = []

        self._state_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    # ── Properties ────────────────────────────────────────────────────────────

    @property
    def delta(self) -> float:
        with self._delta_lock:
            return self._delta

    @property
    def prev_delta(self) -> float:
        with self._delta_lock:
            return self._prev_delta

    @property
    def default_delta(self) -> float:
        return self._default_delta

    @property
    def update_rate_ms(self) -> float:
        return self._update_rate_ms

    @property
    def state(self) -> ClockState:
        with self._state_lock:
            return ClockState.RUNNING if self._thread is not None else ClockState.STOPPED

    @property
    def is_running(self) -> bool:
        return self.state is ClockState.RUNNING

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def simulated_time(self) -> float:
        return self._simulated_time

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Spawn the background tick thread; the first tick fires immediately."""
        with self._state_lock:
            if self._thread is not None:
                raise InvalidState("clock is already running")
            # One event per run, so a loop left over from a stop() issued
            # inside a tick can never be revived by a later start().
            stop_event = threading.Event()
            self._stop_event = stop_event
            self._thread = threading.Thread(
                target=self._loop, args=(stop_event,), daemon=True, name="SimulationClock"
            )
            self._thread.start()
        log.info(
            "SimulationClock started every %.0f ms (delta=%.3f s)",
            self._update_rate_ms, self.delta,
        )

    def stop(self) -> None:
        """Cancel all future ticks and wait for the tick thread to finish.

        A tick already in flight completes first.  Called from inside a
        tick (e.g. by a listener), the loop exits once that tick returns.
        """
        with self._state_lock:
            thread = self._thread
            if thread is None:
                raise InvalidState("clock is not running")
            self._thread = None
            self._stop_event.set()
        if thread is not threading.current_thread():
            thread.join()
        log.info("SimulationClock stopped after %d ticks", self._tick_count)

    # ── Time step ─────────────────────────────────────────────────────────────

    def set_delta(self, delta: float) -> None:
        """Set the tick size; the next tick observes it."""
        delta = _positive_finite("delta", delta)
        with self._delta_lock:
            self._prev_delta = self._delta
            self._delta = delta
            prev = self._prev_delta
        log.info("delta changed %.3f -> %.3f s", prev, delta)

    # ── Listeners ─────────────────────────────────────────────────────────────

    def add_listener(self, listener: TickListener) -> None:
        with self._listeners_lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: TickListener) -> None:
        with self._listeners_lock:
            self._listeners.remove(listener)

    def _notify(self, snapshots: Tuple[VehicleSnapshot, ...]) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshots)
            except Exception:
                log.exception("tick listener %r failed", listener)

    # ── Tick ──────────────────────────────────────────────────────────────────

    def tick(self) -> Tuple[VehicleSnapshot, ...]:
        """Advance every vehicle by one ``delta`` and notify listeners.

        All next states are computed from the state at the start of the
        tick, then committed together, so the outcome does not depend on
        the order of the collection.

        Returns
        -------
        tuple of VehicleSnapshot
            The committed state, as passed to the listeners.
        """
        with self._tick_lock:
            delta = self.delta
            vehicles = list(self._vehicles)

            next_states = [vehicle.next_state(delta) for vehicle in vehicles]
            for vehicle, (speed, position) in zip(vehicles, next_states):
                vehicle.commit(speed, position)

            self._tick_count += 1
            self._simulated_time += delta
            snapshots = tuple(vehicle.snapshot() for vehicle in vehicles)

        self._notify(snapshots)
        return snapshots

    # ── Background loop ───────────────────────────────────────────────────────

    def _loop(self, stop_event: threading.Event) -> None:
        period = self._update_rate_ms / 1000.0
        next_tick = time.monotonic()
        while not stop_event.is_set():
            try:
                self.tick()
            except Exception:
                log.exception("SimulationClock tick error")

            next_tick += period
            now = time.monotonic()
            if now > next_tick:
                # Overran: skip the missed boundaries instead of batching them.
                skipped = int((now - next_tick) // period) + 1
                next_tick += skipped * period
                log.debug("tick overran, skipped %d cadence boundaries", skipped)
            stop_event.wait(next_tick - now)
