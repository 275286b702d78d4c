#!/usr/bin/env python3
"""
roadsim/observers.py
====================
Tick observers.

Both observers are callables taking the tick snapshot and an optional
display scale, so they can be registered either on a
:class:`~roadsim.clock.SimulationClock` (``add_listener``) or on a
:class:`~roadsim.scenario.Simulation` (``add_observer``).

* :class:`LogObserver` dumps every vehicle to the ``roadsim.tick`` logger.
* :class:`TrajectoryRecorder` keeps every row in memory for analysis
  (pandas / numpy) or CSV export.
"""

from __future__ import annotations

import csv
import logging
import math
import os
import threading
from collections import deque
from typing import Deque, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from roadsim import config
from roadsim.errors import InvalidParameter
from roadsim.units import meters_to_pixels, mps_to_kph
from roadsim.vehicle import VehicleSnapshot

COLUMNS: Tuple[str, ...] = ("tick", "vehicle_id", "position", "speed", "front_distance")

_Row = Tuple[int, str, float, float, float]


class LogObserver:
    """Log one DEBUG line per vehicle per tick."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.log = logger or logging.getLogger(config.TICK_LOGGER_NAME)
        self._tick = 0

    def __call__(self, snapshots: Sequence[VehicleSnapshot], scale: Optional[float] = None) -> None:
        self._tick += 1
        if not self.log.isEnabledFor(logging.DEBUG):
            return
        for s in snapshots:
            px = f" px={meters_to_pixels(scale, s.position)}" if scale else ""
            self.log.debug(
                "tick=%d id=%s pos=%.2f m%s speed=%.1f km/h gap=%s",
                self._tick,
                s.id,
                s.position,
                px,
                mps_to_kph(s.speed),
                "inf" if math.isinf(s.front_distance) else f"{s.front_distance:.2f}",
            )


class TrajectoryRecorder:
    """Accumulates ``(tick, vehicle_id, position, speed, front_distance)`` rows.

    Ticks are numbered from 1 in the order the recorder receives them.

    Parameters
    ----------
    max_ticks : int or None
        Keep only the rows of the most recent *max_ticks* ticks.  ``None``
        keeps everything, which suits fixed-length runs such as ``main.py``.
    """

    def __init__(self, max_ticks: Optional[int] = None) -> None:
        if max_ticks is not None and (
            isinstance(max_ticks, bool) or not isinstance(max_ticks, int) or max_ticks <= 0
        ):
            raise InvalidParameter(f"max_ticks must be a positive int or None, got {max_ticks!r}")
        self._lock = threading.Lock()
        # One list of rows per tick; the deque drops the oldest tick first.
        self._frames: Deque[List[_Row]] = deque(maxlen=max_ticks)
        self._ticks = 0

    @property
    def max_ticks(self) -> Optional[int]:
        return self._frames.maxlen

    def __call__(self, snapshots: Sequence[VehicleSnapshot], scale: Optional[float] = None) -> None:
        with self._lock:
            self._ticks += 1
            self._frames.append(
                [(self._ticks, s.id, s.position, s.speed, s.front_distance) for s in snapshots]
            )

    def __len__(self) -> int:
        with self._lock:
            return sum(len(frame) for frame in self._frames)

    @property
    def ticks(self) -> int:
        """Ticks received so far, including any no longer retained."""
        with self._lock:
            return self._ticks

    def rows(self) -> List[_Row]:
        with self._lock:
            return [row for frame in self._frames for row in frame]

    def to_frame(self) -> pd.DataFrame:
        """All recorded rows as a DataFrame with :data:`COLUMNS`."""
        return pd.DataFrame(self.rows(), columns=list(COLUMNS))

    def front_distances(self, vehicle_id: str) -> np.ndarray:
        """Gap of *vehicle_id* to its leader at every recorded tick."""
        return np.array(
            [row[4] for row in self.rows() if row[1] == vehicle_id], dtype=float
        )

    def speeds(self, vehicle_id: str) -> np.ndarray:
        return np.array(
            [row[3] for row in self.rows() if row[1] == vehicle_id], dtype=float
        )

    def write_csv(self, file_path: str) -> None:
        """Write every recorded row to *file_path* (CSV with a header)."""
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(file_path, mode="w", newline="") as fh:
            writer = csv.writer(fh)
            writer.writerow(COLUMNS)
            writer.writerows(self.rows())
