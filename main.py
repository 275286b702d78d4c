#!/usr/bin/env python3
"""
main.py
=======
Headless runner: builds a scenario, runs the clock for a fixed wall-clock
duration and optionally writes the recorded trajectories to CSV.

Environment overrides
---------------------
ROADSIM_SCENARIO     HIGHWAY | CITY | TRAFFIC_JAM
ROADSIM_PROFILE      vehicle profile (e.g. ``truck.xml``)
ROADSIM_AUTONOMOUS   number of AUTONOMOUS vehicles
ROADSIM_HUMAN        number of HUMAN vehicles
ROADSIM_DURATION_S   wall-clock run time in seconds
ROADSIM_DELTA        simulated seconds per tick
ROADSIM_LOG_LEVEL    DEBUG | INFO | WARNING ...
ROADSIM_CSV          output path for the trajectory CSV
ROADSIM_RECORD_TICKS keep only the last N ticks in the trajectory recorder
"""

import logging
import os
import time

from roadsim import config
from roadsim.controller import VehicleControllerType
from roadsim.logging_setup import setup_logging
from roadsim.observers import LogObserver, TrajectoryRecorder
from roadsim.scenario import ScenarioType, Simulation


def main():
    level = getattr(logging, os.environ.get("ROADSIM_LOG_LEVEL", "INFO").upper(), logging.INFO)
    setup_logging(level)
    log = logging.getLogger("main")

    scenario = ScenarioType.from_name(os.environ.get("ROADSIM_SCENARIO", config.DEFAULT_SCENARIO))
    controllers = {
        VehicleControllerType.AUTONOMOUS: int(
            os.environ.get("ROADSIM_AUTONOMOUS", config.DEFAULT_AUTONOMOUS_COUNT)
        ),
        VehicleControllerType.HUMAN: int(
            os.environ.get("ROADSIM_HUMAN", config.DEFAULT_HUMAN_COUNT)
        ),
    }
    duration = float(os.environ.get("ROADSIM_DURATION_S", config.DEFAULT_RUN_DURATION_S))
    csv_path = os.environ.get("ROADSIM_CSV")

    sim = Simulation(scenario, controllers, profile=os.environ.get("ROADSIM_PROFILE"))
    if "ROADSIM_DELTA" in os.environ:
        sim.set_delta(float(os.environ["ROADSIM_DELTA"]))

    record_ticks = os.environ.get("ROADSIM_RECORD_TICKS")
    recorder = TrajectoryRecorder(int(record_ticks) if record_ticks else None)
    sim.add_observer(LogObserver())
    sim.add_observer(recorder)

    log.info("Starting %s scenario for %.1f s...", scenario.label, duration)
    sim.start()
    try:
        time.sleep(duration)
    except KeyboardInterrupt:
        log.info("Interrupted")
    finally:
        sim.stop()

    for s in sim.latest():
        log.info(
            "%s pos=%.1f m speed=%.1f m/s gap=%.1f m",
            s.id, s.position, s.speed, s.front_distance,
        )
    log.info(
        "Simulated %.1f s in %d ticks", sim.clock.simulated_time, sim.clock.tick_count
    )

    if csv_path:
        recorder.write_csv(csv_path)
        log.info("Trajectories written to %s", csv_path)


if __name__ == "__main__":
    main()
