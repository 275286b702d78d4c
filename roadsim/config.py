#!/usr/bin/env python3
"""
roadsim/config.py
=================
Application-wide configuration constants.

Values can be overridden via environment variables (see :mod:`main`).
This module is a thin, import-safe leaf: it never imports from
other project modules.
"""

# ── Simulation clock ─────────────────────────────────────────────────────────
UPDATE_RATE_MS: int = 40
DEFAULT_DELTA: float = 0.3

# ── Scenario defaults ────────────────────────────────────────────────────────
DEFAULT_SCENARIO: str = "HIGHWAY"
DEFAULT_PROFILE: str = "regular.xml"
DEFAULT_AUTONOMOUS_COUNT: int = 4
DEFAULT_HUMAN_COUNT: int = 2
DEFAULT_RUN_DURATION_S: float = 10.0

# ── Display scale (px / m) ───────────────────────────────────────────────────
DEFAULT_SCALE: float = 2.0

# ── Logging ──────────────────────────────────────────────────────────────────
LOG_FILE: str = "roadsim.log"
TICK_LOG_FILE: str = "roadsim_tick.log"
TICK_LOGGER_NAME: str = "roadsim.tick"
