"""Centralized constants for the mneme scheduler.

All magic numbers and scheduling defaults live here so every layer
imports from a single source of truth.
"""

from decimal import Decimal

# ---------- Ease factor ----------
MIN_EASE_FACTOR = Decimal("1.30")
MAX_EASE_FACTOR = Decimal("3.00")
EASE_STEP = Decimal("0.15")

# ---------- Intervals ----------
DEFAULT_INTERVAL_DAYS = 1
MAXIMUM_INTERVAL_DAYS = 36500

# ---------- Learning steps ----------
MAX_LEARNING_STEP_MINUTES = 1440
MAX_LEARNING_STEPS = 10

# ---------- Time ----------
SECONDS_PER_MINUTE = 60

# ---------- Storage ----------
PROGRESS_KEY_SEPARATOR = ":"
DEFAULT_SETTINGS_KEY = "default"
