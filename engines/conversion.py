"""
Service ROI Calculator — Conversion Engine
Maps human response time (minutes) to expected lead conversion %.
Faster replies convert better; past one hour the lead is effectively cold.
"""
import math

from engines.errors import InvalidInputError

# (inclusive upper bound in minutes, conversion %) — scanned in order
CONVERSION_STEPS = [
    (1, 40),
    (2, 30),
    (3, 25),
    (4, 22),
    (5, 20),
    (10, 18),
    (20, 15),
    (30, 10),
    (40, 8),
    (60, 1),
]
TAIL_RATE = 1


def estimate_conversion_rate(minutes):
    """Conversion % for a given response time. First bound with minutes <= bound wins."""
    try:
        m = float(minutes)
    except (TypeError, ValueError):
        raise InvalidInputError('responseTime', f"response time must be numeric, got {minutes!r}")
    if not math.isfinite(m) or m < 0:
        raise InvalidInputError('responseTime', f"response time must be a finite value >= 0, got {minutes!r}")
    for bound, rate in CONVERSION_STEPS:
        if m <= bound:
            return rate
    return TAIL_RATE


def conversion_table():
    rows = []
    lower = 0
    for bound, rate in CONVERSION_STEPS:
        rows.append({'fromMinutes': lower, 'toMinutes': bound, 'conversionRate': rate})
        lower = bound
    rows.append({'fromMinutes': lower, 'toMinutes': None, 'conversionRate': TAIL_RATE})
    return rows
