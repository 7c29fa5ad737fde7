# src/engine/consistency.py
from __future__ import annotations
import math

from .errors import InvalidInput
from .models import MonthlyEfficiencyFacts
from .reward_defs import (
    CONSISTENCY_MIN_SESSIONS, CONSISTENCY_MIN_RATIO, CONSISTENCY_BONUS_POINTS,
)


def evaluate_month(facts: MonthlyEfficiencyFacts) -> int:
    """Flat monthly bonus: enough rides AND average mileage near the rated figure.

    Step function on purpose; ride-level scoring is the continuous incentive.
    """
    if isinstance(facts.session_count, bool) or int(facts.session_count) != facts.session_count:
        raise InvalidInput(f"session_count must be an integer, got {facts.session_count!r}")
    sessions = int(facts.session_count)
    avg = float(facts.avg_mileage)
    expected = float(facts.expected_mileage)
    if sessions < 0:
        raise InvalidInput(f"session_count must be >= 0, got {sessions}")
    if not math.isfinite(expected) or expected <= 0:
        raise InvalidInput(f"expected_mileage must be > 0, got {facts.expected_mileage!r}")
    if not math.isfinite(avg) or avg < 0:
        raise InvalidInput(f"avg_mileage must be >= 0, got {facts.avg_mileage!r}")

    if sessions < CONSISTENCY_MIN_SESSIONS:
        return 0
    if avg / expected >= CONSISTENCY_MIN_RATIO:
        return CONSISTENCY_BONUS_POINTS
    return 0


def monthly_consistency_bonus(*, session_count: int, avg_mileage: float, expected_mileage: float) -> int:
    return evaluate_month(MonthlyEfficiencyFacts(
        session_count=session_count,
        avg_mileage=avg_mileage,
        expected_mileage=expected_mileage,
    ))
