# src/engine/rewards.py
from __future__ import annotations
import math

from .errors import InvalidInput
from .models import RewardCalculation, RideFacts
from .reward_defs import (
    POINTS_PER_KM,
    EFFICIENCY_FULL_RATIO, EFFICIENCY_PARTIAL_RATIO,
    EFFICIENCY_BONUS_RATE, EFFICIENCY_PENALTY_RATE, EFFICIENCY_PARTIAL_SLOPE,
    multiplier_for, parse_vehicle_type,
)


def round_half_up(x: float) -> int:
    """Round to nearest integer, ties away from zero (40.5 -> 41, -0.5 -> -1)."""
    if x < 0:
        return -int(math.floor(-x + 0.5))
    return int(math.floor(x + 0.5))


def efficiency_bonus(points_after_multiplier: float, ratio: float) -> tuple[float, str]:
    """Piecewise efficiency adjustment -> (bonus, band)."""
    if ratio >= EFFICIENCY_FULL_RATIO:
        return points_after_multiplier * EFFICIENCY_BONUS_RATE, "full"
    if ratio >= EFFICIENCY_PARTIAL_RATIO:
        # linear from 0 at the partial ratio up to the full bonus at 1.0
        return (
            points_after_multiplier * (ratio - EFFICIENCY_PARTIAL_RATIO) * EFFICIENCY_PARTIAL_SLOPE,
            "partial",
        )
    return -points_after_multiplier * EFFICIENCY_PENALTY_RATE, "penalty"


def score_ride(facts: RideFacts) -> RewardCalculation:
    """
    Ride award:
      1) base = distance_km * POINTS_PER_KM
      2) multiplier from the vehicle-type table
      3) pam = base * multiplier
      4) efficiency bonus/penalty from actual/expected mileage
      5) round half up, 6) floor at zero

    Pure and deterministic; the intermediate figures are returned so the
    award can be audited later.
    """
    distance = float(facts.distance_km)
    actual = float(facts.actual_mileage)
    expected = float(facts.expected_mileage)
    if not math.isfinite(distance) or distance < 0:
        raise InvalidInput(f"distance_km must be >= 0, got {facts.distance_km!r}")
    if not math.isfinite(expected) or expected <= 0:
        raise InvalidInput(f"expected_mileage must be > 0, got {facts.expected_mileage!r}")
    if not math.isfinite(actual) or actual <= 0:
        raise InvalidInput(f"actual_mileage must be > 0, got {facts.actual_mileage!r}")

    # 1-3) Distance-driven base, scaled by vehicle type
    base_points = distance * POINTS_PER_KM
    multiplier = multiplier_for(facts.vehicle_type)
    pam = base_points * multiplier

    # 4) Efficiency relative to rated mileage
    ratio = actual / expected
    bonus, band = efficiency_bonus(pam, ratio)

    # 5-6) Round, then clamp so a ride never costs points
    total = max(0, round_half_up(pam + bonus))

    return RewardCalculation(
        base_points=base_points,
        multiplier=multiplier,
        efficiency_bonus=bonus,
        total_points=total,
        efficiency_ratio=ratio,
        efficiency_band=band,
    )


def calculate_reward_points(
    *,
    distance_km: float,
    vehicle_type,
    actual_mileage: float,
    expected_mileage: float,
) -> RewardCalculation:
    """Keyword entry point taking a raw vehicle type (e.g. 'ev')."""
    return score_ride(RideFacts(
        distance_km=distance_km,
        vehicle_type=parse_vehicle_type(vehicle_type),
        actual_mileage=actual_mileage,
        expected_mileage=expected_mileage,
    ))
