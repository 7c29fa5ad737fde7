# src/engine/tiers.py
from __future__ import annotations
from typing import Any, Dict, Optional

from .errors import InvalidInput
from .reward_defs import RewardTier, TIER_LADDER


def _check_points(points) -> int:
    if isinstance(points, bool) or int(points) != points:
        raise InvalidInput(f"points must be an integer, got {points!r}")
    pts = int(points)
    if pts < 0:
        raise InvalidInput(f"points must be >= 0, got {pts}")
    return pts


def classify_tier(points: int) -> RewardTier:
    """Inclusive-lower thresholds, scanned from the top tier down."""
    pts = _check_points(points)
    for tier, threshold in TIER_LADDER:
        if pts >= threshold:
            return tier
    return TIER_LADDER[-1][0]


def tier_progress(points: int) -> Dict[str, Any]:
    """Current tier, the next one up, and how many points are still needed."""
    pts = _check_points(points)
    current = classify_tier(pts)
    next_tier: Optional[RewardTier] = None
    next_threshold: Optional[int] = None
    # ladder is descending; the next tier is the lowest threshold above pts
    for tier, threshold in TIER_LADDER:
        if threshold > pts:
            next_tier, next_threshold = tier, threshold

    return {
        "points": pts,
        "tier": current.value,
        "next_tier": next_tier.value if next_tier else None,
        "next_threshold": next_threshold,
        "points_to_next": (next_threshold - pts) if next_threshold is not None else None,
    }
