# tests/test_tiers.py
import pytest
from src.engine.errors import InvalidInput
from src.engine.reward_defs import RewardTier
from src.engine.tiers import classify_tier, tier_progress
from src.serve.display import (
    reward_tier, tier_display, vehicle_color, vehicle_gradient, vehicle_label, mileage_unit,
)

@pytest.mark.parametrize("points,tier", [
    (0, RewardTier.BRONZE),
    (249, RewardTier.BRONZE),
    (250, RewardTier.SILVER),
    (499, RewardTier.SILVER),
    (500, RewardTier.GOLD),
    (999, RewardTier.GOLD),
    (1000, RewardTier.PLATINUM),
    (25_000, RewardTier.PLATINUM),
])
def test_inclusive_lower_boundaries(points, tier):
    assert classify_tier(points) is tier

def test_negative_points_rejected():
    with pytest.raises(InvalidInput):
        classify_tier(-1)

def test_progress_to_next_tier():
    p = tier_progress(240)
    assert p["tier"] == "Bronze"
    assert p["next_tier"] == "Silver"
    assert p["next_threshold"] == 250
    assert p["points_to_next"] == 10

    top = tier_progress(1500)
    assert top["tier"] == "Platinum"
    assert top["next_tier"] is None and top["points_to_next"] is None

def test_tier_colours_are_presentation_only():
    assert reward_tier(1000) == {"tier": "Platinum", "color": "#e5e7eb"}
    assert reward_tier(10) == {"tier": "Bronze", "color": "#d97706"}
    assert tier_display(RewardTier.GOLD) == "#fbbf24"

def test_vehicle_display_helpers():
    assert vehicle_label("ev") == "Electric"
    assert vehicle_color("cng") == "#84cc16"
    assert vehicle_gradient("diesel") == ("#92400e", "#7c2d12")
    assert mileage_unit("ev") == "km/kWh"
    # unknown types render neutrally instead of failing
    assert vehicle_label("hydrogen") == "Unknown"
    assert vehicle_color("hydrogen") == "#6b7280"
