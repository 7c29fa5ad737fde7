from __future__ import annotations
from enum import Enum
from typing import Dict, Tuple

from .errors import InvalidVehicleType


class VehicleType(str, Enum):
    EV = "ev"
    CNG = "cng"
    PETROL = "petrol"
    DIESEL = "diesel"


class RewardTier(str, Enum):
    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    PLATINUM = "Platinum"


# ------------- Ride scoring policy (explicit, easy to tune) -------------
POINTS_PER_KM = 1.0

# lower-emission vehicles earn more per km
VEHICLE_MULTIPLIERS: Dict[VehicleType, float] = {
    VehicleType.EV: 1.6,
    VehicleType.CNG: 1.3,
    VehicleType.PETROL: 1.0,
    VehicleType.DIESEL: 0.9,
}

EFFICIENCY_FULL_RATIO = 1.0       # matched or beat rated mileage
EFFICIENCY_PARTIAL_RATIO = 0.8    # partial credit starts here
EFFICIENCY_BONUS_RATE = 0.10      # flat bonus at/above full ratio
EFFICIENCY_PENALTY_RATE = 0.10    # flat penalty below partial ratio
# must satisfy SLOPE * (FULL - PARTIAL) == BONUS_RATE so the bands meet at 1.0
EFFICIENCY_PARTIAL_SLOPE = 0.5

# ------------- Monthly consistency policy -------------
CONSISTENCY_MIN_SESSIONS = 10
CONSISTENCY_MIN_RATIO = 0.9
CONSISTENCY_BONUS_POINTS = 50

# ------------- Loyalty tiers (highest threshold first) -------------
TIER_LADDER: Tuple[Tuple[RewardTier, int], ...] = (
    (RewardTier.PLATINUM, 1000),
    (RewardTier.GOLD, 500),
    (RewardTier.SILVER, 250),
    (RewardTier.BRONZE, 0),
)


def parse_vehicle_type(value) -> VehicleType:
    """Coerce a raw value (e.g. from a CSV or JSON record) to VehicleType."""
    if isinstance(value, VehicleType):
        return value
    try:
        return VehicleType(str(value).strip().lower())
    except ValueError:
        raise InvalidVehicleType(value) from None


def multiplier_for(vehicle_type) -> float:
    vt = parse_vehicle_type(vehicle_type)
    try:
        return VEHICLE_MULTIPLIERS[vt]
    except KeyError:
        raise InvalidVehicleType(vehicle_type) from None
