"""
Immutable value types passed into and out of the reward engine.
"""
from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import Any, Dict

from .reward_defs import VehicleType


@dataclass(frozen=True)
class RideFacts:
    """One completed ride plus the owning vehicle's rated efficiency.

    Mileages share a unit: km per litre for fuel vehicles, km per kWh for EVs.
    """
    distance_km: float
    vehicle_type: VehicleType
    actual_mileage: float
    expected_mileage: float


@dataclass(frozen=True)
class RewardCalculation:
    base_points: float
    multiplier: float
    efficiency_bonus: float  # signed; negative below the partial band
    total_points: int
    efficiency_ratio: float
    efficiency_band: str  # 'full' | 'partial' | 'penalty'

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MonthlyEfficiencyFacts:
    session_count: int
    avg_mileage: float
    expected_mileage: float
