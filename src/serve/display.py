# src/serve/display.py
from __future__ import annotations
from typing import Dict, Tuple

from src.engine.reward_defs import RewardTier, VehicleType, parse_vehicle_type
from src.engine.tiers import classify_tier

# Presentation only; nothing here feeds back into scoring.
FALLBACK_COLOR = "#6b7280"
FALLBACK_GRADIENT = ("#6b7280", "#4b5563")

VEHICLE_COLORS: Dict[VehicleType, str] = {
    VehicleType.EV: "#22c55e",
    VehicleType.CNG: "#84cc16",
    VehicleType.PETROL: "#fbbf24",
    VehicleType.DIESEL: "#92400e",
}

VEHICLE_GRADIENTS: Dict[VehicleType, Tuple[str, str]] = {
    VehicleType.EV: ("#22c55e", "#15803d"),
    VehicleType.CNG: ("#84cc16", "#65a30d"),
    VehicleType.PETROL: ("#fbbf24", "#f59e0b"),
    VehicleType.DIESEL: ("#92400e", "#7c2d12"),
}

VEHICLE_LABELS: Dict[VehicleType, str] = {
    VehicleType.EV: "Electric",
    VehicleType.CNG: "CNG",
    VehicleType.PETROL: "Petrol",
    VehicleType.DIESEL: "Diesel",
}

TIER_COLORS: Dict[RewardTier, str] = {
    RewardTier.PLATINUM: "#e5e7eb",
    RewardTier.GOLD: "#fbbf24",
    RewardTier.SILVER: "#d1d5db",
    RewardTier.BRONZE: "#d97706",
}

# consumption units shown next to mileage figures
MILEAGE_UNITS: Dict[VehicleType, str] = {
    VehicleType.EV: "km/kWh",
    VehicleType.CNG: "km/kg",
    VehicleType.PETROL: "km/L",
    VehicleType.DIESEL: "km/L",
}


def _lookup(table: Dict, vehicle_type, default):
    try:
        return table[parse_vehicle_type(vehicle_type)]
    except ValueError:
        # unknown types still render, just neutrally
        return default


def vehicle_color(vehicle_type) -> str:
    return _lookup(VEHICLE_COLORS, vehicle_type, FALLBACK_COLOR)


def vehicle_gradient(vehicle_type) -> Tuple[str, str]:
    return _lookup(VEHICLE_GRADIENTS, vehicle_type, FALLBACK_GRADIENT)


def vehicle_label(vehicle_type) -> str:
    return _lookup(VEHICLE_LABELS, vehicle_type, "Unknown")


def mileage_unit(vehicle_type) -> str:
    return _lookup(MILEAGE_UNITS, vehicle_type, "km/unit")


def tier_display(tier: RewardTier) -> str:
    return TIER_COLORS[RewardTier(tier)]


def reward_tier(points: int) -> Dict[str, str]:
    """Tier name plus its accent colour, the shape the profile screen consumes."""
    tier = classify_tier(points)
    return {"tier": tier.value, "color": tier_display(tier)}
