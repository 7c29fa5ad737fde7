from __future__ import annotations
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from src.engine.reward_defs import VehicleType


# --------- Vehicle profile (store contract) ---------
class Vehicle(BaseModel):
    id: str
    user_id: str
    name: str
    type: VehicleType
    model: str
    reg_no: Optional[str] = None
    odometer_start: float = Field(..., ge=0)
    current_odometer: float = Field(..., ge=0)
    tank_capacity: Optional[float] = Field(None, gt=0, description="Litres")
    battery_capacity_kwh: Optional[float] = Field(None, gt=0)
    expected_mileage: float = Field(..., gt=0, description="Rated km/L or km/kWh")
    active: bool = True
    created_at: Optional[datetime] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": "V_001",
                "user_id": "U_001",
                "name": "Daily commuter",
                "type": "ev",
                "model": "Nexon EV",
                "reg_no": "KA01AB1234",
                "odometer_start": 1200.0,
                "current_odometer": 1540.5,
                "battery_capacity_kwh": 30.2,
                "expected_mileage": 6.0,
                "active": True,
            }
        }
    }


# --------- Ride session (store contract) ---------
class Session(BaseModel):
    id: str
    vehicle_id: str
    user_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    start_odometer: float = Field(..., ge=0)
    end_odometer: Optional[float] = Field(None, ge=0)
    distance_km: float = Field(0.0, ge=0)
    avg_speed_kmph: Optional[float] = Field(None, ge=0)
    route_polyline: Optional[str] = None
    reward_points: int = Field(0, ge=0)
    created_at: Optional[datetime] = None


# --------- Refuel / recharge logs ---------
class FuelLog(BaseModel):
    id: str
    vehicle_id: str
    user_id: str
    log_date: datetime
    fuel_type: Literal["petrol", "diesel", "cng"]
    liters: float = Field(..., gt=0)
    cost: float = Field(..., ge=0)
    odometer_reading: float = Field(..., ge=0)
    station: Optional[str] = None
    receipt_image_url: Optional[str] = None


class EVChargeLog(BaseModel):
    id: str
    vehicle_id: str
    user_id: str
    log_date: datetime
    kwh: float = Field(..., gt=0)
    cost: float = Field(..., ge=0)
    odometer_reading: float = Field(..., ge=0)
    percent_before: Optional[float] = Field(None, ge=0, le=100)
    percent_after: Optional[float] = Field(None, ge=0, le=100)


# --------- Aggregates ---------
class MonthlyReport(BaseModel):
    id: str
    user_id: str
    vehicle_id: str
    report_month: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    total_distance_km: float = Field(..., ge=0)
    total_fuel_liters: float = Field(0.0, ge=0)
    total_fuel_cost: float = Field(0.0, ge=0)
    total_ev_kwh: float = Field(0.0, ge=0)
    total_ev_cost: float = Field(0.0, ge=0)
    avg_mileage: float = Field(..., ge=0)
    total_reward_points: int = Field(..., ge=0)
    session_count: int = Field(..., ge=0)
    consistency_bonus: int = Field(0, ge=0)
    generated_at: Optional[datetime] = None


class RewardHistoryEntry(BaseModel):
    id: str
    user_id: str
    vehicle_id: str
    session_id: Optional[str] = None
    monthly_report_id: Optional[str] = None
    points: int
    reason: str
    created_at: Optional[datetime] = None


# --------- API contracts ---------
class RideScoreIn(BaseModel):
    distance_km: float = Field(..., description="Ride length")
    vehicle_type: str
    actual_mileage: float
    expected_mileage: float


class RewardCalculationOut(BaseModel):
    base_points: float
    multiplier: float
    efficiency_bonus: float
    total_points: int
    efficiency_ratio: float
    efficiency_band: Literal["full", "partial", "penalty"]


class SessionScoreIn(BaseModel):
    session: Session
    vehicle: Vehicle
    consumed: Optional[float] = Field(
        None, description="Logged litres/kWh for the ride; estimated when absent"
    )


class SessionScoreOut(BaseModel):
    reward: RewardCalculationOut
    history_entry: RewardHistoryEntry


class MonthScoreIn(BaseModel):
    session_count: int
    avg_mileage: float
    expected_mileage: float


class MonthScoreOut(BaseModel):
    bonus_points: int


class TierOut(BaseModel):
    points: int
    tier: str
    color: str
    next_tier: Optional[str] = None
    next_threshold: Optional[int] = None
    points_to_next: Optional[int] = None


class HistoryTotalOut(BaseModel):
    total_points: int
    tier: str
    entries: List[RewardHistoryEntry] = []
