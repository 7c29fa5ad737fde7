from __future__ import annotations
import hashlib
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

import pandas as pd

from src.engine.consistency import monthly_consistency_bonus
from src.engine.errors import InvalidInput
from src.engine.reward_defs import VehicleType, parse_vehicle_type
from src.serve.schemas import MonthlyReport, RewardHistoryEntry, Vehicle
from src.processing.reward_history import consistency_bonus_entry

SESSION_COLS = ["id", "vehicle_id", "user_id", "start_time", "distance_km", "reward_points"]
FUEL_COLS = ["vehicle_id", "log_date", "liters", "cost"]
CHARGE_COLS = ["vehicle_id", "log_date", "kwh", "cost"]

REPORT_COLS = list(MonthlyReport.model_fields)
_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def month_window(report_month: str) -> Tuple[pd.Timestamp, pd.Timestamp]:
    """'YYYY-MM' -> [first instant of month, first instant of next month) in UTC."""
    m = _MONTH_RE.match(str(report_month))
    if not m or not 1 <= int(m.group(2)) <= 12:
        raise InvalidInput(f"report_month must look like YYYY-MM, got {report_month!r}")
    start = pd.Timestamp(year=int(m.group(1)), month=int(m.group(2)), day=1, tz="UTC")
    end = start + pd.offsets.MonthBegin(1)
    return start, end


def _report_id(vehicle_id: str, report_month: str) -> str:
    h = hashlib.sha1(f"{vehicle_id}|{report_month}".encode("utf-8")).hexdigest()[:12]
    return f"M_{h}"


def _require(df: pd.DataFrame, cols: List[str], name: str) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"{name} missing columns: {missing}")


def _in_window(df: Optional[pd.DataFrame], vehicle_id: str, ts_col: str,
               start: pd.Timestamp, end: pd.Timestamp) -> pd.DataFrame:
    if df is None or df.empty:
        return pd.DataFrame()
    ts = pd.to_datetime(df[ts_col], utc=True)
    mask = (df["vehicle_id"].astype(str) == str(vehicle_id)) & (ts >= start) & (ts < end)
    return df[mask]


def _as_vehicle(vehicle: Union[Vehicle, Dict[str, Any]]) -> Vehicle:
    if isinstance(vehicle, Vehicle):
        return vehicle
    return Vehicle.model_validate(dict(vehicle))


def build_monthly_report(
    vehicle: Union[Vehicle, Dict[str, Any]],
    sessions: pd.DataFrame,
    report_month: str,
    fuel_logs: Optional[pd.DataFrame] = None,
    charge_logs: Optional[pd.DataFrame] = None,
    generated_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    One vehicle-month:
      - distance, session count and ride points from sessions in the window
      - litres/cost from fuel logs (fuel vehicles) or kWh/cost from charge logs (EVs)
      - avg mileage = distance / consumed when consumption was logged,
        else the vehicle's rated mileage (same estimate rides are scored with)
      - consistency bonus on top of ride points
    """
    v = _as_vehicle(vehicle)
    vtype = parse_vehicle_type(v.type)
    start, end = month_window(report_month)

    _require(sessions, SESSION_COLS, "sessions")
    if fuel_logs is not None and not fuel_logs.empty:
        _require(fuel_logs, FUEL_COLS, "fuel_logs")
    if charge_logs is not None and not charge_logs.empty:
        _require(charge_logs, CHARGE_COLS, "charge_logs")

    s = _in_window(sessions, v.id, "start_time", start, end)
    n_sessions = int(len(s))
    distance = float(s["distance_km"].clip(lower=0).sum()) if n_sessions else 0.0
    ride_points = int(s["reward_points"].fillna(0).sum()) if n_sessions else 0

    fuel_l = fuel_cost = ev_kwh = ev_cost = 0.0
    if vtype == VehicleType.EV:
        c = _in_window(charge_logs, v.id, "log_date", start, end)
        if not c.empty:
            ev_kwh = float(c["kwh"].sum())
            ev_cost = float(c["cost"].sum())
        consumed = ev_kwh
    else:
        f = _in_window(fuel_logs, v.id, "log_date", start, end)
        if not f.empty:
            fuel_l = float(f["liters"].sum())
            fuel_cost = float(f["cost"].sum())
        consumed = fuel_l

    if consumed > 0 and distance > 0:
        avg_mileage = distance / consumed
    elif n_sessions:
        avg_mileage = float(v.expected_mileage)
    else:
        avg_mileage = 0.0

    bonus = monthly_consistency_bonus(
        session_count=n_sessions,
        avg_mileage=avg_mileage,
        expected_mileage=float(v.expected_mileage),
    )

    report = {
        "id": _report_id(v.id, report_month),
        "user_id": v.user_id,
        "vehicle_id": v.id,
        "report_month": report_month,
        "total_distance_km": float(round(distance, 2)),
        "total_fuel_liters": float(round(fuel_l, 2)),
        "total_fuel_cost": float(round(fuel_cost, 2)),
        "total_ev_kwh": float(round(ev_kwh, 2)),
        "total_ev_cost": float(round(ev_cost, 2)),
        "avg_mileage": float(round(avg_mileage, 2)),
        "total_reward_points": ride_points + bonus,
        "session_count": n_sessions,
        "consistency_bonus": bonus,
        "generated_at": generated_at or datetime.now(timezone.utc),
    }
    MonthlyReport.model_validate(report)
    return report


def build_monthly_reports(
    vehicles: pd.DataFrame,
    sessions: pd.DataFrame,
    report_month: str,
    fuel_logs: Optional[pd.DataFrame] = None,
    charge_logs: Optional[pd.DataFrame] = None,
) -> pd.DataFrame:
    """One report row per vehicle that had at least one session in the month."""
    start, end = month_window(report_month)
    _require(sessions, SESSION_COLS, "sessions")
    ts = pd.to_datetime(sessions["start_time"], utc=True)
    active_ids = set(sessions.loc[(ts >= start) & (ts < end), "vehicle_id"].astype(str))

    rows = []
    clean = vehicles.astype(object).where(vehicles.notna(), None)
    for rec in clean.to_dict(orient="records"):
        if str(rec["id"]) not in active_ids:
            continue
        rows.append(build_monthly_report(
            rec, sessions, report_month, fuel_logs=fuel_logs, charge_logs=charge_logs,
        ))
    return pd.DataFrame(rows, columns=REPORT_COLS)


def bonus_entries(reports: pd.DataFrame) -> List[RewardHistoryEntry]:
    """History entries for months that earned a consistency bonus."""
    if reports.empty:
        return []
    out = []
    for r in reports[reports["consistency_bonus"] > 0].to_dict(orient="records"):
        out.append(consistency_bonus_entry(
            user_id=r["user_id"],
            vehicle_id=r["vehicle_id"],
            monthly_report_id=r["id"],
            report_month=r["report_month"],
            points=r["consistency_bonus"],
            created_at=r.get("generated_at"),
        ))
    return out
