import pandas as pd
import pytest
from src.engine.errors import InvalidInput
from src.processing.monthly_reports import (
    bonus_entries, build_monthly_report, build_monthly_reports, month_window,
)
from src.serve.schemas import MonthlyReport

def _vehicle(vid="V_001", vtype="petrol", expected=15.0):
    return {"id": vid, "user_id": "U_001", "name": vid, "type": vtype, "model": "m",
            "odometer_start": 0.0, "current_odometer": 0.0, "expected_mileage": expected}

def _sessions(vid="V_001", n=10, km=30.0, points=33, day0=1, month="2025-09"):
    return pd.DataFrame({
        "id": [f"S_{vid}_{i}" for i in range(n)],
        "vehicle_id": [vid] * n,
        "user_id": ["U_001"] * n,
        "start_time": [f"{month}-{day0 + i:02d}T08:00:00Z" for i in range(n)],
        "distance_km": [km] * n,
        "reward_points": [points] * n,
    })

def _fuel(vid="V_001", liters=(10.0, 10.0), month="2025-09"):
    return pd.DataFrame({
        "vehicle_id": [vid] * len(liters),
        "log_date": [f"{month}-{5 + i:02d}T09:00:00Z" for i in range(len(liters))],
        "liters": list(liters),
        "cost": [x * 100.0 for x in liters],
    })

def test_month_window():
    s, e = month_window("2025-09")
    assert s == pd.Timestamp("2025-09-01", tz="UTC")
    assert e == pd.Timestamp("2025-10-01", tz="UTC")
    s, e = month_window("2025-12")
    assert e == pd.Timestamp("2026-01-01", tz="UTC")
    for bad in ("2025-13", "2025-9", "Sept 2025"):
        with pytest.raises(InvalidInput):
            month_window(bad)

def test_consistent_month_earns_bonus():
    # 10 rides x 30 km on 20 L -> 15 km/L == rated
    r = build_monthly_report(_vehicle(), _sessions(), "2025-09", fuel_logs=_fuel())
    MonthlyReport.model_validate(r)
    assert r["session_count"] == 10
    assert r["total_distance_km"] == pytest.approx(300.0)
    assert r["total_fuel_liters"] == pytest.approx(20.0)
    assert r["total_fuel_cost"] == pytest.approx(2000.0)
    assert r["avg_mileage"] == pytest.approx(15.0)
    assert r["consistency_bonus"] == 50
    assert r["total_reward_points"] == 330 + 50

def test_nine_rides_no_bonus():
    r = build_monthly_report(_vehicle(), _sessions(n=9), "2025-09", fuel_logs=_fuel())
    assert r["consistency_bonus"] == 0
    assert r["total_reward_points"] == 9 * 33

def test_poor_efficiency_no_bonus():
    # 300 km on 25 L -> 12 km/L, ratio 0.8
    r = build_monthly_report(_vehicle(), _sessions(), "2025-09", fuel_logs=_fuel(liters=(12.5, 12.5)))
    assert r["avg_mileage"] == pytest.approx(12.0)
    assert r["consistency_bonus"] == 0

def test_only_sessions_inside_month_count():
    s = pd.concat([_sessions(), _sessions(n=3, month="2025-10")], ignore_index=True)
    s["id"] = [f"S_{i}" for i in range(len(s))]
    r = build_monthly_report(_vehicle(), s, "2025-09", fuel_logs=_fuel())
    assert r["session_count"] == 10
    r_oct = build_monthly_report(_vehicle(), s, "2025-10", fuel_logs=_fuel())
    assert r_oct["session_count"] == 3
    assert r_oct["total_fuel_liters"] == 0.0
    # no logged fuel -> rated mileage estimate
    assert r_oct["avg_mileage"] == pytest.approx(15.0)

def test_ev_uses_charge_logs():
    charges = pd.DataFrame({
        "vehicle_id": ["V_EV"] * 2,
        "log_date": ["2025-09-03T20:00:00Z", "2025-09-20T20:00:00Z"],
        "kwh": [30.0, 25.0],
        "cost": [240.0, 200.0],
    })
    r = build_monthly_report(_vehicle("V_EV", "ev", 6.0), _sessions("V_EV", n=11, km=30.0),
                             "2025-09", charge_logs=charges)
    assert r["total_ev_kwh"] == pytest.approx(55.0)
    assert r["total_ev_cost"] == pytest.approx(440.0)
    assert r["total_fuel_liters"] == 0.0
    assert r["avg_mileage"] == pytest.approx(6.0)
    assert r["consistency_bonus"] == 50

def test_build_reports_one_row_per_active_vehicle_and_bonus_entries():
    vehicles = pd.DataFrame([_vehicle("V_001"), _vehicle("V_002"), _vehicle("V_IDLE")])
    sessions = pd.concat([_sessions("V_001"), _sessions("V_002", n=4)], ignore_index=True)
    fuel = pd.concat([_fuel("V_001"), _fuel("V_002", liters=(8.0,))], ignore_index=True)
    reports = build_monthly_reports(vehicles, sessions, "2025-09", fuel_logs=fuel)
    assert sorted(reports["vehicle_id"]) == ["V_001", "V_002"]

    entries = bonus_entries(reports)
    assert len(entries) == 1
    assert entries[0].vehicle_id == "V_001"
    assert entries[0].points == 50
    assert entries[0].monthly_report_id == reports.loc[reports["vehicle_id"] == "V_001", "id"].iloc[0]

def test_missing_session_columns():
    with pytest.raises(ValueError):
        build_monthly_report(_vehicle(), _sessions().drop(columns=["reward_points"]), "2025-09")

def test_month_without_sessions_keeps_report_columns():
    reports = build_monthly_reports(pd.DataFrame([_vehicle()]), _sessions(n=0), "2025-09")
    assert reports.empty
    assert list(reports.columns) == list(MonthlyReport.model_fields)
    assert bonus_entries(reports) == []
