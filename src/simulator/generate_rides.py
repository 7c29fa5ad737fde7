from __future__ import annotations
import argparse
import random
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Tuple

import pandas as pd
from pydantic import BaseModel, ValidationError

from src.engine.reward_defs import VehicleType
from src.serve.schemas import EVChargeLog, FuelLog, Session, Vehicle


# ---------- Personas (tunable) ----------
# efficiency: range of actual/expected mileage per ride
PERSONAS = {
    "eco": {
        "efficiency": (0.95, 1.15),
        "ride_km": (4, 25),
        "rides_per_month": (12, 22),
    },
    "average": {
        "efficiency": (0.82, 1.02),
        "ride_km": (5, 40),
        "rides_per_month": (8, 16),
    },
    "heavy_foot": {
        "efficiency": (0.65, 0.88),
        "ride_km": (10, 60),
        "rides_per_month": (6, 14),
    },
}

# rated mileage (km per litre / kg / kWh) and price per unit
VEHICLE_PROFILES = {
    VehicleType.EV: {"model": "Nexon EV", "expected_mileage": 6.0, "unit_cost": 8.0},
    VehicleType.CNG: {"model": "WagonR CNG", "expected_mileage": 25.0, "unit_cost": 76.0},
    VehicleType.PETROL: {"model": "Swift", "expected_mileage": 15.0, "unit_cost": 104.0},
    VehicleType.DIESEL: {"model": "Nexon Diesel", "expected_mileage": 18.0, "unit_cost": 91.0},
}

REFUEL_EVERY = 4  # rides between logged refuels / recharges


def _validated(model: type[BaseModel], row: Dict) -> Dict:
    # catch generator bugs early
    try:
        model.model_validate(row)
    except ValidationError as e:
        raise RuntimeError(f"Bad {model.__name__}: {e}") from e
    return row


def _iso(ts: datetime) -> str:
    return ts.isoformat().replace("+00:00", "Z")


def _gen_vehicle_month(
    user_id: str,
    vehicle_id: str,
    vtype: VehicleType,
    persona: Dict,
    month_start: datetime,
) -> Tuple[Dict, List[Dict], List[Dict]]:
    prof = VEHICLE_PROFILES[vtype]
    expected = prof["expected_mileage"]
    odo_start = float(random.randint(500, 40_000))
    odo = odo_start

    sessions: List[Dict] = []
    logs: List[Dict] = []
    pending = 0.0  # consumption since last logged refuel
    n_rides = random.randint(*persona["rides_per_month"])
    ts = month_start + timedelta(hours=random.randint(6, 20))

    def _log_refuel(log_ts: datetime, qty: float) -> None:
        base = {
            "id": f"L_{vehicle_id}_{len(logs) + 1:03d}",
            "vehicle_id": vehicle_id,
            "user_id": user_id,
            "log_date": _iso(log_ts),
            "cost": round(qty * prof["unit_cost"], 2),
            "odometer_reading": round(odo, 1),
        }
        if vtype == VehicleType.EV:
            before = random.randint(10, 40)
            logs.append(_validated(EVChargeLog, {
                **base, "kwh": qty,
                "percent_before": before,
                "percent_after": min(100, before + random.randint(30, 60)),
            }))
        else:
            logs.append(_validated(FuelLog, {**base, "fuel_type": vtype.value, "liters": qty}))

    last_end = ts
    for i in range(n_rides):
        if ts.month != month_start.month:
            break
        dist = round(random.uniform(*persona["ride_km"]), 1)
        eff = random.uniform(*persona["efficiency"])
        consumed = dist / (expected * eff)
        duration = timedelta(minutes=max(5, int(dist / random.uniform(18, 45) * 60)))
        sessions.append(_validated(Session, {
            "id": f"S_{vehicle_id}_{i + 1:03d}",
            "vehicle_id": vehicle_id,
            "user_id": user_id,
            "start_time": _iso(ts),
            "end_time": _iso(ts + duration),
            "start_odometer": round(odo, 1),
            "end_odometer": round(odo + dist, 1),
            "distance_km": dist,
            "avg_speed_kmph": round(dist / (duration.total_seconds() / 3600.0), 1),
            "reward_points": 0,
            "consumed": round(consumed, 3),
        }))
        odo += dist
        pending += consumed
        last_end = ts + duration

        if (i + 1) % REFUEL_EVERY == 0:
            _log_refuel(last_end + timedelta(minutes=random.randint(5, 90)), round(pending, 2))
            pending = 0.0

        # next ride later the same day or a day or two on
        ts = ts + timedelta(hours=random.randint(10, 40))

    if pending > 0:
        # top-up at the end of the last ride
        _log_refuel(last_end, round(pending, 2))

    vehicle = _validated(Vehicle, {
        "id": vehicle_id,
        "user_id": user_id,
        "name": f"{user_id} {vtype.value}",
        "type": vtype.value,
        "model": prof["model"],
        "reg_no": f"KA{random.randint(1, 60):02d}{random.randint(1000, 9999)}",
        "odometer_start": odo_start,
        "current_odometer": round(odo, 1),
        "expected_mileage": expected,
        "active": True,
    })
    return vehicle, sessions, logs


def generate_csvs(
    out_dir: Path,
    users: int,
    month: str,
    seed: int,
) -> Dict[str, int]:
    """Write vehicles/sessions/fuel_logs/charge_logs CSVs for one month."""
    random.seed(seed)
    out_dir.mkdir(parents=True, exist_ok=True)
    month_start = datetime.strptime(month, "%Y-%m").replace(tzinfo=timezone.utc)
    personas = list(PERSONAS.keys())
    vtypes = list(VEHICLE_PROFILES.keys())

    vehicles, sessions, fuel, charges = [], [], [], []
    for u in range(users):
        user_id = f"U_{u + 1:03d}"
        persona = PERSONAS[personas[u % len(personas)]]
        vtype = vtypes[u % len(vtypes)]
        v, s, logs = _gen_vehicle_month(user_id, f"V_{u + 1:03d}", vtype, persona, month_start)
        vehicles.append(v)
        sessions.extend(s)
        (charges if vtype == VehicleType.EV else fuel).extend(logs)

    counts = {}
    for name, model, rows in (("vehicles", Vehicle, vehicles), ("sessions", Session, sessions),
                              ("fuel_logs", FuelLog, fuel), ("charge_logs", EVChargeLog, charges)):
        # keep a header even when empty so readers see the columns
        df = pd.DataFrame(rows) if rows else pd.DataFrame(columns=list(model.model_fields))
        df.to_csv(out_dir / f"{name}.csv", index=False)
        counts[name] = len(rows)
    return counts


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--users", type=int, default=8)
    parser.add_argument("--month", type=str, default="2025-09")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--out", type=str, default="data/demo")
    args = parser.parse_args()

    out = Path(args.out)
    counts = generate_csvs(out, args.users, args.month, args.seed)
    print(f"[simulator] wrote {out} " + " ".join(f"{k}={v}" for k, v in counts.items()))


if __name__ == "__main__":
    main()
