# src/serve/score_batch.py
from __future__ import annotations
import argparse
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from src.engine.rewards import calculate_reward_points
from src.processing.monthly_reports import build_monthly_reports, bonus_entries
from src.processing.reward_history import history_frame, ride_reward_entry
from src.processing.ride_facts import estimate_actual_mileage

SESSION_REQ_COLS = ["id", "vehicle_id", "user_id", "start_time", "distance_km"]
VEHICLE_REQ_COLS = ["id", "user_id", "type", "expected_mileage"]
# monthly reports validate full vehicle profiles
REPORT_VEHICLE_REQ_COLS = VEHICLE_REQ_COLS + ["name", "model", "odometer_start", "current_odometer"]

SCORED_COLS = [
    "id", "vehicle_id", "user_id", "start_time", "end_time", "distance_km", "vehicle_type",
    "actual_mileage", "expected_mileage", "base_points", "multiplier", "efficiency_bonus",
    "total_points", "efficiency_ratio", "efficiency_band", "reward_points",
]
SUMMARY_COLS = ["vehicle_id", "n_sessions", "distance_km", "points", "efficiency_ratio_avg"]


def _check_cols(df: pd.DataFrame, cols, name: str) -> None:
    for c in cols:
        if c not in df.columns:
            raise SystemExit(f"Missing column in {name}: {c}")


def score_sessions_df(sessions: pd.DataFrame, vehicles: pd.DataFrame) -> pd.DataFrame:
    """
    Score every session against its vehicle profile.
    An optional 'consumed' column (litres/kWh logged for that ride) replaces the
    estimated consumption.
    """
    veh = vehicles.set_index(vehicles["id"].astype(str))
    outs = []
    for _, r in sessions.iterrows():
        vid = str(r["vehicle_id"])
        if vid not in veh.index:
            raise SystemExit(f"Session {r['id']} references unknown vehicle {vid}")
        v = veh.loc[vid]
        dist = float(r["distance_km"])
        consumed = r.get("consumed")
        consumed = float(consumed) if consumed is not None and pd.notna(consumed) else None
        actual = estimate_actual_mileage(dist, float(v["expected_mileage"]), consumed)
        calc = calculate_reward_points(
            distance_km=dist,
            vehicle_type=v["type"],
            actual_mileage=actual,
            expected_mileage=float(v["expected_mileage"]),
        )
        outs.append({
            "id": r["id"],
            "vehicle_id": vid,
            "user_id": r["user_id"],
            "start_time": r["start_time"],
            "end_time": r.get("end_time"),
            "distance_km": dist,
            "vehicle_type": str(v["type"]),
            "actual_mileage": actual,
            "expected_mileage": float(v["expected_mileage"]),
            **calc.as_dict(),
            "reward_points": calc.total_points,
        })
    # keep the columns even for a month without rides
    return pd.DataFrame(outs, columns=SCORED_COLS)


def _awarded_at(r: dict):
    # end of ride, else its start; keeps batch history reproducible
    for col in ("end_time", "start_time"):
        val = r.get(col)
        if val is not None and pd.notna(val):
            return pd.to_datetime(val, utc=True).to_pydatetime()
    return None


def ride_history_df(scored: pd.DataFrame) -> pd.DataFrame:
    entries = [
        ride_reward_entry(
            user_id=str(r["user_id"]),
            vehicle_id=str(r["vehicle_id"]),
            session_id=str(r["id"]),
            points=int(r["reward_points"]),
            distance_km=float(r["distance_km"]),
            created_at=_awarded_at(r),
        )
        for r in scored.to_dict(orient="records")
    ]
    return history_frame(entries)


def vehicle_summary(scored: pd.DataFrame) -> pd.DataFrame:
    rows = []
    for vid, g in scored.groupby("vehicle_id"):
        w = g["distance_km"].clip(lower=1e-6)
        rows.append({
            "vehicle_id": vid,
            "n_sessions": len(g),
            "distance_km": float(g["distance_km"].sum()),
            "points": int(g["reward_points"].sum()),
            "efficiency_ratio_avg": float(np.average(g["efficiency_ratio"], weights=w)),
        })
    return pd.DataFrame(rows, columns=SUMMARY_COLS)


def _read_optional(path: str) -> Optional[pd.DataFrame]:
    return pd.read_csv(path) if path else None


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--sessions", required=True, help="CSV of completed sessions")
    ap.add_argument("--vehicles", required=True, help="CSV of vehicle profiles")
    ap.add_argument("--out", required=True, help="CSV to write scored sessions")
    ap.add_argument("--history_out", default="", help="Optional reward-history csv")
    ap.add_argument("--summary_out", default="", help="Optional per-vehicle summary csv")
    ap.add_argument("--fuel", default="", help="Optional fuel log csv (for monthly reports)")
    ap.add_argument("--charges", default="", help="Optional EV charge log csv")
    ap.add_argument("--month", default="", help="YYYY-MM; enables monthly reports")
    ap.add_argument("--report_out", default="", help="CSV for monthly reports")
    args = ap.parse_args()

    sessions = pd.read_csv(args.sessions)
    vehicles = pd.read_csv(args.vehicles)
    _check_cols(sessions, SESSION_REQ_COLS, "sessions")
    _check_cols(vehicles, REPORT_VEHICLE_REQ_COLS if args.month else VEHICLE_REQ_COLS, "vehicles")
    if args.month and not args.report_out:
        raise SystemExit("--month requires --report_out")

    scored = score_sessions_df(sessions, vehicles)
    Path(args.out).parent.mkdir(parents=True, exist_ok=True)
    scored.to_csv(args.out, index=False)
    print(f"[score_batch] wrote {args.out} rows={len(scored)}")

    history = ride_history_df(scored)

    if args.month:
        reports = build_monthly_reports(
            vehicles, scored, args.month,
            fuel_logs=_read_optional(args.fuel),
            charge_logs=_read_optional(args.charges),
        )
        Path(args.report_out).parent.mkdir(parents=True, exist_ok=True)
        reports.to_csv(args.report_out, index=False)
        print(f"[score_batch] wrote {args.report_out} rows={len(reports)}")
        history = pd.concat([history, history_frame(bonus_entries(reports))], ignore_index=True)

    if args.history_out:
        Path(args.history_out).parent.mkdir(parents=True, exist_ok=True)
        history.to_csv(args.history_out, index=False)
        print(f"[score_batch] wrote {args.history_out} rows={len(history)}")

    if args.summary_out:
        summ = vehicle_summary(scored)
        Path(args.summary_out).parent.mkdir(parents=True, exist_ok=True)
        summ.to_csv(args.summary_out, index=False)
        print(f"[score_batch] wrote {args.summary_out} rows={len(summ)}")


if __name__ == "__main__":
    main()
