#!/usr/bin/env python
import sys, pathlib
import pandas as pd
ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from src.simulator.generate_rides import generate_csvs
from src.serve.score_batch import score_sessions_df, ride_history_df
from src.processing.monthly_reports import build_monthly_reports, bonus_entries
from src.processing.reward_history import history_frame, total_points, user_tier

def main(users=8, month="2025-09", seed=42):
    out = pathlib.Path("data/demo")
    generate_csvs(out, users=users, month=month, seed=seed)
    vehicles = pd.read_csv(out / "vehicles.csv")
    sessions = pd.read_csv(out / "sessions.csv")

    scored = score_sessions_df(sessions, vehicles)
    reports = build_monthly_reports(
        vehicles, scored, month,
        fuel_logs=pd.read_csv(out / "fuel_logs.csv"),
        charge_logs=pd.read_csv(out / "charge_logs.csv"),
    )
    history = pd.concat([ride_history_df(scored), history_frame(bonus_entries(reports))],
                        ignore_index=True)

    scored.to_csv(out / "scored_sessions.csv", index=False)
    reports.to_csv(out / "monthly_reports.csv", index=False)
    history.to_csv(out / "reward_history.csv", index=False)

    for uid, g in history.groupby("user_id"):
        print(f"{uid}: points={total_points(g)} tier={user_tier(g).value}")
    print(f"wrote {out} sessions={len(scored)} reports={len(reports)} history={len(history)}")

if __name__ == "__main__":
    main()
