from pathlib import Path
import pandas as pd
from src.serve.schemas import Session, Vehicle
from src.simulator.generate_rides import generate_csvs

def test_simulator_golden(tmp_path: Path):
    counts = generate_csvs(tmp_path, users=4, month="2025-09", seed=123)
    for name in ("vehicles", "sessions", "fuel_logs", "charge_logs"):
        assert (tmp_path / f"{name}.csv").exists()
    assert counts["vehicles"] == 4
    assert counts["sessions"] > 0

    vehicles = pd.read_csv(tmp_path / "vehicles.csv")
    sessions = pd.read_csv(tmp_path / "sessions.csv")
    assert set(vehicles["type"]) == {"ev", "cng", "petrol", "diesel"}
    assert sessions["id"].is_unique
    ts = pd.to_datetime(sessions["start_time"], utc=True)
    assert (ts.dt.strftime("%Y-%m") == "2025-09").all()
    assert (sessions["end_odometer"] >= sessions["start_odometer"]).all()

    for row in vehicles.head(2).to_dict(orient="records"):
        Vehicle.model_validate({k: v for k, v in row.items() if pd.notna(v)})
    for row in sessions.head(5).to_dict(orient="records"):
        Session.model_validate(row)

def test_simulator_is_seeded(tmp_path: Path):
    a, b = tmp_path / "a", tmp_path / "b"
    generate_csvs(a, users=3, month="2025-09", seed=7)
    generate_csvs(b, users=3, month="2025-09", seed=7)
    assert (a / "sessions.csv").read_text() == (b / "sessions.csv").read_text()
