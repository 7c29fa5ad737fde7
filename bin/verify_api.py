#!/usr/bin/env python
# bin/verify_api.py
import sys, pathlib

from fastapi.testclient import TestClient

# Ensure project root on path when running directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.serve.api import app
client = TestClient(app)


def main() -> int:
    # 1) health
    r = client.get("/health")
    assert r.status_code == 200 and r.json().get("ok") is True, "health failed"
    print("[VERIFY-API] /health ok")

    # 2) /score/ride with the reference EV ride
    ride = {"distance_km": 100, "vehicle_type": "ev", "actual_mileage": 6.6, "expected_mileage": 6.0}
    r = client.post("/score/ride", json=ride)
    assert r.status_code == 200, f"/score/ride http {r.status_code}"
    out = r.json()
    assert out["total_points"] == 176, f"expected 176 got {out['total_points']}"
    print(f"[VERIFY-API] /score/ride ok  total={out['total_points']} band={out['efficiency_band']}")

    # 3) bad input must be rejected, not scored
    r = client.post("/score/ride", json={**ride, "expected_mileage": 0})
    assert r.status_code == 422, f"zero expected_mileage http {r.status_code}"
    print("[VERIFY-API] /score/ride rejects expected_mileage=0")

    # 4) /score/month at the bonus boundary
    r = client.post("/score/month", json={"session_count": 10, "avg_mileage": 9.0, "expected_mileage": 10.0})
    r.raise_for_status()
    assert r.json()["bonus_points"] == 50, "boundary month should earn the bonus"
    print("[VERIFY-API] /score/month ok")

    # 5) /tier
    for pts, name in ((249, "Bronze"), (250, "Silver"), (999, "Gold"), (1000, "Platinum")):
        r = client.get(f"/tier/{pts}")
        r.raise_for_status()
        assert r.json()["tier"] == name, f"{pts} -> {r.json()['tier']}"
    print("[VERIFY-API] /tier ok")

    print("[VERIFY-API] verification passed")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
