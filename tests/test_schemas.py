import pytest
from pydantic import ValidationError
from src.engine.reward_defs import VehicleType
from src.serve.schemas import EVChargeLog, FuelLog, MonthlyReport, Session, Vehicle

def test_vehicle_schema_example_validates():
    v = Vehicle.model_validate(Vehicle.model_config["json_schema_extra"]["example"])
    assert v.type is VehicleType.EV
    assert v.expected_mileage > 0

def test_vehicle_rejects_unknown_type_and_zero_mileage():
    base = dict(id="V_1", user_id="U_1", name="x", type="petrol", model="Swift",
                odometer_start=0, current_odometer=10, expected_mileage=15.0)
    Vehicle.model_validate(base)
    with pytest.raises(ValidationError):
        Vehicle.model_validate({**base, "type": "hydrogen"})
    with pytest.raises(ValidationError):
        Vehicle.model_validate({**base, "expected_mileage": 0})

def test_session_contract_fields():
    s = Session.model_validate({
        "id": "S_1", "vehicle_id": "V_1", "user_id": "U_1",
        "start_time": "2025-09-09T10:00:00Z",
        "end_time": "2025-09-09T10:30:00Z",
        "start_odometer": 1000.0, "end_odometer": 1012.5,
        "distance_km": 12.5,
    })
    assert s.start_time.tzinfo is not None
    assert s.reward_points == 0

def test_logs_and_report_bounds():
    with pytest.raises(ValidationError):
        FuelLog.model_validate({
            "id": "L_1", "vehicle_id": "V_1", "user_id": "U_1",
            "log_date": "2025-09-09T10:00:00Z", "fuel_type": "petrol",
            "liters": 0, "cost": 0, "odometer_reading": 10,
        })
    with pytest.raises(ValidationError):
        EVChargeLog.model_validate({
            "id": "L_2", "vehicle_id": "V_1", "user_id": "U_1",
            "log_date": "2025-09-09T10:00:00Z", "kwh": 10, "cost": 80,
            "odometer_reading": 10, "percent_after": 120,
        })
    with pytest.raises(ValidationError):
        MonthlyReport.model_validate({
            "id": "M_1", "user_id": "U_1", "vehicle_id": "V_1", "report_month": "2025-9",
            "total_distance_km": 1, "avg_mileage": 1, "total_reward_points": 1, "session_count": 1,
        })
