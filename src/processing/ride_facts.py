from __future__ import annotations
from typing import Optional, Tuple

from src.engine.errors import InvalidInput
from src.engine.models import RewardCalculation, RideFacts
from src.engine.rewards import score_ride
from src.serve.schemas import RewardHistoryEntry, Session, Vehicle
from src.processing.reward_history import ride_reward_entry


def ride_distance_km(start_odometer: float, end_odometer: float) -> float:
    """Odometer difference; a ride cannot run backwards."""
    dist = float(end_odometer) - float(start_odometer)
    if dist < 0:
        raise InvalidInput(
            f"end_odometer {end_odometer} is below start_odometer {start_odometer}"
        )
    return dist


def estimate_actual_mileage(
    distance_km: float,
    expected_mileage: float,
    consumed: Optional[float] = None,
) -> float:
    """
    Mileage for one ride.
    With a logged quantity (litres or kWh) use distance / consumed; otherwise
    consumption is estimated as distance / expected, which lands on the rated
    figure (also for zero-length rides).
    """
    expected = float(expected_mileage)
    if expected <= 0:
        raise InvalidInput(f"expected_mileage must be > 0, got {expected_mileage!r}")
    dist = float(distance_km)
    if consumed is not None and float(consumed) > 0 and dist > 0:
        return dist / float(consumed)
    # distance / (distance / expected) == expected; skip the float round-trip
    return expected


def ride_facts_for_session(
    session: Session,
    vehicle: Vehicle,
    consumed: Optional[float] = None,
) -> RideFacts:
    if session.vehicle_id != vehicle.id:
        raise InvalidInput(
            f"session {session.id} belongs to vehicle {session.vehicle_id}, not {vehicle.id}"
        )
    if session.distance_km > 0:
        distance = float(session.distance_km)
    elif session.end_odometer is not None:
        distance = ride_distance_km(session.start_odometer, session.end_odometer)
    else:
        raise InvalidInput(f"session {session.id} has no distance and no end_odometer")

    return RideFacts(
        distance_km=distance,
        vehicle_type=vehicle.type,
        actual_mileage=estimate_actual_mileage(distance, vehicle.expected_mileage, consumed),
        expected_mileage=float(vehicle.expected_mileage),
    )


def score_session(
    session: Session,
    vehicle: Vehicle,
    consumed: Optional[float] = None,
) -> Tuple[RewardCalculation, RewardHistoryEntry]:
    """Completed ride -> award + the reward-history entry the caller should persist."""
    facts = ride_facts_for_session(session, vehicle, consumed)
    calc = score_ride(facts)
    entry = ride_reward_entry(
        user_id=session.user_id,
        vehicle_id=vehicle.id,
        session_id=session.id,
        points=calc.total_points,
        distance_km=facts.distance_km,
        created_at=session.end_time,
    )
    return calc, entry
