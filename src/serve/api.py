# src/serve/api.py
from __future__ import annotations
from typing import List

from fastapi import FastAPI, HTTPException

from src.engine.consistency import monthly_consistency_bonus
from src.engine.errors import RewardEngineError
from src.engine.rewards import calculate_reward_points
from src.engine.tiers import tier_progress
from src.processing.reward_history import dedup_history, history_frame, total_points, user_tier
from src.processing.ride_facts import score_session
from .display import tier_display
from .schemas import (
    HistoryTotalOut, MonthScoreIn, MonthScoreOut, RewardCalculationOut,
    RewardHistoryEntry, RideScoreIn, SessionScoreIn, SessionScoreOut, TierOut,
)

app = FastAPI(title="Ride Rewards API", version="0.1")


def _unprocessable(e: RewardEngineError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))


# ---------- Endpoints ----------
@app.get("/health")
def health():
    return {"ok": True}


@app.post("/score/ride", response_model=RewardCalculationOut)
def score_ride_endpoint(payload: RideScoreIn):
    try:
        calc = calculate_reward_points(**payload.model_dump())
    except RewardEngineError as e:
        raise _unprocessable(e) from e
    return calc.as_dict()


@app.post("/score/session", response_model=SessionScoreOut)
def score_session_endpoint(payload: SessionScoreIn):
    try:
        calc, entry = score_session(payload.session, payload.vehicle, payload.consumed)
    except RewardEngineError as e:
        raise _unprocessable(e) from e
    return {"reward": calc.as_dict(), "history_entry": entry}


@app.post("/score/month", response_model=MonthScoreOut)
def score_month(payload: MonthScoreIn):
    try:
        bonus = monthly_consistency_bonus(**payload.model_dump())
    except RewardEngineError as e:
        raise _unprocessable(e) from e
    return {"bonus_points": bonus}


@app.get("/tier/{points}", response_model=TierOut)
def tier(points: int):
    try:
        prog = tier_progress(points)
    except RewardEngineError as e:
        raise _unprocessable(e) from e
    return {**prog, "color": tier_display(prog["tier"])}


@app.post("/rewards/summary", response_model=HistoryTotalOut)
def rewards_summary(entries: List[RewardHistoryEntry]):
    # totals and tiers are per user
    if len({e.user_id for e in entries}) > 1:
        raise HTTPException(status_code=422, detail="entries span multiple users")
    df = dedup_history(history_frame(entries))
    kept = [RewardHistoryEntry.model_validate(r) for r in
            df.astype(object).where(df.notna(), None).to_dict(orient="records")]
    return {
        "total_points": total_points(df),
        "tier": user_tier(df).value,
        "entries": kept,
    }
