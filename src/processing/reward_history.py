from __future__ import annotations
import hashlib
from datetime import datetime, timezone
from typing import Iterable, Optional, Union

import pandas as pd

from src.engine.reward_defs import RewardTier
from src.engine.tiers import classify_tier
from src.serve.schemas import RewardHistoryEntry

HISTORY_COLS = [
    "id", "user_id", "vehicle_id", "session_id", "monthly_report_id",
    "points", "reason", "created_at",
]


def _entry_id(kind: str, key: str) -> str:
    # deterministic: the same ride or month always maps to the same entry id
    h = hashlib.sha1(f"{kind}|{key}".encode("utf-8")).hexdigest()[:12]
    return f"R_{h}"


def ride_reward_entry(
    *,
    user_id: str,
    vehicle_id: str,
    session_id: str,
    points: int,
    distance_km: float,
    created_at: Optional[datetime] = None,
) -> RewardHistoryEntry:
    return RewardHistoryEntry(
        id=_entry_id("session", session_id),
        user_id=user_id,
        vehicle_id=vehicle_id,
        session_id=session_id,
        points=int(points),
        reason=f"Ride completed: {float(distance_km):.1f} km",
        created_at=created_at or datetime.now(timezone.utc),
    )


def consistency_bonus_entry(
    *,
    user_id: str,
    vehicle_id: str,
    monthly_report_id: str,
    report_month: str,
    points: int,
    created_at: Optional[datetime] = None,
) -> RewardHistoryEntry:
    return RewardHistoryEntry(
        id=_entry_id("month", monthly_report_id),
        user_id=user_id,
        vehicle_id=vehicle_id,
        monthly_report_id=monthly_report_id,
        points=int(points),
        reason=f"Monthly consistency bonus: {report_month}",
        created_at=created_at or datetime.now(timezone.utc),
    )


def history_frame(entries: Iterable[Union[RewardHistoryEntry, dict]]) -> pd.DataFrame:
    rows = [e.model_dump() if isinstance(e, RewardHistoryEntry) else dict(e) for e in entries]
    if not rows:
        return pd.DataFrame(columns=HISTORY_COLS)
    return pd.DataFrame(rows)


def dedup_history(df: pd.DataFrame) -> pd.DataFrame:
    """
    Append-only guard: the first entry recorded for a session (or a monthly
    report) wins; anything recorded later for the same key is dropped.
    Entries without either key are kept as-is.
    """
    if df.empty:
        return df.copy()
    df = df.reset_index(drop=True)
    keep = pd.Series(True, index=df.index)
    for key in ("session_id", "monthly_report_id"):
        if key not in df.columns:
            continue
        has_key = df[key].notna()
        dup = df[key].duplicated(keep="first") & has_key
        keep &= ~dup
    return df[keep].reset_index(drop=True)


def total_points(entries: Union[pd.DataFrame, Iterable[Union[RewardHistoryEntry, dict]]]) -> int:
    """Running total derived from history; never stored separately."""
    df = entries if isinstance(entries, pd.DataFrame) else history_frame(entries)
    if df.empty:
        return 0
    return int(pd.to_numeric(df["points"], errors="coerce").fillna(0).sum())


def user_tier(entries: Union[pd.DataFrame, Iterable[Union[RewardHistoryEntry, dict]]]) -> RewardTier:
    # offsetting corrections could in principle push a total negative
    return classify_tier(max(0, total_points(entries)))
