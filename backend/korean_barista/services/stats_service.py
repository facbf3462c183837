# backend/korean_barista/services/stats_service.py
from datetime import date, datetime, timedelta, timezone
import logging

import pandas as pd

from ..models_api import schemas

logger = logging.getLogger(__name__)

MINUTES_PER_SENTENCE = 0.5 # Rough estimate used for "total hours"
ACTIVITY_DAYS = 140 # About five months of activity squares
CHART_POINTS = 30


def _history_frame(history: list) -> pd.DataFrame:
    columns = ["date", "wpm", "accuracy", "genre", "difficulty", "mistakes"]
    df = pd.DataFrame([h.model_dump() for h in history], columns=columns)
    if df.empty:
        df["day"] = pd.Series(dtype=object)
        return df
    # Epoch milliseconds -> UTC calendar day
    df["day"] = pd.to_datetime(df["date"], unit="ms").dt.date
    return df


def compute_streak(practice_days, today: date) -> int:
    """
    Consecutive practice days ending today. A day without practice yet keeps
    yesterday's streak alive (it just does not count today).
    """
    days = set(practice_days)
    if today in days:
        current = today
    elif today - timedelta(days=1) in days:
        current = today - timedelta(days=1)
    else:
        return 0

    streak = 0
    while current in days:
        streak += 1
        current -= timedelta(days=1)
    return streak


def summarize(state: schemas.UserState, today: date = None) -> schemas.ProfileStats:
    """Aggregates the learner history into the numbers shown on the profile page."""
    today = today or datetime.now(timezone.utc).date()
    df = _history_frame(state.history)
    total = len(df)

    activity = {}
    chart = []
    if total:
        counts = df.groupby("day").size()
        window_start = today - timedelta(days=ACTIVITY_DAYS - 1)
        activity = {d.isoformat(): int(n) for d, n in counts.items() if window_start <= d <= today}

        recent = df.tail(CHART_POINTS).reset_index(drop=True)
        chart = [
            schemas.ChartPoint(name=str(i), wpm=float(row["wpm"]), accuracy=float(row["accuracy"]),
                               date=row["day"].strftime("%m/%d"))
            for i, row in recent.iterrows()
        ]

    mistake_types = {}
    if state.mistakes:
        mistake_types = pd.Series([m.type for m in state.mistakes]).value_counts().to_dict()

    return schemas.ProfileStats(
        total_sentences=total,
        total_hours=round(total * MINUTES_PER_SENTENCE / 60, 1),
        average_wpm=round(float(df["wpm"].mean()), 1) if total else 0.0,
        average_accuracy=round(float(df["accuracy"].mean()), 1) if total else 0.0,
        streak=compute_streak(df["day"].tolist(), today),
        activity=activity,
        chart=chart,
        mistake_types={str(k): int(v) for k, v in mistake_types.items()},
    )
