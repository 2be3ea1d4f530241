"""Pillar scoring for daily check-ins."""
from __future__ import annotations

from collections import OrderedDict
from typing import Iterable, Mapping

PILLARS = ("deen", "body", "mind", "mission", "brotherhood")


def compute_score(pillars: Mapping[str, bool]) -> int:
    """Number of pillars marked done, 0-5."""
    return sum(1 for p in PILLARS if pillars.get(p))


def daily_averages(check_ins: Iterable) -> list[dict]:
    """
    Per-day mean score across a circle, rounded to one decimal.
    Input must already be ordered by date; output keeps that order.
    """
    by_day: "OrderedDict[str, list[int]]" = OrderedDict()
    for ci in check_ins:
        by_day.setdefault(ci.date, []).append(ci.score)
    return [
        {"date": day, "average": round(sum(scores) / len(scores), 1), "count": len(scores)}
        for day, scores in by_day.items()
    ]
