"""Round-robin clip rotation."""
from __future__ import annotations

from datetime import datetime
from typing import Sequence

SECONDS_PER_DAY = 24 * 60 * 60


def next_in_rotation(order: Sequence[str], user_id: str) -> str | None:
    """
    Whose turn follows user_id. A poster missing from the order hands the
    turn to the first member; an empty order has no next member.
    """
    if not order:
        return None
    try:
        idx = list(order).index(user_id)
    except ValueError:
        idx = -1
    return order[(idx + 1) % len(order)]


def days_since(then: datetime, now: datetime) -> int:
    """Whole days elapsed, floored."""
    return int((now - then).total_seconds() // SECONDS_PER_DAY)


def rotation_status(rotation, user_id: str, now: datetime) -> dict:
    """What a member needs to know about the rotation right now."""
    return {
        "currentUserId": rotation.current_user_id,
        "intervalDays": rotation.interval_days,
        "lastRotatedAt": rotation.last_rotated_at.isoformat(),
        "needsRotation": days_since(rotation.last_rotated_at, now) >= rotation.interval_days,
        "isMyTurn": rotation.current_user_id == user_id,
    }
