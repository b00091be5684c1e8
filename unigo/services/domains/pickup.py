"""Pickup window countdown for cafeteria orders that are ready."""
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from unigo import config

PICKUP_STATUSES = ("ready", "partially_delivered")


def _parse_timestamp(value: Union[str, datetime]) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def pickup_time_left(
    ready_at: Optional[Union[str, datetime]],
    status: str,
    now: Optional[datetime] = None,
) -> Optional[int]:
    """
    Whole seconds left to collect an order.

    The window opens at ``ready_at`` and lasts PICKUP_WINDOW_MINUTES. Returns
    None when the order is not waiting for pickup or the window has passed.
    """
    if not ready_at or status not in PICKUP_STATUSES:
        return None

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    deadline = _parse_timestamp(ready_at) + timedelta(minutes=config.PICKUP_WINDOW_MINUTES)
    remaining = int((deadline - now).total_seconds())
    return remaining if remaining > 0 else None


def format_time_left(seconds: int) -> str:
    """Render seconds as MM:SS."""
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes:02d}:{secs:02d}"
