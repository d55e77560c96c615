# ganttsync/utils.py
from datetime import datetime
from typing import Optional

# The store keeps durations in minutes; the widget works in 8-hour days.
MINUTES_PER_DAY = 480

def minutes_to_days(minutes) -> float:
    return (minutes or 0) / MINUTES_PER_DAY

def days_to_minutes(days) -> float:
    return (days or 0) * MINUTES_PER_DAY

def split_wbs(code: Optional[str]) -> list:
    """
    Split a WBS code into its segments.
    Returns an empty list for blank or malformed codes (empty segments such as
    "1..2", ".1" or "1."), which the tree builder treats as top-level.
    """
    if not code or not code.strip():
        return []
    segments = code.strip().split(".")
    if any(not s.strip() for s in segments):
        return []
    return [s.strip() for s in segments]

def parent_wbs(code: Optional[str]) -> Optional[str]:
    """
    The code of the parent record, i.e. the code minus its last segment.
    None when the code has a single segment or is malformed.
    """
    segments = split_wbs(code)
    if len(segments) < 2:
        return None
    return ".".join(segments[:-1])

def parse_timestamp(value) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    try:
        # Dataverse sends "2024-01-01T08:00:00Z"
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    formats = [
        "%Y-%m-%d %H:%M:%S",  # e.g., "2023-09-07 08:00:00"
        "%m/%d/%Y %H:%M",
        "%m/%d/%Y",
    ]
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            pass
    return None
