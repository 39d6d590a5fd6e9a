"""Check-in time window policy.

Day windows are closed intervals in a fixed UTC offset (no daylight saving).
``classify`` is pure: the caller supplies the current time.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from checkin_api.core.config import EventDaySettings
from checkin_api.models.checkin import DayWindow


class WindowStatus(str, Enum):
    OPEN = "open"
    BEFORE = "before"
    AFTER = "after"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class WindowDecision:
    status: WindowStatus
    day: Optional[DayWindow] = None


@dataclass(frozen=True)
class Countdown:
    hours: int
    minutes: int

    @property
    def hours_label(self) -> str:
        return f"{self.hours:02d}"

    @property
    def minutes_label(self) -> str:
        return f"{self.minutes:02d}"


def build_day_windows(days: Iterable[EventDaySettings], tz: timezone) -> List[DayWindow]:
    """Attach the event offset to configured local times and order by start"""
    windows = []
    for day in days:
        start = day.start.replace(tzinfo=tz) if day.start.tzinfo is None else day.start.astimezone(tz)
        end = day.end.replace(tzinfo=tz) if day.end.tzinfo is None else day.end.astimezone(tz)
        if end < start:
            raise ValueError(f"Event day {day.name} ends before it starts")
        windows.append(DayWindow(name=day.name, label=day.label, start=start, end=end))
    windows.sort(key=lambda w: w.start)
    for previous, current in zip(windows, windows[1:]):
        if current.start <= previous.end:
            raise ValueError(f"Event days {previous.name} and {current.name} overlap")
    return windows


def classify(now: datetime, days: Sequence[DayWindow]) -> WindowDecision:
    if not days:
        return WindowDecision(WindowStatus.UNKNOWN)

    for day in days:
        if day.contains(now):
            return WindowDecision(WindowStatus.OPEN, day)

    if now < days[0].start:
        return WindowDecision(WindowStatus.BEFORE, days[0])

    for previous, upcoming in zip(days, days[1:]):
        if previous.end < now < upcoming.start:
            return WindowDecision(WindowStatus.BEFORE, upcoming)

    if now > days[-1].end:
        return WindowDecision(WindowStatus.AFTER)

    return WindowDecision(WindowStatus.UNKNOWN)


def countdown(now: datetime, target: datetime) -> Countdown:
    """Whole minutes until ``target`` (truncated), split into hours and minutes"""
    total_minutes = max(0, int((target - now).total_seconds() // 60))
    hours, minutes = divmod(total_minutes, 60)
    return Countdown(hours=hours, minutes=minutes)
