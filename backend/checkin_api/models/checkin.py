from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class DayWindow:
    """Closed interval during which check-in for one day sheet is accepted"""
    name: str
    label: str
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class CheckinStamp:
    date: Optional[str] = None
    time: Optional[str] = None


@dataclass(frozen=True)
class CheckinRecord:
    registration_number: str
    name: str
    date: str
    time: str

    @property
    def stamp(self) -> CheckinStamp:
        return CheckinStamp(date=self.date, time=self.time)
