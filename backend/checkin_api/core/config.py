from datetime import datetime, timedelta, timezone
from typing import List, Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings


class EventDaySettings(BaseModel):
    """One check-in day: sheet title, human label and local start/end times."""
    name: str
    label: str
    start: datetime
    end: datetime


DEFAULT_PROFILE_SHEETS = [
    "Conselheiros",
    "CNRPPS",
    "Palestrantes",
    "Staffs",
    "Patrocinadores",
    "Imprensa",
    "Convidados",
]

DEFAULT_EVENT_DAYS = [
    EventDaySettings(
        name="Dia1",
        label="12/08 (terça-feira)",
        start=datetime(2025, 8, 12, 8, 30),
        end=datetime(2025, 8, 12, 17, 30),
    ),
    EventDaySettings(
        name="Dia2",
        label="13/08 (quarta-feira)",
        start=datetime(2025, 8, 13, 8, 30),
        end=datetime(2025, 8, 13, 13, 0),
    ),
]


class Settings(BaseSettings):
    # Application
    PROJECT_NAME: str = "Event Check-in"
    VERSION: str = "1.0.0"
    PORT: int = 3000
    ALLOWED_ORIGIN: str = "*"

    # Google Sheets
    GOOGLE_CREDENTIALS_B64: Optional[str] = None
    GOOGLE_CREDENTIALS_JSON: Optional[str] = None
    SHEET_ID: str = ""
    SHEETS_TIMEOUT_SECONDS: float = 15.0

    # Roster refresh
    REFRESH_INTERVAL_MINUTES: float = 5.0
    STARTUP_RETRY_BASE_SECONDS: float = 2.0
    PROFILE_SHEETS: List[str] = DEFAULT_PROFILE_SHEETS

    # Event schedule (local wall-clock times, fixed offset, no DST)
    UTC_OFFSET_HOURS: int = -3
    EVENT_DAYS: List[EventDaySettings] = DEFAULT_EVENT_DAYS

    # Check-in append retry
    APPEND_MAX_ATTEMPTS: int = 3
    APPEND_BASE_DELAY_SECONDS: float = 0.3

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def event_timezone(self) -> timezone:
        return timezone(timedelta(hours=self.UTC_OFFSET_HOURS))


settings = Settings()
