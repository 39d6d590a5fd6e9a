"""Process-wide roster and check-in state, and its periodic rebuild.

A refresh builds a brand new ``Snapshot`` from the spreadsheet and installs it
with a single assignment, so readers see either the old or the new snapshot,
never a half-built one. A failed refresh leaves the previous snapshot in place.
"""
import asyncio
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional, Sequence, Tuple

from checkin_api.core.config import Settings
from checkin_api.models.attendee import AttendeeRecord
from checkin_api.models.checkin import CheckinStamp, DayWindow
from checkin_api.services.checkin_store import DayTable
from checkin_api.services.roster import build_roster
from checkin_api.services.sheets import is_transient
from checkin_api.utils.retry import RetryPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    ready: bool = False
    roster: Mapping[str, AttendeeRecord] = field(default_factory=dict)
    day_tables: Mapping[str, DayTable] = field(default_factory=dict)
    built_at: Optional[datetime] = None


class AppState:
    """Holds the current snapshot plus check-ins recorded locally since the last read.

    Each local check-in gets a sequence number. A refresh notes the sequence
    before reading the sheets (``begin_refresh``) and, on install, carries over
    only check-ins recorded after that mark; older ones are already in the rows
    it read, or were deleted from the sheet on purpose.
    """

    def __init__(self, day_names: Sequence[str] = ()):
        self.snapshot = Snapshot()
        self._guard = threading.Lock()
        self._sequence = 0
        self._pending: Dict[str, Dict[str, Tuple[int, CheckinStamp]]] = {
            name: {} for name in day_names
        }
        self._checkin_locks: Dict[Tuple[str, str], threading.Lock] = {}

    @property
    def ready(self) -> bool:
        return self.snapshot.ready

    def checkin_lock(self, day: str, registration_number: str) -> threading.Lock:
        """Lock serialising duplicate check + append for one registration on one day"""
        key = (day, registration_number)
        with self._guard:
            lock = self._checkin_locks.get(key)
            if lock is None:
                lock = self._checkin_locks[key] = threading.Lock()
            return lock

    def begin_refresh(self) -> int:
        """Mark taken before a refresh reads the sheets"""
        with self._guard:
            return self._sequence

    def record_checkin(self, day: str, registration_number: str, stamp: CheckinStamp) -> None:
        """Remember a successful append, also in the snapshot installed meanwhile"""
        with self._guard:
            self._sequence += 1
            self._pending.setdefault(day, {})[registration_number] = (self._sequence, stamp)
            table = self.snapshot.day_tables.get(day)
            if table is not None:
                table.confirmed.setdefault(registration_number, stamp)

    def install(self, snapshot: Snapshot, since: Optional[int] = None) -> None:
        """Swap in a new snapshot, keeping check-ins recorded after ``since``"""
        with self._guard:
            if since is None:
                since = self._sequence
            for day, pending in self._pending.items():
                recent = {reg: entry for reg, entry in pending.items() if entry[0] > since}
                table = snapshot.day_tables.get(day)
                if table is not None and table.is_usable:
                    for registration, (_, stamp) in recent.items():
                        table.confirmed.setdefault(registration, stamp)
                self._pending[day] = recent
            self.snapshot = snapshot


class RosterRefresher:
    """Rebuilds the roster index and day sheets from the spreadsheet"""

    def __init__(self, state: AppState, gateway, settings: Settings, days: Sequence[DayWindow]):
        self.state = state
        self.gateway = gateway
        self.settings = settings
        self.days = list(days)
        self.retry_policy = RetryPolicy(
            max_attempts=settings.APPEND_MAX_ATTEMPTS,
            base_delay_seconds=settings.APPEND_BASE_DELAY_SECONDS,
            retryable=is_transient,
        )
        self.startup_policy = RetryPolicy(base_delay_seconds=settings.STARTUP_RETRY_BASE_SECONDS)

    def refresh(self) -> Snapshot:
        since = self.state.begin_refresh()
        worksheets = self.gateway.open_worksheets()

        profile_values = []
        for title in self.settings.PROFILE_SHEETS:
            worksheet = worksheets.get(title)
            if worksheet is None:
                logger.warning(f"⚠️ Profile sheet '{title}' not found, skipping")
                continue
            profile_values.append((title, worksheet.get_all_values()))
        roster = build_roster(profile_values)

        day_tables = {}
        for day in self.days:
            worksheet = worksheets.get(day.name)
            if worksheet is None:
                logger.warning(f"⚠️ Check-in sheet '{day.name}' not found")
                day_tables[day.name] = DayTable(day.name, retry_policy=self.retry_policy)
                continue
            day_tables[day.name] = DayTable.load(
                day.name, worksheet, worksheet.get_all_values(), retry_policy=self.retry_policy
            )

        snapshot = Snapshot(
            ready=True,
            roster=roster,
            day_tables=day_tables,
            built_at=datetime.now(timezone.utc),
        )
        self.state.install(snapshot, since=since)
        logger.info(f"✅ Roster refreshed: {len(roster)} attendees, days {list(day_tables)}")
        return snapshot

    def refresh_safely(self) -> bool:
        """Refresh, logging instead of raising; the previous snapshot stays on failure"""
        try:
            self.refresh()
            return True
        except Exception as e:
            logger.error(f"❌ Roster refresh failed, keeping previous data: {e}", exc_info=True)
            return False

    def next_delay(self, consecutive_failures: int) -> float:
        """Seconds until the next refresh.

        The regular interval once data is loaded; until then, a backoff from
        ``STARTUP_RETRY_BASE_SECONDS`` capped at the interval.
        """
        interval = max(self.settings.REFRESH_INTERVAL_MINUTES, 0.1) * 60
        if self.state.ready or consecutive_failures == 0:
            return interval
        return min(self.startup_policy.delay_for(consecutive_failures), interval)

    async def run_forever(self) -> None:
        failures = 0
        while True:
            if await asyncio.to_thread(self.refresh_safely):
                failures = 0
            else:
                failures += 1
            await asyncio.sleep(self.next_delay(failures))
