import logging
import re
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from checkin_api.core.errors import (
    AlreadyConfirmed,
    ConfirmationError,
    EventClosed,
    InternalError,
    InvalidInput,
    MisconfiguredDayTable,
    NoRegistrationNumber,
    NotRegistered,
    OutsideWindowGeneric,
    OutsideWindowWaiting,
    ServiceBusy,
    ServiceNotReady,
)
from checkin_api.models.checkin import CheckinRecord, DayWindow
from checkin_api.schemas import ConfirmResponse
from checkin_api.services.sheets import is_rate_limited
from checkin_api.services.state import AppState
from checkin_api.services.time_window import WindowStatus, classify, countdown

logger = logging.getLogger(__name__)

_CPF = re.compile(r"[0-9]{11}")

DATE_FORMAT = "%d/%m/%Y"
TIME_FORMAT = "%H:%M"


class ConfirmationService:
    """Decides and records one attendance confirmation"""

    def __init__(
        self,
        state: AppState,
        days: Sequence[DayWindow],
        tz: timezone,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.state = state
        self.days = list(days)
        self.tz = tz
        self.clock = clock or (lambda: datetime.now(self.tz))

    def confirm(self, cpf: str) -> ConfirmResponse:
        if not isinstance(cpf, str) or not _CPF.fullmatch(cpf):
            raise InvalidInput()

        try:
            return self._confirm(cpf)
        except ConfirmationError:
            raise
        except Exception as e:
            if is_rate_limited(e):
                logger.warning(f"⚠️ Spreadsheet rate limit while confirming: {e}")
                raise ServiceBusy() from e
            logger.error(f"❌ Confirmation failed: {e}", exc_info=True)
            raise InternalError() from e

    def _confirm(self, cpf: str) -> ConfirmResponse:
        snapshot = self.state.snapshot
        if not snapshot.ready:
            raise ServiceNotReady()

        attendee = snapshot.roster.get(cpf)
        if attendee is None:
            raise NotRegistered()
        if not attendee.has_registration:
            raise NoRegistrationNumber(attendee.name)

        now = self.clock().astimezone(self.tz)
        decision = classify(now, self.days)
        if decision.status == WindowStatus.BEFORE:
            remaining = countdown(now, decision.day.start)
            raise OutsideWindowWaiting(
                name=attendee.name,
                day=decision.day.name,
                label=decision.day.label,
                hours=remaining.hours_label,
                minutes=remaining.minutes_label,
            )
        if decision.status == WindowStatus.AFTER:
            raise EventClosed()
        if decision.status != WindowStatus.OPEN:
            raise OutsideWindowGeneric()

        day = decision.day
        registration = attendee.registration_number
        with self.state.checkin_lock(day.name, registration):
            table = self.state.snapshot.day_tables.get(day.name)
            if table is None or not table.is_usable:
                logger.error(f"❌ Check-in sheet '{day.name}' is not usable")
                raise MisconfiguredDayTable(day.name)

            if table.has(registration):
                stamp = table.stamp(registration)
                raise AlreadyConfirmed(
                    name=attendee.name,
                    registration=registration,
                    day=day.name,
                    date=stamp.date,
                    time=stamp.time,
                )

            stamped = self.clock().astimezone(self.tz)
            record = CheckinRecord(
                registration_number=registration,
                name=attendee.name,
                date=stamped.strftime(DATE_FORMAT),
                time=stamped.strftime(TIME_FORMAT),
            )
            table.append(record)
            self.state.record_checkin(day.name, registration, record.stamp)

        logger.info(f"✅ Check-in confirmed: {registration} ({attendee.source_sheet}) on {day.name}")
        return ConfirmResponse(
            inscricao=record.registration_number,
            nome=record.name,
            dia=day.name,
            data=record.date,
            hora=record.time,
        )
