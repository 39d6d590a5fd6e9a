import logging
from typing import Dict, Optional, Sequence

from checkin_api.models.checkin import CheckinRecord, CheckinStamp
from checkin_api.services.headers import ColumnField, ColumnMapping, resolve_checkin_columns
from checkin_api.services.sheets import is_transient
from checkin_api.utils.retry import RetryPolicy, with_retry

logger = logging.getLogger(__name__)


class DayTable:
    """Check-in sheet of one event day.

    Holds the resolved column layout and the registration numbers already
    confirmed, so duplicate checks never hit the spreadsheet. Callers hold
    ``AppState.checkin_lock(day, registration)`` around ``has`` + ``append``:
    keyed per registration, so a slow append for one attendee does not hold
    up check-ins of others on the same day.
    """

    def __init__(
        self,
        name: str,
        worksheet=None,
        mapping: Optional[ColumnMapping] = None,
        confirmed: Optional[Dict[str, CheckinStamp]] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.name = name
        self.worksheet = worksheet
        self.mapping = mapping
        self.confirmed: Dict[str, CheckinStamp] = dict(confirmed or {})
        self.retry_policy = retry_policy or RetryPolicy(retryable=is_transient)

    @classmethod
    def load(cls, name: str, worksheet, values: Sequence[Sequence[str]],
             retry_policy: Optional[RetryPolicy] = None) -> "DayTable":
        header = values[0] if values else []
        mapping = resolve_checkin_columns(header)
        if not mapping.ok:
            logger.warning(
                f"⚠️ Check-in sheet '{name}' unusable: {mapping.failure.value} "
                f"(headers: {list(header)})"
            )
            return cls(name, worksheet, mapping, retry_policy=retry_policy)

        confirmed = {}
        for row in values[1:]:
            registration = mapping.cell(row, ColumnField.REGISTRATION)
            if registration and registration not in confirmed:
                confirmed[registration] = CheckinStamp(
                    date=mapping.cell(row, ColumnField.DATE) or None,
                    time=mapping.cell(row, ColumnField.TIME) or None,
                )
        logger.info(f"🗓️ {name}: {len(confirmed)} check-ins already recorded")
        return cls(name, worksheet, mapping, confirmed, retry_policy)

    @property
    def is_usable(self) -> bool:
        return self.worksheet is not None and self.mapping is not None and self.mapping.ok

    def has(self, registration_number: str) -> bool:
        return registration_number in self.confirmed

    def stamp(self, registration_number: str) -> Optional[CheckinStamp]:
        return self.confirmed.get(registration_number)

    def append(self, record: CheckinRecord) -> CheckinRecord:
        """Write one check-in row (retrying transient failures) and remember it"""
        row = self.mapping.build_row({
            ColumnField.REGISTRATION: record.registration_number,
            ColumnField.NAME: record.name,
            ColumnField.DATE: record.date,
            ColumnField.TIME: record.time,
        })

        def on_retry(attempt, delay, exc):
            logger.warning(
                f"⚠️ Append to '{self.name}' failed (attempt {attempt}): {exc}; "
                f"retrying in {delay:.1f}s"
            )

        with_retry(
            lambda: self.worksheet.append_row(row, value_input_option="USER_ENTERED"),
            self.retry_policy,
            on_retry=on_retry,
        )
        self.confirmed[record.registration_number] = record.stamp
        return record
