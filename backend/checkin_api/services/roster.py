import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from checkin_api.models.attendee import AttendeeRecord
from checkin_api.services.headers import ColumnField, resolve_profile_columns
from checkin_api.utils.text import only_digits

logger = logging.getLogger(__name__)

RosterIndex = Dict[str, AttendeeRecord]


def merge_attendee(roster: RosterIndex, record: AttendeeRecord) -> None:
    """First record wins, unless it has no registration number and the new one does"""
    current = roster.get(record.identity_number)
    if current is None:
        roster[record.identity_number] = record
    elif not current.has_registration and record.has_registration:
        logger.info(
            f"CPF ***{record.identity_number[-4:]} upgraded from {current.source_sheet} "
            f"to {record.source_sheet} (registration number found)"
        )
        roster[record.identity_number] = record


def read_profile_sheet(title: str, values: Sequence[Sequence[str]]) -> List[AttendeeRecord]:
    """Turn the raw values of one profile sheet into attendee records.

    Returns an empty list (and logs a warning) when the header row does not
    expose the CPF, name and registration columns.
    """
    if not values:
        logger.warning(f"⚠️ Profile sheet '{title}' is empty, skipping")
        return []

    mapping = resolve_profile_columns(values[0])
    if not mapping.ok:
        logger.warning(
            f"⚠️ Profile sheet '{title}' skipped: {mapping.failure.value} "
            f"(headers: {list(values[0])})"
        )
        return []

    records = []
    for row in values[1:]:
        cpf = only_digits(mapping.cell(row, ColumnField.CPF))
        if not cpf:
            continue
        records.append(AttendeeRecord(
            identity_number=cpf,
            name=mapping.cell(row, ColumnField.NAME),
            registration_number=mapping.cell(row, ColumnField.REGISTRATION),
            source_sheet=title,
        ))
    return records


def build_roster(sheets: Iterable[Tuple[str, Sequence[Sequence[str]]]]) -> RosterIndex:
    """Build a new roster index from (title, values) pairs, in priority order"""
    roster: RosterIndex = {}
    for title, values in sheets:
        records = read_profile_sheet(title, values)
        for record in records:
            merge_attendee(roster, record)
        logger.info(f"📋 {title}: {len(records)} attendees")
    return roster
