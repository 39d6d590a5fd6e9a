"""Header normalization and column discovery for the roster and check-in sheets.

Spreadsheet headers are typed by people ("Nº de Inscrição", "NOME COMPLETO",
"Horário"), so columns are located by matching fragments of the normalized
header text instead of exact labels.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from checkin_api.utils.text import collapse_whitespace, strip_accents

# Headers containing "inscr" that describe the registration, not its number
REGISTRATION_EXCLUDES = ("status", "situacao", "tipo", "categoria")


class ColumnField(str, Enum):
    CPF = "cpf"
    NAME = "name"
    REGISTRATION = "registration"
    DATE = "date"
    TIME = "time"


class ResolutionFailure(str, Enum):
    EMPTY_HEADER = "empty_header"
    MISSING_CPF = "missing_cpf"
    MISSING_NAME = "missing_name"
    MISSING_REGISTRATION = "missing_registration"
    MISSING_DATE = "missing_date"
    MISSING_TIME = "missing_time"


_MISSING = {
    ColumnField.CPF: ResolutionFailure.MISSING_CPF,
    ColumnField.NAME: ResolutionFailure.MISSING_NAME,
    ColumnField.REGISTRATION: ResolutionFailure.MISSING_REGISTRATION,
    ColumnField.DATE: ResolutionFailure.MISSING_DATE,
    ColumnField.TIME: ResolutionFailure.MISSING_TIME,
}


@dataclass(frozen=True)
class ColumnMapping:
    indices: Dict[ColumnField, int] = field(default_factory=dict)
    width: int = 0
    failure: Optional[ResolutionFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def index(self, column: ColumnField) -> Optional[int]:
        return self.indices.get(column)

    def cell(self, row: Sequence[str], column: ColumnField) -> str:
        """Trimmed cell value, or "" when the row is shorter than the header"""
        idx = self.indices.get(column)
        if idx is None or idx >= len(row):
            return ""
        value = row[idx]
        return str(value).strip() if value is not None else ""

    def build_row(self, values: Dict[ColumnField, str]) -> List[str]:
        """Lay out values in sheet order, leaving unmapped columns blank"""
        row = [""] * self.width
        for column, value in values.items():
            idx = self.indices.get(column)
            if idx is not None:
                row[idx] = value
        return row


def normalize_header(header: str) -> str:
    """Lower-case, strip diacritics and collapse whitespace. Idempotent."""
    if header is None:
        return ""
    return collapse_whitespace(strip_accents(str(header).lower()))


def _first(headers: Sequence[str], predicate) -> Optional[int]:
    for idx, header in enumerate(headers):
        if predicate(header):
            return idx
    return None


def find_registration_column(headers: Sequence[str]) -> Optional[int]:
    """Prefer an "inscr" header that is not a status/type column, else any "inscr" header."""
    strict = _first(
        headers,
        lambda h: "inscr" in h and not any(word in h for word in REGISTRATION_EXCLUDES),
    )
    if strict is not None:
        return strict
    return _first(headers, lambda h: "inscr" in h)


def _mapping(found: Dict[ColumnField, Optional[int]], width: int) -> ColumnMapping:
    indices = {column: idx for column, idx in found.items() if idx is not None}
    for column, idx in found.items():
        if idx is None:
            return ColumnMapping(indices=indices, width=width, failure=_MISSING[column])
    return ColumnMapping(indices=indices, width=width)


def resolve_profile_columns(raw_headers: Sequence[str]) -> ColumnMapping:
    """Locate CPF, name and registration columns of a profile sheet"""
    headers = [normalize_header(h) for h in raw_headers]
    if not any(headers):
        return ColumnMapping(width=len(headers), failure=ResolutionFailure.EMPTY_HEADER)

    found = {
        ColumnField.CPF: _first(headers, lambda h: h == "cpf"),
        ColumnField.NAME: _first(headers, lambda h: "nome" in h),
        ColumnField.REGISTRATION: find_registration_column(headers),
    }
    return _mapping(found, len(headers))


def resolve_checkin_columns(raw_headers: Sequence[str]) -> ColumnMapping:
    """Locate registration, name, date and time columns of a day sheet"""
    headers = [normalize_header(h) for h in raw_headers]
    if not any(headers):
        return ColumnMapping(width=len(headers), failure=ResolutionFailure.EMPTY_HEADER)

    found = {
        ColumnField.REGISTRATION: _first(headers, lambda h: "inscr" in h),
        ColumnField.NAME: _first(headers, lambda h: "nome" in h),
        ColumnField.DATE: _first(headers, lambda h: "data" in h),
        ColumnField.TIME: _first(headers, lambda h: "hora" in h),
    }
    return _mapping(found, len(headers))
