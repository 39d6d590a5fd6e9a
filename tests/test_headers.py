from __future__ import annotations

import pytest

from checkin_api.services.headers import (
    ColumnField,
    ResolutionFailure,
    find_registration_column,
    normalize_header,
    resolve_checkin_columns,
    resolve_profile_columns,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("CPF", "cpf"),
        ("  Número   de\tInscrição ", "numero de inscricao"),
        ("HORÁRIO", "horario"),
        ("Situação da Inscrição", "situacao da inscricao"),
        ("", ""),
    ],
)
def test_normalize_header(raw: str, expected: str) -> None:
    assert normalize_header(raw) == expected


@pytest.mark.parametrize("raw", ["Nº de Inscrição", "  NOME  COMPLETO", "Data/Hora", "İstanbul"])
def test_normalize_header_is_idempotent(raw: str) -> None:
    once = normalize_header(raw)
    assert normalize_header(once) == once


def test_registration_column_skips_status_like_headers() -> None:
    headers = [normalize_header(h) for h in [
        "Nome", "Status da Inscrição", "Tipo de Inscrição", "Categoria Inscrição", "Nº Inscrição",
    ]]
    assert find_registration_column(headers) == 4


def test_registration_column_falls_back_to_any_inscr_header() -> None:
    headers = [normalize_header(h) for h in ["Nome", "Situação Inscrição"]]
    assert find_registration_column(headers) == 1


def test_resolve_profile_columns() -> None:
    mapping = resolve_profile_columns(["Nome Completo", "E-mail", "CPF", "Inscrição"])

    assert mapping.ok
    assert mapping.index(ColumnField.NAME) == 0
    assert mapping.index(ColumnField.CPF) == 2
    assert mapping.index(ColumnField.REGISTRATION) == 3


def test_profile_cpf_column_needs_exact_match() -> None:
    mapping = resolve_profile_columns(["Nome", "CPF do responsável", "Inscrição"])

    assert not mapping.ok
    assert mapping.failure is ResolutionFailure.MISSING_CPF


def test_profile_without_registration_column() -> None:
    mapping = resolve_profile_columns(["Nome", "CPF"])

    assert mapping.failure is ResolutionFailure.MISSING_REGISTRATION


def test_empty_header_row() -> None:
    assert resolve_profile_columns(["", "  "]).failure is ResolutionFailure.EMPTY_HEADER
    assert resolve_checkin_columns([]).failure is ResolutionFailure.EMPTY_HEADER


def test_resolve_checkin_columns_and_build_row() -> None:
    mapping = resolve_checkin_columns(["Observação", "NUMERO DE INSCRIÇÃO", "NOME", "DATA", "HORÁRIO"])

    assert mapping.ok
    row = mapping.build_row({
        ColumnField.REGISTRATION: "A42",
        ColumnField.NAME: "Maria",
        ColumnField.DATE: "12/08/2025",
        ColumnField.TIME: "10:00",
    })
    assert row == ["", "A42", "Maria", "12/08/2025", "10:00"]


def test_checkin_columns_missing_time() -> None:
    mapping = resolve_checkin_columns(["Inscrição", "Nome", "Data"])

    assert mapping.failure is ResolutionFailure.MISSING_TIME


def test_cell_tolerates_short_rows() -> None:
    mapping = resolve_checkin_columns(["Inscrição", "Nome", "Data", "Hora"])

    assert mapping.cell([" A42 "], ColumnField.REGISTRATION) == "A42"
    assert mapping.cell(["A42"], ColumnField.TIME) == ""
