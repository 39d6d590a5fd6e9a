from __future__ import annotations

import json
import threading
import time
from datetime import datetime, timedelta, timezone

import pytest
import requests
from fastapi.testclient import TestClient
from gspread.exceptions import APIError

from checkin_api.core.config import Settings
from checkin_api.main import create_app

EVENT_TZ = timezone(timedelta(hours=-3))


def at(day: int, hour: int, minute: int = 0, second: int = 0) -> datetime:
    """Local event time in August 2025"""
    return datetime(2025, 8, day, hour, minute, second, tzinfo=EVENT_TZ)


def api_error(status: int) -> APIError:
    response = requests.Response()
    response.status_code = status
    response._content = json.dumps(
        {"error": {"code": status, "message": "boom", "status": "ERROR"}}
    ).encode("utf-8")
    return APIError(response)


class FakeWorksheet:
    def __init__(self, title: str, values: list[list[str]], append_delay: float = 0.0) -> None:
        self.title = title
        self.values = [list(row) for row in values]
        self.failures: list[Exception] = []
        self.append_calls = 0
        self.append_delay = append_delay
        self._lock = threading.Lock()

    def get_all_values(self) -> list[list[str]]:
        return [list(row) for row in self.values]

    def append_row(self, values, value_input_option=None) -> None:
        with self._lock:
            self.append_calls += 1
            if self.failures:
                raise self.failures.pop(0)
        if self.append_delay:
            time.sleep(self.append_delay)
        with self._lock:
            self.values.append(list(values))


class FakeGateway:
    def __init__(self, worksheets: list[FakeWorksheet]) -> None:
        self.worksheets = {ws.title: ws for ws in worksheets}
        self.error: Exception | None = None
        self.on_open = None
        self.calls = 0

    def open_worksheets(self) -> dict[str, FakeWorksheet]:
        self.calls += 1
        if self.on_open is not None:
            self.on_open()
        if self.error is not None:
            raise self.error
        return dict(self.worksheets)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


CHECKIN_HEADER = ["NUMERO DE INSCRIÇÃO", "NOME", "DATA", "HORÁRIO"]


def profile_sheets() -> list[FakeWorksheet]:
    return [
        FakeWorksheet("Conselheiros", [
            ["Nome Completo", "CPF", "Status da Inscrição", "Nº de Inscrição"],
            ["Ana Lima", "111.222.333-44", "Confirmada", "C-01"],
            ["Bruno Reis", "55566677788", "Pendente", ""],
            ["Sem CPF", "", "Confirmada", "C-99"],
        ]),
        FakeWorksheet("Palestrantes", [
            ["Nome", "CPF", "Inscrição"],
            ["Bruno Reis (palestrante)", "555.666.777-88", "P-07"],
            ["Ana Lima Palestrante", "11122233344", "P-08"],
        ]),
        FakeWorksheet("Staffs", [
            ["NOME", "CPF", "INSCRIÇÃO"],
            ["Maria Souza", "123.456.789-01", "A42"],
            ["Carlos Dias", "99988877766", ""],
        ]),
    ]


def day_sheets() -> list[FakeWorksheet]:
    return [
        FakeWorksheet("Dia1", [CHECKIN_HEADER]),
        FakeWorksheet("Dia2", [CHECKIN_HEADER, ["C-01", "Ana Lima", "13/08/2025", "08:45"]]),
    ]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        SHEET_ID="test-sheet",
        PROFILE_SHEETS=["Conselheiros", "Palestrantes", "Staffs", "Imprensa"],
        APPEND_BASE_DELAY_SECONDS=0.0,
        REFRESH_INTERVAL_MINUTES=60,
    )


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway(profile_sheets() + day_sheets())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(at(12, 10, 0))


@pytest.fixture
def app(settings, gateway, clock):
    return create_app(settings, gateway=gateway, clock=clock)


@pytest.fixture
def ready_app(app):
    app.state.refresher.refresh()
    return app


@pytest.fixture
def client(ready_app) -> TestClient:
    return TestClient(ready_app)
