import base64
import binascii
import json
import logging
from typing import Dict, Optional

import gspread
import requests
from google.auth.exceptions import TransportError
from google.oauth2.service_account import Credentials
from gspread.exceptions import APIError

from checkin_api.core.config import Settings

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


class SheetsConfigError(RuntimeError):
    """Credentials or spreadsheet id missing or unreadable"""


def status_code_of(exc: Exception) -> Optional[int]:
    response = getattr(exc, "response", None)
    return getattr(response, "status_code", None)


def is_rate_limited(exc: Exception) -> bool:
    return isinstance(exc, APIError) and status_code_of(exc) == 429


def is_transient(exc: Exception) -> bool:
    """Rate limits and dropped or timed-out connections are worth retrying"""
    if is_rate_limited(exc):
        return True
    return isinstance(exc, (
        requests.exceptions.ConnectionError,
        requests.exceptions.Timeout,
        TransportError,
        ConnectionResetError,
        TimeoutError,
    ))


def load_service_account_info(settings: Settings) -> dict:
    """Service account JSON from GOOGLE_CREDENTIALS_B64 or GOOGLE_CREDENTIALS_JSON"""
    if settings.GOOGLE_CREDENTIALS_B64:
        try:
            raw = base64.b64decode(settings.GOOGLE_CREDENTIALS_B64).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise SheetsConfigError("GOOGLE_CREDENTIALS_B64 is not valid base64") from e
    elif settings.GOOGLE_CREDENTIALS_JSON:
        raw = settings.GOOGLE_CREDENTIALS_JSON
    else:
        raise SheetsConfigError(
            "Set GOOGLE_CREDENTIALS_B64 or GOOGLE_CREDENTIALS_JSON to the service account key"
        )

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise SheetsConfigError("Invalid service account JSON payload") from e


class SheetsGateway:
    """Opens the event spreadsheet and hands out its worksheets by title"""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _client(self) -> gspread.Client:
        info = load_service_account_info(self.settings)
        creds = Credentials.from_service_account_info(info, scopes=SCOPES)
        client = gspread.authorize(creds)
        client.set_timeout(self.settings.SHEETS_TIMEOUT_SECONDS)
        return client

    def open_worksheets(self) -> Dict[str, gspread.Worksheet]:
        if not self.settings.SHEET_ID:
            raise SheetsConfigError("SHEET_ID is not configured")

        spreadsheet = self._client().open_by_key(self.settings.SHEET_ID)
        worksheets = {ws.title: ws for ws in spreadsheet.worksheets()}
        logger.debug(f"Spreadsheet {spreadsheet.title} has sheets {list(worksheets)}")
        return worksheets
