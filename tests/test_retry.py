from __future__ import annotations

import pytest
import requests

from checkin_api.services.sheets import is_rate_limited, is_transient
from checkin_api.utils.retry import RetryPolicy, with_retry

from conftest import api_error


class Flaky:
    def __init__(self, errors: list[Exception]) -> None:
        self.errors = list(errors)
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "done"


def test_backoff_doubles_from_base_delay() -> None:
    policy = RetryPolicy(max_attempts=3, base_delay_seconds=0.3)

    assert [policy.delay_for(n) for n in (1, 2, 3)] == pytest.approx([0.3, 0.6, 1.2])


def test_retries_transient_errors_until_success() -> None:
    sleeps: list[float] = []
    func = Flaky([api_error(429), requests.exceptions.ConnectionError("reset")])

    result = with_retry(func, RetryPolicy(retryable=is_transient), sleep=sleeps.append)

    assert result == "done"
    assert func.calls == 3
    assert sleeps == pytest.approx([0.3, 0.6])


def test_gives_up_after_max_attempts() -> None:
    sleeps: list[float] = []
    func = Flaky([api_error(429)] * 5)

    with pytest.raises(Exception) as info:
        with_retry(func, RetryPolicy(max_attempts=3, retryable=is_transient), sleep=sleeps.append)

    assert is_rate_limited(info.value)
    assert func.calls == 3
    assert len(sleeps) == 2


def test_non_transient_error_propagates_immediately() -> None:
    sleeps: list[float] = []
    func = Flaky([api_error(403)])

    with pytest.raises(Exception):
        with_retry(func, RetryPolicy(retryable=is_transient), sleep=sleeps.append)

    assert func.calls == 1
    assert sleeps == []


@pytest.mark.parametrize(
    ("exc", "transient"),
    [
        (api_error(429), True),
        (api_error(500), False),
        (requests.exceptions.ReadTimeout("slow"), True),
        (ConnectionResetError(), True),
        (ValueError("bad"), False),
    ],
)
def test_is_transient(exc: Exception, transient: bool) -> None:
    assert is_transient(exc) is transient
