from __future__ import annotations

from dataclasses import dataclass, field

import pytest
import requests

from issuewindow import retry

# Constants for test expectations
FIRST_SUCCESS_ATTEMPT = 2  # transient once then success
EXPECTED_RETRY_COUNT = 2  # total attempts when one retry occurs


@dataclass
class _Response:
    status_code: int
    text: str = ""
    headers: dict[str, str] = field(default_factory=dict)


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    slept: list[float] = []
    monkeypatch.setattr(retry.time, "sleep", slept.append)
    return slept


def test_is_transient_tokens():
    assert retry.is_transient('Rate Limit exceeded')
    assert retry.is_transient('secondary rate limit triggered')
    assert retry.is_transient('ABUSE DETECTION mechanism')
    assert not retry.is_transient('some other error')


def test_is_transient_response():
    assert retry.is_transient_response(_Response(503))
    assert retry.is_transient_response(_Response(403, "API rate limit exceeded"))
    assert not retry.is_transient_response(_Response(403, "Resource not accessible"))
    assert not retry.is_transient_response(_Response(404))
    assert not retry.is_transient_response(_Response(200))


def test_run_with_retries_transient_then_success():
    attempts: list[int] = []

    def fn():
        attempts.append(1)
        if len(attempts) < FIRST_SUCCESS_ATTEMPT:
            return _Response(502)
        return _Response(200, "ok")

    cfg = retry.RetryConfig(attempts=3, base_sleep=0.01)
    result = retry.run_with_retries(fn, cfg=cfg)
    assert result.text == 'ok'
    assert len(attempts) == EXPECTED_RETRY_COUNT


def test_run_with_retries_non_transient_returns_immediately():
    attempts: list[int] = []

    def fn():
        attempts.append(1)
        return _Response(404, "not found")

    result = retry.run_with_retries(fn, cfg=retry.RetryConfig(attempts=4, base_sleep=0.01))
    assert result.status_code == 404
    assert len(attempts) == 1


def test_run_with_retries_transient_exhausts_returns_last_response():
    attempts: list[int] = []

    def fn():
        attempts.append(1)
        return _Response(503)

    cfg = retry.RetryConfig(attempts=3, base_sleep=0.0)
    result = retry.run_with_retries(fn, cfg=cfg)
    assert result.status_code == 503
    assert len(attempts) == cfg.attempts


def test_connection_errors_retry_then_raise():
    attempts: list[int] = []

    def fn():
        attempts.append(1)
        raise requests.ConnectionError("connection reset by peer")

    cfg = retry.RetryConfig(attempts=3, base_sleep=0.0)
    with pytest.raises(requests.ConnectionError):
        retry.run_with_retries(fn, cfg=cfg)
    assert len(attempts) == cfg.attempts


def test_other_exceptions_propagate_immediately():
    attempts: list[int] = []

    def fn():
        attempts.append(1)
        raise ValueError("bad")

    with pytest.raises(ValueError):
        retry.run_with_retries(fn, cfg=retry.RetryConfig(attempts=3, base_sleep=0.0))
    assert len(attempts) == 1


def test_retry_after_header_is_honoured(_no_sleep):
    responses = [_Response(503, headers={"Retry-After": "7"}), _Response(200)]
    retry.run_with_retries(lambda: responses.pop(0), cfg=retry.RetryConfig(attempts=2, base_sleep=0.0))
    assert _no_sleep == [7.0]


def test_max_sleep_cap(monkeypatch, _no_sleep):
    monkeypatch.setenv("ISSUEWINDOW_RETRY_MAX_SLEEP", "2")
    responses = [_Response(503, headers={"Retry-After": "30"}), _Response(200)]
    retry.run_with_retries(lambda: responses.pop(0), cfg=retry.RetryConfig(attempts=2, base_sleep=0.0))
    assert _no_sleep == [2.0]


def test_retry_config_reads_environment(monkeypatch):
    monkeypatch.setenv("ISSUEWINDOW_RETRY_ATTEMPTS", "5")
    monkeypatch.setenv("ISSUEWINDOW_RETRY_BASE", "0.1")
    cfg = retry.RetryConfig()
    assert cfg.attempts == 5
    assert cfg.base_sleep == 0.1


def test_malformed_retry_environment_falls_back_to_defaults(monkeypatch):
    monkeypatch.setenv("ISSUEWINDOW_RETRY_ATTEMPTS", "three")
    monkeypatch.setenv("ISSUEWINDOW_RETRY_BASE", "fast")
    cfg = retry.RetryConfig()
    assert cfg.attempts == 3
    assert cfg.base_sleep == 0.5
