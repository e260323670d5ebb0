"""
Tests for retry with exponential backoff.
"""

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import HumanMessage

from utils.llm_clients import complete
from utils.retry import calculate_delay, is_retryable_error, retry_with_backoff


class FlakyCall:
    def __init__(self, failures, error):
        self.failures = failures
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


def test_retries_transient_errors_until_success():
    delays = []
    flaky = FlakyCall(2, Exception("429 Too Many Requests"))

    result = retry_with_backoff(max_retries=3, base_delay=1.0, max_delay=10.0, sleep=delays.append)(flaky)()

    assert result == "ok"
    assert flaky.calls == 3
    assert len(delays) == 2
    assert 1.0 <= delays[0] <= 1.3
    assert 2.0 <= delays[1] <= 2.6


def test_gives_up_after_max_retries():
    delays = []
    flaky = FlakyCall(10, TimeoutError("timed out"))

    with pytest.raises(TimeoutError):
        retry_with_backoff(max_retries=2, base_delay=0.1, sleep=delays.append)(flaky)()

    assert flaky.calls == 3
    assert len(delays) == 2


def test_non_retryable_error_is_raised_immediately():
    delays = []
    flaky = FlakyCall(1, ValueError("invalid api key"))

    with pytest.raises(ValueError):
        retry_with_backoff(max_retries=3, sleep=delays.append)(flaky)()

    assert flaky.calls == 1
    assert delays == []


def test_custom_retry_predicate():
    flaky = FlakyCall(1, ValueError("anything"))

    result = retry_with_backoff(max_retries=1, should_retry=lambda e: True, sleep=lambda s: None)(flaky)()

    assert result == "ok"


def test_zero_retries_means_single_attempt():
    flaky = FlakyCall(1, ConnectionError("reset"))

    with pytest.raises(ConnectionError):
        retry_with_backoff(max_retries=0, sleep=lambda s: None)(flaky)()

    assert flaky.calls == 1


@pytest.mark.parametrize("message,expected", [
    ("Rate limit exceeded", True),
    ("HTTP 503 Service Unavailable", True),
    ("Request timed out", True),
    ("ECONNRESET", True),
    ("Network unreachable", True),
    ("Invalid request: model not found", False),
])
def test_is_retryable_error(message, expected):
    assert is_retryable_error(Exception(message)) is expected


def test_delay_is_capped():
    for attempt in range(10):
        assert calculate_delay(attempt, 1.0, 10.0) <= 10.0
    assert calculate_delay(0, 1.0, 10.0) >= 1.0


def test_complete_returns_response_text():
    llm = FakeListChatModel(responses=['{"queries": []}'])

    assert complete(llm, [HumanMessage(content="hi")], sleep=lambda s: None) == '{"queries": []}'
