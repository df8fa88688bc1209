"""Unit tests for the readiness poller."""

from __future__ import annotations

import time

import pytest
from conftest import FakeRosaClient
from tenacity import stop_after_attempt

from profile_manager.config import TestConfig
from profile_manager.errors import ClusterStateError, ClusterTimeoutError
from profile_manager.poller import record_cluster_install_log, wait_for_cluster_ready


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _wait(client: FakeRosaClient, settings: TestConfig, sleep: SleepRecorder, **kwargs) -> None:
    wait_for_cluster_ready(client, "my-cluster", kwargs.pop("timeout", 60), settings, sleep=sleep, **kwargs)


def test_installing_then_ready_takes_two_ticks(settings: TestConfig) -> None:
    client = FakeRosaClient(states=["Installing", "Ready"])
    sleep = SleepRecorder()
    _wait(client, settings, sleep)

    assert client.describe_count == 2
    assert sleep.calls == [120]


def test_states_are_matched_case_insensitively(settings: TestConfig) -> None:
    client = FakeRosaClient(states=["pending", "validating", "ready"])
    _wait(client, settings, SleepRecorder())

    assert client.describe_count == 3


def test_ready_must_match_the_whole_state(settings: TestConfig) -> None:
    client = FakeRosaClient(states=["ready-ish"])

    with pytest.raises(ClusterStateError, match="unknown cluster state ready-ish"):
        _wait(client, settings, SleepRecorder())


def test_error_state_captures_install_log_once(settings: TestConfig) -> None:
    client = FakeRosaClient(states=["Error: insufficient quota"])

    with pytest.raises(ClusterStateError, match="Error"):
        _wait(client, settings, SleepRecorder())

    assert client.names().count("install_log") == 1
    assert settings.install_log_file.read_text() == "level=error msg=quota exceeded"


def test_waiting_too_long_is_reported_as_stuck(settings: TestConfig) -> None:
    client = FakeRosaClient(states=["Pending", "Waiting", "Waiting", "Waiting", "Waiting"])
    sleep = SleepRecorder()

    with pytest.raises(ClusterStateError, match="stuck"):
        _wait(client, settings, sleep)

    # the fourth Waiting tick fails after three Waiting sleeps
    assert client.describe_count == 5
    assert len(sleep.calls) == 4


def test_waiting_budget_is_not_reset_between_waiting_spells(settings: TestConfig) -> None:
    client = FakeRosaClient(states=["Waiting", "Installing", "Waiting", "Installing", "Waiting", "Installing",
                                    "Waiting", "Ready"])

    with pytest.raises(ClusterStateError, match="stuck"):
        _wait(client, settings, SleepRecorder())

    assert client.describe_count == 7


def test_uninstalling_is_terminal(settings: TestConfig) -> None:
    client = FakeRosaClient(states=["Installing", "Uninstalling"])

    with pytest.raises(ClusterStateError, match="Uninstalling"):
        _wait(client, settings, SleepRecorder())
    assert "install_log" not in client.names()


def test_unknown_state_is_terminal(settings: TestConfig) -> None:
    client = FakeRosaClient(states=["Hibernating"])

    with pytest.raises(ClusterStateError, match="unknown cluster state Hibernating"):
        _wait(client, settings, SleepRecorder())


def test_deadline_raises_timeout(settings: TestConfig) -> None:
    client = FakeRosaClient(states=["Installing"])

    with pytest.raises(ClusterTimeoutError, match="after 60 mins"):
        _wait(client, settings, SleepRecorder(), stop=stop_after_attempt(3))

    assert client.describe_count == 3


class FakeClock:
    """Monotonic clock that only moves when the poller sleeps."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    fake = FakeClock()
    monkeypatch.setattr(time, "monotonic", fake)
    return fake


def test_no_describe_after_the_deadline(settings: TestConfig, clock: FakeClock) -> None:
    client = FakeRosaClient(states=["Installing", "Installing", "Ready"])

    with pytest.raises(ClusterTimeoutError, match="after 3 mins"):
        wait_for_cluster_ready(client, "my-cluster", 3, settings, sleep=clock.sleep)

    # a third tick would start at 240s, past the 180s deadline
    assert client.describe_count == 2
    assert clock.now == 120


def test_ready_before_the_deadline(settings: TestConfig, clock: FakeClock) -> None:
    client = FakeRosaClient(states=["Installing", "Installing", "Ready"])
    wait_for_cluster_ready(client, "my-cluster", 5, settings, sleep=clock.sleep)

    assert client.describe_count == 3
    assert clock.now == 240


def test_record_cluster_install_log(settings: TestConfig) -> None:
    path = record_cluster_install_log(FakeRosaClient(), "my-cluster", settings)

    assert path == settings.install_log_file
    assert path.read_text() == "level=error msg=quota exceeded"
