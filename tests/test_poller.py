import pytest

from skyforge.exceptions import OperationError, OperationTimeoutError
from skyforge.poller import OperationPoller
from skyforge.reporter import ReportLevel
from skyforge.schemas.operations import (
    OperationErrorDetail,
    OperationSnapshot,
    StatusSnapshot,
)


def _ops(*statuses, errors=None):
    snaps = [OperationSnapshot(name="op-1", status=s) for s in statuses]
    if errors:
        snaps[-1] = OperationSnapshot(name="op-1", status=statuses[-1], errors=errors)
    return snaps


def test_operation_done_after_three_polls(mocker, poller, reporter, clock):
    fetch = mocker.Mock(side_effect=_ops("RUNNING", "RUNNING", "DONE"))

    result = poller.await_operation(fetch, "instance web-1")

    assert result.done
    assert fetch.call_count == 3
    # One sleep between each pair of polls
    assert clock.sleeps == [2, 2]


def test_status_changes_announced_and_repeats_heartbeat(mocker, poller, reporter):
    fetch = mocker.Mock(
        side_effect=[
            StatusSnapshot(status="PROVISIONING"),
            StatusSnapshot(status="STAGING"),
            StatusSnapshot(status="STAGING"),
            StatusSnapshot(status="RUNNING"),
        ]
    )

    poller.await_completion(fetch, "RUNNING")

    calls = [c.args for c in reporter.report.call_args_list]
    assert calls == [
        (ReportLevel.INFO, "Current status: PROVISIONING."),
        (ReportLevel.INFO, "Current status: STAGING."),
        (ReportLevel.PROGRESS, "."),
    ]


def test_already_at_desired_status_does_not_sleep(mocker, poller, clock):
    fetch = mocker.Mock(return_value=StatusSnapshot(status="READY"))

    snapshot = poller.await_completion(fetch, "READY")

    assert snapshot.status == "READY"
    assert fetch.call_count == 1
    assert clock.sleeps == []


def test_timeout_stops_polling(mocker, reporter, clock):
    poller = OperationPoller(
        reporter, timeout=10, poll_interval=2, sleep=clock.sleep, clock=clock
    )
    fetch = mocker.Mock(return_value=OperationSnapshot(name="op-1", status="RUNNING"))

    with pytest.raises(OperationTimeoutError) as exc:
        poller.await_operation(fetch, "instance web-1")

    # Polls at t=0,2,4,6,8,10; the deadline is hit after the sixth
    assert fetch.call_count == 6
    assert len(clock.sleeps) == 5
    assert exc.value.last_status == "RUNNING"
    assert "Check the Google Cloud Console" in str(exc.value)
    assert isinstance(exc.value, TimeoutError)


def test_timeout_shorter_than_interval_polls_once(mocker, reporter, clock):
    poller = OperationPoller(
        reporter, timeout=1, poll_interval=5, sleep=clock.sleep, clock=clock
    )
    fetch = mocker.Mock(return_value=StatusSnapshot(status="RUNNING"))

    with pytest.raises(OperationTimeoutError):
        poller.await_completion(fetch, "DONE")

    assert fetch.call_count == 1
    assert clock.sleeps == []


def test_status_reached_after_deadline_is_not_observed(mocker, reporter, clock):
    poller = OperationPoller(
        reporter, timeout=5, poll_interval=2, sleep=clock.sleep, clock=clock
    )
    # Polls at t=0,2,4; a poll at t=6 would see DONE
    fetch = mocker.Mock(
        side_effect=_ops("RUNNING", "RUNNING", "RUNNING", "DONE")
    )

    with pytest.raises(OperationTimeoutError) as exc:
        poller.await_operation(fetch, "instance web-1")

    assert fetch.call_count == 3
    assert clock.now <= 5
    assert exc.value.last_status == "RUNNING"


def test_per_call_timeout_and_interval_override(mocker, poller, clock):
    fetch = mocker.Mock(return_value=StatusSnapshot(status="RUNNING"))

    with pytest.raises(OperationTimeoutError):
        poller.await_completion(fetch, "DONE", timeout=3, poll_interval=1)

    assert clock.sleeps == [1, 1, 1]
    assert fetch.call_count == 4


def test_done_with_errors_raises_operation_error(mocker, poller, reporter):
    errors = [OperationErrorDetail(code="RESOURCE_EXHAUSTED", message="quota exceeded")]
    fetch = mocker.Mock(side_effect=_ops("RUNNING", "RUNNING", "DONE", errors=errors))

    with pytest.raises(OperationError) as exc:
        poller.await_operation(fetch, "instance web-1")

    assert exc.value.operation == "op-1"
    assert exc.value.errors == errors
    assert "quota exceeded" in str(exc.value)
    reporter.report.assert_any_call(
        ReportLevel.ERROR, "RESOURCE_EXHAUSTED: quota exceeded"
    )
    # DONE is terminal: never polled again to read the errors
    assert fetch.call_count == 3


def test_fetch_errors_propagate_without_retry(mocker, poller):
    fetch = mocker.Mock(side_effect=RuntimeError("connection reset"))

    with pytest.raises(RuntimeError, match="connection reset"):
        poller.await_completion(fetch, "DONE")

    assert fetch.call_count == 1
