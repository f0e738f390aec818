import pytest

from skyforge.core import Settings
from skyforge.gateway import ComputeGateway
from skyforge.poller import OperationPoller


class FakeClock:
    """Monotonic clock that only moves when something sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def reporter(mocker):
    rep = mocker.Mock()
    rep.confirm.return_value = True
    return rep


@pytest.fixture
def gateway(mocker):
    return mocker.create_autospec(ComputeGateway, instance=True)


@pytest.fixture
def settings():
    return Settings(
        project="my-project",
        zone="us-west1-b",
        wait_timeout=600,
        poll_interval=2,
        max_pages=20,
        page_size=100,
    )


@pytest.fixture
def poller(reporter, clock):
    return OperationPoller(
        reporter, timeout=600, poll_interval=2, sleep=clock.sleep, clock=clock
    )
