from oncalldash.config import RefreshConfig
from oncalldash.model import DashboardState, Source
from oncalldash.scheduler import (
    ALWAYS_POLLED, ISSUE_REFRESH_INTERVAL, RefreshScheduler, issue_refresh_due, poll_batch,
)


def test_issue_refresh_due_without_previous_refresh():
    assert issue_refresh_due(0.0, None)


def test_issue_refresh_due_boundaries():
    assert not issue_refresh_due(159.9, 100.0)
    assert issue_refresh_due(160.0, 100.0)
    assert issue_refresh_due(500.0, 100.0)


def test_poll_batch_always_includes_cheap_sources():
    batch = poll_batch(10.0, 5.0)
    assert batch == list(ALWAYS_POLLED)
    assert Source.ISSUES not in batch


def test_poll_batch_appends_issue_list_when_due():
    assert poll_batch(10.0, None) == list(ALWAYS_POLLED) + [Source.ISSUES]
    assert Source.ISSUES in poll_batch(ISSUE_REFRESH_INTERVAL, 0.0)


def test_scheduler_from_config():
    scheduler = RefreshScheduler.from_config(
        RefreshConfig(tick_interval=5.0, issue_refresh_interval=30.0, splash_delay=0.5)
    )
    assert scheduler.tick_interval == 5.0
    assert scheduler.issue_refresh_interval == 30.0
    assert scheduler.splash_delay == 0.5


def test_scheduler_batch_reads_last_refresh_from_state():
    scheduler = RefreshScheduler(issue_refresh_interval=30.0)
    state = DashboardState(last_issue_refresh=100.0)
    assert Source.ISSUES not in scheduler.batch(state, 129.0)
    assert Source.ISSUES in scheduler.batch(state, 130.0)
