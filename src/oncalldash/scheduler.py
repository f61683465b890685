"""
Refresh cadence.

A tick every TICK_INTERVAL seconds polls pods, context, health and issue
counts. The issue list is more expensive and is only re-fetched when the
last successful refresh is at least ISSUE_REFRESH_INTERVAL seconds old, or
when none has completed yet. The timers themselves are armed by the
front-end; this module only decides what a tick polls.
"""

from typing import List, Optional

from .model import DashboardState, Source

TICK_INTERVAL = 15.0
ISSUE_REFRESH_INTERVAL = 60.0
SPLASH_DELAY = 1.2

ALWAYS_POLLED = (Source.PODS, Source.CONTEXT, Source.HEALTH, Source.ISSUE_COUNTS)


def issue_refresh_due(now: float, last_issue_refresh: Optional[float],
                      interval: float = ISSUE_REFRESH_INTERVAL) -> bool:
    if last_issue_refresh is None:
        return True
    return now - last_issue_refresh >= interval


def poll_batch(now: float, last_issue_refresh: Optional[float],
               issue_refresh_interval: float = ISSUE_REFRESH_INTERVAL) -> List[Source]:
    batch = list(ALWAYS_POLLED)
    if issue_refresh_due(now, last_issue_refresh, issue_refresh_interval):
        batch.append(Source.ISSUES)
    return batch


class RefreshScheduler:
    """Holds the configured intervals; shared read-only by fold and front-end."""

    def __init__(self, tick_interval: float = TICK_INTERVAL,
                 issue_refresh_interval: float = ISSUE_REFRESH_INTERVAL,
                 splash_delay: float = SPLASH_DELAY):
        self.tick_interval = tick_interval
        self.issue_refresh_interval = issue_refresh_interval
        self.splash_delay = splash_delay

    @classmethod
    def from_config(cls, refresh_config) -> "RefreshScheduler":
        return cls(
            tick_interval=refresh_config.tick_interval,
            issue_refresh_interval=refresh_config.issue_refresh_interval,
            splash_delay=refresh_config.splash_delay,
        )

    def batch(self, state: DashboardState, now: float) -> List[Source]:
        return poll_batch(now, state.last_issue_refresh, self.issue_refresh_interval)
