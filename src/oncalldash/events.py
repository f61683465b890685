"""
Events folded into the dashboard state, and commands the fold asks for.

Events arrive one at a time on the event loop: user input, timers, terminal
resizes and collector results. Commands are the only way the state machine
requests side effects; the front-end executes them and feeds the outcome
back in as new events.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from .model import HealthResult, IssueCount, PodSnapshot, ProjectIssues, Source


# --- Events ---

@dataclass(frozen=True)
class Tick:
    now: float


@dataclass(frozen=True)
class SplashTimerElapsed:
    pass


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class IssuesLoaded:
    projects: Tuple[ProjectIssues, ...]
    completed_at: float


@dataclass(frozen=True)
class IssueCountsLoaded:
    counts: Tuple[IssueCount, ...]


@dataclass(frozen=True)
class PodsLoaded:
    snapshot: PodSnapshot


@dataclass(frozen=True)
class ContextLoaded:
    context: str


@dataclass(frozen=True)
class HealthLoaded:
    results: Tuple[HealthResult, ...]


@dataclass(frozen=True)
class PodLogsLoaded:
    pod_name: str
    text: str


@dataclass(frozen=True)
class CollectorFailed:
    source: Source
    message: str
    pod_name: str = ""  # set for Source.LOGS


Event = Union[
    Tick, SplashTimerElapsed, KeyPressed, Resized,
    IssuesLoaded, IssueCountsLoaded, PodsLoaded, ContextLoaded,
    HealthLoaded, PodLogsLoaded, CollectorFailed,
]


# --- Commands ---

@dataclass(frozen=True)
class Poll:
    source: Source


@dataclass(frozen=True)
class FetchLogs:
    pod_name: str


@dataclass(frozen=True)
class EchoSize:
    width: int
    height: int


@dataclass(frozen=True)
class Quit:
    pass


Command = Union[Poll, FetchLogs, EchoSize, Quit]
