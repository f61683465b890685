"""
Data models and structures for oncalldash application state.

This module defines the dataclasses that flow between the collectors, the
state machine and the renderer. Everything here is frozen: collectors build
fresh records on every poll and the state machine produces a new
DashboardState per event via dataclasses.replace.

Data Classes:
  - IssueRecord / ProjectIssues: parsed sentry-cli issue rows per project
  - IssueCount: coarse issue totals per project
  - GroupHealth / HealthResult: health endpoint results, with nested groups
  - PodSnapshot: kubectl display table plus row-aligned pod names
  - LogViewerState: modal log viewer (only while the modal is open)
  - DashboardState: the single authoritative dashboard state

Enums:
  - Pane: ERRORS, ANALYTICS, PODS (cycled with next()/previous())
  - Source: one value per collector, used to route events and errors
  - Status: OK / FAIL / UNKNOWN health classification
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


class Pane(IntEnum):
    ERRORS = 0
    ANALYTICS = 1
    PODS = 2

    def next(self) -> "Pane":
        return Pane((self + 1) % len(Pane))

    def previous(self) -> "Pane":
        return Pane((self - 1) % len(Pane))


class Source(Enum):
    ISSUES = "issues"
    ISSUE_COUNTS = "issue_counts"
    PODS = "pods"
    CONTEXT = "context"
    HEALTH = "health"
    LOGS = "logs"


class Status(Enum):
    OK = "OK"
    FAIL = "FAIL"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class IssueRecord:
    issue_id: str = ""
    short_id: str = ""
    title: str = ""
    last_seen: str = ""
    status: str = ""  # resolved, ignored, unresolved, ...
    level: str = ""   # error, fatal, warning, info, debug, ...


@dataclass(frozen=True)
class ProjectIssues:
    project: str
    issues: Tuple[IssueRecord, ...] = ()


@dataclass(frozen=True)
class IssueCount:
    project: str
    total: int


@dataclass(frozen=True)
class GroupHealth:
    name: str
    status_text: str
    status: Status


@dataclass(frozen=True)
class HealthResult:
    service_name: str
    latency_ms: int = 0
    status_text: str = ""
    status: Status = Status.UNKNOWN
    groups: Tuple[GroupHealth, ...] = ()
    error: Optional[str] = None  # set when the service request itself failed


@dataclass(frozen=True)
class PodSnapshot:
    """Display table and pod names; pod_names[i] is data row i + 1 of table."""
    table: str = ""
    pod_names: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LogViewerState:
    pod_name: str
    log_text: str = ""
    width: int = 0
    height: int = 0
    offset: int = 0
    ready: bool = False


def _empty_errors() -> Mapping[Source, str]:
    return MappingProxyType({})


@dataclass(frozen=True)
class DashboardState:
    active_pane: Pane = Pane.ERRORS
    selected_pod_index: int = 0
    issues: Tuple[ProjectIssues, ...] = ()
    issue_counts: Tuple[IssueCount, ...] = ()
    health: Tuple[HealthResult, ...] = ()
    pods: PodSnapshot = field(default_factory=PodSnapshot)
    cluster_context: str = ""
    last_issue_refresh: Optional[float] = None
    splash_visible: bool = True
    splash_timer_elapsed: bool = False
    first_data_arrived: bool = False
    modal: Optional[LogViewerState] = None
    width: int = 0
    height: int = 0
    errors: Mapping[Source, str] = field(default_factory=_empty_errors)
    quitting: bool = False

    @property
    def modal_active(self) -> bool:
        return self.modal is not None

    @property
    def selected_pod(self) -> Optional[str]:
        names = self.pods.pod_names
        if 0 <= self.selected_pod_index < len(names):
            return names[self.selected_pod_index]
        return None
