"""
Dashboard state machine.

All state changes go through fold(state, event), which returns the new
DashboardState plus the commands (side effects) the front-end must run.
fold never performs I/O and never reads the clock: timestamps come in on the
events themselves, so the same (state, event) always yields the same result.

States:
  - Splash: splash_visible is True (keys and data are still folded)
  - Main: one of the three panes is focused
  - Modal: a LogViewerState is open and takes the keyboard

Transitions:
  - Splash -> Main on a Tick once the splash timer elapsed and data arrived
  - Main -> Modal on "l" in the Pods pane with a non-empty pod list
  - Modal -> Main on esc / q / ctrl+c
"""

import logging
from dataclasses import replace
from types import MappingProxyType
from typing import List, Optional, Tuple

from . import logviewer
from .events import (
    Command, CollectorFailed, ContextLoaded, EchoSize, Event, FetchLogs,
    HealthLoaded, IssueCountsLoaded, IssuesLoaded, KeyPressed, PodLogsLoaded,
    PodsLoaded, Poll, Quit, Resized, SplashTimerElapsed, Tick,
)
from .model import DashboardState, Pane, Source
from .scheduler import RefreshScheduler

logger = logging.getLogger(__name__)

Transition = Tuple[DashboardState, List[Command]]

QUIT_KEYS = ("ctrl+c", "q")
MODAL_DISMISS_KEYS = ("escape", "esc", "q", "ctrl+c")
NEXT_PANE_KEYS = ("tab",)
PREVIOUS_PANE_KEYS = ("shift+tab",)
UP_KEYS = ("up", "k")
DOWN_KEYS = ("down", "j")
OPEN_LOGS_KEYS = ("l",)

_default_scheduler = RefreshScheduler()


def initial_state() -> DashboardState:
    return DashboardState()


def _with_error(state: DashboardState, source: Source, message: Optional[str]) -> DashboardState:
    errors = dict(state.errors)
    if message is None:
        if source not in errors:
            return state
        errors.pop(source)
    else:
        errors[source] = message
    return replace(state, errors=MappingProxyType(errors))


def _loaded(state: DashboardState, source: Source, **changes) -> DashboardState:
    """Apply a successful collector result and clear that source's error."""
    return _with_error(replace(state, **changes), source, None)


# --- Keyboard ---

def _move_pod(state: DashboardState, delta: int) -> DashboardState:
    count = len(state.pods.pod_names)
    if state.active_pane != Pane.PODS or count == 0:
        return state
    return replace(state, selected_pod_index=(state.selected_pod_index + delta) % count)


def _open_logs(state: DashboardState) -> Transition:
    pod = state.selected_pod if state.active_pane == Pane.PODS else None
    if pod is None:
        return state, []
    logger.debug(f"Opening log viewer for {pod}")
    new_state = replace(state, modal=logviewer.open_viewer(pod))
    return new_state, [EchoSize(state.width, state.height), FetchLogs(pod)]


def _on_modal_key(state: DashboardState, key: str) -> Transition:
    if key in MODAL_DISMISS_KEYS:
        return replace(state, modal=None), []
    return replace(state, modal=logviewer.handle_key(state.modal, key)), []


def _on_key(state: DashboardState, event: KeyPressed, scheduler: RefreshScheduler) -> Transition:
    key = event.key
    if state.modal_active:
        return _on_modal_key(state, key)

    if key in QUIT_KEYS:
        return replace(state, quitting=True), [Quit()]
    if key in NEXT_PANE_KEYS:
        return replace(state, active_pane=state.active_pane.next(), selected_pod_index=0), []
    if key in PREVIOUS_PANE_KEYS:
        return replace(state, active_pane=state.active_pane.previous(), selected_pod_index=0), []
    if key in UP_KEYS:
        return _move_pod(state, -1), []
    if key in DOWN_KEYS:
        return _move_pod(state, 1), []
    if key in OPEN_LOGS_KEYS:
        return _open_logs(state)
    return state, []


# --- Timers and terminal ---

def _on_tick(state: DashboardState, event: Tick, scheduler: RefreshScheduler) -> Transition:
    if state.splash_visible and state.splash_timer_elapsed and state.first_data_arrived:
        state = replace(state, splash_visible=False)
    commands: List[Command] = [Poll(source) for source in scheduler.batch(state, event.now)]
    return state, commands


def _on_splash_timer(state: DashboardState, event: SplashTimerElapsed, scheduler: RefreshScheduler) -> Transition:
    return replace(state, splash_timer_elapsed=True), []


def _on_resize(state: DashboardState, event: Resized, scheduler: RefreshScheduler) -> Transition:
    state = replace(state, width=event.width, height=event.height)
    if state.modal_active:
        state = replace(state, modal=logviewer.resize(state.modal, event.width, event.height))
    return state, []


# --- Collector results ---

def _on_issues(state: DashboardState, event: IssuesLoaded, scheduler: RefreshScheduler) -> Transition:
    return _loaded(
        state, Source.ISSUES,
        issues=tuple(event.projects),
        last_issue_refresh=event.completed_at,
        first_data_arrived=True,
    ), []


def _on_issue_counts(state: DashboardState, event: IssueCountsLoaded, scheduler: RefreshScheduler) -> Transition:
    return _loaded(state, Source.ISSUE_COUNTS, issue_counts=tuple(event.counts), first_data_arrived=True), []


def _on_pods(state: DashboardState, event: PodsLoaded, scheduler: RefreshScheduler) -> Transition:
    index = state.selected_pod_index
    if index >= len(event.snapshot.pod_names):
        index = 0
    return _loaded(
        state, Source.PODS,
        pods=event.snapshot,
        selected_pod_index=index,
        first_data_arrived=True,
    ), []


def _on_context(state: DashboardState, event: ContextLoaded, scheduler: RefreshScheduler) -> Transition:
    return _loaded(state, Source.CONTEXT, cluster_context=event.context), []


def _on_health(state: DashboardState, event: HealthLoaded, scheduler: RefreshScheduler) -> Transition:
    return _loaded(state, Source.HEALTH, health=tuple(event.results), first_data_arrived=True), []


def _viewer_for(state: DashboardState, pod_name: str):
    if state.modal_active and state.modal.pod_name == pod_name:
        return state.modal
    return None


def _on_pod_logs(state: DashboardState, event: PodLogsLoaded, scheduler: RefreshScheduler) -> Transition:
    viewer = _viewer_for(state, event.pod_name)
    if viewer is None:
        # modal was dismissed or moved on to another pod
        return state, []
    return _loaded(state, Source.LOGS, modal=logviewer.set_logs(viewer, event.text)), []


def _on_failure(state: DashboardState, event: CollectorFailed, scheduler: RefreshScheduler) -> Transition:
    state = _with_error(state, event.source, event.message)
    if event.source == Source.LOGS:
        viewer = _viewer_for(state, event.pod_name)
        if viewer is not None:
            state = replace(state, modal=logviewer.set_error(viewer, event.message))
    return state, []


_HANDLERS = {
    KeyPressed: _on_key,
    Tick: _on_tick,
    SplashTimerElapsed: _on_splash_timer,
    Resized: _on_resize,
    IssuesLoaded: _on_issues,
    IssueCountsLoaded: _on_issue_counts,
    PodsLoaded: _on_pods,
    ContextLoaded: _on_context,
    HealthLoaded: _on_health,
    PodLogsLoaded: _on_pod_logs,
    CollectorFailed: _on_failure,
}


def fold(state: DashboardState, event: Event,
         scheduler: Optional[RefreshScheduler] = None) -> Transition:
    """Fold one event into the state; returns (new_state, commands)."""
    handler = _HANDLERS.get(type(event))
    if handler is None:
        logger.warning(f"Ignoring unknown event {event!r}")
        return state, []
    return handler(state, event, scheduler or _default_scheduler)
