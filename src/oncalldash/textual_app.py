"""Textual-based UI for oncalldash."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Static

from .backend import OnCallBackend
from .config import AppConfig
from .events import (
    CollectorFailed, Command, EchoSize, Event, FetchLogs, KeyPressed, Poll, Quit, Resized,
    SplashTimerElapsed, Tick,
)
from .model import DashboardState, Pane, Source
from .scheduler import RefreshScheduler
from .state import fold, initial_state
from .styles import DEFAULT_THEME, Theme
from .ui import MODE_MAIN, MODE_MODAL, MODE_SPLASH, render

logger = logging.getLogger(__name__)

PANE_WIDGETS = {
    Pane.ERRORS: "#errors",
    Pane.ANALYTICS: "#analytics",
    Pane.PODS: "#pods",
}


class OnCallApp(App[None]):
    TITLE = "oncalldash"
    SUB_TITLE = "On-Call Dashboard"

    CSS = """
    Screen {
      layout: vertical;
    }

    #splash {
      width: 100%;
      height: 1fr;
      border: solid $accent;
      padding: 1 2;
      content-align: center middle;
    }

    #main {
      layout: vertical;
      height: 1fr;
    }

    #top {
      height: 1fr;
    }

    #left {
      width: 50%;
      height: 1fr;
    }

    .pane {
      height: 1fr;
      border: solid $panel;
      padding: 1 2;
      overflow: hidden;
    }

    .pane.focused {
      border: heavy $accent;
    }

    #pods {
      width: 50%;
    }

    #hints {
      height: 3;
      border: solid $panel;
      padding: 0 2;
      color: $text-muted;
    }

    #logview {
      height: 1fr;
      padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("q", "press('q')", "Quit", priority=True),
        Binding("ctrl+c", "press('ctrl+c')", "Quit", show=False, priority=True),
        Binding("tab", "press('tab')", "Next Pane", priority=True),
        Binding("shift+tab", "press('shift+tab')", "Previous Pane", show=False, priority=True),
        Binding("up", "press('up')", "Up", show=False, priority=True),
        Binding("down", "press('down')", "Down", show=False, priority=True),
        Binding("k", "press('k')", "Up", show=False, priority=True),
        Binding("j", "press('j')", "Down", show=False, priority=True),
        Binding("l", "press('l')", "Logs", priority=True),
        Binding("escape", "press('escape')", "Back", show=False, priority=True),
        Binding("pageup", "press('pageup')", "Page Up", show=False, priority=True),
        Binding("pagedown", "press('pagedown')", "Page Down", show=False, priority=True),
        Binding("home", "press('home')", "Top", show=False, priority=True),
        Binding("end", "press('end')", "Bottom", show=False, priority=True),
    ]

    def __init__(self, config: AppConfig, backend: Optional[OnCallBackend] = None,
                 theme: Theme = DEFAULT_THEME) -> None:
        super().__init__()
        self.app_config = config
        self.backend = backend or OnCallBackend(config)
        self.scheduler = RefreshScheduler.from_config(config.refresh)
        self.dashboard_theme = theme
        self.dashboard: DashboardState = initial_state()
        self._in_flight: set[Source] = set()
        self._view_ready = False

    def compose(self) -> ComposeResult:
        yield Static("", id="splash")
        yield Vertical(
            Horizontal(
                Vertical(
                    Static("", id="errors", classes="pane"),
                    Static("", id="analytics", classes="pane"),
                    id="left",
                ),
                Static("", id="pods", classes="pane"),
                id="top",
            ),
            Static("", id="hints"),
            id="main",
        )
        yield Static("", id="logview")

    def on_mount(self) -> None:
        self._view_ready = True
        self.set_interval(self.scheduler.tick_interval, self._tick)
        self.set_timer(self.scheduler.splash_delay, self._splash_elapsed)
        self.fold_event(Resized(self.size.width, self.size.height))
        # initial fetch of every source
        self._tick()

    def on_resize(self, event: events.Resize) -> None:
        self.fold_event(Resized(event.size.width, event.size.height))

    def _tick(self) -> None:
        self.fold_event(Tick(self.backend.clock()))

    def _splash_elapsed(self) -> None:
        self.fold_event(SplashTimerElapsed())

    def action_press(self, key: str) -> None:
        self.fold_event(KeyPressed(key))

    # --- event loop ---

    def fold_event(self, event: Event) -> None:
        """Fold one event, re-render, then run the commands it produced."""
        self.dashboard, commands = fold(self.dashboard, event, self.scheduler)
        self._render()
        for command in commands:
            self._execute(command)

    def _execute(self, command: Command) -> None:
        if isinstance(command, Quit):
            self.exit()
        elif isinstance(command, EchoSize):
            # folded as its own event after this one
            self.call_later(self.fold_event, Resized(command.width, command.height))
        elif isinstance(command, FetchLogs):
            self.run_worker(self._fetch_logs(command.pod_name), group="logs", exclusive=True)
        elif isinstance(command, Poll):
            if command.source in self._in_flight:
                logger.debug(f"Skipping poll of {command.source.value}, previous one still running")
                return
            self._in_flight.add(command.source)
            self.run_worker(self._collect(command.source), group=f"poll-{command.source.value}")

    async def _collect(self, source: Source) -> None:
        try:
            event = await asyncio.to_thread(self.backend.collect, source)
        except Exception as e:
            logger.error(f"Unexpected error collecting {source.value}: {e}", exc_info=True)
            event = CollectorFailed(source=source, message=str(e))
        finally:
            self._in_flight.discard(source)
        self.fold_event(event)

    async def _fetch_logs(self, pod_name: str) -> None:
        try:
            event = await asyncio.to_thread(self.backend.fetch_logs, pod_name)
        except Exception as e:
            logger.error(f"Unexpected error fetching logs for {pod_name}: {e}", exc_info=True)
            event = CollectorFailed(source=Source.LOGS, message=str(e), pod_name=pod_name)
        self.fold_event(event)

    # --- view ---

    def _render(self) -> None:
        if not self._view_ready:
            return
        view = render(self.dashboard, self.dashboard_theme)

        splash = self.query_one("#splash", Static)
        main = self.query_one("#main", Vertical)
        logview = self.query_one("#logview", Static)
        splash.display = view.mode == MODE_SPLASH
        main.display = view.mode == MODE_MAIN
        logview.display = view.mode == MODE_MODAL

        if view.mode == MODE_SPLASH:
            splash.update(view.splash)
            return
        if view.mode == MODE_MODAL:
            logview.update(view.log_view)
            return

        self.query_one("#errors", Static).update(view.errors)
        self.query_one("#analytics", Static).update(view.analytics)
        self.query_one("#pods", Static).update(view.pods)
        self.query_one("#hints", Static).update(view.hints)
        for pane, selector in PANE_WIDGETS.items():
            self.query_one(selector, Static).set_class(pane == view.active_pane, "focused")


def run(config: AppConfig) -> None:
    app = OnCallApp(config)
    app.run()
