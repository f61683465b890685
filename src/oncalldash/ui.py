"""
View derivation.

render(state, theme) turns the current DashboardState into rich Text for
each region of the screen. It holds no state of its own and is called after
every folded event; the Textual front-end only copies the result into its
widgets.

Regions:
  - splash: shown until the splash timer elapsed and first data arrived
  - errors / analytics / pods: the three main panes
  - hints: key help line
  - log_view: the modal log viewer
"""

from dataclasses import dataclass
from typing import List, Optional

from rich.text import Text

from . import __version__, logviewer
from .model import DashboardState, HealthResult, Pane, ProjectIssues, Source
from .styles import DEFAULT_THEME, Theme

MODE_SPLASH = "splash"
MODE_MAIN = "main"
MODE_MODAL = "modal"

ERRORS_TITLE = "🛑 Recent Sentry Errors"
ANALYTICS_TITLE = "📊 Analytics"
PODS_TITLE = "📦 Pod Status (Live)"
HINTS = "q/^C: Quit | Tab/Shift+Tab: Switch Panes | ↑/↓ or k/j: Select Pod | l: Pod Logs"
LOADING = "Loading..."


@dataclass(frozen=True)
class View:
    mode: str
    active_pane: Pane
    splash: Text
    errors: Text
    analytics: Text
    pods: Text
    hints: Text
    log_view: Optional[Text] = None


def _error_line(state: DashboardState, source: Source, theme: Theme) -> Optional[Text]:
    message = state.errors.get(source)
    if not message:
        return None
    first_line = message.splitlines()[0] if message.splitlines() else message
    return Text(f"  ! {first_line}", style=theme.error_text)


def render_splash(theme: Theme = DEFAULT_THEME) -> Text:
    text = Text(justify="center")
    text.append("On-Call", style=theme.pane_title)
    text.append("\n\n")
    text.append(f"v{__version__}", style=theme.level_info)
    text.append("\n\nFetching data...")
    return text


def _render_project_issues(project: ProjectIssues, theme: Theme) -> Text:
    text = Text()
    text.append(f"Recent {project.project} Issues:", style=theme.header)
    if not project.issues:
        text.append("\n  No unresolved issues found.")
        return text
    for issue in project.issues:
        text.append("\n  ")
        text.append(issue.short_id, style=theme.issue_id)
        text.append(" ")
        text.append(issue.title, style=theme.title)
        text.append(" | ")
        text.append(issue.last_seen, style=theme.last_seen)
        text.append(" | ")
        text.append(issue.status, style=theme.issue_status(issue.status))
        text.append(" | ")
        text.append(issue.level, style=theme.issue_level(issue.level))
    return text


def render_errors_pane(state: DashboardState, theme: Theme = DEFAULT_THEME) -> Text:
    parts: List[Text] = [Text(ERRORS_TITLE, style=theme.pane_title)]
    error = _error_line(state, Source.ISSUES, theme)
    if error is not None:
        parts.append(error)
    if state.issues:
        parts.append(Text("\n\n").join(_render_project_issues(p, theme) for p in state.issues))
    elif error is None:
        parts.append(Text(LOADING))
    return Text("\n").join(parts)


def _render_health(result: HealthResult, theme: Theme) -> Text:
    if result.error is not None:
        return Text(f"{result.service_name}: Error - {result.error}", style=theme.error_text)
    text = Text(f"{result.service_name}: {result.latency_ms}ms")
    text.append("\n  Status: ")
    text.append(result.status_text, style=theme.health_status(result.status))
    if result.groups:
        text.append("\n  Groups: ")
        text.append(", ".join(g.name for g in result.groups), style=theme.level_info)
        for group in result.groups:
            text.append(f"\n    - {group.name}: ")
            text.append(group.status_text, style=theme.health_status(group.status))
    return text


def render_analytics_pane(state: DashboardState, theme: Theme = DEFAULT_THEME) -> Text:
    parts: List[Text] = [Text(ANALYTICS_TITLE, style=theme.pane_title)]

    for source in (Source.ISSUE_COUNTS, Source.HEALTH):
        error = _error_line(state, source, theme)
        if error is not None:
            parts.append(error)

    if state.issue_counts:
        parts.append(Text("\n").join(
            Text(f"{c.project} Issues (total): {c.total}") for c in state.issue_counts
        ))
    if state.health:
        parts.append(Text(""))
        parts.append(Text("\n").join(_render_health(r, theme) for r in state.health))
    if len(parts) == 1:
        parts.append(Text(LOADING))
    return Text("\n").join(parts)


def colorize_pods(table: str, selected_index: int, theme: Theme = DEFAULT_THEME) -> Text:
    """Color kubectl rows by STATUS column; data row selected_index is highlighted."""
    lines = table.split("\n")
    out: List[Text] = []
    if lines:
        out.append(Text(lines[0]))
    row = 0
    for line in lines[1:]:
        if not line.strip():
            continue
        style = theme.highlight if row == selected_index else theme.default
        fields = line.split()
        if len(fields) > 2 and fields[2] in theme.pod_phases:
            style = style + theme.pod_phase(fields[2])
        out.append(Text(line, style=style))
        row += 1
    return Text("\n").join(out)


def render_pods_pane(state: DashboardState, theme: Theme = DEFAULT_THEME) -> Text:
    title = Text(PODS_TITLE, style=theme.pane_title)
    if state.cluster_context:
        title.append(" [")
        title.append(state.cluster_context, style=theme.level_info)
        title.append("]")
    parts: List[Text] = [title]
    for source in (Source.PODS, Source.CONTEXT):
        error = _error_line(state, source, theme)
        if error is not None:
            parts.append(error)
    if state.pods.table:
        parts.append(colorize_pods(state.pods.table, state.selected_pod_index, theme))
    elif Source.PODS not in state.errors:
        parts.append(Text(LOADING))
    return Text("\n").join(parts)


def render_log_view(state: DashboardState, theme: Theme = DEFAULT_THEME) -> Text:
    viewer = state.modal
    if viewer is None or not viewer.ready:
        return Text(logviewer.LOADING_TEXT)
    parts = [Text(logviewer.header_text(viewer), style=theme.log_header)]
    parts.extend(Text(line) for line in logviewer.visible_lines(viewer))
    # pad so the footer stays at the bottom of the viewport
    parts.extend(Text("") for _ in range(viewer.height - len(parts) + 1))
    parts.append(Text(logviewer.FOOTER_TEXT, style=theme.log_footer))
    return Text("\n").join(parts)


def render(state: DashboardState, theme: Theme = DEFAULT_THEME) -> View:
    if state.splash_visible:
        mode = MODE_SPLASH
    elif state.modal_active:
        mode = MODE_MODAL
    else:
        mode = MODE_MAIN
    return View(
        mode=mode,
        active_pane=state.active_pane,
        splash=render_splash(theme),
        errors=render_errors_pane(state, theme),
        analytics=render_analytics_pane(state, theme),
        pods=render_pods_pane(state, theme),
        hints=Text(HINTS),
        log_view=render_log_view(state, theme) if state.modal_active else None,
    )
