from dataclasses import replace
from types import MappingProxyType

from oncalldash import logviewer
from oncalldash.model import (
    DashboardState, GroupHealth, HealthResult, IssueCount, IssueRecord, Pane,
    ProjectIssues, Source, Status,
)
from oncalldash.styles import DEFAULT_THEME
from oncalldash.ui import (
    HINTS, LOADING, MODE_MAIN, MODE_MODAL, MODE_SPLASH, colorize_pods,
    render, render_analytics_pane, render_errors_pane, render_log_view,
    render_pods_pane,
)


def main_state(**changes):
    return replace(DashboardState(splash_visible=False), **changes)


def test_render_modes(state, pods):
    assert render(state).mode == MODE_SPLASH

    view = render(main_state(pods=pods))
    assert view.mode == MODE_MAIN
    assert view.log_view is None
    assert view.hints.plain == HINTS

    view = render(main_state(pods=pods, modal=logviewer.open_viewer("api-0")))
    assert view.mode == MODE_MODAL
    assert view.log_view is not None


def test_splash_text(state):
    text = render(state).splash.plain
    assert "On-Call" in text
    assert "Fetching data..." in text


def test_errors_pane_loading_and_issues():
    assert LOADING in render_errors_pane(main_state()).plain

    issues = (
        ProjectIssues("Ticketing", (IssueRecord(
            short_id="T-1", title="Boom", last_seen="2m ago", status="unresolved", level="error",
        ),)),
        ProjectIssues("IAM"),
    )
    text = render_errors_pane(main_state(issues=issues)).plain

    assert "Recent Ticketing Issues:" in text
    assert "  T-1 Boom | 2m ago | unresolved | error" in text
    assert "Recent IAM Issues:\n  No unresolved issues found." in text


def test_error_line_shows_first_line_only():
    state = main_state(errors=MappingProxyType({
        Source.ISSUES: "sentry-cli issues list failed (exit 1)\nerror: auth token expired",
    }))
    text = render_errors_pane(state).plain
    assert "  ! sentry-cli issues list failed (exit 1)" in text
    assert "auth token" not in text
    assert LOADING not in text


def test_analytics_pane():
    state = main_state(
        issue_counts=(IssueCount("Ticketing", 4), IssueCount("IAM", 0)),
        health=(
            HealthResult("Ticketing API", latency_ms=87, status_text="UP", status=Status.OK),
            HealthResult("IAM API", latency_ms=120, status_text="UP", status=Status.OK, groups=(
                GroupHealth("liveness", "UP", Status.OK),
                GroupHealth("readiness", "DOWN", Status.FAIL),
            )),
            HealthResult("Billing API", error="connection refused"),
        ),
    )
    text = render_analytics_pane(state).plain

    assert "Ticketing Issues (total): 4" in text
    assert "IAM Issues (total): 0" in text
    assert "Ticketing API: 87ms\n  Status: UP" in text
    assert "  Groups: liveness, readiness" in text
    assert "    - readiness: DOWN" in text
    assert "Billing API: Error - connection refused" in text


def test_colorize_pods_highlights_selected_row(pods):
    text = colorize_pods(pods.table, 1)
    lines = text.plain.split("\n")

    assert lines[0].startswith("NAME")
    assert len(lines) == 4

    # style of each data row's span, in order
    row_styles = [span.style for span in text.spans]
    assert len(row_styles) == 3
    assert row_styles[0] == DEFAULT_THEME.default + DEFAULT_THEME.pod_running
    assert row_styles[1] == DEFAULT_THEME.highlight + DEFAULT_THEME.pod_error
    assert row_styles[2] == DEFAULT_THEME.default + DEFAULT_THEME.pod_pending


def test_pods_pane_shows_context(pods):
    text = render_pods_pane(main_state(pods=pods, cluster_context="production")).plain
    assert text.startswith("📦 Pod Status (Live) [production]")
    assert "api-7d9f8b6c4-abcde" in text


def test_pods_pane_error_without_table():
    state = main_state(errors=MappingProxyType({Source.PODS: "kubectl get pods failed (exit 1)"}))
    text = render_pods_pane(state).plain
    assert "! kubectl get pods failed" in text
    assert LOADING not in text


def test_log_view_loading_until_ready():
    viewer = logviewer.set_logs(logviewer.open_viewer("api-0"), "hello")
    state = main_state(modal=viewer)
    assert render_log_view(state).plain == logviewer.LOADING_TEXT


def test_log_view_layout():
    viewer = logviewer.resize(logviewer.open_viewer("api-0"), 80, 6)
    viewer = logviewer.set_logs(viewer, "one\ntwo")
    lines = render_log_view(main_state(modal=viewer)).plain.split("\n")

    assert lines[0] == "Logs for api-0"
    assert lines[1:3] == ["one", "two"]
    assert lines[-1] == logviewer.FOOTER_TEXT
    assert len(lines) == 6


def test_active_pane_is_reported(pods):
    assert render(main_state(active_pane=Pane.PODS)).active_pane == Pane.PODS
