"""
Color theme for the dashboard.

The theme is a frozen value built once at startup and handed to the render
functions; nothing mutates it at runtime.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from rich.style import Style

from .model import Status


@dataclass(frozen=True)
class Theme:
    header: Style = Style(bold=True, color="bright_blue")
    issue_id: Style = Style(color="bright_magenta")
    title: Style = Style(color="bright_white")
    last_seen: Style = Style(color="bright_black")
    status_resolved: Style = Style(color="bright_green")
    status_unresolved: Style = Style(color="bright_red")
    level_error: Style = Style(color="bright_red")
    level_warning: Style = Style(color="bright_yellow")
    level_info: Style = Style(color="bright_blue")
    pane_title: Style = Style(bold=True)
    default: Style = Style(color="bright_white")
    error_text: Style = Style(color="bright_red", italic=True)

    pod_running: Style = Style(color="bright_green")
    pod_pending: Style = Style(color="bright_yellow")
    pod_error: Style = Style(color="bright_red")
    highlight: Style = Style(color="bright_white", bgcolor="color(19)")

    log_header: Style = Style(color="bright_blue", bold=True)
    log_footer: Style = Style(color="bright_black")

    pod_phases: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({
        "Running": "pod_running",
        "Pending": "pod_pending",
        "ContainerCreating": "pod_pending",
        "PodInitializing": "pod_pending",
        "Error": "pod_error",
        "Evicted": "pod_error",
        "CrashLoopBackOff": "pod_error",
        "ImagePullBackOff": "pod_error",
        "ErrImagePull": "pod_error",
    }))

    def issue_status(self, status: str) -> Style:
        if status in ("resolved", "ignored"):
            return self.status_resolved
        if status == "unresolved":
            return self.status_unresolved
        return self.default

    def issue_level(self, level: str) -> Style:
        if level in ("error", "fatal"):
            return self.level_error
        if level == "warning":
            return self.level_warning
        if level in ("info", "debug"):
            return self.level_info
        return self.default

    def health_status(self, status: Status) -> Style:
        if status == Status.OK:
            return self.status_resolved
        if status == Status.FAIL:
            return self.status_unresolved
        return self.default

    def pod_phase(self, phase: str) -> Style:
        """Foreground style for a kubectl STATUS column value."""
        name = self.pod_phases.get(phase)
        return getattr(self, name) if name else self.default


DEFAULT_THEME = Theme()
