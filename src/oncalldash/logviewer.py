"""
Log viewer sub-state for the modal pod log view.

The viewer starts without geometry; the first resize (the front-end echoes
the current terminal size when the modal opens) sizes the viewport and marks
it ready. Log text arriving before that is kept and shown once ready.
"""

from dataclasses import replace
from typing import List

from .model import LogViewerState

HEADER_HEIGHT = 1
FOOTER_HEIGHT = 1

FOOTER_TEXT = "Scroll with arrow keys / PgUp / PgDn | Esc: Back"
LOADING_TEXT = "Loading logs..."

SCROLL_KEYS = {
    "up": -1, "k": -1,
    "down": 1, "j": 1,
}


def open_viewer(pod_name: str) -> LogViewerState:
    return LogViewerState(pod_name=pod_name)


def header_text(viewer: LogViewerState) -> str:
    return f"Logs for {viewer.pod_name}"


def _lines(viewer: LogViewerState) -> List[str]:
    return viewer.log_text.splitlines()


def _max_offset(viewer: LogViewerState) -> int:
    return max(0, len(_lines(viewer)) - viewer.height)


def _clamped(viewer: LogViewerState, offset: int) -> LogViewerState:
    return replace(viewer, offset=max(0, min(offset, _max_offset(viewer))))


def resize(viewer: LogViewerState, width: int, height: int) -> LogViewerState:
    viewport_height = max(0, height - HEADER_HEIGHT - FOOTER_HEIGHT)
    resized = replace(viewer, width=width, height=viewport_height, ready=True)
    return _clamped(resized, resized.offset)


def set_logs(viewer: LogViewerState, text: str) -> LogViewerState:
    return _clamped(replace(viewer, log_text=text), viewer.offset)


def set_error(viewer: LogViewerState, message: str) -> LogViewerState:
    return set_logs(viewer, f"Error fetching logs: {message}")


def handle_key(viewer: LogViewerState, key: str) -> LogViewerState:
    if not viewer.ready:
        return viewer
    if key in SCROLL_KEYS:
        return _clamped(viewer, viewer.offset + SCROLL_KEYS[key])
    if key == "pageup":
        return _clamped(viewer, viewer.offset - max(1, viewer.height))
    if key == "pagedown":
        return _clamped(viewer, viewer.offset + max(1, viewer.height))
    if key == "home":
        return _clamped(viewer, 0)
    if key == "end":
        return _clamped(viewer, _max_offset(viewer))
    return viewer


def visible_lines(viewer: LogViewerState) -> List[str]:
    return _lines(viewer)[viewer.offset:viewer.offset + viewer.height]

