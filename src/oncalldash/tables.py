"""
Parsers for tabular CLI output.

sentry-cli prints issues as an ASCII-boxed table whose column widths depend
on the content, so columns are located by the offset of each title in the
header row. kubectl prints its context list as whitespace-separated columns
with a `*` marking the active context.

Malformed input never raises: a table without a header or separator simply
yields no records.
"""

from typing import List, Optional, Sequence

from .model import IssueRecord

HEADER_TITLES = {
    "issue_id": "Issue ID",
    "short_id": "Short ID",
    "title": "Title",
    "last_seen": "Last seen",
    "status": "Status",
    "level": "Level",
}


def _locate_table(lines: Sequence[str]) -> Optional[tuple]:
    """Return (header_index, separator_index) or None."""
    header_idx = None
    for i, line in enumerate(lines):
        if header_idx is None:
            if "Issue ID" in line and "Title" in line:
                header_idx = i
        elif line.startswith("+"):
            return header_idx, i
    return None


def _column(line: str, start: int, offsets: Sequence[int]) -> str:
    if start >= len(line):
        return ""
    end = len(line)
    for offset in offsets:
        if offset > start:
            end = offset
            break
    # boxed tables leave the column divider inside the segment
    return line[start:end].strip().strip("|").strip()


def parse_issues(text: str) -> List[IssueRecord]:
    """
    Parse `sentry-cli issues list` output into IssueRecords.

    Any subset of the known column titles may be present; absent columns
    leave the corresponding field empty.
    """
    if not text:
        return []
    lines = text.splitlines()
    located = _locate_table(lines)
    if located is None:
        return []
    header_idx, separator_idx = located

    header = lines[header_idx]
    starts = {}
    for field_name, title in HEADER_TITLES.items():
        offset = header.find(title)
        if offset != -1:
            starts[field_name] = offset
    offsets = sorted(starts.values())

    issues = []
    for line in lines[separator_idx + 1:]:
        if line.startswith("+") or not line.strip():
            continue
        values = {name: _column(line, start, offsets) for name, start in starts.items()}
        issues.append(IssueRecord(**values))
    return issues


def count_data_rows(text: str) -> int:
    """Coarse issue count: non-blank lines that are not the 'Issue ...' header."""
    count = 0
    for line in (text or "").splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("Issue"):
            count += 1
    return count


def parse_current_context(text: str) -> str:
    """Name of the active context from `kubectl config get-contexts` output."""
    for line in (text or "").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("CURRENT ") or stripped.startswith("NAME "):
            continue
        if stripped.startswith("*"):
            fields = stripped.split()
            if len(fields) >= 2:
                return fields[1]
    return ""
