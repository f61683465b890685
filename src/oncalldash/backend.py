"""
Collectors for the external tools the dashboard watches.

This module wraps kubectl, sentry-cli and the HTTP health endpoints. Every
public collector is a blocking call meant to run in a worker thread; it
returns exactly one event describing the outcome, so workers never touch
dashboard state directly:
  - collect_pods: row-aligned pod names and display table
  - collect_context: active kubectl context
  - collect_health: latency, status and per-group health of each endpoint
  - collect_issues: unresolved issues of the last 24h per Sentry project
  - collect_issue_counts: total issue rows per Sentry project
  - fetch_logs: tail of one pod's logs, bounded by a hard timeout

Error Handling:
  - Collectors follow a fail-safe pattern: failures are logged and returned
    as CollectorFailed events instead of raised (see collector_safe)
  - A missing binary, non-zero exit status, timeout or HTTP transport error
    all count as collector failures
  - An individual health endpoint failure is reported on that endpoint only

Dependencies:
  - subprocess (kubectl, sentry-cli)
  - requests (health endpoints)
"""

import functools
import logging
import subprocess
import time
from typing import Callable, List, Optional

import requests

from .config import AppConfig, HealthEndpoint
from .errors import CollectorError
from .events import (
    CollectorFailed, ContextLoaded, Event, HealthLoaded, IssueCountsLoaded,
    IssuesLoaded, PodLogsLoaded, PodsLoaded,
)
from .extractor import classify_status, extract_json_value, parse_group_names
from .model import (
    GroupHealth, HealthResult, IssueCount, PodSnapshot, ProjectIssues, Source, Status,
)
from .tables import count_data_rows, parse_current_context, parse_issues

logger = logging.getLogger(__name__)

COLLECTOR_ERRORS = (CollectorError, subprocess.SubprocessError, OSError, requests.RequestException)


def collector_safe(source: Source) -> Callable:
    """
    Decorator for collectors that ensures safe error handling.

    Catches collector failures, logs them, and returns a CollectorFailed
    event for `source` so the UI loop never sees an exception.

    Usage:
        @collector_safe(Source.PODS)
        def collect_pods(self) -> Event:
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs) -> Event:
            try:
                return func(self, *args, **kwargs)
            except COLLECTOR_ERRORS as e:
                logger.error(f"Collector {source.value} failed in {func.__name__}: {e}", exc_info=True)
                pod_name = ""
                if source == Source.LOGS:
                    pod_name = kwargs.get("pod_name") or (args[0] if args else "")
                return CollectorFailed(source=source, message=str(e), pod_name=pod_name)
        return wrapper
    return decorator


class OnCallBackend:
    def __init__(self, config: AppConfig, clock: Callable[[], float] = time.monotonic):
        self.config = config
        self.clock = clock

    # --- process helpers ---

    def _run(self, cmd: List[str], source: Source, timeout: Optional[float] = None,
             merge_stderr: bool = True) -> str:
        """
        Run cmd and return its output; raise CollectorError on failure.

        With merge_stderr the returned text interleaves stdout and stderr, as a
        terminal would show it. Without it only stdout is returned and stderr
        is kept for the error message. Undecodable bytes are replaced.
        """
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            completed = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            # subprocess.run has already killed the child
            raise CollectorError(source, f"{' '.join(cmd[:3])} timed out after {timeout:g}s") from e
        if completed.returncode != 0:
            raise CollectorError(
                source,
                f"{' '.join(cmd[:3])} failed (exit {completed.returncode})",
                output=(completed.stdout or "") + (completed.stderr or ""),
            )
        return completed.stdout or ""

    def _kubectl(self, *args: str) -> List[str]:
        return [self.config.kubectl.binary, *args]

    def _sentry_issues(self, slug: str, query: Optional[str] = None) -> List[str]:
        sentry = self.config.sentry
        cmd = [sentry.binary, "issues", "list", "--org", sentry.org, "--project", slug]
        if query:
            cmd.extend(["--query", query])
        return cmd

    # --- kubectl ---

    @collector_safe(Source.PODS)
    def collect_pods(self) -> Event:
        # stderr notices ("No resources found ...") must not become pod names
        names_out = self._run(
            self._kubectl("get", "pods", "--no-headers", "-o", "custom-columns=NAME:.metadata.name"),
            Source.PODS,
            merge_stderr=False,
        )
        pod_names = [name.strip() for name in names_out.strip().split("\n") if name.strip()]
        table = self._run(self._kubectl("get", "pods"), Source.PODS)
        return PodsLoaded(PodSnapshot(table=table, pod_names=tuple(pod_names)))

    @collector_safe(Source.CONTEXT)
    def collect_context(self) -> Event:
        out = self._run(self._kubectl("config", "get-contexts"), Source.CONTEXT)
        return ContextLoaded(parse_current_context(out))

    @collector_safe(Source.LOGS)
    def fetch_logs(self, pod_name: str) -> Event:
        refresh = self.config.refresh
        out = self._run(
            self._kubectl("logs", pod_name, f"--tail={refresh.log_tail}"),
            Source.LOGS,
            timeout=refresh.log_timeout,
        )
        return PodLogsLoaded(pod_name=pod_name, text=out)

    # --- sentry-cli ---

    @collector_safe(Source.ISSUES)
    def collect_issues(self) -> Event:
        sentry = self.config.sentry
        projects = []
        for project in sentry.projects:
            out = self._run(self._sentry_issues(project.slug, sentry.query), Source.ISSUES)
            projects.append(ProjectIssues(project=project.name, issues=tuple(parse_issues(out))))
        return IssuesLoaded(projects=tuple(projects), completed_at=self.clock())

    @collector_safe(Source.ISSUE_COUNTS)
    def collect_issue_counts(self) -> Event:
        counts = []
        for project in self.config.sentry.projects:
            out = self._run(self._sentry_issues(project.slug), Source.ISSUE_COUNTS)
            counts.append(IssueCount(project=project.name, total=count_data_rows(out)))
        return IssueCountsLoaded(tuple(counts))

    # --- health endpoints ---

    def _get(self, url: str) -> requests.Response:
        return requests.get(url, timeout=self.config.health.timeout)

    def _check_group(self, base_url: str, group: str) -> GroupHealth:
        url = f"{base_url.rstrip('/')}/{group}"
        try:
            body = self._get(url).text.strip()
        except requests.RequestException as e:
            # reported as FAIL below, like an empty response
            logger.warning(f"Group health request {url} failed: {e}")
            body = ""
        raw = extract_json_value(body, "status")
        ok = classify_status(raw, body) == Status.OK
        text = raw.strip().upper()
        if not text:
            text = "OK" if ok else "FAIL"
        return GroupHealth(name=group, status_text=text, status=Status.OK if ok else Status.FAIL)

    def _check_endpoint(self, endpoint: HealthEndpoint) -> HealthResult:
        try:
            response = self._get(endpoint.url)
        except requests.RequestException as e:
            logger.error(f"Health request for {endpoint.name} failed: {e}")
            return HealthResult(service_name=endpoint.name, error=str(e))

        body = response.text.strip()
        latency_ms = round(response.elapsed.total_seconds() * 1000)
        raw = extract_json_value(body, "status")
        status = classify_status(raw, body)
        status_text = raw.strip().upper() if raw.strip() else status.value

        groups = ()
        if endpoint.groups:
            names = parse_group_names(extract_json_value(body, "groups"))
            groups = tuple(self._check_group(endpoint.url, name) for name in names)

        return HealthResult(
            service_name=endpoint.name,
            latency_ms=latency_ms,
            status_text=status_text,
            status=status,
            groups=groups,
        )

    @collector_safe(Source.HEALTH)
    def collect_health(self) -> Event:
        results = tuple(self._check_endpoint(ep) for ep in self.config.health.endpoints)
        return HealthLoaded(results)

    # --- dispatch ---

    def collect(self, source: Source) -> Event:
        """Run the collector for a polled source."""
        collectors = {
            Source.PODS: self.collect_pods,
            Source.CONTEXT: self.collect_context,
            Source.HEALTH: self.collect_health,
            Source.ISSUES: self.collect_issues,
            Source.ISSUE_COUNTS: self.collect_issue_counts,
        }
        collector = collectors.get(source)
        if collector is None:
            raise ValueError(f"No poll collector for {source}")
        return collector()
