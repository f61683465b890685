import asyncio
import threading
from dataclasses import replace

from oncalldash.config import AppConfig
from oncalldash.events import ContextLoaded, PodLogsLoaded, PodsLoaded
from oncalldash.model import Pane, PodSnapshot, Source
from oncalldash.textual_app import OnCallApp

from conftest import POD_NAMES, POD_TABLE


class FakeBackend:
    """Answers every poll immediately with canned data."""

    def __init__(self):
        self.polled = []
        self.logs_requested = []
        self._lock = threading.Lock()

    def clock(self):
        return 0.0

    def collect(self, source):
        with self._lock:
            self.polled.append(source)
        if source == Source.PODS:
            return PodsLoaded(PodSnapshot(table=POD_TABLE, pod_names=POD_NAMES))
        return ContextLoaded("production")

    def fetch_logs(self, pod_name):
        with self._lock:
            self.logs_requested.append(pod_name)
        return PodLogsLoaded(pod_name=pod_name, text="hello from the pod")


def fast_config():
    config = AppConfig()
    return replace(config, refresh=replace(config.refresh, splash_delay=0.01))


def run_app(scenario, backend=None):
    async def runner():
        app = OnCallApp(fast_config(), backend=backend or FakeBackend())
        async with app.run_test(size=(120, 40)) as pilot:
            await app.workers.wait_for_complete()
            await pilot.pause()
            await scenario(app, pilot)
        return app
    return asyncio.run(runner())


def test_mount_polls_every_source():
    async def scenario(app, pilot):
        assert set(app.backend.polled) == {
            Source.PODS, Source.CONTEXT, Source.HEALTH, Source.ISSUE_COUNTS, Source.ISSUES,
        }
        assert app.dashboard.pods.pod_names == POD_NAMES
        assert app.dashboard.width == 120

    run_app(scenario)


def test_keys_reach_state_machine():
    async def scenario(app, pilot):
        await pilot.press("tab", "tab")
        assert app.dashboard.active_pane == Pane.PODS
        await pilot.press("down")
        assert app.dashboard.selected_pod_index == 1

    run_app(scenario)


def test_log_modal_round_trip():
    async def scenario(app, pilot):
        await pilot.press("tab", "tab", "l")
        await app.workers.wait_for_complete()
        await pilot.pause()

        assert app.backend.logs_requested == [POD_NAMES[0]]
        assert app.dashboard.modal.ready
        assert app.dashboard.modal.log_text == "hello from the pod"

        await pilot.press("escape")
        assert not app.dashboard.modal_active

    run_app(scenario)


def test_quit_key_exits():
    async def scenario(app, pilot):
        await pilot.press("q")
        await pilot.pause()
        assert app.dashboard.quitting

    run_app(scenario)


class BrokenBackend(FakeBackend):
    """Raises errors the collectors do not translate themselves."""

    def collect(self, source):
        event = super().collect(source)
        if source == Source.HEALTH:
            raise RuntimeError("health checker bug")
        return event

    def fetch_logs(self, pod_name):
        raise UnicodeDecodeError("utf-8", b"ok\xffbad", 2, 3, "invalid start byte")


def test_worker_errors_are_shown_not_fatal():
    async def scenario(app, pilot):
        assert app.dashboard.errors[Source.HEALTH] == "health checker bug"

        await pilot.press("tab", "tab", "l")
        await app.workers.wait_for_complete()
        await pilot.pause()

        assert app.is_running
        assert app.dashboard.modal_active
        assert app.dashboard.modal.log_text.startswith("Error fetching logs: 'utf-8' codec")
        assert Source.LOGS in app.dashboard.errors

    run_app(scenario, backend=BrokenBackend())


def test_failed_poll_can_run_again():
    async def scenario(app, pilot):
        app._tick()
        await app.workers.wait_for_complete()
        assert app.backend.polled.count(Source.HEALTH) == 2

    run_app(scenario, backend=BrokenBackend())
