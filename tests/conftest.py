import pytest

from oncalldash.config import AppConfig
from oncalldash.model import DashboardState, PodSnapshot

POD_TABLE = (
    "NAME                     READY   STATUS             RESTARTS   AGE\n"
    "api-7d9f8b6c4-abcde      1/1     Running            0          3d\n"
    "worker-5c6d7e8f9-fghij   0/1     CrashLoopBackOff   12         1h\n"
    "cron-1a2b3c4d5-klmno     0/1     Pending            0          2m\n"
)

POD_NAMES = ("api-7d9f8b6c4-abcde", "worker-5c6d7e8f9-fghij", "cron-1a2b3c4d5-klmno")


@pytest.fixture
def config():
    return AppConfig()


@pytest.fixture
def pods():
    return PodSnapshot(table=POD_TABLE, pod_names=POD_NAMES)


@pytest.fixture
def state():
    return DashboardState()
