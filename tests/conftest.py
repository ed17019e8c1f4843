import pytest

from replication_planner import (
    DataObject,
    GlobalConfig,
    IntegrationPattern,
    MiddlewareCluster,
    TargetSystem,
)


@pytest.fixture
def customer():
    return DataObject("1", "Customer Master", 500_000, 100, 1.5)


@pytest.fixture
def s4():
    return TargetSystem("t1", "c1", "SAP S/4HANA", 3000.0)


@pytest.fixture
def cluster():
    return MiddlewareCluster("c1", "US Region", 50, 10, 5000.0)


@pytest.fixture
def async_config():
    return GlobalConfig(middleware_overhead_ms=200.0, concurrency=4)


@pytest.fixture
def sync_config():
    return GlobalConfig(
        middleware_overhead_ms=200.0,
        concurrency=4,
        integration_pattern=IntegrationPattern.SYNC,
    )
