"""ミドルウェア経由データレプリケーションの負荷見積もり。"""

from replication_planner.config import (
    GlobalConfig,
    IntegrationPattern,
    ReplicationType,
)
from replication_planner.engine import CapacityEstimator, compute
from replication_planner.loader import TopologyError, load_topology
from replication_planner.result import (
    ClusterHealth,
    RouteResult,
    SimulationResult,
)
from replication_planner.topology import (
    DataObject,
    Mapping,
    MiddlewareCluster,
    TargetSystem,
    Topology,
)

__all__ = [
    "CapacityEstimator",
    "ClusterHealth",
    "DataObject",
    "GlobalConfig",
    "IntegrationPattern",
    "Mapping",
    "MiddlewareCluster",
    "ReplicationType",
    "RouteResult",
    "SimulationResult",
    "TargetSystem",
    "Topology",
    "TopologyError",
    "compute",
    "load_topology",
]
