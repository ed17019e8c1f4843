"""見積もりエンジン。

有効なマッピングごとにレートとキューを計算し、クラスタ使用量と
全体の集計値をまとめる。入力は変更しない。
"""

import logging
import math
from collections.abc import Iterable

from replication_planner.backlog import estimate_queue
from replication_planner.cluster import (
    ClusterUsage,
    cluster_health,
    fold,
    route_usage,
)
from replication_planner.config import GlobalConfig
from replication_planner.rates import route_rates
from replication_planner.result import RouteResult, SimulationResult
from replication_planner.topology import (
    DataObject,
    Mapping,
    MiddlewareCluster,
    TargetSystem,
    Topology,
)

logger = logging.getLogger(__name__)


class CapacityEstimator:
    """ソース -> ミドルウェア -> ターゲットの負荷見積もり。"""

    def __init__(self, topology: Topology, config: GlobalConfig):
        self.topology = topology
        self.config = config

    def run(self) -> SimulationResult:
        """見積もり実行。"""
        topo = self.topology
        cfg = self.config
        active = topo.active_pairs()
        cluster_ids = {c.id for c in topo.clusters}

        routes: list[RouteResult] = []
        contributions: list[tuple[str, ClusterUsage]] = []
        total_api_requests = 0
        max_payload_kb = 0.0
        peak_rps = 0.0

        for obj in topo.data_objects:
            # 帯域見積もりはマッピングの有無によらず最も重いパケットを使う
            max_payload_kb = max(max_payload_kb, obj.payload_per_packet_kb)

            active_targets = 0
            for target in topo.targets:
                if (obj.id, target.id) not in active:
                    continue
                active_targets += 1

                route = self._route(obj, target)
                routes.append(route)
                peak_rps += route.effective_inbound_rps

                # 未知のクラスタへの寄与は fold 側で捨てられる
                contributions.append(
                    (
                        target.cluster_id,
                        route_usage(
                            route.used_threads,
                            route.peak_queue_storage_mb,
                            cfg.is_sync,
                        ),
                    )
                )

            total_api_requests += obj.total_packets * active_targets

        self._warn_dangling(cluster_ids)

        usage = fold(topo.clusters, contributions)
        return SimulationResult(
            config=cfg,
            routes=routes,
            clusters=cluster_health(topo.clusters, usage),
            peak_inbound_rps=peak_rps,
            total_api_requests=total_api_requests,
            max_packet_payload_kb=max_payload_kb,
            required_network_mbps=peak_rps * max_payload_kb / 1024,
            total_storage_mb=sum(r.peak_queue_storage_mb for r in routes),
            overall_completion_secs=max(
                (r.completion_time_secs for r in routes), default=0.0
            ),
        )

    def _route(self, obj: DataObject, target: TargetSystem) -> RouteResult:
        """ルート 1 本分の計算。"""
        cfg = self.config
        rates = route_rates(obj, target, cfg)
        queue = estimate_queue(obj, rates, cfg.is_sync)

        depth_packets = (
            math.ceil(queue.peak_depth_records / obj.packet_size)
            if obj.packet_size > 0
            else 0
        )

        return RouteResult(
            data_object_id=obj.id,
            data_object_name=obj.name,
            target_id=target.id,
            target_name=target.name,
            cluster_id=target.cluster_id,
            total_records=obj.volume,
            total_packets=obj.total_packets,
            payload_per_packet_kb=obj.payload_per_packet_kb,
            total_data_mb=obj.total_data_mb,
            split_factor=rates.split_factor,
            effective_packet_size=rates.effective_packet_size,
            theoretical_inbound_rps=rates.theoretical_inbound_rps,
            effective_inbound_rps=rates.effective_inbound_rps,
            ingress_limit_rps=rates.ingress_limit_rps,
            is_throttled=rates.is_throttled,
            throttled_rps=rates.throttled_rps,
            inbound_records_per_sec=rates.inbound_records_per_sec,
            outbound_records_per_sec=rates.outbound_records_per_sec,
            used_threads=rates.used_threads,
            is_thread_bound=rates.is_thread_bound,
            completion_time_secs=queue.completion_time_secs,
            peak_queue_depth_records=queue.peak_depth_records,
            peak_queue_depth_packets=depth_packets,
            peak_queue_storage_mb=queue.peak_storage_mb,
        )

    def _warn_dangling(self, cluster_ids: set[str]):
        """存在しないクラスタを参照するターゲットを警告する。"""
        for target in self.topology.targets:
            if target.cluster_id not in cluster_ids:
                logger.warning(
                    "target %r references unknown cluster %r; "
                    "excluded from cluster usage",
                    target.id,
                    target.cluster_id,
                )


def compute(
    data_objects: Iterable[DataObject],
    targets: Iterable[TargetSystem],
    mappings: Iterable[Mapping],
    config: GlobalConfig,
    clusters: Iterable[MiddlewareCluster],
) -> SimulationResult:
    """トポロジと設定から見積もり結果を返す。"""
    topology = Topology(
        data_objects=tuple(data_objects),
        targets=tuple(targets),
        mappings=tuple(mappings),
        clusters=tuple(clusters),
    )
    return CapacityEstimator(topology, config).run()
