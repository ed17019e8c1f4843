"""クラスタ単位の使用量集計。

ルートごとの消費 (スレッド・キュー・ストレージ) をクラスタへ畳み込み、
上限と比較する。集計は単純な足し算なので順序に依存しない。
"""

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from replication_planner.result import ClusterHealth
from replication_planner.topology import MiddlewareCluster

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClusterUsage:
    """クラスタの使用量 (またはルート 1 本分の寄与)。"""

    threads: float = 0.0
    queues: int = 0
    storage_mb: float = 0.0

    def __add__(self, other: "ClusterUsage") -> "ClusterUsage":
        return ClusterUsage(
            threads=self.threads + other.threads,
            queues=self.queues + other.queues,
            storage_mb=self.storage_mb + other.storage_mb,
        )


def route_usage(
    used_threads: float, peak_storage_mb: float, is_sync: bool
) -> ClusterUsage:
    """ルート 1 本の寄与。SYNC はキューもストレージも使わない。"""
    if is_sync:
        return ClusterUsage(threads=used_threads)
    return ClusterUsage(
        threads=used_threads, queues=1, storage_mb=peak_storage_mb
    )


def accumulate(
    usage: Mapping[str, ClusterUsage],
    cluster_id: str,
    contribution: ClusterUsage,
) -> dict[str, ClusterUsage]:
    """cluster_id の使用量に contribution を足した新しい dict を返す。

    未知のクラスタは集計対象外として無視する。
    """
    updated = dict(usage)
    if cluster_id not in updated:
        logger.debug("skip usage for unknown cluster %r", cluster_id)
        return updated
    updated[cluster_id] = updated[cluster_id] + contribution
    return updated


def fold(
    clusters: Iterable[MiddlewareCluster],
    contributions: Iterable[tuple[str, ClusterUsage]],
) -> dict[str, ClusterUsage]:
    """(cluster_id, 寄与) の列をクラスタごとに合算する。"""
    usage = {c.id: ClusterUsage() for c in clusters}
    for cluster_id, contribution in contributions:
        usage = accumulate(usage, cluster_id, contribution)
    return usage


def health(
    cluster: MiddlewareCluster, usage: ClusterUsage
) -> ClusterHealth:
    """使用量を上限と比較する。スレッドは切り上げてから比較する。"""
    threads = math.ceil(usage.threads)
    return ClusterHealth(
        cluster_id=cluster.id,
        cluster_name=cluster.name,
        used_threads=threads,
        max_threads=cluster.max_threads,
        active_queues=usage.queues,
        max_queues=cluster.max_queues,
        storage_used_mb=usage.storage_mb,
        max_storage_mb=cluster.max_storage_mb,
        is_thread_breached=threads > cluster.max_threads,
        is_queue_breached=usage.queues > cluster.max_queues,
        is_storage_breached=usage.storage_mb > cluster.max_storage_mb,
    )


def cluster_health(
    clusters: Iterable[MiddlewareCluster],
    usage: Mapping[str, ClusterUsage],
) -> list[ClusterHealth]:
    """設定順にクラスタの健全性を返す。"""
    return [health(c, usage.get(c.id, ClusterUsage())) for c in clusters]
