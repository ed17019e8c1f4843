"""Mermaid xychart-beta チャート生成。"""

from replication_planner.config import GlobalConfig, IntegrationPattern
from replication_planner.engine import CapacityEstimator
from replication_planner.topology import Topology

CONCURRENCIES = [1, 2, 4, 8, 16]


def _run(topology: Topology, **kwargs) -> dict:
    """見積もりを実行して結果を dict で返す。"""
    r = CapacityEstimator(topology, GlobalConfig(**kwargs)).run()
    return {
        "peak_rps": r.peak_inbound_rps,
        "completion_min": r.overall_completion_secs / 60,
        "storage_mb": r.total_storage_mb,
    }


def _series(values) -> str:
    return ", ".join(str(round(v, 1)) for v in values)


def concurrency_chart(topology: Topology, overhead_ms: float = 200.0) -> str:
    """並列数 vs 流入 RPS / キューストレージ (ASYNC)。"""
    rps = []
    storage = []

    for c in CONCURRENCIES:
        r = _run(
            topology,
            concurrency=c,
            middleware_overhead_ms=overhead_ms,
            integration_pattern=IntegrationPattern.ASYNC,
        )
        rps.append(r["peak_rps"])
        storage.append(r["storage_mb"])

    x = ", ".join(f'"{c}"' for c in CONCURRENCIES)

    return f"""\
```mermaid
xychart-beta
    title "並列数 vs 流入 RPS / キュー MB (ASYNC, overhead={overhead_ms:g}ms)"
    x-axis "concurrency" [{x}]
    y-axis "値"
    bar "peak inbound (req/s)" [{_series(rps)}]
    line "queue storage (MB)" [{_series(storage)}]
```"""


def pattern_chart(topology: Topology, overhead_ms: float = 200.0) -> str:
    """並列数ごとの完了時間 ASYNC vs SYNC。"""
    async_min = []
    sync_min = []

    for c in CONCURRENCIES:
        for pattern, series in (
            (IntegrationPattern.ASYNC, async_min),
            (IntegrationPattern.SYNC, sync_min),
        ):
            r = _run(
                topology,
                concurrency=c,
                middleware_overhead_ms=overhead_ms,
                integration_pattern=pattern,
            )
            series.append(r["completion_min"])

    x = ", ".join(f'"{c}"' for c in CONCURRENCIES)

    return f"""\
```mermaid
xychart-beta
    title "完了時間 ASYNC vs SYNC (overhead={overhead_ms:g}ms)"
    x-axis "concurrency" [{x}]
    y-axis "完了時間 (分)"
    bar "ASYNC" [{_series(async_min)}]
    bar "SYNC" [{_series(sync_min)}]
```"""


CHARTS = {
    "concurrency": concurrency_chart,
    "pattern": pattern_chart,
}
