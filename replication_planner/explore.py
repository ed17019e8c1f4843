"""グローバル設定のグリッドサーチ。"""

import csv
import itertools
import time

from replication_planner.config import GlobalConfig, IntegrationPattern
from replication_planner.engine import CapacityEstimator
from replication_planner.topology import Topology

# 探索するパラメータ空間
PARAM_GRID = {
    "concurrency": [1, 2, 4, 8, 16],
    "middleware_overhead_ms": [50.0, 100.0, 200.0, 500.0],
    "integration_pattern": [IntegrationPattern.ASYNC, IntegrationPattern.SYNC],
}

DEFAULT_OUTPUT_CSV = "exploration_results.csv"

FIELDNAMES = [
    "integration_pattern",
    "concurrency",
    "middleware_overhead_ms",
    "peak_inbound_rps",
    "required_network_mbps",
    "total_api_requests",
    "total_storage_mb",
    "overall_completion_secs",
    "breached_clusters",
    "capacity_breached",
]

_SUMMARY_HEADER = (
    f"{'pattern':>8} {'concur':>7} {'ovh ms':>7} "
    f"{'in rps':>9} {'MB/s':>8} {'queue MB':>10} {'time s':>11} "
    f"{'breached':>9}"
)


def _format_row(r: dict) -> str:
    return (
        f"{r['integration_pattern']:>8} {r['concurrency']:>7} "
        f"{r['middleware_overhead_ms']:>7} "
        f"{float(r['peak_inbound_rps']):>9.2f} "
        f"{float(r['required_network_mbps']):>8.2f} "
        f"{float(r['total_storage_mb']):>10.2f} "
        f"{float(r['overall_completion_secs']):>11.1f} "
        f"{r['breached_clusters']:>9}"
    )


def explore_row(topology: Topology, config: GlobalConfig) -> dict:
    """1 組み合わせ分の見積もりを CSV 行にする。"""
    result = CapacityEstimator(topology, config).run()
    breached = result.breached_clusters
    return {
        "integration_pattern": config.integration_pattern.value,
        "concurrency": config.concurrency,
        "middleware_overhead_ms": config.middleware_overhead_ms,
        "peak_inbound_rps": round(result.peak_inbound_rps, 3),
        "required_network_mbps": round(result.required_network_mbps, 3),
        "total_api_requests": result.total_api_requests,
        "total_storage_mb": round(result.total_storage_mb, 3),
        "overall_completion_secs": round(result.overall_completion_secs, 1),
        "breached_clusters": len(breached),
        "capacity_breached": bool(breached),
    }


def run_grid_search(
    topology: Topology,
    output_csv: str = DEFAULT_OUTPUT_CSV,
    param_grid: dict | None = None,
) -> str:
    """グリッドサーチを実行し、結果を CSV に出力する。"""
    grid = param_grid or PARAM_GRID
    keys_list = sorted(grid.keys())
    combinations = list(itertools.product(*(grid[k] for k in keys_list)))
    total = len(combinations)

    print(f"Total combinations: {total}")
    print(f"Output: {output_csv}")
    print()

    with open(output_csv, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()

        satisfied_count = 0
        start_time = time.time()

        for values in combinations:
            params = dict(zip(keys_list, values))
            row = explore_row(topology, GlobalConfig(**params))
            writer.writerow(row)
            if not row["capacity_breached"]:
                satisfied_count += 1

    elapsed = time.time() - start_time
    print(f"Completed in {elapsed:.2f}s")
    print(f"Within capacity: {satisfied_count}/{total}")
    print(f"Results saved to {output_csv}")
    return output_csv


def print_summary(output_csv: str = DEFAULT_OUTPUT_CSV):
    """CSV から結果を読み込み、サマリーを表示する。"""
    with open(output_csv, newline="") as f:
        rows = list(csv.DictReader(f))

    satisfied = [r for r in rows if r["capacity_breached"] == "False"]
    breached = [r for r in rows if r["capacity_breached"] == "True"]

    print(f"\n{'='*80}")
    print("EXPLORATION SUMMARY")
    print(f"{'='*80}")
    print(f"Total combinations: {len(rows)}")
    print(f"Within capacity: {len(satisfied)}")
    print(f"Capacity breached: {len(breached)}")

    if satisfied:
        satisfied.sort(key=lambda r: float(r["overall_completion_secs"]))
        print("\n--- Top 20 (fastest completion, within capacity) ---")
        print(_SUMMARY_HEADER)
        print("-" * 80)
        for r in satisfied[:20]:
            print(_format_row(r))

    if breached:
        breached.sort(key=lambda r: float(r["overall_completion_secs"]))
        print("\n--- Breached (fastest first) ---")
        print(_SUMMARY_HEADER)
        print("-" * 80)
        for r in breached[:10]:
            print(_format_row(r))
