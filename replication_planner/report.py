"""見積もり結果のテキスト表示。"""

from replication_planner.result import SimulationResult


def format_duration(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.1f} sec"
    if seconds < 3600:
        return f"{seconds / 60:.1f} min"
    return f"{seconds / 3600:.1f} hrs"


def format_number(value: float) -> str:
    """3 桁区切り、小数 1 桁まで (末尾の 0 は落とす)。"""
    text = f"{value:,.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    # 丸めて 0 になった負数は符号を落とす
    if text == "-0":
        text = "0"
    return text


_ROUTE_HEADER = (
    f"{'data object':<18} {'target':<18} {'split':>6} "
    f"{'in rps':>8} {'in rec/s':>10} {'out rec/s':>10} "
    f"{'queue MB':>9} {'time':>10} {'notes':<12}"
)

_CLUSTER_HEADER = (
    f"{'cluster':<22} {'threads':>11} {'queues':>9} {'storage MB':>20}"
)


def _route_notes(route, is_sync: bool) -> str:
    notes = []
    if route.is_throttled:
        notes.append(f"throttled(-{format_number(route.throttled_rps)})")
    if is_sync:
        notes.append("thread-bound" if route.is_thread_bound else "target-bound")
    return " ".join(notes)


def _flag(breached: bool) -> str:
    return " !" if breached else ""


def render_summary(result: SimulationResult) -> str:
    """CLI 向けの要約。"""
    cfg = result.config
    is_sync = cfg.is_sync
    mode = (
        "Synchronous (Request-Response)"
        if is_sync
        else "Asynchronous (Queued)"
    )

    lines = [
        "=== Capacity Estimate ===",
        f"Mode: {mode}",
        f"Config: overhead={cfg.middleware_overhead_ms:g}ms, "
        f"concurrency={cfg.concurrency}",
        f"Max API load (inbound): {format_number(result.peak_inbound_rps)} RPS",
        "Required network throughput: "
        f"{format_number(result.required_network_mbps)} MB/s",
        f"Total API requests: {format_number(result.total_api_requests)}",
        "Total queue storage: "
        + (
            "N/A"
            if is_sync
            else f"{format_number(result.total_storage_mb)} MB"
        ),
        "Longest replication time: "
        f"{format_duration(result.overall_completion_secs)}",
        "",
        "--- Routes ---",
        _ROUTE_HEADER,
        "-" * len(_ROUTE_HEADER),
    ]
    for r in result.routes:
        split = f"1:{r.split_factor}"
        lines.append(
            f"{r.data_object_name[:18]:<18} {r.target_name[:18]:<18} "
            f"{split:>6} "
            f"{r.effective_inbound_rps:>8.2f} "
            f"{r.inbound_records_per_sec:>10.1f} "
            f"{r.outbound_records_per_sec:>10.1f} "
            f"{r.peak_queue_storage_mb:>9.2f} "
            f"{format_duration(r.completion_time_secs):>10} "
            f"{_route_notes(r, is_sync):<12}"
        )

    lines += [
        "",
        "--- Middleware Clusters ---",
        _CLUSTER_HEADER,
        "-" * len(_CLUSTER_HEADER),
    ]
    for c in result.clusters:
        threads = f"{c.used_threads}/{c.max_threads}{_flag(c.is_thread_breached)}"
        queues = f"{c.active_queues}/{c.max_queues}{_flag(c.is_queue_breached)}"
        storage = (
            f"{format_number(c.storage_used_mb)}/"
            f"{format_number(c.max_storage_mb)}"
            f"{_flag(c.is_storage_breached)}"
        )
        lines.append(
            f"{c.cluster_name[:22]:<22} {threads:>11} {queues:>9} "
            f"{storage:>20}"
        )

    breached = result.breached_clusters
    lines.append("")
    if breached:
        names = ", ".join(c.cluster_name for c in breached)
        lines.append(f"Capacity breached: {names}")
    else:
        lines.append("All clusters within capacity")
    return "\n".join(lines)
