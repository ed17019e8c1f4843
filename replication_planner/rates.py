"""ルート 1 本分のレート計算。

ソース -> ミドルウェア (inbound) と ミドルウェア -> ターゲット (outbound) の
レートを求める。パケットサイズの不一致による分割と、ミドルウェア側の
流入制限を考慮する。
"""

import math
from dataclasses import dataclass

from replication_planner.config import GlobalConfig
from replication_planner.topology import DataObject, TargetSystem

# ターゲットの RPM が 0 以下のときに使う 1 コールあたりのレイテンシ (秒)
FLOOR_TARGET_LATENCY_SECS = 0.1
# ミドルウェアの処理時間が 0 以下のときの下限 (ms)
FLOOR_OVERHEAD_MS = 1.0


@dataclass(frozen=True)
class RouteRates:
    """レート計算の結果。"""

    split_factor: int
    effective_packet_size: int
    # 流入制限をかける前の理論 RPS
    theoretical_inbound_rps: float
    # 流入制限後の RPS
    effective_inbound_rps: float
    # 流入制限 (req/s)。制限なしなら 0
    ingress_limit_rps: float
    is_throttled: bool
    inbound_records_per_sec: float
    outbound_records_per_sec: float
    used_threads: int
    is_thread_bound: bool = False

    @property
    def throttled_rps(self) -> float:
        """流入制限で削られた RPS。"""
        if not self.is_throttled:
            return 0.0
        return self.theoretical_inbound_rps - self.effective_inbound_rps


def split_packet(
    source_packet_size: int, target_packet_size: int | None
) -> tuple[int, int]:
    """(実効パケットサイズ, 分割数) を返す。

    ターゲットが受け付けるサイズがソースより小さければ、ソースの
    1 リクエストは ceil(source / effective) 回のターゲットコールに分かれる。
    """
    source = max(source_packet_size, 1)
    if target_packet_size is None or target_packet_size <= 0:
        return source, 1
    effective = min(source, target_packet_size)
    return effective, math.ceil(source / effective)


def apply_ingress_limit(
    theoretical_rps: float, target: TargetSystem
) -> tuple[float, float, bool]:
    """(実効 RPS, 制限値 RPS, 制限がかかったか) を返す。"""
    limit = target.ingress_limit_rps
    if limit is None:
        return theoretical_rps, 0.0, False
    if theoretical_rps > limit:
        return limit, limit, True
    return theoretical_rps, limit, False


def _overhead_ms(config: GlobalConfig) -> float:
    return max(config.middleware_overhead_ms, FLOOR_OVERHEAD_MS)


def target_latency_secs(target: TargetSystem) -> float:
    """ターゲット 1 コールに要する時間 (秒)。RPM から逆算する。"""
    if target.rate_limit_rpm <= 0:
        return FLOOR_TARGET_LATENCY_SECS
    return 60 / target.rate_limit_rpm


def async_rates(
    obj: DataObject, target: TargetSystem, config: GlobalConfig
) -> RouteRates:
    """キュー経由 (ASYNC) のレート。"""
    effective_packet, split = split_packet(
        obj.packet_size, target.max_packet_size
    )

    # 各チャネルが overhead ms ごとに 1 往復する
    theoretical = (1000 / _overhead_ms(config)) * config.concurrency
    effective_rps, limit_rps, throttled = apply_ingress_limit(
        theoretical, target
    )

    # ターゲットは RPM * 実効パケットサイズ までしか受け取れない
    outbound = max(target.rate_limit_rpm, 0) / 60 * effective_packet

    return RouteRates(
        split_factor=split,
        effective_packet_size=effective_packet,
        theoretical_inbound_rps=theoretical,
        effective_inbound_rps=effective_rps,
        ingress_limit_rps=limit_rps,
        is_throttled=throttled,
        inbound_records_per_sec=effective_rps * obj.packet_size,
        outbound_records_per_sec=outbound,
        used_threads=config.concurrency,
    )


def sync_rates(
    obj: DataObject, target: TargetSystem, config: GlobalConfig
) -> RouteRates:
    """リクエスト/レスポンス (SYNC) のレート。"""
    effective_packet, split = split_packet(
        obj.packet_size, target.max_packet_size
    )

    # ミドルウェアは分割したコールを順に終えてからソースに応答する
    rtt = _overhead_ms(config) / 1000 + split * target_latency_secs(target)

    by_threads = config.concurrency / rtt
    by_target = max(target.rate_limit_rpm, 0) / 60 / split

    theoretical = min(by_threads, by_target)
    effective_rps, limit_rps, throttled = apply_ingress_limit(
        theoretical, target
    )
    inbound = effective_rps * obj.packet_size

    # 接続中はターゲット待ちでもスレッドを占有する (最悪値)
    return RouteRates(
        split_factor=split,
        effective_packet_size=effective_packet,
        theoretical_inbound_rps=theoretical,
        effective_inbound_rps=effective_rps,
        ingress_limit_rps=limit_rps,
        is_throttled=throttled,
        inbound_records_per_sec=inbound,
        outbound_records_per_sec=inbound,
        used_threads=config.concurrency,
        is_thread_bound=by_threads < by_target,
    )


def route_rates(
    obj: DataObject, target: TargetSystem, config: GlobalConfig
) -> RouteRates:
    """連携パターンに応じてレートを計算する。"""
    if config.is_sync:
        return sync_rates(obj, target, config)
    return async_rates(obj, target, config)
