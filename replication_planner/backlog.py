"""キュー滞留と完了時間の見積もり。"""

from dataclasses import dataclass

from replication_planner.rates import RouteRates
from replication_planner.topology import DataObject

# 0 除算を避けるためのレート下限 (records/s)
FLOOR_RATE = 0.001


@dataclass(frozen=True)
class QueueEstimate:
    """ルート 1 本分のキュー見積もり。"""

    completion_time_secs: float = 0.0
    peak_depth_records: float = 0.0
    peak_storage_mb: float = 0.0


def async_queue(obj: DataObject, rates: RouteRates) -> QueueEstimate:
    """ASYNC のピーク滞留。完了時間はターゲットの排出速度で決まる。"""
    outbound = max(rates.outbound_records_per_sec, FLOOR_RATE)
    inbound = rates.inbound_records_per_sec
    completion = obj.volume / outbound

    if inbound > outbound:
        # 取り込みが終わるまでキューは伸び続ける
        time_to_ingest = obj.volume / inbound
        depth = (inbound - outbound) * time_to_ingest
    else:
        # 排出中でも 1 パケット分は常に滞留している
        depth = float(obj.packet_size)

    depth = min(depth, float(obj.volume))
    return QueueEstimate(
        completion_time_secs=completion,
        peak_depth_records=depth,
        peak_storage_mb=depth * obj.payload_kb_per_record / 1024,
    )


def sync_queue(obj: DataObject, rates: RouteRates) -> QueueEstimate:
    """SYNC はソースが応答を待つのでキューを持たない。"""
    inbound = max(rates.inbound_records_per_sec, FLOOR_RATE)
    return QueueEstimate(completion_time_secs=obj.volume / inbound)


def estimate_queue(
    obj: DataObject, rates: RouteRates, is_sync: bool
) -> QueueEstimate:
    if is_sync:
        return sync_queue(obj, rates)
    return async_queue(obj, rates)
