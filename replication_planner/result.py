"""見積もり結果。"""

from dataclasses import asdict, dataclass, field

from replication_planner.config import GlobalConfig


@dataclass
class RouteResult:
    """有効なマッピング 1 本分の結果。"""

    data_object_id: str
    data_object_name: str
    target_id: str
    target_name: str
    cluster_id: str
    # データ量
    total_records: int = 0
    total_packets: int = 0
    payload_per_packet_kb: float = 0.0
    total_data_mb: float = 0.0
    # パケット分割 (ソース 1 コール -> ターゲット N コール)
    split_factor: int = 1
    effective_packet_size: int = 0
    # 流入 (ソース -> ミドルウェア)
    theoretical_inbound_rps: float = 0.0
    effective_inbound_rps: float = 0.0
    ingress_limit_rps: float = 0.0
    is_throttled: bool = False
    throttled_rps: float = 0.0
    inbound_records_per_sec: float = 0.0
    # 流出 (ミドルウェア -> ターゲット)
    outbound_records_per_sec: float = 0.0
    # スレッド
    used_threads: int = 0
    is_thread_bound: bool = False
    # キュー
    completion_time_secs: float = 0.0
    peak_queue_depth_records: float = 0.0
    peak_queue_depth_packets: int = 0
    peak_queue_storage_mb: float = 0.0


@dataclass
class ClusterHealth:
    """クラスタ 1 つ分の使用量と上限。"""

    cluster_id: str
    cluster_name: str
    used_threads: int = 0
    max_threads: int = 0
    active_queues: int = 0
    max_queues: int = 0
    storage_used_mb: float = 0.0
    max_storage_mb: float = 0.0
    is_thread_breached: bool = False
    is_queue_breached: bool = False
    is_storage_breached: bool = False

    @property
    def has_breach(self) -> bool:
        return (
            self.is_thread_breached
            or self.is_queue_breached
            or self.is_storage_breached
        )


@dataclass
class SimulationResult:
    """見積もり全体の結果。"""

    config: GlobalConfig
    routes: list[RouteResult] = field(default_factory=list)
    clusters: list[ClusterHealth] = field(default_factory=list)
    # 全ルート合計の流入 RPS (ピーク API 負荷)
    peak_inbound_rps: float = 0.0
    # ソース側 API リクエスト総数
    total_api_requests: int = 0
    # 最も重いパケットのペイロード (KB)
    max_packet_payload_kb: float = 0.0
    # 必要ネットワーク帯域 (MB/s)
    required_network_mbps: float = 0.0
    # キューストレージ需要の合計 (MB)。クラスタ上限では切らない
    total_storage_mb: float = 0.0
    # 最も遅いルートの完了時間 (秒)
    overall_completion_secs: float = 0.0

    @property
    def breached_clusters(self) -> list[ClusterHealth]:
        return [c for c in self.clusters if c.has_breach]

    def to_dict(self) -> dict:
        """JSON 出力用の dict。"""
        data = asdict(self)
        data["config"]["integration_pattern"] = (
            self.config.integration_pattern.value
        )
        return data
