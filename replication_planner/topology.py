"""レプリケーショントポロジの入力エンティティ。"""

import math
from dataclasses import dataclass

from replication_planner.config import ReplicationType


@dataclass(frozen=True)
class DataObject:
    """レプリケーション対象のデータ種別 (マスタデータ 1 種類)。"""

    id: str
    name: str
    # 総レコード数
    volume: int
    # ソース 1 リクエストあたりのレコード数
    packet_size: int
    # 1 レコードあたりのペイロード (KB)
    payload_kb_per_record: float

    @property
    def payload_per_packet_kb(self) -> float:
        return self.packet_size * self.payload_kb_per_record

    @property
    def total_packets(self) -> int:
        if self.packet_size <= 0:
            return 0
        return math.ceil(self.volume / self.packet_size)

    @property
    def total_data_mb(self) -> float:
        return self.volume * self.payload_kb_per_record / 1024


@dataclass(frozen=True)
class MiddlewareCluster:
    """スレッド・キュー・ストレージを共有するミドルウェアの実行単位。"""

    id: str
    name: str
    # 最大同時処理スレッド数
    max_threads: int
    # 最大キュー数
    max_queues: int
    # クラスタ全体のキューストレージ上限 (MB)
    max_storage_mb: float


@dataclass(frozen=True)
class TargetSystem:
    """ミドルウェア経由でデータを受け取るターゲットシステム。"""

    id: str
    cluster_id: str
    name: str
    # ターゲット API のレート制限 (req/min)
    rate_limit_rpm: float
    # ターゲット 1 コールあたりの最大レコード数 (None ならソースのパケットサイズ)
    max_packet_size: int | None = None
    replication_type: ReplicationType = ReplicationType.REALTIME
    # SCHEDULED の実行間隔 (分)。どの計算式にも使わない
    schedule_interval_minutes: float | None = None
    # ミドルウェア側の流入レート制限
    ingress_limit_enabled: bool = False
    ingress_limit_rpm: float | None = None

    @property
    def ingress_limit_rps(self) -> float | None:
        """有効な流入上限 (req/s)。制限なしなら None。"""
        if not self.ingress_limit_enabled:
            return None
        if self.ingress_limit_rpm is None or self.ingress_limit_rpm <= 0:
            return None
        return self.ingress_limit_rpm / 60


@dataclass(frozen=True)
class Mapping:
    """データ種別 -> ターゲットのルーティング。"""

    data_object_id: str
    target_id: str
    active: bool = True


@dataclass(frozen=True)
class Topology:
    """見積もり 1 回分の入力一式。"""

    data_objects: tuple[DataObject, ...] = ()
    targets: tuple[TargetSystem, ...] = ()
    mappings: tuple[Mapping, ...] = ()
    clusters: tuple[MiddlewareCluster, ...] = ()

    def active_pairs(self) -> frozenset[tuple[str, str]]:
        """有効な (data_object_id, target_id) の集合。"""
        # 同じペアが複数あれば先勝ち
        state: dict[tuple[str, str], bool] = {}
        for m in self.mappings:
            state.setdefault((m.data_object_id, m.target_id), m.active)
        return frozenset(k for k, v in state.items() if v)

    @classmethod
    def sample(cls) -> "Topology":
        """デモ用トポロジ。"""
        return cls(
            data_objects=(
                DataObject("1", "Customer Master", 500_000, 100, 1.5),
                DataObject("2", "Material Master", 1_200_000, 200, 2.0),
                DataObject("3", "Vendor Master", 50_000, 50, 1.2),
            ),
            clusters=(
                MiddlewareCluster("c1", "MuleSoft US Region", 50, 10, 5000.0),
                MiddlewareCluster("c2", "SAP CPI EU Region", 20, 5, 2000.0),
            ),
            targets=(
                TargetSystem(
                    "t1", "c1", "SAP S/4HANA (US)", 3000.0,
                    ingress_limit_rpm=30.0,
                ),
                TargetSystem(
                    "t2", "c1", "Salesforce CRM", 1000.0,
                    replication_type=ReplicationType.SCHEDULED,
                    schedule_interval_minutes=15.0,
                    ingress_limit_rpm=30.0,
                ),
                TargetSystem(
                    "t3", "c2", "Legacy ERP", 300.0,
                    ingress_limit_rpm=30.0,
                ),
            ),
            mappings=(
                Mapping("1", "t1"),
                Mapping("1", "t2"),
                Mapping("2", "t1"),
                Mapping("2", "t3"),
                Mapping("3", "t1"),
            ),
        )
