"""見積もりのグローバル設定。"""

from dataclasses import dataclass
from enum import Enum


class IntegrationPattern(str, Enum):
    """ミドルウェアの連携パターン。"""

    # キュー経由 (Fire & Forget)
    ASYNC = "ASYNC"
    # リクエスト/レスポンス (ソースはターゲット応答まで待つ)
    SYNC = "SYNC"


class ReplicationType(str, Enum):
    """ターゲットのレプリケーション方式。計算式には影響しない。"""

    REALTIME = "REALTIME"
    SCHEDULED = "SCHEDULED"


@dataclass(frozen=True)
class GlobalConfig:
    """トポロジ全体に効くパラメータ。"""

    # ソース -> ミドルウェアの 1 リクエストあたり処理時間 (ms)
    middleware_overhead_ms: float = 200.0
    # ターゲットインターフェースごとにソースが開く並列チャネル数
    concurrency: int = 4
    # 連携パターン
    integration_pattern: IntegrationPattern = IntegrationPattern.ASYNC

    @property
    def is_sync(self) -> bool:
        return self.integration_pattern is IntegrationPattern.SYNC
