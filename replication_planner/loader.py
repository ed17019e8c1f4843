"""JSON ファイルからトポロジを読み込む。

snake_case のフィールド名に加え、プランナー画面が書き出していた
camelCase の名前 (packetSize, apiRateLimitRPM など) も受け付ける。
"""

import json
import logging
from pathlib import Path

from replication_planner.config import (
    GlobalConfig,
    IntegrationPattern,
    ReplicationType,
)
from replication_planner.topology import (
    DataObject,
    Mapping,
    MiddlewareCluster,
    TargetSystem,
    Topology,
)

logger = logging.getLogger(__name__)

# camelCase -> snake_case
ALIASES = {
    "mdgConcurrency": "concurrency",
    "avgMiddlewareResponseTimeMs": "middleware_overhead_ms",
    "integrationPattern": "integration_pattern",
    "packetSize": "packet_size",
    "payloadSizePerRecordKB": "payload_kb_per_record",
    "maxThreads": "max_threads",
    "maxQueues": "max_queues",
    "maxQueueCapacityMB": "max_storage_mb",
    "middlewareClusterId": "cluster_id",
    "apiRateLimitRPM": "rate_limit_rpm",
    "targetPacketSize": "max_packet_size",
    "replicationType": "replication_type",
    "scheduleIntervalMinutes": "schedule_interval_minutes",
    "middlewareRateLimitEnabled": "ingress_limit_enabled",
    "middlewareIngressRPM": "ingress_limit_rpm",
    "mdoId": "data_object_id",
    "targetId": "target_id",
    "mdos": "data_objects",
    "globalConfig": "config",
}


class TopologyError(ValueError):
    """トポロジ定義の不備。"""


def _normalize(raw: dict, where: str) -> dict:
    if not isinstance(raw, dict):
        raise TopologyError(f"{where}: expected an object, got {raw!r}")
    return {ALIASES.get(k, k): v for k, v in raw.items()}


def _required(data: dict, key: str, where: str):
    if data.get(key) is None:
        raise TopologyError(f"{where}: missing field '{key}'")
    return data[key]


def _number(data: dict, key: str, where: str, *, minimum=0.0,
            strict=True, integer=False):
    value = _required(data, key, where)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TopologyError(f"{where}: '{key}' must be a number")
    if integer and value != int(value):
        raise TopologyError(f"{where}: '{key}' must be an integer")
    if strict and value <= minimum:
        raise TopologyError(f"{where}: '{key}' must be > {minimum:g}")
    if not strict and value < minimum:
        raise TopologyError(f"{where}: '{key}' must be >= {minimum:g}")
    return int(value) if integer else float(value)


def _optional_number(data: dict, key: str, where: str, *, integer=False):
    if data.get(key) is None:
        return None
    return _number(data, key, where, integer=integer)


def _flag(data: dict, key: str, where: str, default: bool) -> bool:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise TopologyError(f"{where}: '{key}' must be true or false")
    return value


def _enum(enum_cls, value, where: str, key: str):
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        choices = ", ".join(e.value.lower() for e in enum_cls)
        raise TopologyError(
            f"{where}: '{key}' must be one of {choices}, got {value!r}"
        ) from None


def parse_config(raw: dict | None) -> GlobalConfig:
    """グローバル設定。省略したフィールドは既定値。"""
    data = _normalize(raw or {}, "config")
    kwargs = {}
    if data.get("middleware_overhead_ms") is not None:
        kwargs["middleware_overhead_ms"] = _number(
            data, "middleware_overhead_ms", "config"
        )
    if data.get("concurrency") is not None:
        kwargs["concurrency"] = _number(
            data, "concurrency", "config", integer=True
        )
    if data.get("integration_pattern") is not None:
        kwargs["integration_pattern"] = _enum(
            IntegrationPattern,
            data["integration_pattern"],
            "config",
            "integration_pattern",
        )
    return GlobalConfig(**kwargs)


def parse_data_object(raw: dict, index: int) -> DataObject:
    data = _normalize(raw, f"data_objects[{index}]")
    where = f"data object {data.get('id', index)!r}"
    return DataObject(
        id=str(_required(data, "id", where)),
        name=str(data.get("name") or data["id"]),
        volume=_number(data, "volume", where, strict=False, integer=True),
        packet_size=_number(data, "packet_size", where, integer=True),
        payload_kb_per_record=_number(data, "payload_kb_per_record", where),
    )


def parse_cluster(raw: dict, index: int) -> MiddlewareCluster:
    data = _normalize(raw, f"clusters[{index}]")
    where = f"cluster {data.get('id', index)!r}"
    return MiddlewareCluster(
        id=str(_required(data, "id", where)),
        name=str(data.get("name") or data["id"]),
        max_threads=_number(data, "max_threads", where, integer=True),
        max_queues=_number(data, "max_queues", where, integer=True),
        max_storage_mb=_number(data, "max_storage_mb", where),
    )


def parse_target(raw: dict, index: int) -> TargetSystem:
    data = _normalize(raw, f"targets[{index}]")
    where = f"target {data.get('id', index)!r}"
    replication_type = ReplicationType.REALTIME
    if data.get("replication_type") is not None:
        replication_type = _enum(
            ReplicationType, data["replication_type"], where,
            "replication_type",
        )
    return TargetSystem(
        id=str(_required(data, "id", where)),
        cluster_id=str(_required(data, "cluster_id", where)),
        name=str(data.get("name") or data["id"]),
        rate_limit_rpm=_number(data, "rate_limit_rpm", where),
        max_packet_size=_optional_number(
            data, "max_packet_size", where, integer=True
        ),
        replication_type=replication_type,
        schedule_interval_minutes=_optional_number(
            data, "schedule_interval_minutes", where
        ),
        ingress_limit_enabled=_flag(
            data, "ingress_limit_enabled", where, False
        ),
        ingress_limit_rpm=_optional_number(data, "ingress_limit_rpm", where),
    )


def parse_mapping(raw: dict, index: int) -> Mapping:
    data = _normalize(raw, f"mappings[{index}]")
    where = f"mappings[{index}]"
    return Mapping(
        data_object_id=str(_required(data, "data_object_id", where)),
        target_id=str(_required(data, "target_id", where)),
        active=_flag(data, "active", where, True),
    )


def parse_topology(document: dict) -> tuple[Topology, GlobalConfig]:
    """dict から (Topology, GlobalConfig) を組み立てる。"""
    doc = _normalize(document, "topology")

    def items(key):
        value = doc.get(key) or []
        if not isinstance(value, list):
            raise TopologyError(f"'{key}' must be a list")
        return value

    topology = Topology(
        data_objects=tuple(
            parse_data_object(r, i) for i, r in enumerate(items("data_objects"))
        ),
        clusters=tuple(
            parse_cluster(r, i) for i, r in enumerate(items("clusters"))
        ),
        targets=tuple(
            parse_target(r, i) for i, r in enumerate(items("targets"))
        ),
        mappings=tuple(
            parse_mapping(r, i) for i, r in enumerate(items("mappings"))
        ),
    )
    config = parse_config(doc.get("config"))
    logger.debug(
        "loaded topology: %d data objects, %d targets, %d mappings, "
        "%d clusters",
        len(topology.data_objects),
        len(topology.targets),
        len(topology.mappings),
        len(topology.clusters),
    )
    return topology, config


def load_topology(path: str | Path) -> tuple[Topology, GlobalConfig]:
    """JSON ファイルを読み込む。"""
    try:
        with open(path, encoding="utf-8") as f:
            document = json.load(f)
    except json.JSONDecodeError as e:
        raise TopologyError(f"{path}: invalid JSON ({e})") from e
    except UnicodeDecodeError as e:
        raise TopologyError(f"{path}: not UTF-8 text ({e})") from e
    return parse_topology(document)
