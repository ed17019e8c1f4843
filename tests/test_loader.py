import json

import pytest

from replication_planner import (
    IntegrationPattern,
    ReplicationType,
    TopologyError,
    load_topology,
)
from replication_planner.loader import parse_topology


def _document():
    return {
        "config": {"middleware_overhead_ms": 100, "concurrency": 2,
                   "integration_pattern": "sync"},
        "data_objects": [
            {"id": "1", "name": "Customer", "volume": 1000,
             "packet_size": 100, "payload_kb_per_record": 1.5},
        ],
        "clusters": [
            {"id": "c1", "name": "US", "max_threads": 10, "max_queues": 2,
             "max_storage_mb": 100},
        ],
        "targets": [
            {"id": "t1", "cluster_id": "c1", "name": "ERP",
             "rate_limit_rpm": 600, "max_packet_size": 50,
             "replication_type": "scheduled",
             "schedule_interval_minutes": 15,
             "ingress_limit_enabled": True, "ingress_limit_rpm": 120},
        ],
        "mappings": [{"data_object_id": "1", "target_id": "t1"}],
    }


def test_parse_snake_case_document():
    topology, config = parse_topology(_document())

    assert config.middleware_overhead_ms == 100.0
    assert config.concurrency == 2
    assert config.integration_pattern is IntegrationPattern.SYNC

    (target,) = topology.targets
    assert target.max_packet_size == 50
    assert target.replication_type is ReplicationType.SCHEDULED
    assert target.ingress_limit_rps == pytest.approx(2.0)
    assert topology.active_pairs() == {("1", "t1")}


def test_parse_planner_export_with_camel_case_names():
    document = {
        "mdos": [{"id": "1", "name": "Customer Master", "volume": 500000,
                  "packetSize": 100, "payloadSizePerRecordKB": 1.5}],
        "clusters": [{"id": "c1", "name": "MuleSoft", "maxThreads": 50,
                      "maxQueues": 10, "maxQueueCapacityMB": 5000}],
        "targets": [{"id": "t1", "middlewareClusterId": "c1",
                     "name": "S/4HANA", "apiRateLimitRPM": 3000,
                     "replicationType": "Realtime",
                     "middlewareRateLimitEnabled": False,
                     "middlewareIngressRPM": 30}],
        "mappings": [{"mdoId": "1", "targetId": "t1", "active": True}],
        "globalConfig": {"avgMiddlewareResponseTimeMs": 200,
                         "mdgConcurrency": 4, "integrationPattern": "ASYNC"},
    }
    topology, config = parse_topology(document)

    assert topology.data_objects[0].packet_size == 100
    assert topology.clusters[0].max_storage_mb == 5000.0
    assert topology.targets[0].cluster_id == "c1"
    assert topology.targets[0].ingress_limit_rps is None
    assert config.concurrency == 4
    assert config.integration_pattern is IntegrationPattern.ASYNC


def test_missing_sections_default_to_empty():
    topology, config = parse_topology({})
    assert topology.data_objects == ()
    assert topology.active_pairs() == frozenset()
    assert config.concurrency == 4
    assert config.middleware_overhead_ms == 200.0


def test_zero_packet_size_is_rejected():
    document = _document()
    document["data_objects"][0]["packet_size"] = 0
    with pytest.raises(TopologyError, match="packet_size"):
        parse_topology(document)


def test_zero_volume_is_allowed():
    document = _document()
    document["data_objects"][0]["volume"] = 0
    topology, _ = parse_topology(document)
    assert topology.data_objects[0].volume == 0


def test_missing_required_field():
    document = _document()
    del document["targets"][0]["cluster_id"]
    with pytest.raises(TopologyError, match="cluster_id"):
        parse_topology(document)


def test_unknown_pattern():
    document = _document()
    document["config"]["integration_pattern"] = "batch"
    with pytest.raises(TopologyError, match="integration_pattern"):
        parse_topology(document)


def test_non_numeric_value():
    document = _document()
    document["clusters"][0]["max_threads"] = "many"
    with pytest.raises(TopologyError, match="max_threads"):
        parse_topology(document)


def test_section_must_be_a_list():
    with pytest.raises(TopologyError, match="targets"):
        parse_topology({"targets": {"id": "t1"}})


def test_load_topology_from_file(tmp_path):
    path = tmp_path / "topology.json"
    path.write_text(json.dumps(_document()), encoding="utf-8")
    topology, config = load_topology(path)
    assert topology.data_objects[0].name == "Customer"
    assert config.concurrency == 2


def test_load_topology_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(TopologyError, match="invalid JSON"):
        load_topology(path)


def test_load_topology_not_utf8(tmp_path):
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"name": "\xff\xfe"}')
    with pytest.raises(TopologyError, match="UTF-8"):
        load_topology(path)


def test_string_flag_is_rejected():
    document = _document()
    document["mappings"][0]["active"] = "false"
    with pytest.raises(TopologyError, match="active"):
        parse_topology(document)

    document = _document()
    document["targets"][0]["ingress_limit_enabled"] = "yes"
    with pytest.raises(TopologyError, match="ingress_limit_enabled"):
        parse_topology(document)


def test_inactive_mapping_flag_is_kept():
    document = _document()
    document["mappings"][0]["active"] = False
    topology, _ = parse_topology(document)
    assert topology.active_pairs() == frozenset()
