import dataclasses

import pytest

from replication_planner.rates import (
    async_rates,
    route_rates,
    split_packet,
    sync_rates,
)


def test_split_factor_is_one_when_target_accepts_full_packet():
    assert split_packet(100, None) == (100, 1)
    assert split_packet(100, 100) == (100, 1)
    assert split_packet(100, 500) == (100, 1)


def test_split_factor_rounds_up():
    assert split_packet(100, 30) == (30, 4)
    assert split_packet(100, 50) == (50, 2)
    assert split_packet(100, 1) == (1, 100)


def test_split_factor_non_decreasing_as_target_packet_shrinks():
    previous = 0
    for target_size in range(150, 0, -1):
        _, split = split_packet(100, target_size)
        assert split >= previous
        previous = split


def test_async_scenario(customer, s4, async_config):
    r = async_rates(customer, s4, async_config)
    assert r.theoretical_inbound_rps == pytest.approx(20.0)
    assert r.effective_inbound_rps == pytest.approx(20.0)
    assert r.inbound_records_per_sec == pytest.approx(2000.0)
    assert r.effective_packet_size == 100
    assert r.split_factor == 1
    assert r.outbound_records_per_sec == pytest.approx(5000.0)
    assert r.used_threads == 4
    assert not r.is_throttled
    assert not r.is_thread_bound


def test_async_outbound_uses_effective_packet(customer, s4, async_config):
    target = dataclasses.replace(s4, max_packet_size=30)
    r = async_rates(customer, target, async_config)
    assert r.split_factor == 4
    assert r.outbound_records_per_sec == pytest.approx(1500.0)
    # 流入側はソースのパケットサイズのまま
    assert r.inbound_records_per_sec == pytest.approx(2000.0)


def test_ingress_limit_throttles_when_lower(customer, s4, async_config):
    target = dataclasses.replace(
        s4, ingress_limit_enabled=True, ingress_limit_rpm=600.0
    )
    r = async_rates(customer, target, async_config)
    assert r.is_throttled
    assert r.effective_inbound_rps == 600.0 / 60
    assert r.ingress_limit_rps == pytest.approx(10.0)
    assert r.throttled_rps == pytest.approx(10.0)
    assert r.inbound_records_per_sec == pytest.approx(1000.0)


def test_ingress_limit_above_theoretical_does_not_throttle(
    customer, s4, async_config
):
    target = dataclasses.replace(
        s4, ingress_limit_enabled=True, ingress_limit_rpm=1800.0
    )
    r = async_rates(customer, target, async_config)
    assert not r.is_throttled
    assert r.effective_inbound_rps == r.theoretical_inbound_rps
    assert r.ingress_limit_rps == pytest.approx(30.0)
    assert r.throttled_rps == 0.0


def test_disabled_ingress_limit_is_ignored(customer, s4, async_config):
    target = dataclasses.replace(s4, ingress_limit_rpm=60.0)
    r = async_rates(customer, target, async_config)
    assert not r.is_throttled
    assert r.ingress_limit_rps == 0.0
    assert r.effective_inbound_rps == pytest.approx(20.0)


def test_enabled_ingress_limit_without_rpm_is_ignored(
    customer, s4, async_config
):
    target = dataclasses.replace(s4, ingress_limit_enabled=True)
    r = async_rates(customer, target, async_config)
    assert not r.is_throttled
    assert r.effective_inbound_rps == pytest.approx(20.0)


def test_sync_thread_bound_scenario(customer, s4, sync_config):
    r = sync_rates(customer, s4, sync_config)
    assert r.theoretical_inbound_rps == pytest.approx(4 / 0.22)
    assert r.effective_inbound_rps == pytest.approx(18.1818, rel=1e-4)
    assert r.is_thread_bound
    assert r.used_threads == 4
    assert r.outbound_records_per_sec == r.inbound_records_per_sec


def test_sync_target_bound_with_split(customer, s4, sync_config):
    target = dataclasses.replace(s4, max_packet_size=30)
    r = sync_rates(customer, target, sync_config)
    # rtt = 0.2 + 4 * 0.02 -> 14.29 req/s, target = 50 / 4 = 12.5 req/s
    assert r.split_factor == 4
    assert r.theoretical_inbound_rps == pytest.approx(12.5)
    assert not r.is_thread_bound


def test_sync_ingress_limit(customer, s4, sync_config):
    target = dataclasses.replace(
        s4, ingress_limit_enabled=True, ingress_limit_rpm=300.0
    )
    r = sync_rates(customer, target, sync_config)
    assert r.is_throttled
    assert r.effective_inbound_rps == 300.0 / 60
    assert r.throttled_rps == pytest.approx(4 / 0.22 - 5.0)
    assert r.inbound_records_per_sec == pytest.approx(500.0)


def test_zero_rate_limit_does_not_divide_by_zero(
    customer, s4, async_config, sync_config
):
    target = dataclasses.replace(s4, rate_limit_rpm=0.0)
    r = async_rates(customer, target, async_config)
    assert r.outbound_records_per_sec == 0.0

    r = sync_rates(customer, target, sync_config)
    assert r.theoretical_inbound_rps == 0.0
    assert r.inbound_records_per_sec == 0.0


def test_route_rates_dispatches_on_pattern(
    customer, s4, async_config, sync_config
):
    assert route_rates(customer, s4, async_config).theoretical_inbound_rps == (
        pytest.approx(20.0)
    )
    assert route_rates(customer, s4, sync_config).is_thread_bound
