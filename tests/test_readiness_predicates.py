"""Readiness predicates for live cluster objects."""

from __future__ import annotations

from typing import Any

import pytest

from meshctl.domain.readiness import (
    daemonset_ready,
    deployment_ready,
    is_ready,
    namespace_ready,
    pod_ready,
    service_ready,
    statefulset_ready,
)


@pytest.mark.os_agnostic
def test_deployment_is_ready_when_available_replicas_reach_desired() -> None:
    obj = {
        "metadata": {"generation": 2},
        "spec": {"replicas": 3},
        "status": {"availableReplicas": 3, "observedGeneration": 2},
    }
    assert deployment_ready(obj)


@pytest.mark.os_agnostic
def test_deployment_is_not_ready_while_rollout_is_unobserved() -> None:
    """A stale status from the previous generation does not count."""
    obj = {
        "metadata": {"generation": 3},
        "spec": {"replicas": 1},
        "status": {"availableReplicas": 1, "observedGeneration": 2},
    }
    assert not deployment_ready(obj)


@pytest.mark.os_agnostic
def test_deployment_scaled_to_zero_is_ready() -> None:
    assert deployment_ready({"spec": {"replicas": 0}, "status": {}})


@pytest.mark.os_agnostic
def test_deployment_without_status_is_not_ready() -> None:
    assert not deployment_ready({"spec": {"replicas": 1}})


@pytest.mark.os_agnostic
@pytest.mark.parametrize(("ready", "desired", "expected"), [(2, 2, True), (1, 2, False), (0, 0, True)])
def test_daemonset_compares_ready_to_scheduled(ready: int, desired: int, expected: bool) -> None:
    obj = {"status": {"numberReady": ready, "desiredNumberScheduled": desired}}
    assert daemonset_ready(obj) is expected


@pytest.mark.os_agnostic
def test_statefulset_needs_ready_replicas() -> None:
    assert statefulset_ready({"spec": {"replicas": 2}, "status": {"readyReplicas": 2}})
    assert not statefulset_ready({"spec": {"replicas": 2}, "status": {"readyReplicas": 1}})


@pytest.mark.os_agnostic
def test_pod_needs_running_phase_and_ready_condition() -> None:
    running = {"status": {"phase": "Running", "conditions": [{"type": "Ready", "status": "True"}]}}
    not_ready = {"status": {"phase": "Running", "conditions": [{"type": "Ready", "status": "False"}]}}
    pending = {"status": {"phase": "Pending"}}

    assert pod_ready(running)
    assert not pod_ready(not_ready)
    assert not pod_ready(pending)


@pytest.mark.os_agnostic
def test_load_balancer_service_needs_an_ingress_entry() -> None:
    assigned = {"spec": {"type": "LoadBalancer"}, "status": {"loadBalancer": {"ingress": [{"ip": "203.0.113.1"}]}}}
    pending = {"spec": {"type": "LoadBalancer", "clusterIP": "10.0.0.1"}, "status": {"loadBalancer": {}}}

    assert service_ready(assigned)
    assert not service_ready(pending)


@pytest.mark.os_agnostic
def test_cluster_ip_service_needs_a_cluster_ip() -> None:
    assert service_ready({"spec": {"clusterIP": "10.0.0.1"}})
    assert not service_ready({"spec": {}})


@pytest.mark.os_agnostic
def test_namespace_is_ready_unless_terminating() -> None:
    assert namespace_ready({"status": {"phase": "Active"}})
    assert not namespace_ready({"status": {"phase": "Terminating"}})


@pytest.mark.os_agnostic
def test_missing_object_is_never_ready() -> None:
    assert not is_ready(None)


@pytest.mark.os_agnostic
@pytest.mark.parametrize("kind", ["ConfigMap", "ServiceAccount", "ClusterRole"])
def test_kinds_without_predicate_are_ready_once_they_exist(kind: str) -> None:
    assert is_ready({"kind": kind, "metadata": {"name": "x"}})


@pytest.mark.os_agnostic
def test_is_ready_dispatches_on_kind() -> None:
    obj: dict[str, Any] = {"kind": "Deployment", "spec": {"replicas": 1}, "status": {}}
    assert not is_ready(obj)
