# tests/node/test_k8s_node_lifecycle.py
"""
Tests for K8sNode start/stop/clear_storage with kubectl and health checks mocked.
"""

import subprocess
from unittest.mock import AsyncMock, call

import pytest

from forge_k8s.core.exceptions import (
    ClearStorageError,
    HealthCheckFailure,
    HealthCheckTimeout,
    HealthCheckUnknown,
    ScaleError,
)
from forge_k8s.node.k8s_node import K8sNode


@pytest.fixture
def mock_scale(mocker):
    return mocker.patch("forge_k8s.node.k8s_node.scale_stateful_set_replicas")


@pytest.fixture
def mock_run_kubectl(mocker):
    return mocker.patch("forge_k8s.node.k8s_node.run_kubectl")


async def test_start_scales_up_and_waits_for_health(make_node, mock_scale, mocker):
    health = mocker.patch.object(K8sNode, "health_check", new_callable=AsyncMock)
    node = make_node()

    await node.start()

    mock_scale.assert_called_once_with("aptos-node-0-validator", 1)
    health.assert_awaited_once()


async def test_start_retries_failed_health_checks(make_node, mock_scale, mocker):
    health = mocker.patch.object(
        K8sNode,
        "health_check",
        new_callable=AsyncMock,
        side_effect=[HealthCheckFailure("not yet"), HealthCheckFailure("not yet"), None],
    )
    node = make_node()

    await node.start()

    assert health.await_count == 3


async def test_start_times_out(make_node, mock_scale, mocker, monkeypatch):
    monkeypatch.setenv("HEALTH_CHECK_TIMEOUT", "0.05")
    mocker.patch.object(K8sNode, "health_check", new_callable=AsyncMock, side_effect=HealthCheckFailure("down"))
    node = make_node()

    with pytest.raises(HealthCheckTimeout, match="val0"):
        await node.start()


async def test_start_gives_up_on_unknown_health(make_node, mock_scale, mocker):
    health = mocker.patch.object(
        K8sNode, "health_check", new_callable=AsyncMock, side_effect=HealthCheckUnknown("???")
    )
    node = make_node()

    with pytest.raises(HealthCheckUnknown):
        await node.start()
    health.assert_awaited_once()


async def test_start_propagates_scale_error(make_node, mock_scale, mocker):
    mock_scale.side_effect = ScaleError("forbidden")
    health = mocker.patch.object(K8sNode, "health_check", new_callable=AsyncMock)
    node = make_node()

    with pytest.raises(ScaleError):
        await node.start()
    health.assert_not_awaited()


async def test_start_then_stop_scales_back_to_zero(make_node, mock_scale, mocker):
    mocker.patch.object(K8sNode, "health_check", new_callable=AsyncMock)
    node = make_node()

    await node.start()
    node.stop()

    assert mock_scale.call_args_list == [
        call("aptos-node-0-validator", 1),
        call("aptos-node-0-validator", 0),
    ]


def test_stop_is_idempotent(make_node, mock_scale):
    node = make_node()

    node.stop()
    node.stop()

    assert mock_scale.call_args_list == [call("aptos-node-0-validator", 0)] * 2


@pytest.mark.parametrize(
    "sts_name, pvc_name",
    [
        ("aptos-node-0-validator-fullnode", "fn-aptos-node-0-validator-fullnode-0"),
        ("aptos-node-0-validator", "aptos-node-0-validator"),
    ],
)
def test_clear_storage_deletes_pvc(make_node, mock_run_kubectl, sts_name, pvc_name):
    mock_run_kubectl.return_value = subprocess.CompletedProcess([], 0, stdout=b"", stderr=b"")
    node = make_node(stateful_set_name=sts_name)

    node.clear_storage()

    mock_run_kubectl.assert_called_once_with(["delete", "pvc", pvc_name])


def test_clear_storage_failure_carries_stderr(make_node, mock_run_kubectl):
    mock_run_kubectl.return_value = subprocess.CompletedProcess(
        [], 1, stdout=b"", stderr=b'persistentvolumeclaims "val0" not found'
    )
    node = make_node(stateful_set_name="val0")

    with pytest.raises(ClearStorageError, match='persistentvolumeclaims "val0" not found'):
        node.clear_storage()
