# tests/core/test_k8s_client.py

from unittest.mock import AsyncMock, MagicMock, patch

from kubernetes_asyncio import config as k8s_config

from forge_k8s.core import k8s_client


@patch("forge_k8s.core.k8s_client.config.load_kube_config", new_callable=AsyncMock)
@patch("forge_k8s.core.k8s_client.config.load_incluster_config", new_callable=MagicMock)
async def test_prefers_in_cluster_config(mock_incluster, mock_kubeconfig):
    assert await k8s_client.ensure_k8s_config() is True

    mock_incluster.assert_called_once()
    mock_kubeconfig.assert_not_awaited()


@patch("forge_k8s.core.k8s_client.config.load_kube_config", new_callable=AsyncMock)
@patch(
    "forge_k8s.core.k8s_client.config.load_incluster_config",
    new_callable=MagicMock,
    side_effect=k8s_config.ConfigException("not in cluster"),
)
async def test_falls_back_to_kubeconfig_once(mock_incluster, mock_kubeconfig):
    assert await k8s_client.ensure_k8s_config() is True
    assert await k8s_client.ensure_k8s_config() is True

    mock_kubeconfig.assert_awaited_once()


@patch(
    "forge_k8s.core.k8s_client.config.load_kube_config",
    new_callable=AsyncMock,
    side_effect=k8s_config.ConfigException("no kubeconfig"),
)
@patch(
    "forge_k8s.core.k8s_client.config.load_incluster_config",
    new_callable=MagicMock,
    side_effect=k8s_config.ConfigException("not in cluster"),
)
async def test_no_config_returns_none(mock_incluster, mock_kubeconfig):
    assert await k8s_client.get_apps_v1_api() is None
