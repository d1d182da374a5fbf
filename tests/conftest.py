# tests/conftest.py

import pytest

from forge_k8s.models.node import K8sNodeDescriptor
from forge_k8s.node.k8s_node import K8sNode

PEER_ID = "ab" * 32


@pytest.fixture(autouse=True)
def mock_settings_env_vars(monkeypatch):
    """
    Pytest fixture to pin the environment read by the config module.

    Runs for every test so settings never leak in from the developer's shell.
    """
    for key in (
        "KUBECTL_BIN",
        "FORGE_NAMESPACE",
        "HEALTH_CHECK_TIMEOUT",
        "PORT_FORWARD_SETTLE_SECONDS",
        "METRIC_FORWARD_SETTLE_SECONDS",
        "METRICS_PORT_FORWARD_NAMESPACE",
        "COUNTER_TIMEOUT",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HEALTH_CHECK_INTERVAL", "0.01")


@pytest.fixture(autouse=True)
def reset_k8s_config(monkeypatch):
    """Forget any previously loaded Kubernetes configuration."""
    monkeypatch.setattr("forge_k8s.core.k8s_client._CONFIG_LOADED", False)


@pytest.fixture
def make_node():
    """
    Factory building a K8sNode; keyword arguments override the defaults.
    """

    def _make(**overrides) -> K8sNode:
        fields = dict(
            name="val0",
            stateful_set_name="aptos-node-0-validator",
            peer_id=PEER_ID,
            index=0,
            service_name="val0",
            namespace="forge",
            rest_api_port=40001,
            version="v1.0.0",
            haproxy_enabled=False,
            port_forward_enabled=True,
        )
        fields.update(overrides)
        return K8sNode(K8sNodeDescriptor(**fields))

    return _make
