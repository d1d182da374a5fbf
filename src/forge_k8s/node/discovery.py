# src/forge_k8s/node/discovery.py
"""
Builds K8sNode objects from the stateful-sets deployed in a namespace.

Validators and full nodes are recognised by their `app.kubernetes.io/name`
label. Each stateful-set runs exactly one pod.
"""

import logging
import re
import secrets
from typing import List, Optional

from kubernetes_asyncio.client.rest import ApiException

from ..core.config import Config
from ..core.exceptions import ClusterConfigError
from ..core.k8s_client import get_apps_v1_api
from ..models.node import K8sNodeDescriptor
from ..utils.net import get_free_port
from .k8s_node import K8sNode

logger = logging.getLogger(__name__)

ROLE_LABEL = "app.kubernetes.io/name"
VALIDATOR_ROLE = "validator"
FULLNODE_ROLE = "fullnode"

# e.g. aptos-node-3-validator, aptos-node-3-fullnode
_NODE_INDEX_RE = re.compile(r"-(\d+)-")


def parse_node_index(sts_name: str) -> int:
    match = _NODE_INDEX_RE.search(sts_name)
    return int(match.group(1)) if match else 0


def service_name_for(sts_name: str, role: str, haproxy_enabled: bool) -> str:
    """HAProxy fronts validators through a `-lb` service; everything else is reached directly."""
    if haproxy_enabled and role == VALIDATOR_ROLE:
        return f"{sts_name}-lb"
    return sts_name


def build_node(
    sts_name: str,
    role: str,
    namespace: str,
    version: str = "",
    port_forward_enabled: bool = False,
    haproxy_enabled: bool = False,
    peer_id: Optional[str] = None,
) -> K8sNode:
    # Only validators sit behind HAProxy; full nodes are always reached directly.
    behind_proxy = haproxy_enabled and role == VALIDATOR_ROLE
    if port_forward_enabled:
        rest_api_port = get_free_port()
    elif behind_proxy:
        rest_api_port = Config.REST_API_HAPROXY_SERVICE_PORT
    else:
        rest_api_port = Config.REST_API_SERVICE_PORT

    descriptor = K8sNodeDescriptor(
        name=sts_name,
        stateful_set_name=sts_name,
        # The real identity lives in the node's keys; forge only needs it to be unique.
        peer_id=peer_id or secrets.token_hex(32),
        index=parse_node_index(sts_name),
        service_name=service_name_for(sts_name, role, haproxy_enabled),
        namespace=namespace,
        rest_api_port=rest_api_port,
        version=version,
        haproxy_enabled=behind_proxy,
        port_forward_enabled=port_forward_enabled,
        is_validator=role == VALIDATOR_ROLE,
        is_fullnode=role == FULLNODE_ROLE,
    )
    return K8sNode(descriptor)


async def discover_nodes(
    namespace: str,
    version: str = "",
    port_forward_enabled: bool = False,
    haproxy_enabled: bool = False,
) -> List[K8sNode]:
    """
    Lists the validator and full node stateful-sets of a namespace.

    Raises:
        ClusterConfigError: If no Kubernetes configuration is available.
        ApiException: If listing the stateful-sets fails.
    """
    api = await get_apps_v1_api()
    if not api:
        raise ClusterConfigError("No Kubernetes configuration available for node discovery.")

    try:
        selector = f"{ROLE_LABEL} in ({VALIDATOR_ROLE},{FULLNODE_ROLE})"
        sts_list = await api.list_namespaced_stateful_set(namespace, label_selector=selector)
    except ApiException as e:
        logger.error("Kubernetes API error while listing stateful sets in %s: %s", namespace, e)
        raise
    finally:
        await api.api_client.close()

    nodes = []
    for sts in sorted(sts_list.items, key=lambda s: s.metadata.name):
        labels = sts.metadata.labels or {}
        role = labels.get(ROLE_LABEL)
        if role not in (VALIDATOR_ROLE, FULLNODE_ROLE):
            logger.debug("Skipping stateful set %s with role %s", sts.metadata.name, role)
            continue
        node = build_node(
            sts.metadata.name,
            role,
            namespace,
            version=version,
            port_forward_enabled=port_forward_enabled,
            haproxy_enabled=haproxy_enabled,
        )
        logger.info(" -> %s '%s' (index %d) at %s", role, node.name, node.index, node.rest_api_endpoint())
        nodes.append(node)

    if not nodes:
        logger.warning("No validator or fullnode stateful sets found in namespace %s.", namespace)
    return nodes


async def get_stateful_set_replicas(sts_name: str, namespace: str) -> int:
    """
    Returns the desired replica count of a stateful-set (0 when stopped, 1 when started).

    Raises:
        ClusterConfigError: If no Kubernetes configuration is available.
        ApiException: If the stateful-set cannot be read.
    """
    api = await get_apps_v1_api()
    if not api:
        raise ClusterConfigError("No Kubernetes configuration available.")
    try:
        sts = await api.read_namespaced_stateful_set(sts_name, namespace)
    finally:
        await api.api_client.close()
    return sts.spec.replicas or 0
