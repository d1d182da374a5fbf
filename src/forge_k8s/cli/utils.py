# src/forge_k8s/cli/utils.py
import asyncio
import logging
import secrets
from typing import Optional

import typer
from kubernetes_asyncio.client.rest import ApiException
from pydantic import BaseModel

from ..core.config import Config
from ..core.exceptions import ForgeError
from ..models.node import K8sNodeDescriptor
from ..node.k8s_node import K8sNode
from ..utils.net import get_free_port

logger = logging.getLogger(__name__)


class NodeOptions(BaseModel):
    """Node coordinates collected by the top-level callback."""

    namespace: str
    sts: Optional[str] = None
    service: Optional[str] = None
    name: Optional[str] = None
    port: Optional[int] = None
    peer_id: Optional[str] = None
    haproxy: bool = False
    port_forward: bool = False


def build_node(opts: NodeOptions) -> K8sNode:
    """Builds a K8sNode from CLI options, filling in the same defaults discovery uses."""
    if not opts.sts:
        raise typer.BadParameter("--sts is required for this command.", param_hint="--sts")

    port = opts.port
    if port is None:
        if opts.port_forward:
            port = get_free_port()
        elif opts.haproxy:
            port = Config.REST_API_HAPROXY_SERVICE_PORT
        else:
            port = Config.REST_API_SERVICE_PORT

    try:
        descriptor = K8sNodeDescriptor(
            name=opts.name or opts.sts,
            stateful_set_name=opts.sts,
            peer_id=opts.peer_id or secrets.token_hex(32),
            service_name=opts.service or opts.sts,
            namespace=opts.namespace,
            rest_api_port=port,
            haproxy_enabled=opts.haproxy,
            port_forward_enabled=opts.port_forward,
            is_validator="fullnode" not in opts.sts,
            is_fullnode="fullnode" in opts.sts,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e
    return K8sNode(descriptor)


def run_or_exit(func, *args):
    """
    Runs a node operation (sync or coroutine function) and turns forge errors,
    Kubernetes API errors and bad settings into a one-line message and exit code 1.
    """
    try:
        result = func(*args)
        if asyncio.iscoroutine(result):
            result = asyncio.run(result)
        return result
    except ApiException as e:
        logger.debug("Kubernetes API call failed", exc_info=True)
        typer.secho(f"Error: Kubernetes API error ({e.status}): {e.reason}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except (ForgeError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
