# src/forge_k8s/node/k8s_node.py

import logging
import math
import time

import requests

from ..clients.rest_client import RestClient
from ..core.config import Config, config
from ..core.exceptions import (
    ClearStorageError,
    CounterError,
    CounterNotFoundError,
    CounterTypeError,
    CounterValueError,
    HealthCheckFailure,
)
from ..core.kubectl import run_kubectl, scale_stateful_set_replicas
from ..models.node import K8sNodeDescriptor
from ..utils.net import get_free_port
from .base import BaseNode
from .port_forward import PortForward, start_port_forward

logger = logging.getLogger(__name__)


class K8sNode(BaseNode):
    """
    A node running as the single replica of a stateful-set.

    start/stop scale the stateful-set between 0 and 1 replicas; the REST API
    and metrics are reached either in-cluster or through kubectl port-forward.
    Operations on one instance must be serialized by the caller.
    """

    def __init__(self, descriptor: K8sNodeDescriptor):
        self.descriptor = descriptor

    @classmethod
    def from_fields(cls, **fields) -> "K8sNode":
        return cls(K8sNodeDescriptor(**fields))

    def __repr__(self) -> str:
        return str(self.descriptor)

    # --- Identity ---

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def peer_id(self) -> str:
        return self.descriptor.peer_id

    @property
    def version(self) -> str:
        return self.descriptor.version

    @version.setter
    def version(self, value: str) -> None:
        self.descriptor.version = value

    @property
    def index(self) -> int:
        return self.descriptor.index

    @property
    def stateful_set_name(self) -> str:
        return self.descriptor.stateful_set_name

    @property
    def namespace(self) -> str:
        return self.descriptor.namespace

    @property
    def service_name(self) -> str:
        return self.descriptor.service_name

    @property
    def rest_api_port(self) -> int:
        return self.descriptor.rest_api_port

    @property
    def is_validator(self) -> bool:
        return self.descriptor.is_validator

    @property
    def is_fullnode(self) -> bool:
        return self.descriptor.is_fullnode

    def rest_api_endpoint(self) -> str:
        return self.descriptor.rest_api_endpoint()

    def inspection_service_endpoint(self) -> str:
        return self.descriptor.inspection_service_endpoint()

    def rest_client(self) -> RestClient:
        return RestClient(self.rest_api_endpoint())

    # --- Forwarding ---

    def spawn_port_forward(self) -> PortForward:
        """
        Forwards the local REST port to the node's service.

        Returns the forwarder handle; it is left running unless the caller closes it.
        """
        args = [
            "port-forward",
            "-n",
            self.namespace,
            f"svc/{self.service_name}",
            f"{self.rest_api_port}:{self.descriptor.remote_rest_api_port}",
        ]
        return start_port_forward(
            args,
            local_port=self.rest_api_port,
            remote_port=self.descriptor.remote_rest_api_port,
            settle_seconds=config.PORT_FORWARD_SETTLE_SECONDS,
            description=repr(self),
        )

    def expose_metric(self) -> int:
        """Forwards a fresh local port to the pod's metrics port and returns it."""
        port = get_free_port()
        args = ["port-forward"]
        if config.METRICS_PORT_FORWARD_NAMESPACE:
            args += ["-n", self.namespace]
        args += [f"pod/{self.descriptor.pod_name}", f"{port}:{Config.NODE_METRIC_PORT}"]
        logger.info("%s", args)
        start_port_forward(
            args,
            local_port=port,
            remote_port=Config.NODE_METRIC_PORT,
            settle_seconds=config.METRIC_FORWARD_SETTLE_SECONDS,
            check=False,
        )
        return port

    # --- Lifecycle ---

    async def start(self) -> None:
        scale_stateful_set_replicas(self.stateful_set_name, 1)
        await self.wait_until_healthy(time.monotonic() + config.HEALTH_CHECK_TIMEOUT)
        logger.info("Node %s is healthy", self.name)

    def stop(self) -> None:
        logger.info("going to stop node %s", self.stateful_set_name)
        scale_stateful_set_replicas(self.stateful_set_name, 0)

    def clear_storage(self) -> None:
        result = run_kubectl(["delete", "pvc", self.descriptor.pvc_name])
        if result.returncode != 0:
            raise ClearStorageError((result.stderr or b"").decode("utf-8", errors="replace"))

    # --- Probes ---

    async def health_check(self) -> None:
        try:
            await self.rest_client().get_ledger_information()
        except Exception as e:
            raise HealthCheckFailure(f"K8s node health_check failed: {e}") from e

    def counter(self, counter: str, port: int) -> float:
        """
        Reads one counter from the node's `/counters` JSON endpoint.

        Blocking on purpose: callers scrape from synchronous code.
        """
        url = f"http://localhost:{port}/counters"
        try:
            response = requests.get(url, timeout=config.COUNTER_TIMEOUT)
            response.raise_for_status()
            counters = response.json()
        except (requests.RequestException, ValueError) as e:
            raise CounterError(f"Failed to fetch counters from {url}: {e}") from e

        if not isinstance(counters, dict):
            raise CounterTypeError(f"Counters payload from {url} is not a JSON object: {counters!r}")
        if counter not in counters:
            raise CounterNotFoundError(f"Counter({counter}) was not found at {url}")

        value = counters[counter]
        # bool is an int subclass but JSON true/false are not numbers
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise CounterTypeError(f"Counter({counter}) was not a number: {value!r}")
        try:
            as_float = float(value)
        except OverflowError as e:
            raise CounterValueError(f"Failed to parse counter({counter}) as f64: {value!r}") from e
        if not math.isfinite(as_float):
            raise CounterValueError(f"Failed to parse counter({counter}) as f64: {value!r}")
        return as_float
