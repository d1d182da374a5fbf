# src/forge_k8s/node/base.py
"""
This module defines the abstract base class for all forge nodes.

Test drivers program against this interface so a node backed by a local
process and a node backed by a Kubernetes pod are interchangeable.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod

from ..core.config import config
from ..core.exceptions import HealthCheckError, HealthCheckTimeout, HealthCheckUnknown

logger = logging.getLogger(__name__)


class BaseNode(ABC):
    """
    Abstract Base Class for a controllable blockchain node.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def peer_id(self) -> str:
        pass

    @property
    @abstractmethod
    def version(self) -> str:
        pass

    @abstractmethod
    def rest_api_endpoint(self) -> str:
        pass

    @abstractmethod
    def inspection_service_endpoint(self) -> str:
        pass

    @abstractmethod
    async def start(self) -> None:
        """Start the node and return once it is healthy."""
        pass

    @abstractmethod
    def stop(self) -> None:
        pass

    @abstractmethod
    def clear_storage(self) -> None:
        """Wipe the node's persistent storage. Only valid while stopped."""
        pass

    @abstractmethod
    async def health_check(self) -> None:
        """
        Probe the node once.

        Raises:
            HealthCheckError: Or one of its subclasses when the node is not healthy.
        """
        pass

    @abstractmethod
    def counter(self, counter: str, port: int) -> float:
        pass

    @abstractmethod
    def expose_metric(self) -> int:
        """Make the node's metrics reachable locally and return the local port."""
        pass

    async def wait_until_healthy(self, deadline: float) -> None:
        """
        Polls health_check until it succeeds or the deadline passes.

        Args:
            deadline: Absolute time on the time.monotonic() clock.

        Raises:
            HealthCheckTimeout: If the node is still unhealthy at the deadline.
            HealthCheckUnknown: Re-raised immediately, the state cannot be recovered by waiting.
        """
        interval = config.HEALTH_CHECK_INTERVAL
        while time.monotonic() < deadline:
            try:
                await self.health_check()
                return
            except HealthCheckUnknown:
                logger.error("Node %s is in an unknown state, giving up", self.name)
                raise
            except HealthCheckError as e:
                # For other errors we'll retry
                logger.debug("Node %s not healthy yet: %s", self.name, e)
            await asyncio.sleep(interval)

        raise HealthCheckTimeout(f"Timed out waiting for Node {self.name} to be healthy")
