# tests/node/test_base_node.py
"""
Tests for BaseNode.wait_until_healthy with a scripted in-memory node.
"""

import time

import pytest

from forge_k8s.core.exceptions import (
    HealthCheckFailure,
    HealthCheckTimeout,
    HealthCheckUnknown,
    NodeNotRunning,
)
from forge_k8s.node.base import BaseNode


class ScriptedNode(BaseNode):
    """Replays a list of health check outcomes, then stays healthy."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.checks = 0

    name = "scripted"
    peer_id = "00" * 32
    version = "test"

    def rest_api_endpoint(self):
        return "http://127.0.0.1:1/"

    def inspection_service_endpoint(self):
        return "http://scripted:1/"

    async def start(self):
        pass

    def stop(self):
        pass

    def clear_storage(self):
        pass

    async def health_check(self):
        self.checks += 1
        if self.outcomes:
            outcome = self.outcomes.pop(0)
            if outcome is not None:
                raise outcome

    def counter(self, counter, port):
        return 0.0

    def expose_metric(self):
        return 0


async def test_returns_on_first_success():
    node = ScriptedNode([])

    await node.wait_until_healthy(time.monotonic() + 1)

    assert node.checks == 1


async def test_retries_failures_and_not_running():
    node = ScriptedNode([NodeNotRunning("down"), HealthCheckFailure("syncing"), None])

    await node.wait_until_healthy(time.monotonic() + 5)

    assert node.checks == 3


async def test_unknown_aborts_immediately():
    node = ScriptedNode([HealthCheckUnknown("???")])

    with pytest.raises(HealthCheckUnknown):
        await node.wait_until_healthy(time.monotonic() + 5)
    assert node.checks == 1


async def test_times_out():
    node = ScriptedNode([HealthCheckFailure("down")] * 1000)

    with pytest.raises(HealthCheckTimeout, match="scripted"):
        await node.wait_until_healthy(time.monotonic() + 0.05)


async def test_past_deadline_never_probes():
    node = ScriptedNode([])

    with pytest.raises(HealthCheckTimeout):
        await node.wait_until_healthy(time.monotonic() - 1)
    assert node.checks == 0


def test_incomplete_node_cannot_be_instantiated():
    class Incomplete(BaseNode):
        pass

    with pytest.raises(TypeError):
        Incomplete()
