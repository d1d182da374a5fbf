# src/forge_k8s/node/port_forward.py
"""
Supervision of kubectl port-forward children.

Forwarders are not reaped by the adapter: they live until the test process
exits, unless the caller closes the returned handle.
"""

import logging
import subprocess
import time
from typing import List, Optional, Sequence

from ..core.exceptions import PortForwardError
from ..core.kubectl import kubectl_argv, spawn_kubectl

logger = logging.getLogger(__name__)


class PortForward:
    """Handle on a running `kubectl port-forward` child."""

    def __init__(
        self,
        argv: Sequence[str],
        process: subprocess.Popen,
        local_port: int,
        remote_port: int,
    ):
        self.argv: List[str] = list(argv)
        self.process = process
        self.local_port = local_port
        self.remote_port = remote_port
        # Set when the child had already exited at the end of the settle window
        self.exited_early = False

    def __repr__(self) -> str:
        return f"PortForward({self.local_port}->{self.remote_port}, pid={self.process.pid})"

    @property
    def alive(self) -> bool:
        return self.process.poll() is None

    def close(self, timeout: float = 5.0) -> None:
        """Terminates the forwarder; kills it if it ignores SIGTERM."""
        if not self.alive:
            return
        logger.debug("Stopping port-forward %s", self.argv)
        self.process.terminate()
        try:
            self.process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Port-forward %s did not terminate, killing it", self.argv)
            self.process.kill()
            self.process.wait()

    def __enter__(self) -> "PortForward":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def start_port_forward(
    args: Sequence[str],
    local_port: int,
    remote_port: int,
    settle_seconds: float,
    check: bool = True,
    description: Optional[str] = None,
) -> PortForward:
    """
    Spawns `kubectl <args>` and gives it `settle_seconds` to bind.

    With check=True the child's status is polled once after settling. A child
    that already exited is still a success: another forwarder most likely owns
    the local port and will keep serving it.

    Raises:
        SpawnError: If kubectl could not be launched.
        PortForwardError: If the child's status could not be polled.
    """
    process = spawn_kubectl(args)
    forward = PortForward(kubectl_argv(args), process, local_port, remote_port)

    time.sleep(settle_seconds)
    if not check:
        return forward

    try:
        status = process.poll()
    except OSError as e:
        raise PortForwardError(f"Port-forward did not work: {forward.argv} error {e}") from e

    if status is not None:
        forward.exited_early = True
        logger.info("Port-forward may have started already: exit %s", status)
    else:
        logger.info("Port-forward started for %s", description or forward.argv)
    return forward
