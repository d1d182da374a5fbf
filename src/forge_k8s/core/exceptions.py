from typing import Optional, Sequence


class ForgeError(Exception):
    """Base exception for forge-k8s."""

    pass


class SpawnError(ForgeError):
    """Raised when the cluster CLI could not be launched at all."""

    def __init__(self, argv: Sequence[str], cause: Optional[BaseException] = None, message: str = None):
        self.argv = list(argv)
        self.cause = cause
        if message is None:
            message = f"Failed to launch {self.argv}: {cause}"
        super().__init__(message)


class PortForwardError(ForgeError):
    """Raised when a port-forward child could not be polled after spawning."""

    pass


class ScaleError(ForgeError):
    """Raised when scaling a stateful-set fails."""

    pass


class ClearStorageError(ForgeError):
    """Raised when deleting a node's persistent volume claim fails."""

    pass


class ClusterConfigError(ForgeError):
    """Raised when no Kubernetes configuration could be loaded."""

    pass


class HealthCheckError(ForgeError):
    """Base exception for health check outcomes other than healthy."""

    pass


class NodeNotRunning(HealthCheckError):
    """The node is known not to be running."""

    pass


class HealthCheckFailure(HealthCheckError):
    """The liveness probe ran and failed. Waiters retry on this."""

    pass


class HealthCheckUnknown(HealthCheckError):
    """The probe could not determine the node state. Waiters give up on this."""

    pass


class HealthCheckTimeout(ForgeError):
    """Raised when a node does not become healthy before its deadline."""

    pass


class CounterError(ForgeError):
    """Base exception for counter scraping errors."""

    pass


class CounterNotFoundError(CounterError):
    """The counter is absent from the /counters payload."""

    pass


class CounterTypeError(CounterError):
    """The counter value is not a JSON number."""

    pass


class CounterValueError(CounterError):
    """The counter value is not representable as a finite float."""

    pass
