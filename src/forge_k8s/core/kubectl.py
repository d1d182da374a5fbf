# src/forge_k8s/core/kubectl.py
"""
Thin wrappers around the cluster CLI.

Lifecycle operations shell out to kubectl instead of talking to the
Kubernetes API so they behave exactly like an operator typing the same
commands against the current context.
"""

import logging
import subprocess
from typing import List, Sequence

from .config import config
from .exceptions import ScaleError, SpawnError

logger = logging.getLogger(__name__)


def kubectl_argv(args: Sequence[str]) -> List[str]:
    return [config.KUBECTL_BIN, *args]


def run_kubectl(args: Sequence[str]) -> subprocess.CompletedProcess:
    """
    Runs kubectl to completion and captures its output.

    stdout and stderr are returned as bytes; the exit status is not checked.

    Raises:
        SpawnError: If the kubectl binary could not be launched.
    """
    argv = kubectl_argv(args)
    logger.info("%s", argv)
    try:
        return subprocess.run(argv, capture_output=True, check=False)
    except OSError as e:
        raise SpawnError(argv, e) from e


def spawn_kubectl(args: Sequence[str]) -> subprocess.Popen:
    """
    Starts a long-running kubectl child (e.g. port-forward) without waiting.

    stdout is discarded and stderr is inherited so operators see forwarding errors.

    Raises:
        SpawnError: If the kubectl binary could not be launched.
    """
    argv = kubectl_argv(args)
    try:
        return subprocess.Popen(argv, stdout=subprocess.DEVNULL)
    except OSError as e:
        raise SpawnError(argv, e, message=f"Port-forward did not start: {argv} error {e}") from e


def scale_stateful_set_replicas(sts_name: str, replicas: int) -> None:
    """
    Sets the desired replica count of a stateful-set.

    Raises:
        ScaleError: If kubectl exits with a non-zero status.
    """
    args = ["scale", "sts", sts_name, f"--replicas={replicas}"]
    result = run_kubectl(args)
    if result.returncode != 0:
        stderr = (result.stderr or b"").decode("utf-8", errors="replace").strip()
        raise ScaleError(f"Failed to scale stateful set {sts_name} to {replicas} replicas: {stderr}")
    logger.debug("Scaled stateful set %s to %d replicas", sts_name, replicas)
