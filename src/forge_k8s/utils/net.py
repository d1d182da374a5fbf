import logging
import socket

logger = logging.getLogger(__name__)


def get_free_port() -> int:
    """
    Asks the OS for an unused local TCP port.

    The socket is closed before returning, so the port is only reserved
    until somebody else binds it. Callers hand it straight to kubectl.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    logger.debug("Allocated free local port %d", port)
    return port
