# src/forge_k8s/core/config.py

import logging
import os

from dotenv import load_dotenv

# Load environment variables from a .env file located in the project root
dotenv_path = os.path.join(os.path.dirname(__file__), "..", "..", "..", ".env")
load_dotenv(dotenv_path=dotenv_path)

_TRUTHY = ("true", "1", "t", "y", "yes")


def _get_float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{key} must be a number, got '{raw}'") from e


class Config:
    """
    Handles the adapter's configuration by loading values from environment variables.

    Every setting is resolved at access time so tests (and long-lived drivers)
    can change the environment after import.
    """

    # --- Fixed by the deployment manifests ---
    REST_API_SERVICE_PORT = 8080
    REST_API_HAPROXY_SERVICE_PORT = 80
    NODE_METRIC_PORT = 9101
    LOCALHOST = "127.0.0.1"

    # --- Cluster CLI ---
    @property
    def KUBECTL_BIN(self) -> str:
        return os.getenv("KUBECTL_BIN", "kubectl")

    @property
    def FORGE_NAMESPACE(self) -> str:
        return os.getenv("FORGE_NAMESPACE", "default")

    # --- Logging variables ---
    @property
    def LOG_LEVEL(self) -> str:
        return os.getenv("LOG_LEVEL", "INFO")

    # --- Lifecycle timings (seconds) ---
    @property
    def HEALTH_CHECK_TIMEOUT(self) -> float:
        return _get_float("HEALTH_CHECK_TIMEOUT", 60.0)

    @property
    def HEALTH_CHECK_INTERVAL(self) -> float:
        return _get_float("HEALTH_CHECK_INTERVAL", 0.5)

    @property
    def PORT_FORWARD_SETTLE_SECONDS(self) -> float:
        return _get_float("PORT_FORWARD_SETTLE_SECONDS", 1.0)

    @property
    def METRIC_FORWARD_SETTLE_SECONDS(self) -> float:
        return _get_float("METRIC_FORWARD_SETTLE_SECONDS", 5.0)

    # Off by default: the metrics forwarder relies on the current kubectl context.
    @property
    def METRICS_PORT_FORWARD_NAMESPACE(self) -> bool:
        return os.getenv("METRICS_PORT_FORWARD_NAMESPACE", "False").lower() in _TRUTHY

    # --- HTTP variables ---
    @property
    def DEFAULT_TIMEOUT_CONNECT(self) -> float:
        return _get_float("DEFAULT_TIMEOUT_CONNECT", 5.0)

    @property
    def DEFAULT_TIMEOUT_READ(self) -> float:
        return _get_float("DEFAULT_TIMEOUT_READ", 10.0)

    @property
    def COUNTER_TIMEOUT(self) -> float:
        return _get_float("COUNTER_TIMEOUT", 10.0)

    @property
    def USER_AGENT(self) -> str:
        from .. import __version__

        return os.getenv("USER_AGENT", f"forge-k8s/{__version__}")

    def validate_instance(self):
        positive = {
            "HEALTH_CHECK_TIMEOUT": self.HEALTH_CHECK_TIMEOUT,
            "HEALTH_CHECK_INTERVAL": self.HEALTH_CHECK_INTERVAL,
            "DEFAULT_TIMEOUT_CONNECT": self.DEFAULT_TIMEOUT_CONNECT,
            "DEFAULT_TIMEOUT_READ": self.DEFAULT_TIMEOUT_READ,
            "COUNTER_TIMEOUT": self.COUNTER_TIMEOUT,
        }
        for key, value in positive.items():
            if value <= 0:
                raise ValueError(f"{key} must be greater than 0.")
        for key in ("PORT_FORWARD_SETTLE_SECONDS", "METRIC_FORWARD_SETTLE_SECONDS"):
            if getattr(self, key) < 0:
                raise ValueError(f"{key} must not be negative.")
        if not self.KUBECTL_BIN:
            raise ValueError("KUBECTL_BIN must not be empty.")
        if self.HEALTH_CHECK_INTERVAL >= self.HEALTH_CHECK_TIMEOUT:
            logging.getLogger(__name__).warning(
                "HEALTH_CHECK_INTERVAL (%s) is not shorter than HEALTH_CHECK_TIMEOUT (%s); "
                "start() will probe the node only once.",
                self.HEALTH_CHECK_INTERVAL,
                self.HEALTH_CHECK_TIMEOUT,
            )


# Instantiate the config to be imported by other modules
config = Config()
config.validate_instance()
