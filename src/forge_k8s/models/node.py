# src/forge_k8s/models/node.py

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.config import Config

# RFC 1123 names as used for Kubernetes services and stateful-sets (dots allowed for FQDNs)
_DNS_NAME_RE = re.compile(r"[a-z0-9]([-a-z0-9.]*[a-z0-9])?")
_PEER_ID_HEX_LEN = 64


class K8sNodeDescriptor(BaseModel):
    """
    Identity of one node backed by a single-replica stateful-set.

    Attributes:
        name: Human readable label used in logs
        stateful_set_name: Workload controller of the node's single pod
        peer_id: 32-byte network identity, hex encoded
        index: Zero-based ordinal of the node within its group
        service_name: In-cluster DNS name of the REST API service
        namespace: Namespace holding both the workload and the service
        rest_api_port: Local port when port-forwarding, else the service port
        version: Opaque version identifier, the only mutable field
        haproxy_enabled: Whether an HAProxy service fronts the node
        port_forward_enabled: Whether traffic goes through a local port-forward
        is_validator: Capability tag for the validator role
        is_fullnode: Capability tag for the full node role
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    name: str = Field(..., min_length=1, frozen=True, description="Node label")
    stateful_set_name: str = Field(..., frozen=True, description="Stateful set name")
    peer_id: str = Field(..., frozen=True, description="Peer id (64 hex chars)")
    index: int = Field(0, ge=0, frozen=True, description="Ordinal within the node group")
    service_name: str = Field(..., frozen=True, description="REST API service name")
    namespace: str = Field("default", frozen=True, description="Kubernetes namespace")
    rest_api_port: int = Field(..., ge=1, le=65535, frozen=True, description="REST API port")
    version: str = Field("", description="Node version")
    haproxy_enabled: bool = Field(False, frozen=True, description="HAProxy fronts the node")
    port_forward_enabled: bool = Field(False, frozen=True, description="Reach the node via port-forward")
    is_validator: bool = Field(True, frozen=True, description="Validator role")
    is_fullnode: bool = Field(True, frozen=True, description="Full node role")

    @field_validator("stateful_set_name", "service_name", "namespace")
    @classmethod
    def _check_dns_name(cls, value: str) -> str:
        if not _DNS_NAME_RE.fullmatch(value):
            raise ValueError(f"'{value}' is not a valid Kubernetes resource name")
        return value

    @field_validator("peer_id", mode="before")
    @classmethod
    def _normalize_peer_id(cls, value):
        if isinstance(value, (bytes, bytearray)):
            if len(value) != _PEER_ID_HEX_LEN // 2:
                raise ValueError(f"peer_id must be {_PEER_ID_HEX_LEN // 2} bytes, got {len(value)}")
            return bytes(value).hex()
        if not isinstance(value, str):
            raise ValueError("peer_id must be a hex string or bytes")
        hex_id = value.lower()
        if hex_id.startswith("0x"):
            hex_id = hex_id[2:]
        if len(hex_id) != _PEER_ID_HEX_LEN:
            raise ValueError(f"peer_id must be {_PEER_ID_HEX_LEN} hex characters, got {len(hex_id)}")
        try:
            bytes.fromhex(hex_id)
        except ValueError as e:
            raise ValueError(f"peer_id is not hex: {value}") from e
        return hex_id

    @property
    def pod_name(self) -> str:
        return f"{self.stateful_set_name}-0"

    @property
    def rest_api_host(self) -> str:
        return Config.LOCALHOST if self.port_forward_enabled else self.service_name

    @property
    def remote_rest_api_port(self) -> int:
        """Service port the REST forwarder targets: HAProxy listens on 80, the node on 8080."""
        if self.haproxy_enabled:
            return Config.REST_API_HAPROXY_SERVICE_PORT
        return Config.REST_API_SERVICE_PORT

    @property
    def pvc_name(self) -> str:
        # Naming convention of the deployment manifests
        if "fullnode" in self.stateful_set_name:
            return f"fn-{self.stateful_set_name}-0"
        return self.stateful_set_name

    def rest_api_endpoint(self) -> str:
        return f"http://{self.rest_api_host}:{self.rest_api_port}/"

    def inspection_service_endpoint(self) -> str:
        """In-cluster URL, consumed by tooling running next to the node."""
        return f"http://{self.service_name}:{self.rest_api_port}/"

    def __str__(self) -> str:
        return f"{self.name} @ {self.rest_api_host}:{self.rest_api_port}"
