from .base import BaseNode
from .k8s_node import K8sNode
from .port_forward import PortForward

__all__ = ["BaseNode", "K8sNode", "PortForward"]
