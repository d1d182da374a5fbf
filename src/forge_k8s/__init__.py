"""
forge-k8s: drive blockchain nodes running in Kubernetes from forge tests.
"""

__version__ = "0.1.0"
