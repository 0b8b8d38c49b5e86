"""
Kubernetes module exports for client, ownership resolution, and exception classes.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from nodedrain.k8s.client import KubernetesClient
from nodedrain.k8s.exception import KubernetesException, is_not_found
from nodedrain.k8s.owner import OwnerChainResolver, OwnerKind, controller_of, object_key

__all__ = [
    "KubernetesClient",
    "KubernetesException",
    "OwnerChainResolver",
    "OwnerKind",
    "controller_of",
    "is_not_found",
    "object_key",
]
