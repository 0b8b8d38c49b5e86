"""
Ownership chain helpers: controller references and pod to deployment resolution.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging
from enum import Enum
from typing import Any, NamedTuple

from kubernetes import client as k8s

from nodedrain.k8s.client import KubernetesClient

logger = logging.getLogger(__name__)


class OwnerKind(Enum):
    """Kinds of controlling owners the drain logic distinguishes."""

    REPLICA_SET = "ReplicaSet"
    DEPLOYMENT = "Deployment"
    DAEMON_SET = "DaemonSet"
    NODE = "Node"
    OTHER = "Other"

    @classmethod
    def from_kind(cls, kind: str | None) -> "OwnerKind":
        """Map an owner reference kind string onto an OwnerKind.

        :param kind: ``kind`` field of an owner reference
        :return: Matching OwnerKind, OTHER for anything unrecognized
        """
        for member in cls:
            if member is not cls.OTHER and member.value == kind:
                return member
        return cls.OTHER


class Owner(NamedTuple):
    """Controlling owner of an object."""

    kind: OwnerKind
    name: str


def object_key(obj: Any) -> str:
    """Return the ``namespace/name`` key of a namespaced object.

    :param obj: Kubernetes object with metadata
    :return: Object key
    """
    return f"{obj.metadata.namespace}/{obj.metadata.name}"


def controller_of(obj: Any) -> Owner | None:
    """Get the controlling owner of an object.

    :param obj: Kubernetes object with metadata
    :return: Owner of the first controller reference, None if there is none
    """
    for ref in obj.metadata.owner_references or []:
        if ref.controller:
            return Owner(kind=OwnerKind.from_kind(ref.kind), name=ref.name)
    return None


class OwnerChainResolver:
    """Resolves pods to their owning deployments through their replica sets.

    Lookups are memoized by owner identity, so pods sharing a replica set or a
    deployment only cost one read per owner. Create one resolver per drain
    pass; cached objects are not refreshed.
    """

    def __init__(self, k8s_client: KubernetesClient) -> None:
        self.k8s_client = k8s_client
        self._replica_set_owners: dict[str, Owner | None] = {}
        self._deployments: dict[str, k8s.V1Deployment] = {}

    def resolve_deployment(self, pod: k8s.V1Pod) -> k8s.V1Deployment | None:
        """Resolve the deployment controlling a pod.

        Pods without a replica set controller, and replica sets without a
        deployment controller, resolve to None. API errors propagate.

        :param pod: Kubernetes pod object
        :return: Owning deployment or None
        """
        owner = controller_of(pod)
        if owner is None or owner.kind is not OwnerKind.REPLICA_SET:
            return None

        namespace = pod.metadata.namespace
        owner = self._replica_set_owner(owner.name, namespace)
        if owner is None or owner.kind is not OwnerKind.DEPLOYMENT:
            return None

        return self._deployment(owner.name, namespace)

    def _replica_set_owner(self, name: str, namespace: str) -> Owner | None:
        key = f"{namespace}/{name}"
        if key not in self._replica_set_owners:
            replica_set = self.k8s_client.get_replica_set(name=name, namespace=namespace)
            self._replica_set_owners[key] = controller_of(replica_set)
        return self._replica_set_owners[key]

    def _deployment(self, name: str, namespace: str) -> k8s.V1Deployment:
        key = f"{namespace}/{name}"
        if key not in self._deployments:
            logger.debug(f"Fetching deployment {key}")
            self._deployments[key] = self.k8s_client.get_deployment(
                name=name, namespace=namespace
            )
        return self._deployments[key]
