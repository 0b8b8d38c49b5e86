"""
Idempotent tainting of nodes that are about to be drained.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import copy
import logging
from typing import Any

from kubernetes import client as k8s

from nodedrain.k8s.client import KubernetesClient
from nodedrain.settings import (
    DISRUPTION_TAINT_EFFECT,
    DISRUPTION_TAINT_KEY,
    DISRUPTION_TAINT_VALUE,
    EXCLUDE_BALANCERS_LABEL_VALUE,
)

logger = logging.getLogger(__name__)

EXCLUDE_BALANCERS_LABEL = "node.kubernetes.io/exclude-from-external-load-balancers"
TAINT_EFFECTS = ("NoSchedule", "PreferNoSchedule", "NoExecute")


def disruption_taint(
    key: str = None, value: str = None, effect: str = None
) -> k8s.V1Taint:
    """Build the taint marking a node as draining.

    :param key: Taint key
    :param value: Taint value
    :param effect: Taint effect, one of NoSchedule, PreferNoSchedule, NoExecute
    :return: V1Taint object
    """
    _effect = DISRUPTION_TAINT_EFFECT if effect is None else effect
    if _effect not in TAINT_EFFECTS:
        raise ValueError(f"Invalid taint effect '{_effect}', expected one of {TAINT_EFFECTS}")
    return k8s.V1Taint(
        key=DISRUPTION_TAINT_KEY if key is None else key,
        value=DISRUPTION_TAINT_VALUE if value is None else value,
        effect=_effect,
    )


def _matches(existing: k8s.V1Taint, taint: k8s.V1Taint) -> bool:
    # Key and effect only, value is ignored
    return existing.key == taint.key and existing.effect == taint.effect


def _serialize_taint(taint: k8s.V1Taint) -> dict[str, Any]:
    body: dict[str, Any] = {"key": taint.key, "effect": taint.effect}
    if taint.value is not None:
        body["value"] = taint.value
    if taint.time_added is not None:
        body["timeAdded"] = taint.time_added.isoformat()
    return body


class NodeTainter:
    """Marks nodes as draining with a taint and a load-balancer exclusion label."""

    def __init__(self, k8s_client: KubernetesClient, exclude_balancers_value: str = None) -> None:
        """Initialize node tainter.

        :param k8s_client: Kubernetes client wrapper
        :param exclude_balancers_value: Value of the load-balancer exclusion label
        """
        self.k8s_client = k8s_client
        self.exclude_balancers_value = (
            EXCLUDE_BALANCERS_LABEL_VALUE
            if exclude_balancers_value is None
            else exclude_balancers_value
        )

    def taint(self, node: k8s.V1Node, taint: k8s.V1Taint) -> bool:
        """Idempotently add a taint and the exclusion label to a node.

        A taint with the same key and effect counts as already present. A
        taint with the same key but another effect is replaced. The node
        object is updated in place after a successful patch, and patched
        only when it changed.

        :param node: Kubernetes node object
        :param taint: Desired taint
        :return: True if the node was patched
        """
        desired = copy.deepcopy(node)

        if desired.spec is None:
            desired.spec = k8s.V1NodeSpec()
        taints = list(desired.spec.taints or [])
        if not any(_matches(existing, taint) for existing in taints):
            taints = [existing for existing in taints if existing.key != taint.key]
            taints.append(taint)
        desired.spec.taints = taints

        # Removes the node from load-balancer target groups while it drains
        desired.metadata.labels = {
            **(desired.metadata.labels or {}),
            EXCLUDE_BALANCERS_LABEL: self.exclude_balancers_value,
        }

        if desired == node:
            return False

        body = {
            "metadata": {"labels": desired.metadata.labels},
            "spec": {"taints": [_serialize_taint(t) for t in desired.spec.taints]},
        }
        self.k8s_client.patch_node(node.metadata.name, body)

        # Only mirror the change locally once the server accepted it
        node.spec = desired.spec
        node.metadata.labels = desired.metadata.labels
        logger.info(
            f"Tainted node {node.metadata.name}",
            extra={
                "context": {
                    "node": node.metadata.name,
                    "taint.key": taint.key,
                    "taint.value": taint.value,
                    "taint.effect": taint.effect,
                }
            },
        )
        return True
