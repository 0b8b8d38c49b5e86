"""
Drain events and the recorder that publishes them to logs and notifiers.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging
from datetime import datetime
from typing import Any, NamedTuple

from kubernetes import client as k8s

from nodedrain.notification import send_notification

logger = logging.getLogger(__name__)


class Event(NamedTuple):
    """Observability event about an object touched by a drain."""

    kind: str
    namespace: str | None
    name: str
    type: str
    reason: str
    message: str

    @property
    def object_ref(self) -> str:
        if self.namespace:
            return f"{self.kind}/{self.namespace}/{self.name}"
        return f"{self.kind}/{self.name}"


def disrupt_pod_delete(
    pod: k8s.V1Pod, grace_period_seconds: int, node_termination_time: datetime
) -> Event:
    """Event for a pod deleted ahead of its node's forced termination.

    :param pod: Deleted pod
    :param grace_period_seconds: Clamped grace period used for the deletion
    :param node_termination_time: Time the node will be forcefully terminated
    :return: Event describing the deletion
    """
    return Event(
        kind="Pod",
        namespace=pod.metadata.namespace,
        name=pod.metadata.name,
        type="Warning",
        reason="Disrupted",
        message=(
            f"Deleting the pod to accommodate the terminationTime "
            f"{node_termination_time.isoformat()} of the node. The pod was granted "
            f"{grace_period_seconds} seconds of grace-period of its "
            f"{pod.spec.termination_grace_period_seconds} terminationGracePeriodSeconds. "
            f"This bypasses the PDB of the pod."
        ),
    )


def deployment_restart(deployment: k8s.V1Deployment, node_name: str) -> Event:
    """Event for a deployment restarted instead of draining its pods.

    :param deployment: Restarted deployment
    :param node_name: Node being drained
    :return: Event describing the restart
    """
    return Event(
        kind="Deployment",
        namespace=deployment.metadata.namespace,
        name=deployment.metadata.name,
        type="Normal",
        reason="Restarted",
        message=f"Restarting the deployment, all of its replicas run on draining node {node_name}",
    )


class EventRecorder:
    """Publishes drain events. Publishing never fails the caller."""

    def __init__(self, notify: bool = True) -> None:
        """Initialize event recorder.

        :param notify: Forward events to the registered notifiers
        """
        self.notify = notify

    def publish(self, *events: Event) -> None:
        """Record events in the log and forward them to notifiers.

        :param events: Events to publish
        """
        for event in events:
            context: dict[str, Any] = {
                "object": event.object_ref,
                "type": event.type,
                "reason": event.reason,
            }
            logger.info(event.message, extra={"context": context})
            if not self.notify:
                continue
            try:
                send_notification(event)
            except Exception as e:
                logger.exception(f"Failed to publish event for {event.object_ref}: {e}")
