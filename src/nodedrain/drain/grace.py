"""
Proactive deletion of pods that would not finish their grace period before the
node is forcefully terminated.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from kubernetes import client as k8s

from nodedrain.drain.events import EventRecorder, disrupt_pod_delete
from nodedrain.k8s.client import KubernetesClient

logger = logging.getLogger(__name__)


def pod_delete_time(pod: k8s.V1Pod, node_termination_time: datetime | None) -> datetime | None:
    """Latest time a pod can be deleted and still get its full grace period.

    E.g. if the node is terminated in 30m and the pod has a grace period of
    45m, the result is 15m ago.

    :param pod: Kubernetes pod object
    :param node_termination_time: Time the node will be forcefully terminated
    :return: Delete time, None if there is no deadline or no grace period
    """
    grace_period = pod.spec.termination_grace_period_seconds if pod.spec else None
    if node_termination_time is None or grace_period is None:
        return None
    return node_termination_time - timedelta(seconds=grace_period)


class GracePeriodEnforcer:
    """Deletes pods that can no longer be evicted in time."""

    def __init__(
        self,
        k8s_client: KubernetesClient,
        recorder: EventRecorder,
        now: Callable[[], datetime] = None,
    ) -> None:
        """Initialize grace period enforcer.

        :param k8s_client: Kubernetes client wrapper
        :param recorder: Event recorder
        :param now: Clock returning the current UTC time
        """
        self.k8s_client = k8s_client
        self.recorder = recorder
        self.now = now or (lambda: datetime.now(timezone.utc))

    def delete_expiring_pods(
        self, pods: list[k8s.V1Pod], node_termination_time: datetime | None
    ) -> list[k8s.V1Pod]:
        """Delete pods whose delete time has passed.

        The grace period of each deletion is clamped to the time left until
        the node's termination, so the deletion finishes before it. The
        first failed deletion aborts the remaining ones.

        :param pods: Pods waiting eviction and not yet terminating
        :param node_termination_time: Time the node will be forcefully terminated
        :return: Pods that were deleted
        """
        deleted: list[k8s.V1Pod] = []
        if node_termination_time is None:
            return deleted

        for pod in pods:
            delete_time = pod_delete_time(pod, node_termination_time)
            now = self.now()
            if delete_time is None or now <= delete_time:
                continue

            remaining = (node_termination_time - now).total_seconds()
            grace_period_seconds = max(0, int(remaining))
            self.recorder.publish(disrupt_pod_delete(pod, grace_period_seconds, node_termination_time))
            self.k8s_client.delete_pod(
                name=pod.metadata.name,
                namespace=pod.metadata.namespace,
                grace_period_seconds=grace_period_seconds,
            )
            logger.info(
                f"Deleted pod {pod.metadata.namespace}/{pod.metadata.name} ahead of node termination",
                extra={
                    "context": {
                        "pod.terminationGracePeriodSeconds": pod.spec.termination_grace_period_seconds,
                        "delete.gracePeriodSeconds": grace_period_seconds,
                        "node.terminationTime": node_termination_time.isoformat(),
                    }
                },
            )
            deleted.append(pod)
        return deleted
