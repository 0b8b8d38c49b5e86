"""
Pod state predicates used to decide eviction eligibility and drain completion.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from datetime import datetime, timedelta

from kubernetes import client as k8s

from nodedrain.k8s.owner import OwnerKind, controller_of
from nodedrain.settings import CRITICAL_PRIORITY_CLASSES, STUCK_TERMINATING_TIMEOUT


def is_terminal(pod: k8s.V1Pod) -> bool:
    """Check if pod has run to completion.

    :param pod: Kubernetes pod object
    :return: True if pod phase is Succeeded or Failed
    """
    phase = pod.status.phase if pod.status else None
    return phase in ("Succeeded", "Failed")


def is_terminating(pod: k8s.V1Pod) -> bool:
    """Check if pod is being deleted.

    :param pod: Kubernetes pod object
    :return: True if pod has a deletion timestamp
    """
    return pod.metadata.deletion_timestamp is not None


def is_stuck_terminating(
    pod: k8s.V1Pod, now: datetime, timeout: timedelta = STUCK_TERMINATING_TIMEOUT
) -> bool:
    """Check if pod has outlived its termination grace period.

    The API server sets the deletion timestamp to the moment the grace period
    ends, so a pod is stuck once ``timeout`` has passed since then.

    :param pod: Kubernetes pod object
    :param now: Current time
    :param timeout: Allowance past the deletion timestamp
    :return: True if pod is terminating past its deletion timestamp
    """
    return is_terminating(pod) and now - pod.metadata.deletion_timestamp > timeout


def is_owned_by_daemonset(pod: k8s.V1Pod) -> bool:
    owner = controller_of(pod)
    return owner is not None and owner.kind is OwnerKind.DAEMON_SET


def is_owned_by_node(pod: k8s.V1Pod) -> bool:
    """Static and mirror pods are owned by their node and cannot be evicted."""
    owner = controller_of(pod)
    return owner is not None and owner.kind is OwnerKind.NODE


def is_critical(pod: k8s.V1Pod, critical_priority_classes: list[str] = None) -> bool:
    """Check if pod runs with a system-critical priority class.

    :param pod: Kubernetes pod object
    :param critical_priority_classes: Priority class names considered critical
    :return: True if pod priority class is critical
    """
    classes = (
        CRITICAL_PRIORITY_CLASSES if critical_priority_classes is None else critical_priority_classes
    )
    return pod.spec is not None and pod.spec.priority_class_name in classes


def is_waiting_eviction(pod: k8s.V1Pod, now: datetime) -> bool:
    """Check if pod still has to leave the node.

    True for pods not yet evicted and for pods that are terminating but still
    within their grace period.

    :param pod: Kubernetes pod object
    :param now: Current time
    :return: True if pod is still waiting for eviction
    """
    return not is_terminal(pod) and not is_stuck_terminating(pod, now) and not is_owned_by_node(pod)


def is_evictable(pod: k8s.V1Pod) -> bool:
    """Check if the eviction API can be called against pod.

    :param pod: Kubernetes pod object
    :return: True if pod is active and not owned by its node
    """
    return not is_terminal(pod) and not is_terminating(pod) and not is_owned_by_node(pod)
