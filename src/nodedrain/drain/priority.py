"""
Partitioning of pods into eviction tiers by criticality and DaemonSet ownership.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from typing import NamedTuple

from kubernetes import client as k8s

from nodedrain.k8s.pod import is_critical, is_owned_by_daemonset
from nodedrain.settings import CRITICAL_PRIORITY_CLASSES


class EvictionTiers(NamedTuple):
    """Pods grouped by tier, fields in eviction order."""

    non_critical_non_daemon: list[k8s.V1Pod]
    non_critical_daemon: list[k8s.V1Pod]
    critical_non_daemon: list[k8s.V1Pod]
    critical_daemon: list[k8s.V1Pod]


class PriorityPodClassifier:
    """Sorts pods into eviction tiers.

    Non-critical workloads leave first and critical DaemonSet pods last, see
    https://kubernetes.io/docs/concepts/architecture/nodes/#graceful-node-shutdown
    """

    def __init__(self, critical_priority_classes: list[str] = None) -> None:
        """Initialize pod classifier.

        :param critical_priority_classes: Priority class names considered critical
        """
        self.critical_priority_classes = (
            CRITICAL_PRIORITY_CLASSES
            if critical_priority_classes is None
            else critical_priority_classes
        )

    def classify(self, pods: list[k8s.V1Pod]) -> EvictionTiers:
        """Partition pods into the four eviction tiers.

        :param pods: Pods to classify
        :return: EvictionTiers
        """
        tiers = EvictionTiers([], [], [], [])
        for pod in pods:
            critical = is_critical(pod, self.critical_priority_classes)
            daemon = is_owned_by_daemonset(pod)
            match critical, daemon:
                case False, False:
                    tiers.non_critical_non_daemon.append(pod)
                case False, True:
                    tiers.non_critical_daemon.append(pod)
                case True, False:
                    tiers.critical_non_daemon.append(pod)
                case True, True:
                    tiers.critical_daemon.append(pod)
        return tiers
