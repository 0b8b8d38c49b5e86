"""
Drain orchestration: one polled pass that restarts, deletes, and evicts the pods
of a node until nothing is left waiting.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging
from datetime import datetime, timezone
from typing import Callable

from kubernetes import client as k8s

from nodedrain.drain.events import EventRecorder
from nodedrain.drain.exception import NodeDrainError
from nodedrain.drain.grace import GracePeriodEnforcer
from nodedrain.drain.priority import PriorityPodClassifier
from nodedrain.drain.queue import EvictionQueue
from nodedrain.drain.restart import DeploymentRestartPlanner, RestartRecord
from nodedrain.drain.taint import NodeTainter, disruption_taint
from nodedrain.k8s.client import KubernetesClient
from nodedrain.k8s.owner import OwnerChainResolver, object_key
from nodedrain.k8s.pod import is_evictable, is_terminating, is_waiting_eviction

logger = logging.getLogger(__name__)


class DrainOrchestrator:
    """Drains nodes ahead of their termination.

    ``taint`` is called once when the disruption starts, ``drain`` is polled
    until it stops raising NodeDrainError. Calls for the same node must be
    serialized by the caller; different nodes may be drained concurrently.
    """

    def __init__(
        self,
        k8s_client: KubernetesClient,
        eviction_queue: EvictionQueue,
        recorder: EventRecorder = None,
        restart_record: RestartRecord = None,
        tainter: NodeTainter = None,
        planner: DeploymentRestartPlanner = None,
        classifier: PriorityPodClassifier = None,
        enforcer: GracePeriodEnforcer = None,
        now: Callable[[], datetime] = None,
    ) -> None:
        """Initialize drain orchestrator.

        :param k8s_client: Kubernetes client wrapper
        :param eviction_queue: Queue of the asynchronous eviction worker
        :param recorder: Event recorder
        :param restart_record: Per-node record of restarted deployments
        :param tainter: Node tainter
        :param planner: Deployment restart planner
        :param classifier: Eviction tier classifier
        :param enforcer: Grace period enforcer
        :param now: Clock returning the current UTC time
        """
        self.k8s_client = k8s_client
        self.eviction_queue = eviction_queue
        self.now = now or (lambda: datetime.now(timezone.utc))
        self.recorder = EventRecorder() if recorder is None else recorder
        self.restart_record = RestartRecord() if restart_record is None else restart_record
        self.tainter = NodeTainter(k8s_client) if tainter is None else tainter
        self.planner = (
            DeploymentRestartPlanner(k8s_client, self.restart_record, self.recorder)
            if planner is None
            else planner
        )
        self.classifier = PriorityPodClassifier() if classifier is None else classifier
        self.enforcer = (
            GracePeriodEnforcer(k8s_client, self.recorder, now=self.now)
            if enforcer is None
            else enforcer
        )

    def taint(self, node: k8s.V1Node, taint: k8s.V1Taint = None) -> bool:
        """Mark a node as draining.

        :param node: Kubernetes node object
        :param taint: Taint to apply, the configured disruption taint by default
        :return: True if the node was patched
        """
        return self.tainter.taint(node, disruption_taint() if taint is None else taint)

    def drain(self, node: k8s.V1Node, node_termination_time: datetime = None) -> None:
        """Run one drain pass over a node.

        :param node: Kubernetes node object
        :param node_termination_time: Time the node will be forcefully terminated, if known
        :raises NodeDrainError: If pods are still waiting to be evicted
        :raises RestartDeploymentsError: If restarting deployments failed
        :raises KubernetesException: On any other API failure
        """
        node_name = node.metadata.name
        pods = self.k8s_client.list_pods_on_node(node_name)

        plan = self.planner.plan(pods, node_name, OwnerChainResolver(self.k8s_client))
        logger.debug(
            f"Planned drain pass for node {node_name}",
            extra={
                "context": {
                    "node": node_name,
                    "pods": len(pods),
                    "restart_deployments": len(plan.deployments),
                    "replaced_pods": len(plan.replaced_pods),
                    "drain_pods": len(plan.drain_pods),
                }
            },
        )

        deleted: set[str] = set()
        if node_termination_time is not None:
            now = self.now()
            expiring = [
                p for p in plan.drain_pods if is_waiting_eviction(p, now) and not is_terminating(p)
            ]
            deleted = {
                object_key(p)
                for p in self.enforcer.delete_expiring_pods(expiring, node_termination_time)
            }

        self.planner.restart_deployments(plan.deployments, node_name)

        # Pods deleted above are already on their way out
        self.evict(
            [p for p in plan.drain_pods if is_evictable(p) and object_key(p) not in deleted]
        )

        now = self.now()
        pending = sum(1 for p in pods if is_waiting_eviction(p, now))
        if pending > 0:
            raise NodeDrainError(node_name, pending)

        self.restart_record.clear(node_name)
        logger.info(f"Drained node {node_name}")

    def evict(self, pods: list[k8s.V1Pod]) -> list[k8s.V1Pod]:
        """Submit the highest priority tier of pods for eviction.

        :param pods: Evictable pods
        :return: Pods submitted to the eviction queue
        """
        return self.evict_in_order(*self.classifier.classify(pods))

    def evict_in_order(self, *tiers: list[k8s.V1Pod]) -> list[k8s.V1Pod]:
        """Submit only the first non-empty tier, later tiers wait for later passes.

        :param tiers: Lists of pods in eviction order
        :return: Pods submitted to the eviction queue
        """
        for pods in tiers:
            if pods:
                self.eviction_queue.add(*pods)
                return pods
        return []
