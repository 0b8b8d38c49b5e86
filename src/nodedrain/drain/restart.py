"""
Deployment restart planning: restart deployments whose replicas all run on the
draining node instead of evicting their pods one by one.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging
import threading
from collections import Counter
from typing import NamedTuple

from kubernetes import client as k8s

from nodedrain.drain.events import EventRecorder, deployment_restart
from nodedrain.drain.exception import RestartDeploymentsError
from nodedrain.k8s.client import KubernetesClient
from nodedrain.k8s.exception import KubernetesException
from nodedrain.k8s.owner import OwnerChainResolver, object_key
from nodedrain.settings import ENABLE_DEPLOYMENT_RESTART, RESTART_ANNOTATION_KEY

logger = logging.getLogger(__name__)


class RestartRecord:
    """Deployments restarted per node during the current drain episode.

    Only a cache: the restart annotation on the deployment template is the
    source of truth, and an empty record (e.g. after a process restart) is
    always safe.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._restarted: dict[str, set[str]] = {}

    def add(self, node_name: str, deployment_key: str) -> None:
        with self._lock:
            self._restarted.setdefault(node_name, set()).add(deployment_key)

    def contains(self, node_name: str, deployment_key: str) -> bool:
        with self._lock:
            return deployment_key in self._restarted.get(node_name, ())

    def keys(self, node_name: str) -> set[str]:
        with self._lock:
            return set(self._restarted.get(node_name, ()))

    def clear(self, node_name: str) -> None:
        with self._lock:
            self._restarted.pop(node_name, None)


class RestartPlan(NamedTuple):
    """Outcome of planning a drain pass.

    ``replaced_pods`` and ``drain_pods`` together hold every planned pod
    exactly once.
    """

    deployments: list[k8s.V1Deployment]
    replaced_pods: list[k8s.V1Pod]
    drain_pods: list[k8s.V1Pod]


def _desired_replicas(deployment: k8s.V1Deployment) -> int:
    # The API server defaults an unset replica count to 1
    replicas = deployment.spec.replicas if deployment.spec else None
    return 1 if replicas is None else replicas


def _template_annotations(deployment: k8s.V1Deployment) -> dict[str, str]:
    template = deployment.spec.template
    if template.metadata is None:
        template.metadata = k8s.V1ObjectMeta()
    if template.metadata.annotations is None:
        template.metadata.annotations = {}
    return template.metadata.annotations


def restarted_for_node(deployment: k8s.V1Deployment, node_name: str, annotation_key: str) -> bool:
    """Check if the deployment template already carries the restart marker for a node."""
    template = deployment.spec.template if deployment.spec else None
    metadata = template.metadata if template else None
    annotations = (metadata.annotations if metadata else None) or {}
    return annotations.get(annotation_key) == node_name


class DeploymentRestartPlanner:
    """Decides which deployments to restart and which pods to drain for a node."""

    def __init__(
        self,
        k8s_client: KubernetesClient,
        restart_record: RestartRecord,
        recorder: EventRecorder,
        annotation_key: str = None,
        enabled: bool = None,
    ) -> None:
        """Initialize deployment restart planner.

        :param k8s_client: Kubernetes client wrapper
        :param restart_record: Per-node record of restarted deployments
        :param recorder: Event recorder
        :param annotation_key: Pod template annotation holding the restart marker
        :param enabled: Restart deployments instead of draining their pods
        """
        self.k8s_client = k8s_client
        self.restart_record = restart_record
        self.recorder = recorder
        self.annotation_key = RESTART_ANNOTATION_KEY if annotation_key is None else annotation_key
        self.enabled = ENABLE_DEPLOYMENT_RESTART if enabled is None else enabled

    def plan(
        self, pods: list[k8s.V1Pod], node_name: str, resolver: OwnerChainResolver
    ) -> RestartPlan:
        """Split the pods of a node into deployments to restart and pods to drain.

        A deployment is restarted when every one of its desired replicas runs
        on the node. Pods of a deployment already restarted for this node are
        left to the rollout and not drained.

        :param pods: Pods currently on the node
        :param node_name: Name of the node
        :param resolver: Owner resolver for this drain pass
        :return: RestartPlan
        """
        if not self.enabled:
            return RestartPlan(deployments=[], replaced_pods=[], drain_pods=list(pods))

        owners = [(pod, resolver.resolve_deployment(pod)) for pod in pods]
        tally = Counter(object_key(d) for _, d in owners if d is not None)
        logger.debug(
            f"Deployment replicas on node {node_name}",
            extra={"context": {"node": node_name, "replicas": dict(tally)}},
        )

        deployments: dict[str, k8s.V1Deployment] = {}
        replaced_pods: list[k8s.V1Pod] = []
        drain_pods: list[k8s.V1Pod] = []
        for pod, deployment in owners:
            if deployment is None:
                drain_pods.append(pod)
                continue
            key = object_key(deployment)
            if tally[key] == _desired_replicas(deployment):
                deployments.setdefault(key, deployment)
                replaced_pods.append(pod)
            elif self.restart_record.contains(node_name, key) or restarted_for_node(
                deployment, node_name, self.annotation_key
            ):
                # The marker is never cleared, so a new node reusing the name
                # of a drained one keeps these pods out of eviction as well
                replaced_pods.append(pod)
            else:
                drain_pods.append(pod)

        return RestartPlan(
            deployments=list(deployments.values()),
            replaced_pods=replaced_pods,
            drain_pods=drain_pods,
        )

    def restart_deployments(self, deployments: list[k8s.V1Deployment], node_name: str) -> None:
        """Trigger a rollout of each deployment by stamping the node name on its template.

        Deployments already stamped with this node are skipped. Every
        deployment is attempted; failures are raised together afterwards.

        :param deployments: Deployments to restart
        :param node_name: Name of the node being drained
        :raises RestartDeploymentsError: If any update failed
        """
        errors: list[tuple[str, Exception]] = []
        for deployment in deployments:
            key = object_key(deployment)
            if restarted_for_node(deployment, node_name, self.annotation_key):
                logger.debug(f"Deployment {key} already restarted for node {node_name}")
                continue

            _template_annotations(deployment)[self.annotation_key] = node_name
            try:
                self.k8s_client.replace_deployment(deployment)
            except KubernetesException as e:
                logger.warning(f"Failed to restart deployment {key}: {e}")
                errors.append((key, e))
                continue

            self.restart_record.add(node_name, key)
            logger.info(
                f"Restarted deployment {key}",
                extra={"context": {"node": node_name, "deployment": key}},
            )
            self.recorder.publish(deployment_restart(deployment, node_name))

        if errors:
            raise RestartDeploymentsError(errors)
