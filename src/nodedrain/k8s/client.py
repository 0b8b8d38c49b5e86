"""
Kubernetes API client wrapper with error handling for node drain operations.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging
from typing import Any

from kubernetes import client as k8s
from kubernetes import config as k8s_config
from kubernetes.client import ApiException

from nodedrain.k8s.exception import KubernetesException, handle_k8s_api_exception, is_not_found
from nodedrain.settings import TEST_KUBE_CONTEXT_NAME

logger = logging.getLogger(__name__)


class KubernetesClient:
    """Wrapper for Kubernetes API operations."""

    def __init__(self) -> None:
        """Initialize Kubernetes client."""
        try:
            k8s_config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes config")
        except k8s_config.ConfigException:
            try:
                k8s_config.load_kube_config()
                logger.info("Loaded local Kubernetes config")
                # Verify we are using the expected kube-context for testing
                _, current_context = k8s_config.list_kube_config_contexts()
                if current_context["name"] != TEST_KUBE_CONTEXT_NAME:
                    raise KubernetesException(
                        f"Unexpected kube-context '{current_context['name']}' name"
                    )
            except k8s_config.ConfigException as e:
                raise KubernetesException(
                    f"Failed to load Kubernetes config: {e}. Ensure you have a valid "
                    f"kubeconfig file or are running in a Kubernetes cluster"
                ) from e
            except KubernetesException:
                raise
            except Exception as e:
                raise KubernetesException(f"Unexpected error loading kube config: {e}") from e

        self.v1: k8s.CoreV1Api = k8s.CoreV1Api()
        self.apps_v1: k8s.AppsV1Api = k8s.AppsV1Api()
        logger.info("Kubernetes client initialized")

    @handle_k8s_api_exception
    def read_node(self, node_name: str) -> k8s.V1Node:
        """Read a node by name.

        :param node_name: Name of the node
        :return: V1Node object
        """
        return self.v1.read_node(name=node_name)

    @handle_k8s_api_exception
    def patch_node(self, node_name: str, body: dict[str, Any]) -> k8s.V1Node:
        """Apply a strategic merge patch to a node.

        :param node_name: Name of the node
        :param body: Patch body
        :return: Patched V1Node object
        """
        return self.v1.patch_node(name=node_name, body=body)

    @handle_k8s_api_exception
    def list_pods_on_node(self, node_name: str) -> list[k8s.V1Pod]:
        """List all pods scheduled on a specific node.

        :param node_name: Name of the node
        :return: List of pods on the node
        """
        pods: k8s.V1PodList = self.v1.list_pod_for_all_namespaces(
            field_selector=f"spec.nodeName={node_name}"
        )
        return pods.items

    @handle_k8s_api_exception
    def delete_pod(self, name: str, namespace: str, grace_period_seconds: int | None = None) -> None:
        """Delete a pod, bypassing the eviction API.

        A pod that no longer exists is treated as deleted.

        :param name: Name of the pod
        :param namespace: Namespace of the pod
        :param grace_period_seconds: Grace period override for the deletion
        """
        try:
            self.v1.delete_namespaced_pod(
                name=name, namespace=namespace, grace_period_seconds=grace_period_seconds
            )
            logger.info(
                f"Deleted pod {namespace}/{name} with grace period {grace_period_seconds}s"
            )
        except ApiException as e:
            if is_not_found(e):
                logger.info(f"Pod {namespace}/{name} already deleted")
            else:
                raise e

    @handle_k8s_api_exception
    def get_replica_set(self, name: str, namespace: str) -> k8s.V1ReplicaSet:
        """Read a replica set.

        :param name: Name of the replica set
        :param namespace: Namespace of the replica set
        :return: V1ReplicaSet object
        """
        return self.apps_v1.read_namespaced_replica_set(name=name, namespace=namespace)

    @handle_k8s_api_exception
    def get_deployment(self, name: str, namespace: str) -> k8s.V1Deployment:
        """Read a deployment.

        :param name: Name of the deployment
        :param namespace: Namespace of the deployment
        :return: V1Deployment object
        """
        return self.apps_v1.read_namespaced_deployment(name=name, namespace=namespace)

    @handle_k8s_api_exception
    def replace_deployment(self, deployment: k8s.V1Deployment) -> k8s.V1Deployment:
        """Update a deployment in place.

        The deployment's resource version is sent along, so a concurrent
        modification fails with a conflict instead of being overwritten.

        :param deployment: Modified deployment object
        :return: Updated V1Deployment object
        """
        return self.apps_v1.replace_namespaced_deployment(
            name=deployment.metadata.name,
            namespace=deployment.metadata.namespace,
            body=deployment,
        )
