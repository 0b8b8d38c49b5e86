"""
Unit tests for the Kubernetes API client wrapper used by the drain orchestrator.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from unittest.mock import Mock, patch

import pytest
from kubernetes import config as k8s_config
from kubernetes.client import ApiException

from factories import make_deployment, make_pod
from nodedrain.k8s.client import KubernetesClient
from nodedrain.k8s.exception import KubernetesException


class TestKubernetesClientInitialization:
    """Test KubernetesClient initialization."""

    @patch("nodedrain.k8s.client.k8s_config.load_incluster_config")
    @patch("nodedrain.k8s.client.k8s.AppsV1Api")
    @patch("nodedrain.k8s.client.k8s.CoreV1Api")
    def test_initialization_in_cluster(self, mock_core_v1_api, mock_apps_v1_api, mock_load_incluster):
        """Test initialization with in-cluster config."""
        client = KubernetesClient()

        mock_load_incluster.assert_called_once()
        assert client.v1 is mock_core_v1_api.return_value
        assert client.apps_v1 is mock_apps_v1_api.return_value

    @patch("nodedrain.k8s.client.k8s_config.load_incluster_config")
    @patch("nodedrain.k8s.client.k8s_config.load_kube_config")
    @patch("nodedrain.k8s.client.k8s_config.list_kube_config_contexts")
    @patch("nodedrain.k8s.client.k8s.AppsV1Api")
    @patch("nodedrain.k8s.client.k8s.CoreV1Api")
    @patch("nodedrain.k8s.client.TEST_KUBE_CONTEXT_NAME", "kind-test")
    def test_initialization_local_config(
        self,
        mock_core_v1_api,
        mock_apps_v1_api,
        mock_list_contexts,
        mock_load_kube_config,
        mock_load_incluster,
    ):
        """Test initialization with local kubeconfig."""
        mock_load_incluster.side_effect = k8s_config.ConfigException("Not in cluster")
        mock_list_contexts.return_value = (None, {"name": "kind-test"})

        client = KubernetesClient()

        mock_load_kube_config.assert_called_once()
        assert client.v1 is mock_core_v1_api.return_value

    @patch("nodedrain.k8s.client.k8s_config.load_incluster_config")
    @patch("nodedrain.k8s.client.k8s_config.load_kube_config")
    @patch("nodedrain.k8s.client.k8s_config.list_kube_config_contexts")
    @patch("nodedrain.k8s.client.TEST_KUBE_CONTEXT_NAME", "kind-test")
    def test_initialization_wrong_context(
        self, mock_list_contexts, mock_load_kube_config, mock_load_incluster
    ):
        """Test initialization fails with wrong context."""
        mock_load_incluster.side_effect = k8s_config.ConfigException("Not in cluster")
        mock_list_contexts.return_value = (None, {"name": "wrong-context"})

        with pytest.raises(KubernetesException) as exc_info:
            KubernetesClient()

        assert "Unexpected kube-context 'wrong-context' name" in str(exc_info.value)

    @patch("nodedrain.k8s.client.k8s_config.load_incluster_config")
    @patch("nodedrain.k8s.client.k8s_config.load_kube_config")
    def test_initialization_config_failure(self, mock_load_kube_config, mock_load_incluster):
        """Test initialization fails when both configs fail."""
        mock_load_incluster.side_effect = k8s_config.ConfigException("Not in cluster")
        mock_load_kube_config.side_effect = k8s_config.ConfigException("No kubeconfig")

        with pytest.raises(KubernetesException) as exc_info:
            KubernetesClient()

        assert "Failed to load Kubernetes config" in str(exc_info.value)


class TestKubernetesClientMethods:
    """Test KubernetesClient methods."""

    def setup_method(self):
        """Set up test environment."""
        with patch("nodedrain.k8s.client.k8s_config.load_incluster_config"), patch(
            "nodedrain.k8s.client.k8s.CoreV1Api"
        ) as mock_core_v1_api, patch("nodedrain.k8s.client.k8s.AppsV1Api") as mock_apps_v1_api:
            self.mock_v1_api = Mock()
            self.mock_apps_v1_api = Mock()
            mock_core_v1_api.return_value = self.mock_v1_api
            mock_apps_v1_api.return_value = self.mock_apps_v1_api
            self.client = KubernetesClient()

    def test_list_pods_on_node(self):
        """Test listing pods on a specific node."""
        pods = [make_pod("pod1"), make_pod("pod2")]
        self.mock_v1_api.list_pod_for_all_namespaces.return_value = Mock(items=pods)

        result = self.client.list_pods_on_node("test-node")

        self.mock_v1_api.list_pod_for_all_namespaces.assert_called_once_with(
            field_selector="spec.nodeName=test-node"
        )
        assert result == pods

    def test_list_pods_on_node_api_exception(self):
        """Test list_pods_on_node converts API exceptions."""
        self.mock_v1_api.list_pod_for_all_namespaces.side_effect = ApiException(
            status=500, reason="Internal Server Error"
        )

        with pytest.raises(KubernetesException) as exc_info:
            self.client.list_pods_on_node("test-node")

        assert exc_info.value.status == 500

    def test_patch_node(self):
        """Test patching a node."""
        body = {"spec": {"taints": []}}

        self.client.patch_node("test-node", body)

        self.mock_v1_api.patch_node.assert_called_once_with(name="test-node", body=body)

    def test_read_node(self):
        """Test reading a node."""
        result = self.client.read_node("test-node")

        self.mock_v1_api.read_node.assert_called_once_with(name="test-node")
        assert result is self.mock_v1_api.read_node.return_value

    def test_delete_pod_with_grace_period(self):
        """Test deleting a pod with a grace period override."""
        self.client.delete_pod("pod1", "default", grace_period_seconds=12)

        self.mock_v1_api.delete_namespaced_pod.assert_called_once_with(
            name="pod1", namespace="default", grace_period_seconds=12
        )

    def test_delete_pod_already_deleted(self):
        """Test deleting a pod that no longer exists succeeds."""
        self.mock_v1_api.delete_namespaced_pod.side_effect = ApiException(
            status=404, reason="Not Found"
        )

        self.client.delete_pod("pod1", "default", grace_period_seconds=0)

        self.mock_v1_api.delete_namespaced_pod.assert_called_once()

    def test_delete_pod_other_api_exception(self):
        """Test delete_pod raises on other API exceptions."""
        self.mock_v1_api.delete_namespaced_pod.side_effect = ApiException(
            status=403, reason="Forbidden"
        )

        with pytest.raises(KubernetesException) as exc_info:
            self.client.delete_pod("pod1", "default")

        assert exc_info.value.status == 403

    def test_get_replica_set(self):
        """Test reading a replica set."""
        self.client.get_replica_set(name="web-abc", namespace="default")

        self.mock_apps_v1_api.read_namespaced_replica_set.assert_called_once_with(
            name="web-abc", namespace="default"
        )

    def test_get_deployment_not_found(self):
        """Test reading a missing deployment raises a not found error."""
        self.mock_apps_v1_api.read_namespaced_deployment.side_effect = ApiException(
            status=404, reason="Not Found"
        )

        with pytest.raises(KubernetesException) as exc_info:
            self.client.get_deployment(name="web", namespace="default")

        assert exc_info.value.status == 404

    def test_replace_deployment(self):
        """Test updating a deployment."""
        deployment = make_deployment("web", namespace="apps")

        self.client.replace_deployment(deployment)

        self.mock_apps_v1_api.replace_namespaced_deployment.assert_called_once_with(
            name="web", namespace="apps", body=deployment
        )
