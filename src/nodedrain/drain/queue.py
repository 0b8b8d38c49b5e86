"""
Contract of the asynchronous eviction worker the orchestrator submits pods to.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""
from typing import Protocol

from kubernetes import client as k8s


class EvictionQueue(Protocol):
    """Queue of pods waiting for the eviction API to be called against them."""

    def add(self, *pods: k8s.V1Pod) -> None:
        """Enqueue pods for eviction.

        Must not block on the eviction itself. Adding a pod that is already
        queued is a no-op.

        :param pods: Pods to evict
        """
        pass
