"""
Drain module exports for the orchestrator, its components, and exception classes.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from nodedrain.drain.events import EventRecorder
from nodedrain.drain.exception import NodeDrainError, RestartDeploymentsError, is_node_drain_error
from nodedrain.drain.grace import GracePeriodEnforcer
from nodedrain.drain.orchestrator import DrainOrchestrator
from nodedrain.drain.priority import EvictionTiers, PriorityPodClassifier
from nodedrain.drain.queue import EvictionQueue
from nodedrain.drain.restart import DeploymentRestartPlanner, RestartPlan, RestartRecord
from nodedrain.drain.taint import NodeTainter, disruption_taint

__all__ = [
    "DeploymentRestartPlanner",
    "DrainOrchestrator",
    "EventRecorder",
    "EvictionQueue",
    "EvictionTiers",
    "GracePeriodEnforcer",
    "NodeDrainError",
    "NodeTainter",
    "PriorityPodClassifier",
    "RestartDeploymentsError",
    "RestartPlan",
    "RestartRecord",
    "disruption_taint",
    "is_node_drain_error",
]
