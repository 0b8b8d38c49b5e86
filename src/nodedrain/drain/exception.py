"""
Exceptions raised by the drain orchestrator.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""


class NodeDrainError(Exception):
    """Raised while pods on a node are still waiting to be evicted.

    This is an expected outcome of a drain pass: the caller should requeue the
    node and call drain again later, without treating it as a failure.
    """

    def __init__(self, node_name: str, pending: int) -> None:
        super().__init__(f"{pending} pods are waiting to be evicted from node {node_name}")
        self.node_name = node_name
        self.pending = pending


def is_node_drain_error(exc: BaseException) -> bool:
    """Check if an exception only signals an incomplete drain.

    :param exc: Exception raised by a drain pass
    :return: True if exc is a NodeDrainError
    """
    return isinstance(exc, NodeDrainError)


class RestartDeploymentsError(Exception):
    """Raised when one or more deployment restarts failed.

    :param errors: List of (deployment key, exception) pairs
    """

    def __init__(self, errors: list[tuple[str, Exception]]) -> None:
        details = "; ".join(f"{key}: {error}" for key, error in errors)
        super().__init__(f"Failed to restart {len(errors)} deployment(s): {details}")
        self.errors = errors
