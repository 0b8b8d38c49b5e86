"""
Custom exceptions and error handling decorators for Kubernetes API operations.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from functools import wraps
from typing import Any, Callable

from kubernetes.client import ApiException


class KubernetesException(Exception):
    """Custom exception for Kubernetes client errors."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def is_not_found(exc: BaseException) -> bool:
    """Check if an exception reports an HTTP 404 from the API server.

    :param exc: Exception raised by a client operation
    :return: True if the object was not found
    """
    return getattr(exc, "status", None) == 404


def handle_k8s_api_exception(func) -> Callable[..., Any]:
    """Decorator to handle Kubernetes API exceptions."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except KubernetesException:
            raise
        except ApiException as e:
            match e.status:
                case 403:
                    error_msg = (
                        f"'Unauthorized' error when running {func.__name__}. Check RBAC permissions"
                    )
                case 404:
                    error_msg = f"'Not found' error when running {func.__name__}"
                case 409:
                    error_msg = f"'Conflict' error when running {func.__name__}"
                case _:
                    error_msg = (
                        f"Unexpected error when running {func.__name__}: "
                        f"HTTP {e.status} - {e.reason}"
                    )
            raise KubernetesException(error_msg, status=e.status) from e
        except Exception as e:
            error_msg = f"Unexpected error when running {func.__name__}: {e}"
            raise KubernetesException(error_msg) from e

    return wrapper
