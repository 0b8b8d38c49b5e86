"""
Environment variable parsing and configuration management for nodedrain.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import os
import re
from datetime import timedelta


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable.

    :param key: Environment variable name
    :param default: Default value if not set
    :return: Boolean value
    """
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def _parse_duration(duration_str: str, default: timedelta = timedelta(minutes=1)) -> timedelta:
    """Parse duration string like '10m', '1h', '30s' into timedelta.

    :param duration_str: Duration string (e.g., "30m", "1h", "45s")
    :param default: Value returned when the string cannot be parsed
    :return: Parsed timedelta object
    """
    match = re.match(r"^(\d+)([smhd])$", duration_str.lower())
    if not match:
        return default

    value, unit = int(match.group(1)), match.group(2)

    match unit:
        case "s":
            return timedelta(seconds=value)
        case "m":
            return timedelta(minutes=value)
        case "h":
            return timedelta(hours=value)
        case "d":
            return timedelta(days=value)
        case _:
            return default


def _parse_list(list_str: str) -> list[str]:
    """Parse comma-separated string into list.

    Supports formats:
    - str1,str2,str3
    - Empty string (returns empty list)

    :param list_str: Comma-separated string
    :return: List of strings
    """

    return [f.strip() for f in list_str.split(",") if f.strip()]


"""nodedrain Settings"""
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_JSON_LOGS = _get_bool_env("ENABLE_JSON_LOGS", True)
CLUSTER_NAME = os.getenv("CLUSTER_NAME", "unknown")
SLACK_WEBHOOK_URL = os.getenv("SLACK_WEBHOOK_URL")
TEST_KUBE_CONTEXT_NAME = os.getenv("TEST_KUBE_CONTEXT_NAME", "kind-nodedrain-test")
DISRUPTION_TAINT_KEY = os.getenv("DISRUPTION_TAINT_KEY", "nodedrain.io/disruption")
DISRUPTION_TAINT_VALUE = os.getenv("DISRUPTION_TAINT_VALUE", "disrupting")
DISRUPTION_TAINT_EFFECT = os.getenv("DISRUPTION_TAINT_EFFECT", "NoSchedule")
EXCLUDE_BALANCERS_LABEL_VALUE = os.getenv("EXCLUDE_BALANCERS_LABEL_VALUE", "nodedrain")
RESTART_ANNOTATION_KEY = os.getenv(
    "RESTART_ANNOTATION_KEY", "kubectl.kubernetes.io/restartedNode"
)
CRITICAL_PRIORITY_CLASSES = _parse_list(
    os.getenv("CRITICAL_PRIORITY_CLASSES", "system-cluster-critical,system-node-critical")
)
STUCK_TERMINATING_TIMEOUT = _parse_duration(os.getenv("STUCK_TERMINATING_TIMEOUT", "1m"))
ENABLE_DEPLOYMENT_RESTART = _get_bool_env("ENABLE_DEPLOYMENT_RESTART", True)
SLACK_EVENT_TYPES = _parse_list(os.getenv("SLACK_EVENT_TYPES", "Normal,Warning"))
