"""
Slack webhook notification provider for drain events.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""
import logging
from typing import TYPE_CHECKING

import requests

from nodedrain.notification.notification import register_notifier
from nodedrain.settings import CLUSTER_NAME, SLACK_EVENT_TYPES, SLACK_WEBHOOK_URL

if TYPE_CHECKING:
    from nodedrain.drain.events import Event

logger = logging.getLogger(__name__)

_EVENT_TYPE_EMOJI = {
    "Normal": ":information_source:",
    "Warning": ":warning:",
}


def format_slack_message(event: "Event", cluster_name: str) -> str:
    """Render a drain event as Slack mrkdwn.

    :param event: Event to render
    :param cluster_name: Cluster the event happened in
    :return: Message text
    """
    emoji = _EVENT_TYPE_EMOJI.get(event.type, ":grey_question:")
    return f"{emoji} [{cluster_name}] *{event.reason}* `{event.object_ref}`: {event.message}"


@register_notifier("slack", event_types=SLACK_EVENT_TYPES)
def send_slack_notification(
    event: "Event", slack_webhook_url: str = None, cluster_name: str = None
) -> None:
    """Send a drain event to Slack via webhook.

    :param event: Event to send
    :param slack_webhook_url: Slack webhook URL (optional)
    :param cluster_name: Cluster name shown in the message (optional)
    """
    webhook_url = SLACK_WEBHOOK_URL if slack_webhook_url is None else slack_webhook_url
    cluster = CLUSTER_NAME if cluster_name is None else cluster_name

    if not webhook_url:
        logger.debug(f"No Slack webhook configured, skipping event for {event.object_ref}")
        return

    try:
        response = requests.post(
            webhook_url, json={"text": format_slack_message(event, cluster)}, timeout=10
        )
        response.raise_for_status()
        logger.info(f"Slack notification sent: {response.status_code} '{response.text}'")
    except requests.RequestException as e:
        logger.exception(f"Failed to send Slack notification for {event.object_ref}: {e}")
