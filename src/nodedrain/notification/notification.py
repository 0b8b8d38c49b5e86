"""
Registry of notifiers that drain events are dispatched to, filtered by event type.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""
from typing import TYPE_CHECKING, Any, Callable, Iterable, NamedTuple, Protocol

if TYPE_CHECKING:
    from nodedrain.drain.events import Event


class Notifier(Protocol):
    """Protocol for functions delivering a drain event to an external channel."""

    def __call__(self, event: "Event", *args: Any, **kwargs: Any) -> None:
        """Deliver a drain event.

        :param event: Event to deliver
        :param args: Additional arguments
        :param kwargs: Additional keyword arguments
        """
        pass


class Subscription(NamedTuple):
    """A registered notifier and the event types it receives, None for all."""

    notifier: Notifier
    event_types: frozenset[str] | None

    def accepts(self, event: "Event") -> bool:
        return self.event_types is None or event.type in self.event_types


_notifiers: dict[str, Subscription] = {}


def register_notifier(
    name: str, event_types: Iterable[str] | None = None
) -> Callable[[Notifier], Notifier]:
    """Decorator to auto-register notifiers.

    :param name: Name of the notifier
    :param event_types: Event types (e.g. Normal, Warning) delivered to it, all if None
    :return: Decorator function
    """

    def wrapper(func: Notifier) -> Notifier:
        types = None if event_types is None else frozenset(event_types)
        _notifiers[name] = Subscription(notifier=func, event_types=types)
        return func

    return wrapper


def send_notification(*events: "Event") -> None:
    """Deliver each event to every notifier subscribed to its type.

    :param events: Events to deliver
    """
    for event in events:
        for subscription in _notifiers.values():
            if subscription.accepts(event):
                subscription.notifier(event)
