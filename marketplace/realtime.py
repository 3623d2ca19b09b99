"""In-process change feed over model signals.

Subscribers register for a table name and an event type (``INSERT``,
``UPDATE``, ``DELETE`` or ``*``) with optional equality filters on column
values::

    subscription = feed.subscribe("messages", on_insert, event="INSERT",
                                  filters={"receiver_id": user.id})
    ...
    subscription.unsubscribe()

Events are published once the surrounding transaction commits.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

from django.apps import apps
from django.db import transaction
from django.db.models.signals import post_delete, post_save, pre_save

logger = logging.getLogger(__name__)

EVENT_TYPES = ("INSERT", "UPDATE", "DELETE")
ANY_EVENT = "*"


@dataclass(frozen=True)
class ChangeEvent:
    event_type: str
    table: str
    new: dict[str, Any] = field(default_factory=dict)
    old: dict[str, Any] = field(default_factory=dict)

    @property
    def row(self) -> dict[str, Any]:
        return self.old if self.event_type == "DELETE" else self.new


def parse_filter(expression: str) -> dict[str, str]:
    """Parse a ``column=eq.value`` filter expression."""
    column, _, rest = expression.partition("=")
    operator, _, value = rest.partition(".")
    if not column or operator != "eq" or not value:
        raise ValueError(f"Unsupported filter expression: {expression!r}")
    return {column.strip(): value.strip()}


class Subscription:
    def __init__(self, feed: ChangeFeed, key: int, table: str, event: str, filters: dict, callback: Callable):
        self.feed = feed
        self.key = key
        self.table = table
        self.event = event
        self.filters = filters
        self.callback = callback

    def matches(self, event: ChangeEvent) -> bool:
        if event.table != self.table:
            return False
        if self.event != ANY_EVENT and self.event != event.event_type:
            return False
        row = event.row
        return all(str(row.get(column)) == str(value) for column, value in self.filters.items())

    def unsubscribe(self) -> None:
        self.feed.remove(self.key)


class ChangeFeed:
    """Fan-out of row changes to in-process subscribers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._subscriptions: dict[int, Subscription] = {}

    def subscribe(
        self,
        table: str,
        callback: Callable[[ChangeEvent], Any],
        *,
        event: str = ANY_EVENT,
        filters: dict | str | None = None,
    ) -> Subscription:
        if event != ANY_EVENT and event not in EVENT_TYPES:
            raise ValueError(f"Unknown event type: {event}")
        if isinstance(filters, str):
            filters = parse_filter(filters)
        with self._lock:
            key = next(self._ids)
            subscription = Subscription(self, key, table, event, dict(filters or {}), callback)
            self._subscriptions[key] = subscription
        logger.debug("Subscribed to %s %s (%s)", event, table, filters or "no filter")
        return subscription

    def remove(self, key: int) -> None:
        with self._lock:
            self._subscriptions.pop(key, None)

    def has_subscribers(self, table: str) -> bool:
        with self._lock:
            return any(sub.table == table for sub in self._subscriptions.values())

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            subscriptions = [sub for sub in self._subscriptions.values() if sub.matches(event)]
        for subscription in subscriptions:
            try:
                subscription.callback(event)
            except Exception:
                logger.exception("Change feed subscriber failed for %s on %s", event.event_type, event.table)


feed = ChangeFeed()


def serialize_row(instance) -> dict[str, Any]:
    return {f.attname: f.value_from_object(instance) for f in instance._meta.concrete_fields}


def _capture_previous(sender, instance, raw=False, **kwargs):
    instance._change_feed_old = {}
    if raw or instance._state.adding or instance.pk is None:
        return
    if not feed.has_subscribers(sender._meta.db_table):
        return
    previous = sender._default_manager.filter(pk=instance.pk).first()
    if previous is not None:
        instance._change_feed_old = serialize_row(previous)


def _on_save(sender, instance, created, raw=False, **kwargs):
    if raw:
        return
    event = ChangeEvent(
        event_type="INSERT" if created else "UPDATE",
        table=sender._meta.db_table,
        new=serialize_row(instance),
        old=getattr(instance, "_change_feed_old", {}),
    )
    transaction.on_commit(lambda: feed.publish(event))


def _on_delete(sender, instance, **kwargs):
    event = ChangeEvent(event_type="DELETE", table=sender._meta.db_table, old=serialize_row(instance))
    transaction.on_commit(lambda: feed.publish(event))


def connect_signals() -> None:
    for model in apps.get_app_config("marketplace").get_models():
        label = model._meta.label_lower
        pre_save.connect(_capture_previous, sender=model, dispatch_uid=f"change-feed-pre-{label}")
        post_save.connect(_on_save, sender=model, dispatch_uid=f"change-feed-save-{label}")
        post_delete.connect(_on_delete, sender=model, dispatch_uid=f"change-feed-delete-{label}")
