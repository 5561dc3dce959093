# PATH: /OperativeX/jobs/changes.py
"""Change feed for ``job_processes``.

Every insert, update and delete of a ``JobProcess`` is stored as a numbered
``JobProcessChange`` row and then sent on the ``job_process_changed`` signal
with the payload::

    {"id": <change id>, "event": "INSERT" | "UPDATE" | "DELETE",
     "table": "job_processes", "new": {...}, "old": {...}}

In-process code listens through ``subscribe``; browser pages poll
``changes_since`` with the last change id they have seen.
"""

from __future__ import annotations

import logging
from typing import Callable

from django.dispatch import Signal

from .models import JobProcessChange

logger = logging.getLogger(__name__)

TABLE = 'job_processes'

# Sent with ``payload=<dict>`` after each change row is written.
job_process_changed = Signal()


def _payload(change: JobProcessChange) -> dict:
    return {
        'id': change.pk,
        'event': change.event,
        'table': TABLE,
        'new': change.new or {},
        'old': change.old or {},
    }


def publish(event: str, *, new: dict | None = None, old: dict | None = None) -> dict:
    """Record one change and notify subscribers; returns the payload."""
    row = new or old or {}
    change = JobProcessChange.objects.create(
        event=event,
        process_id=row.get('process_id'),
        new=new or {},
        old=old or {},
    )
    # Reload so the payload carries JSON-safe values identical to what pollers read.
    change.refresh_from_db(fields=['new', 'old'])
    payload = _payload(change)
    job_process_changed.send(sender=JobProcessChange, payload=payload)
    return payload


def publish_inserts(instances) -> None:
    """Publish INSERT events for rows created with ``bulk_create``."""
    for instance in instances:
        publish('INSERT', new=instance.snapshot())
        instance._loaded_snapshot = instance.snapshot()


class Subscription:
    """Handle returned by ``subscribe``; call ``close`` to stop receiving events."""

    def __init__(self, callback: Callable[[dict], None], process_id=None):
        self.callback = callback
        self.process_id = process_id
        self.closed = False
        self._uid = f"job-process-subscription-{id(self)}"
        job_process_changed.connect(self._dispatch, sender=JobProcessChange, weak=False, dispatch_uid=self._uid)

    def _matches(self, payload: dict) -> bool:
        if self.process_id is None:
            return True
        wanted = str(self.process_id)
        return any(
            str((payload.get(key) or {}).get('process_id')) == wanted
            for key in ('new', 'old')
        )

    def _dispatch(self, sender, payload, **kwargs):
        if self.closed or not self._matches(payload):
            return
        self.callback(payload)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        job_process_changed.disconnect(sender=JobProcessChange, dispatch_uid=self._uid)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


def subscribe(callback: Callable[[dict], None], process_id=None) -> Subscription:
    """Call ``callback(payload)`` for every change, optionally for one process id."""
    return Subscription(callback, process_id=process_id)


def latest_cursor() -> int:
    last = JobProcessChange.objects.order_by('-id').values_list('id', flat=True).first()
    return last or 0


def changes_since(cursor: int = 0, process_id=None, limit: int = 200) -> list[dict]:
    """Changes with an id greater than ``cursor``, oldest first."""
    qs = JobProcessChange.objects.filter(id__gt=cursor or 0)
    if process_id is not None:
        qs = qs.filter(process_id=process_id)
    return [_payload(change) for change in qs.order_by('id')[:limit]]


def prune(before) -> int:
    """Delete change rows created before ``before``; returns the number removed."""
    deleted, _ = JobProcessChange.objects.filter(created_at__lt=before).delete()
    if deleted:
        logger.info("Pruned %d job process changes", deleted)
    return deleted
