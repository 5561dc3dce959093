# PATH: /OperativeX/production_line/worklist.py
"""Client-side state of one stage list.

``WorkList`` keeps the rows a stage page shows and applies the page's
writes to them:

* ``complete`` updates the matching rows locally before the write is sent,
  and refetches the authoritative list when the write fails;
* a successful write leaves an "in flight" marker on the row for
  ``OPERATIVEX_IN_FLIGHT_SECONDS`` so the page can keep showing
  "Updating..." until the change feed catches up;
* ``handle_change`` clears the marker matching a change notification and
  re-lists;
* each refresh takes a request token, and a response carrying a token older
  than the latest one is dropped.

Markers live in a plain dict so a view can keep them in the session.
"""

from __future__ import annotations

import time

from django.conf import settings
from django.utils import timezone

from jobs.models import JobProcess
from .services import (
    EmployeeCodeMissing,
    complete_work_item,
    filter_by_status,
    list_work_items,
    search_work_items,
)


class WorkList:

    def __init__(self, process_id, machine_id=None, *, employee_code=None, resolve_employee_code=None,
                 fetch=list_work_items, complete=complete_work_item, markers=None,
                 clock=time.time, in_flight_seconds=None, machine_refs=None):
        self.process_id = process_id
        self.machine_id = machine_id or None
        # Equivalent stored forms of the scoped machine (its id and its name).
        self.machine_refs = {str(ref) for ref in machine_refs or ()}
        if self.machine_id:
            self.machine_refs.add(str(self.machine_id))
        self.rows: list[dict] = []
        self._employee_code = employee_code
        self._resolve_employee_code = resolve_employee_code
        self._fetch = fetch
        self._complete = complete
        self.markers = markers if markers is not None else {}
        self._clock = clock
        if in_flight_seconds is None:
            in_flight_seconds = getattr(settings, 'OPERATIVEX_IN_FLIGHT_SECONDS', 3)
        self.in_flight_seconds = in_flight_seconds
        self._token = 0

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------
    def begin_refresh(self) -> int:
        self._token += 1
        return self._token

    def apply_refresh(self, token: int, rows) -> bool:
        """Store ``rows`` unless a newer refresh has started since ``token``."""
        if token != self._token:
            return False
        self.rows = list(rows)
        return True

    def refresh(self) -> bool:
        token = self.begin_refresh()
        return self.apply_refresh(token, self._fetch(self.process_id, self.machine_id))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    @property
    def employee_code(self):
        if not self._employee_code and self._resolve_employee_code is not None:
            self._employee_code = self._resolve_employee_code()
        return self._employee_code

    def _key(self, job_id, sub_job_id, machine_id=None) -> str:
        return f"{self.process_id}|{job_id}|{sub_job_id}|{machine_id or ''}"

    def _refs(self, machine_id) -> set[str]:
        if machine_id in (None, ''):
            return set()
        if str(machine_id) in self.machine_refs:
            return self.machine_refs
        return {str(machine_id)}

    def _matches(self, row, job_id, sub_job_id, machine_id) -> bool:
        if str(row.get('job_id')) != str(job_id) or str(row.get('sub_job_id')) != str(sub_job_id):
            return False
        return machine_id in (None, '') or str(row.get('machine_id')) in self._refs(machine_id)

    def complete(self, job_id, sub_job_id, machine_id=None) -> int:
        code = self.employee_code
        if not code:
            raise EmployeeCodeMissing()
        machine_id = machine_id or self.machine_id
        stamp = timezone.now()
        for row in self.rows:
            if self._matches(row, job_id, sub_job_id, machine_id):
                row.update(status=JobProcess.STATUS_COMPLETED, employee_code=code, updated_at=stamp)
        try:
            updated = self._complete(self.process_id, job_id, sub_job_id, code, machine_id=machine_id)
        except Exception:
            self.refresh()
            raise
        self.markers[self._key(job_id, sub_job_id, machine_id)] = self._clock() + self.in_flight_seconds
        self.refresh()
        return updated

    # ------------------------------------------------------------------
    # In-flight markers
    # ------------------------------------------------------------------
    def _prune(self) -> None:
        now = self._clock()
        for key in [k for k, deadline in self.markers.items() if deadline <= now]:
            del self.markers[key]

    def is_in_flight(self, job_id, sub_job_id, machine_id=None) -> bool:
        self._prune()
        for ref in self._refs(machine_id) or {machine_id}:
            if self._key(job_id, sub_job_id, ref) in self.markers:
                return True
        return machine_id not in (None, '') and self._key(job_id, sub_job_id) in self.markers

    def handle_change(self, payload: dict, refresh: bool = True) -> None:
        """Clear the marker for the changed row and, by default, re-list."""
        row = payload.get('new') or payload.get('old') or {}
        if row:
            for machine in (*(self._refs(row.get('machine_id')) or {row.get('machine_id')}), None):
                self.markers.pop(self._key(row.get('job_id'), row.get('sub_job_id'), machine), None)
        if refresh:
            self.refresh()

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------
    def visible(self, tab: str = 'all', term: str = '') -> list[dict]:
        """Rows after search then status filtering, each flagged with ``in_flight``."""
        rows = filter_by_status(search_work_items(self.rows, term), tab)
        for row in rows:
            row['in_flight'] = self.is_in_flight(row.get('job_id'), row.get('sub_job_id'), row.get('machine_id'))
        return rows
