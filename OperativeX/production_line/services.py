# PATH: /OperativeX/production_line/services.py
"""Work item operations behind the stage pages and the job status page."""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from jobs.models import JobCard, JobProcess
from machines.models import Machine

logger = logging.getLogger(__name__)

ROW_FIELDS = (
    'id', 'job_id', 'sub_job_id', 'process_id', 'machine_id',
    'status', 'employee_code', 'created_at', 'updated_at',
)


class WorkItemError(Exception):
    status = 400
    default_message = "Work item update failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class EmployeeCodeMissing(WorkItemError):
    default_message = "Could not identify your employee code. Please refresh the page."


class WorkItemNotFound(WorkItemError):
    status = 404
    default_message = "Work item not found."


def customer_names(job_ids) -> dict[str, str]:
    """One batch lookup of customer names keyed by job id."""
    job_ids = {j for j in job_ids if j}
    if not job_ids:
        return {}
    return dict(JobCard.objects.filter(job_id__in=job_ids).values_list('job_id', 'customer_name'))


def machine_aliases(machine_id) -> set[str]:
    """Every stored form of a machine reference: the value itself plus, when it
    names a known machine, that machine's id and name."""
    ref = str(machine_id)
    machine = Machine.objects.resolve_refs([ref]).get(ref)
    if machine is None:
        return {ref}
    return {ref, machine.ref, machine.name}


def list_work_items(process_id, machine_id=None) -> list[dict]:
    """All instances of one process, newest first, with the customer name attached."""
    qs = JobProcess.objects.filter(process_id=process_id)
    if machine_id not in (None, ''):
        qs = qs.filter(machine_id__in=machine_aliases(machine_id))
    rows = list(qs.order_by('-created_at', '-id').values(*ROW_FIELDS))
    names = customer_names(row['job_id'] for row in rows)
    for row in rows:
        row['customer_name'] = names.get(row['job_id'], '')
    return rows


def search_work_items(rows, term: str | None) -> list[dict]:
    """Case-insensitive substring match on job id or customer name."""
    needle = (term or '').strip().lower()
    if not needle:
        return list(rows)
    return [
        row for row in rows
        if needle in str(row.get('job_id') or '').lower()
        or needle in str(row.get('customer_name') or '').lower()
    ]


def filter_by_status(rows, tab: str | None) -> list[dict]:
    if tab in (JobProcess.STATUS_PENDING, JobProcess.STATUS_COMPLETED):
        return [row for row in rows if row.get('status') == tab]
    return list(rows)


def machine_counts(rows, machines) -> list[dict]:
    """Number of rows per machine, in the order ``machines`` is given."""
    counts: dict[str, int] = {}
    for row in rows:
        ref = row.get('machine_id')
        if ref is not None:
            counts[str(ref)] = counts.get(str(ref), 0) + 1
    result = []
    for machine in machines:
        total = counts.get(machine.ref, 0)
        if machine.name != machine.ref:
            total += counts.get(machine.name, 0)
        result.append({'id': machine.ref, 'name': machine.name, 'count': total})
    return result


def _set_status(job_process: JobProcess, status: str, employee_code, stamp) -> None:
    job_process.status = status
    job_process.employee_code = employee_code
    job_process.updated_at = stamp
    job_process.save(update_fields=['status', 'employee_code', 'updated_at'])


def complete_work_item(process_id, job_id, sub_job_id, employee_code, machine_id=None) -> int:
    """Mark the (job, sub-job[, machine]) instance of a process completed.

    Completing an already completed row stamps the new employee code and
    time over the old ones.  Returns the number of rows updated.
    """
    if not employee_code:
        raise EmployeeCodeMissing()
    qs = JobProcess.objects.filter(process_id=process_id, job_id=job_id, sub_job_id=str(sub_job_id))
    if machine_id not in (None, ''):
        qs = qs.filter(machine_id__in=machine_aliases(machine_id))
    rows = list(qs)
    if not rows:
        raise WorkItemNotFound()
    stamp = timezone.now()
    with transaction.atomic():
        for job_process in rows:
            _set_status(job_process, JobProcess.STATUS_COMPLETED, employee_code, stamp)
    logger.info("%s completed %s-%s (process %s)", employee_code, job_id, sub_job_id, process_id)
    return len(rows)


def undo_work_item(record_id) -> JobProcess:
    """Put a record back to pending and clear who completed it."""
    job_process = JobProcess.objects.filter(pk=record_id).first()
    if job_process is None:
        raise WorkItemNotFound()
    _set_status(job_process, JobProcess.STATUS_PENDING, None, timezone.now())
    logger.info("Record %s reset to pending", record_id)
    return job_process


def complete_record(record_id, employee_code) -> JobProcess:
    """Complete one record by id, whatever process it belongs to."""
    if not employee_code:
        raise EmployeeCodeMissing()
    job_process = JobProcess.objects.filter(pk=record_id).first()
    if job_process is None:
        raise WorkItemNotFound()
    _set_status(job_process, JobProcess.STATUS_COMPLETED, employee_code, timezone.now())
    logger.info("%s completed record %s", employee_code, record_id)
    return job_process
