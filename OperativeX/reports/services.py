# PATH: /OperativeX/reports/services.py
"""Aggregation of work items for the reports and job status pages."""

from __future__ import annotations

from django.utils import timezone

from jobs.models import JobProcess, SubJobCard
from machines.models import Process
from production_line.services import ROW_FIELDS, customer_names, search_work_items

NOT_COMPLETED = "Not completed"


def format_timestamp(value) -> str:
    if value is None:
        return ''
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return value.strftime("%Y-%m-%d %H:%M:%S")


def completed_by(row) -> str:
    """``"<employee code> (<timestamp>)"`` for completed rows."""
    if row.get('status') == JobProcess.STATUS_COMPLETED and row.get('employee_code'):
        return f"{row['employee_code']} ({format_timestamp(row.get('updated_at'))})"
    return NOT_COMPLETED


def load_report_rows() -> list[dict]:
    """Every work item, most recently updated first, joined in memory with
    customer names, sub-job descriptions and process names."""
    rows = list(JobProcess.objects.order_by('-updated_at', '-id').values(*ROW_FIELDS))
    job_ids = {row['job_id'] for row in rows}
    names = customer_names(job_ids)
    descriptions = {
        (job_id, sub_job_id): description
        for job_id, sub_job_id, description in SubJobCard.objects.filter(job_id__in=job_ids)
        .values_list('job_id', 'sub_job_id', 'description')
    }
    process_names = dict(Process.objects.values_list('id', 'name'))
    for row in rows:
        row['customer_name'] = names.get(row['job_id'], '')
        row['description'] = descriptions.get((row['job_id'], row['sub_job_id']), '')
        row['process_name'] = process_names.get(row['process_id'], f"Process {row['process_id']}")
        row['completed_by'] = completed_by(row)
    return rows


def group_detailed(rows) -> dict[str, dict[str, list[dict]]]:
    """job id -> sub-job id -> rows, keeping the incoming order."""
    grouped: dict[str, dict[str, list[dict]]] = {}
    for row in rows:
        grouped.setdefault(row['job_id'], {}).setdefault(row['sub_job_id'], []).append(row)
    return grouped


def completion_ratio(group) -> float:
    total = len(group['rows'])
    if not total:
        return 0.0
    return group['completed'] / total


def group_compact(rows) -> list[dict]:
    """One group per (job id, sub-job id) with its process rows as chips."""
    groups: dict[tuple, dict] = {}
    for row in rows:
        key = (row['job_id'], row['sub_job_id'])
        group = groups.get(key)
        if group is None:
            group = groups[key] = {
                'key': f"{row['job_id']}-{row['sub_job_id']}",
                'job_id': row['job_id'],
                'sub_job_id': row['sub_job_id'],
                'customer_name': row.get('customer_name', ''),
                'description': row.get('description', ''),
                'rows': [],
                'completed': 0,
            }
        group['rows'].append(row)
        if row['status'] == JobProcess.STATUS_COMPLETED:
            group['completed'] += 1
    for group in groups.values():
        group['total'] = len(group['rows'])
        group['ratio'] = completion_ratio(group)
    return list(groups.values())


def group_status(group) -> str:
    """``completed`` or ``pending`` when every member agrees, else ``mixed``."""
    statuses = {row['status'] for row in group['rows']}
    if statuses == {JobProcess.STATUS_COMPLETED}:
        return JobProcess.STATUS_COMPLETED
    if statuses == {JobProcess.STATUS_PENDING}:
        return JobProcess.STATUS_PENDING
    return 'mixed'


def filter_groups(groups, tab: str | None = 'all', term: str | None = '') -> list[dict]:
    """Search by job id or customer name, then keep groups matching the status tab."""
    needle = (term or '').strip()
    if needle:
        groups = [g for g in groups if search_work_items([g], needle)]
    if tab in (JobProcess.STATUS_COMPLETED, JobProcess.STATUS_PENDING):
        groups = [g for g in groups if group_status(g) == tab]
    return list(groups)


def flatten(groups) -> list[dict]:
    return [row for group in groups for row in group['rows']]
