# PATH: /OperativeX/jobs/services.py
"""Job card submission.

``submit_job`` turns one composed job card into rows in ``job_cards``,
``sub_job_cards`` and ``job_processes``.  The inserts run one after another,
each inside its own savepoint; when a later insert fails, the rows written
by earlier steps are deleted again so a failed submission leaves nothing
behind.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, NamedTuple

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from machines.models import Process
from users.models import Profile
from . import changes
from .models import JobCard, JobProcess, SubJobCard

logger = logging.getLogger(__name__)


class SubmissionError(Exception):
    """A submission that could not be stored; ``status`` is the HTTP status to report."""

    status = 500

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        if status is not None:
            self.status = status


class ProfileNotFound(SubmissionError):
    status = 400

    def __init__(self, message: str = "User profile not found"):
        super().__init__(message)


class SubmissionResult(NamedTuple):
    job_id: str
    job_code: int
    sub_jobs_count: int
    processes_count: int
    created_by: int  # id of the submitting user account
    employee_code: str


def resolve_machine(process_name: str, pairings: Iterable[Mapping], flat_ids: Iterable,
                    default_table: Mapping | None = None):
    """Pick the machine for one selected process.

    Order: an explicit ``{"process", "machine"}`` pairing for the process,
    then the first flat machine id, then ``default_table[process_name]``.
    Returns ``None`` when nothing matches.
    """
    for pairing in pairings or []:
        if pairing.get('process') == process_name and pairing.get('machine') not in (None, ''):
            return str(pairing['machine'])
    for machine in flat_ids or []:
        if machine not in (None, ''):
            return str(machine)
    default = (default_table or {}).get(process_name)
    return str(default) if default is not None else None


def split_machine_refs(machine_ids) -> tuple[list[dict], list]:
    """Separate ``{"process", "machine"}`` pairings from plain machine ids."""
    pairings, flat = [], []
    for entry in machine_ids or []:
        if isinstance(entry, Mapping):
            pairings.append(entry)
        else:
            flat.append(entry)
    return pairings, flat


def selected_process_names(processes) -> list[str]:
    return [name for name, selected in (processes or {}).items() if selected]


def _resolve_profile(user_uid) -> Profile:
    if not user_uid:
        raise SubmissionError("User UID is required", status=400)
    User = get_user_model()
    try:
        user = User.objects.filter(pk=user_uid).first()
    except (TypeError, ValueError) as exc:
        raise ProfileNotFound() from exc
    profile = Profile.objects.filter(user=user).first() if user is not None else None
    if profile is None:
        raise ProfileNotFound()
    return profile


def _int_or_none(value):
    if value in (None, ''):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _build_process_rows(job: JobCard, sub_job: SubJobCard, descriptor: Mapping, default_table) -> list[JobProcess]:
    names = selected_process_names(descriptor.get('processes'))
    if not names:
        return []
    try:
        catalog = dict(Process.objects.filter(name__in=names).values_list('name', 'id'))
    except DatabaseError:
        # The sub-job then contributes no process rows; the submission goes on.
        logger.exception("Process lookup failed for %s-%s", job.job_id, sub_job.sub_job_id)
        return []
    pairings, flat = split_machine_refs(descriptor.get('machine_id'))
    rows = []
    for name in names:
        process_id = catalog.get(name)
        if process_id is None:
            logger.warning("Unknown process %r on %s-%s ignored", name, job.job_id, sub_job.sub_job_id)
            continue
        rows.append(JobProcess(
            job=job,
            sub_job_card=sub_job,
            sub_job_id=sub_job.sub_job_id,
            process_id=process_id,
            machine_id=resolve_machine(name, pairings, flat, default_table),
            status=JobProcess.STATUS_PENDING,
            employee_code=None,
        ))
    return rows


def _rollback(job: JobCard, *, sub_jobs: bool) -> None:
    """Compensating deletes: sub-job cards first, then the job card."""
    logger.warning("Rolling back job card %s", job.job_id)
    if sub_jobs:
        SubJobCard.objects.filter(job_id=job.job_id).delete()
    JobCard.objects.filter(pk=job.pk).delete()


def submit_job(data: Mapping, default_table: Mapping | None = None) -> SubmissionResult:
    """Store one job card with its sub-jobs and process instances.

    ``data`` carries ``user_uid``, ``job_id``, ``customer_name``,
    ``start_date``, ``required_date`` and ``sub_jobs``.  Raises
    ``SubmissionError`` (or ``ProfileNotFound``) with the message and HTTP
    status to report; nothing is left in the store when it raises after the
    job card insert.
    """
    if default_table is None:
        default_table = getattr(settings, 'OPERATIVEX_DEFAULT_MACHINES', {})

    profile = _resolve_profile(data.get('user_uid'))

    try:
        with transaction.atomic():
            job = JobCard.objects.create(
                job_id=data.get('job_id'),
                customer_name=data.get('customer_name') or '',
                start_date=data.get('start_date') or None,
                required_date=data.get('required_date') or None,
                created_by=profile,
            )
    except (DatabaseError, ValidationError, ValueError, TypeError) as exc:
        logger.exception("Job card insert failed for %s", data.get('job_id'))
        raise SubmissionError(f"Job card creation failed: {exc}") from exc
    logger.info("Job card %s created (code %s) by %s", job.job_id, job.job_code, profile.employee_code)

    descriptors = list(data.get('sub_jobs') or [])
    if not descriptors:
        return SubmissionResult(job.job_id, job.job_code, 0, 0, profile.user_id, profile.employee_code)

    try:
        with transaction.atomic():
            sub_jobs = SubJobCard.objects.bulk_create([
                SubJobCard(
                    job=job,
                    sub_job_id=str(d.get('sub_job_id')),
                    description=d.get('description') or '',
                    color=d.get('color') or '',
                    card_size=d.get('card_size') or '',
                    card_quantity=_int_or_none(d.get('card_quantity')),
                    item_quantity=_int_or_none(d.get('item_quantity')),
                )
                for d in descriptors
            ])
    except (DatabaseError, ValidationError, ValueError, TypeError) as exc:
        logger.exception("Sub job insert failed for %s", job.job_id)
        _rollback(job, sub_jobs=False)
        raise SubmissionError(f"Sub job cards creation failed: {exc}") from exc

    process_rows = []
    for sub_job, descriptor in zip(sub_jobs, descriptors):
        process_rows.extend(_build_process_rows(job, sub_job, descriptor, default_table))

    created = []
    if process_rows:
        try:
            with transaction.atomic():
                created = JobProcess.objects.bulk_create(process_rows)
        except (DatabaseError, ValidationError, ValueError, TypeError) as exc:
            logger.exception("Job process insert failed for %s", job.job_id)
            _rollback(job, sub_jobs=True)
            raise SubmissionError(f"Job processes creation failed: {exc}") from exc
        changes.publish_inserts(created)

    logger.info(
        "Job card %s stored with %d sub jobs and %d processes",
        job.job_id, len(sub_jobs), len(created),
    )
    return SubmissionResult(
        job.job_id, job.job_code, len(sub_jobs), len(created), profile.user_id, profile.employee_code,
    )
