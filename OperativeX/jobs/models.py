# PATH: /OperativeX/jobs/models.py
"""Models for the jobs app.

A ``JobCard`` is one customer order.  It is split into ``SubJobCard`` rows,
and each sub-job gets one ``JobProcess`` per production process selected for
it.  ``JobProcess`` is the unit of work floor workers complete; every change
to it is appended to ``JobProcessChange`` so open pages can follow along.
"""

from __future__ import annotations

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver
from django.utils import timezone


class JobCard(models.Model):
    job_code = models.BigAutoField(primary_key=True)
    job_id = models.CharField(max_length=50, unique=True)
    customer_name = models.CharField(max_length=200)
    start_date = models.DateField(null=True, blank=True)
    required_date = models.DateField(null=True, blank=True)
    created_by = models.ForeignKey(
        'users.Profile', on_delete=models.SET_NULL, null=True, blank=True, related_name='job_cards',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'job_cards'
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.job_id} ({self.customer_name})"


class SubJobCard(models.Model):
    job = models.ForeignKey(
        JobCard, to_field='job_id', db_column='job_id', on_delete=models.CASCADE, related_name='sub_jobs',
    )
    sub_job_id = models.CharField(max_length=50)
    description = models.TextField(blank=True)
    color = models.CharField(max_length=100, blank=True)
    card_size = models.CharField(max_length=100, blank=True)
    card_quantity = models.PositiveIntegerField(null=True, blank=True)
    item_quantity = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        db_table = 'sub_job_cards'
        constraints = [
            models.UniqueConstraint(fields=['job', 'sub_job_id'], name='unique_sub_job_per_job'),
        ]

    def __str__(self) -> str:
        return f"{self.job_id}-{self.sub_job_id}"


class JobProcess(models.Model):
    """One production step of one sub-job.

    ``job_id`` and ``sub_job_id`` repeat the parent keys so stage pages can
    filter and complete rows without joins.  ``machine_id`` holds the machine
    reference as submitted (machine id or display name); it is text rather
    than a foreign key and is cleared when the machine is deleted.
    ``employee_code`` names whoever completed the step and is empty while the
    step is pending.
    """

    STATUS_PENDING = 'pending'
    STATUS_COMPLETED = 'completed'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    job = models.ForeignKey(
        JobCard, to_field='job_id', db_column='job_id', on_delete=models.CASCADE, related_name='processes',
    )
    sub_job_card = models.ForeignKey(SubJobCard, on_delete=models.CASCADE, related_name='processes')
    sub_job_id = models.CharField(max_length=50)
    process = models.ForeignKey('machines.Process', on_delete=models.PROTECT, related_name='job_processes')
    machine_id = models.CharField(max_length=100, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    employee_code = models.CharField(max_length=50, null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'job_processes'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['process', 'status'], name='job_process_stage_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.job_id}-{self.sub_job_id} / {self.process_id} ({self.status})"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_snapshot = instance.snapshot()
        return instance

    def snapshot(self) -> dict:
        """Row as published on the change feed."""
        return {
            'id': self.pk,
            'job_id': self.job_id,
            'sub_job_id': self.sub_job_id,
            'process_id': self.process_id,
            'machine_id': self.machine_id,
            'status': self.status,
            'employee_code': self.employee_code,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }


class JobProcessChange(models.Model):
    """Append-only log of inserts, updates and deletes on ``job_processes``."""

    EVENT_CHOICES = [
        ('INSERT', 'Insert'),
        ('UPDATE', 'Update'),
        ('DELETE', 'Delete'),
    ]

    event = models.CharField(max_length=10, choices=EVENT_CHOICES)
    process_id = models.BigIntegerField(null=True, blank=True, db_index=True)
    new = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    old = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'job_process_changes'
        ordering = ['id']

    def __str__(self) -> str:
        return f"#{self.pk} {self.event} process={self.process_id}"


# ----------------------------------------------------------------------------
# Signals publishing row changes to the change feed
# ----------------------------------------------------------------------------
@receiver(post_save, sender='jobs.JobProcess')
def publish_job_process_save(sender, instance, created, **kwargs):
    from .changes import publish

    old = getattr(instance, '_loaded_snapshot', None) or {}
    new = instance.snapshot()
    publish('INSERT' if created else 'UPDATE', new=new, old={} if created else old)
    instance._loaded_snapshot = new


@receiver(post_delete, sender='jobs.JobProcess')
def publish_job_process_delete(sender, instance, **kwargs):
    from .changes import publish

    publish('DELETE', new={}, old=instance.snapshot())
