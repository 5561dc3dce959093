# PATH: /OperativeX/machines/models.py
"""Catalog models: production processes and the machines that run them."""

from __future__ import annotations

from django.db import models
from django.db.models.signals import post_delete
from django.dispatch import receiver

# Stage names as stored in the processes catalog.
PROCESS_NAMES = [
    'Pre_Press',
    'Plates',
    'Printing',
    'Card_Cutting',
    'Varnish: Shine',
    'Lamination: Matte',
    'Lamination: Shine',
    'Joint',
    'Die_Cutting',
    'Foil',
    'Pasting',
    'Screen_Printing',
    'Embose',
    'Double_Tape',
    'Sorting',
]


class Process(models.Model):
    name = models.CharField(max_length=100, unique=True)

    class Meta:
        db_table = 'processes'
        ordering = ['name']

    def __str__(self):
        return self.name


class MachineQuerySet(models.QuerySet):
    def resolve_refs(self, refs) -> dict[str, 'Machine']:
        """Map machine references to machines.

        Process instances store machine references as text; a reference may be
        the machine's numeric id or its display name.  Ids win over names.
        """
        refs = {str(r) for r in refs if r not in (None, '')}
        if not refs:
            return {}
        ids = [int(r) for r in refs if r.isdigit()]
        found: dict[str, Machine] = {}
        for machine in self.filter(models.Q(pk__in=ids) | models.Q(name__in=refs)):
            if machine.name in refs:
                found.setdefault(machine.name, machine)
            if str(machine.pk) in refs:
                found[str(machine.pk)] = machine
        return found


class Machine(models.Model):
    name = models.CharField(max_length=100, unique=True)
    size = models.CharField(max_length=100, blank=True)
    capacity = models.PositiveIntegerField(null=True, blank=True)
    available_days = models.PositiveIntegerField(null=True, blank=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MachineQuerySet.as_manager()

    class Meta:
        db_table = 'machines'
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def ref(self) -> str:
        return str(self.pk)


@receiver(post_delete, sender=Machine)
def release_machine_references(sender, instance, **kwargs):
    """Null the machine reference on process instances pointing at a deleted machine."""
    from jobs.models import JobProcess

    refs = {instance.ref, instance.name}
    for job_process in JobProcess.objects.filter(machine_id__in=refs):
        job_process.machine_id = None
        job_process.save(update_fields=['machine_id'])
