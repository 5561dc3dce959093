# PATH: /OperativeX/users/services.py
"""Profile provisioning and worker administration."""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from .models import DEFAULT_WORKER_ROLES, Profile

logger = logging.getLogger(__name__)


class WorkerError(Exception):
    """Raised when a worker create/update/delete cannot be applied."""

    status = 400

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        if status is not None:
            self.status = status


def ensure_profile(user) -> Profile:
    """Return the user's profile, creating a default one on first sign-in.

    New profiles use the login handle as employee code.  Superusers are
    provisioned as administrators, everyone else as a worker with the
    default capability roles.
    """
    profile = Profile.objects.filter(user=user).first()
    if profile is not None:
        return profile
    role = 'admin' if user.is_superuser else 'worker'
    profile = Profile.objects.create(
        user=user,
        full_name=getattr(user, 'full_name', '') or '',
        employee_code=user.get_username(),
        role=role,
        roles=[] if role == 'admin' else list(DEFAULT_WORKER_ROLES),
    )
    logger.info("Provisioned %s profile for %s", role, profile.employee_code)
    return profile


def create_worker(*, full_name: str, employee_code: str, roles: list[str], password: str) -> Profile:
    User = get_user_model()
    if User.objects.filter(username=employee_code).exists() or \
            Profile.objects.filter(employee_code=employee_code).exists():
        raise WorkerError("Employee code already exists")
    try:
        with transaction.atomic():
            user = User.objects.create_user(username=employee_code, password=password, full_name=full_name)
            profile = Profile.objects.create(
                user=user,
                full_name=full_name,
                employee_code=employee_code,
                role='worker',
                roles=list(roles),
            )
    except IntegrityError as exc:
        raise WorkerError("Employee code already exists") from exc
    logger.info("Created worker %s with roles %s", employee_code, roles)
    return profile


def update_worker(profile_id: int, *, full_name: str, employee_code: str, roles: list[str],
                  password: str | None = None) -> Profile:
    profile = Profile.objects.select_related('user').filter(pk=profile_id).first()
    if profile is None:
        raise WorkerError("Worker not found", status=404)
    if profile.is_admin:
        raise WorkerError("Admin profiles cannot be edited here", status=403)
    User = get_user_model()
    clash = (
        Profile.objects.filter(employee_code=employee_code).exclude(pk=profile.pk).exists()
        or User.objects.filter(username=employee_code).exclude(pk=profile.user_id).exists()
    )
    if clash:
        raise WorkerError("Employee code already exists")
    with transaction.atomic():
        profile.full_name = full_name
        profile.employee_code = employee_code
        profile.roles = list(roles)
        profile.save(update_fields=['full_name', 'employee_code', 'roles'])
        user = profile.user
        user.username = employee_code
        user.full_name = full_name
        if password:
            user.set_password(password)
        user.save()
    logger.info("Updated worker %s", employee_code)
    return profile


def delete_worker(profile_id: int) -> None:
    """Delete the profile and its auth identity."""
    profile = Profile.objects.select_related('user').filter(pk=profile_id).first()
    if profile is None:
        raise WorkerError("Worker not found", status=404)
    if profile.is_admin:
        raise WorkerError("Admin profiles cannot be deleted here", status=403)
    code = profile.employee_code
    profile.user.delete()
    logger.info("Deleted worker %s", code)
