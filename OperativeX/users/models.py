# PATH: /OperativeX/users/models.py
from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models

# Capability tags a worker profile may hold.
ROLE_VOCABULARY = [
    ('printing', 'Printing'),
    ('pasting', 'Pasting'),
    ('lamination', 'Lamination'),
    ('prepress', 'Pre-Press'),
    ('plates', 'Plates'),
    ('card_cutting', 'Card Cutting'),
    ('sorting', 'Sorting'),
    ('varnish', 'Varnish'),
    ('joint', 'Joint'),
    ('die_cutting', 'Die Cutting'),
    ('foil', 'Foil'),
    ('screen_printing', 'Screen Printing'),
    ('embose', 'Embose'),
    ('double_tape', 'Double Tape'),
    ('machineinfo', 'Machine Info'),
]
ROLE_TAGS = [code for code, _label in ROLE_VOCABULARY]

DEFAULT_WORKER_ROLES = ['printing']


class CustomUser(AbstractUser):
    """Auth identity; ``username`` holds the employee code used to sign in."""

    full_name = models.CharField(max_length=150, blank=True)

    def __str__(self):
        return self.full_name or self.username

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"


class Profile(models.Model):
    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('worker', 'Worker'),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='profile',
    )
    full_name = models.CharField(max_length=150, blank=True)
    employee_code = models.CharField(max_length=50, unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='worker')
    roles = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'profiles'
        ordering = ['-created_at']
        verbose_name = "Profile"
        verbose_name_plural = "Profiles"

    def __str__(self):
        return f"{self.full_name or self.employee_code} ({self.employee_code})"

    @property
    def is_admin(self) -> bool:
        return self.role == 'admin' or 'admin' in (self.roles or [])

    def get_roles_display(self) -> str:
        labels = dict(ROLE_VOCABULARY)
        return ", ".join(labels.get(r, str(r).replace('_', ' ').title()) for r in (self.roles or []))
