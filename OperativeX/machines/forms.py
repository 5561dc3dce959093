# PATH: /OperativeX/machines/forms.py
from django import forms

from users.forms import TailwindFormMixin
from .models import Machine


class MachineForm(TailwindFormMixin, forms.ModelForm):
    class Meta:
        model = Machine
        fields = ("name", "size", "capacity", "available_days", "description")
        widgets = {
            "description": forms.Textarea(attrs={"rows": 3}),
        }
        labels = {
            "name": "Machine Name",
            "available_days": "Available Days",
        }
        error_messages = {
            "name": {"unique": "A machine with this name already exists."},
        }
