# PATH: /OperativeX/machines/admin.py
from django.contrib import admin

from .models import Machine, Process


@admin.register(Machine)
class MachineAdmin(admin.ModelAdmin):
    list_display = ("name", "size", "capacity", "available_days", "updated_at")
    search_fields = ("name", "description")


@admin.register(Process)
class ProcessAdmin(admin.ModelAdmin):
    list_display = ("id", "name")
    search_fields = ("name",)
