# PATH: /OperativeX/users/admin.py
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import CustomUser, Profile


@admin.register(CustomUser)
class CustomUserAdmin(BaseUserAdmin):
    list_display = ("username", "full_name", "is_active", "is_staff")

    def get_fieldsets(self, request, obj=None):
        base = super().get_fieldsets(request, obj)
        if obj is None:
            return base
        return base + ((None, {"fields": ("full_name",)}),)


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("employee_code", "full_name", "role", "created_at")
    search_fields = ("employee_code", "full_name")
    list_filter = ("role",)
