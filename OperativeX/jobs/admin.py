# PATH: /OperativeX/jobs/admin.py
from django.contrib import admin

from .models import JobCard, JobProcess, JobProcessChange, SubJobCard


class SubJobCardInline(admin.TabularInline):
    model = SubJobCard
    extra = 0


@admin.register(JobCard)
class JobCardAdmin(admin.ModelAdmin):
    list_display = ("job_id", "job_code", "customer_name", "start_date", "required_date", "created_by")
    search_fields = ("job_id", "customer_name")
    inlines = [SubJobCardInline]


@admin.register(JobProcess)
class JobProcessAdmin(admin.ModelAdmin):
    list_display = ("job_id", "sub_job_id", "process", "machine_id", "status", "employee_code", "updated_at")
    search_fields = ("job__job_id", "sub_job_id", "employee_code")
    list_filter = ("status", "process")


@admin.register(JobProcessChange)
class JobProcessChangeAdmin(admin.ModelAdmin):
    list_display = ("id", "event", "process_id", "created_at")
    list_filter = ("event",)
