# PATH: /OperativeX/jobs/views.py
import json
import logging

from django.contrib import messages
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_GET, require_POST

from machines.models import Machine
from OperativeX.navigation import page_required
from .forms import JobCardForm, SubJobFormSet
from .models import JobProcess
from .services import SubmissionError, submit_job

logger = logging.getLogger(__name__)


@page_required('job_form')
def job_form_view(request):
    """Admin page composing a job card and its sub-jobs."""
    if request.method == 'POST':
        form = JobCardForm(request.POST)
        formset = SubJobFormSet(request.POST, prefix='sub_jobs')
        if form.is_valid() and formset.is_valid():
            payload = {
                'user_uid': request.user.pk,
                'job_id': form.cleaned_data['job_id'],
                'customer_name': form.cleaned_data['customer_name'],
                'start_date': form.cleaned_data['start_date'],
                'required_date': form.cleaned_data['required_date'],
                'sub_jobs': formset.descriptors(),
            }
            try:
                result = submit_job(payload)
            except SubmissionError as exc:
                messages.error(request, f"Error: {exc}")
            else:
                messages.success(
                    request,
                    f"Job card {result.job_id} submitted with {result.sub_jobs_count} sub jobs "
                    f"and {result.processes_count} processes.",
                )
                return redirect('jobs:job_form')
    else:
        form = JobCardForm()
        formset = SubJobFormSet(prefix='sub_jobs', initial=[{'sub_job_id': '1'}])
    return render(request, 'jobs/job_form.html', {'form': form, 'formset': formset})


@require_POST
def submit_job_api(request):
    """Create a job card from a JSON body; 201 on success, ``{error}`` otherwise."""
    if not request.user.is_authenticated:
        return JsonResponse({"error": "Authentication required"}, status=401)
    try:
        body = json.loads(request.body or b"{}")
    except ValueError:
        return JsonResponse({"error": "Invalid JSON body"}, status=400)
    if not isinstance(body, dict):
        return JsonResponse({"error": "Invalid JSON body"}, status=400)

    try:
        result = submit_job(body)
    except SubmissionError as exc:
        return JsonResponse({"error": str(exc)}, status=exc.status)

    if result.sub_jobs_count:
        message = "Job card created successfully with machine IDs"
    else:
        message = "Job card created successfully (no sub jobs)"
    return JsonResponse({
        "message": message,
        "job_id": result.job_id,
        "job_code": result.job_code,
        "sub_jobs_count": result.sub_jobs_count,
        "processes_count": result.processes_count,
        "created_by": result.created_by,
        "employee_code": result.employee_code,
    }, status=201)


@require_GET
def printing_jobs_api(request):
    """All process instances grouped by machine, for the machine boards."""
    if not request.user.is_authenticated:
        return JsonResponse({"error": "Authentication required"}, status=401)
    rows = list(
        JobProcess.objects.order_by('id').values('id', 'job_id', 'sub_job_id', 'status', 'machine_id')
    )
    machines = Machine.objects.resolve_refs(row['machine_id'] for row in rows)
    grouped = {}
    for row in rows:
        ref = row['machine_id']
        if ref not in grouped:
            machine = machines.get(str(ref)) if ref is not None else None
            grouped[ref] = {
                'id': ref,
                'name': machine.name if machine else "Unknown Machine",
                'jobs': [],
            }
        grouped[ref]['jobs'].append({
            'id': row['id'],
            'jobId': row['job_id'],
            'subJobId': row['sub_job_id'],
            'status': row['status'],
        })
    return JsonResponse({'machines': list(grouped.values())})
