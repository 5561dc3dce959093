# PATH: /OperativeX/reports/views.py
import logging

from django.contrib import messages
from django.db import DatabaseError
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_GET, require_POST

from jobs.changes import changes_since, latest_cursor
from OperativeX.navigation import page_required
from production_line.services import WorkItemError, complete_record, undo_work_item
from production_line.stages import STATUS_TABS
from utils.pdf import build_table_pdf
from utils.xlsx import build_table_response
from .services import filter_groups, flatten, group_compact, group_detailed, load_report_rows

logger = logging.getLogger(__name__)

VIEW_MODES = ('compact', 'detailed')


def _filtered_groups(request):
    tab = request.GET.get('tab') or 'all'
    term = (request.GET.get('q') or '').strip()
    groups = filter_groups(group_compact(load_report_rows()), tab, term)
    return groups, tab, term


@page_required('reports')
def reports_view(request):
    """Completion report per job and sub-job.

    ``view`` switches between the compact chip strip and the detailed
    job -> sub-job -> process table; ``tab`` and ``q`` filter both.
    """
    groups, tab, term = _filtered_groups(request)
    mode = request.GET.get('view') if request.GET.get('view') in VIEW_MODES else 'compact'
    context = {
        'groups': groups,
        'detailed': group_detailed(flatten(groups)) if mode == 'detailed' else {},
        'mode': mode,
        'tab': tab,
        'status_tabs': STATUS_TABS,
        'search_query': term,
        'cursor': latest_cursor(),
    }
    return render(request, 'reports/reports.html', context)


@page_required('job_status')
def job_status_view(request):
    """Every record with Undo / Complete actions."""
    groups, tab, term = _filtered_groups(request)
    return render(request, 'reports/job_status.html', {
        'groups': groups,
        'tab': tab,
        'status_tabs': STATUS_TABS,
        'search_query': term,
        'cursor': latest_cursor(),
    })


EXPORT_HEADERS = ['Job ID', 'Sub Job', 'Customer', 'Description', 'Process', 'Status', 'Completed By']


def _export_rows(request) -> list[list]:
    groups, _tab, _term = _filtered_groups(request)
    return [
        [
            row['job_id'],
            row['sub_job_id'],
            row['customer_name'],
            row['description'],
            row['process_name'],
            row['status'].title(),
            row['completed_by'],
        ]
        for row in flatten(groups)
    ]


@page_required('reports')
def reports_export_xlsx(request):
    return build_table_response(
        sheet_title="Job Report",
        report_title="Job Process Report",
        headers=EXPORT_HEADERS,
        rows=_export_rows(request),
        filename="job_process_report.xlsx",
        column_widths=[14, 10, 28, 32, 20, 14, 30],
        table_name="JobProcessReport",
    )


@page_required('reports')
def reports_export_pdf(request):
    return build_table_pdf(
        report_title="Job Process Report",
        headers=EXPORT_HEADERS,
        rows=_export_rows(request),
        filename="job_process_report.pdf",
    )


def _record_response(request, ok_message, error=None, status=200):
    """JSON for script callers; redirect back with a message for form posts."""
    next_url = request.POST.get('next')
    if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        if error:
            messages.error(request, error)
        else:
            messages.success(request, ok_message)
        return redirect(next_url)
    if error:
        return JsonResponse({"error": error}, status=status)
    return JsonResponse({"message": ok_message})


@require_POST
@page_required('job_status')
def record_undo_api(request, record_id):
    try:
        undo_work_item(record_id)
    except WorkItemError as exc:
        return _record_response(request, None, str(exc), exc.status)
    except DatabaseError as exc:
        logger.exception("Undo failed for record %s", record_id)
        return _record_response(request, None, f"Error updating status: {exc}", 500)
    return _record_response(request, "Status reset to pending.")


@require_POST
@page_required('job_status')
def record_complete_api(request, record_id):
    profile = getattr(request, 'profile', None)
    try:
        complete_record(record_id, profile.employee_code if profile else None)
    except WorkItemError as exc:
        return _record_response(request, None, str(exc), exc.status)
    except DatabaseError as exc:
        logger.exception("Complete failed for record %s", record_id)
        return _record_response(request, None, f"Error updating status: {exc}", 500)
    return _record_response(request, "Status marked as completed.")


@require_GET
@page_required('reports')
def changes_api(request):
    """Change feed across all processes; report pages poll it and reload on change."""
    try:
        since = int(request.GET.get('since') or 0)
    except ValueError:
        return JsonResponse({"error": "since must be an integer"}, status=400)
    changes = changes_since(since)
    return JsonResponse({"changes": changes, "cursor": changes[-1]['id'] if changes else since})
