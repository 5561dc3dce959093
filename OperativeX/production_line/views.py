# PATH: /OperativeX/production_line/views.py
import json
import logging

from django.conf import settings
from django.db import DatabaseError
from django.http import Http404, JsonResponse
from django.shortcuts import render
from django.urls import reverse
from django.views.decorators.http import require_GET, require_POST

from jobs.changes import changes_since, latest_cursor
from machines.models import Machine, Process
from OperativeX.navigation import page_required
from .services import WorkItemError, list_work_items, machine_aliases, machine_counts
from .stages import STAGES, STATUS_TABS, pick_variant
from .worklist import WorkList

logger = logging.getLogger(__name__)

SESSION_MARKERS_KEY = 'in_flight_markers'


# ------------------------------
# Helpers
# ------------------------------

def _stage_or_404(stage: str) -> dict:
    entry = STAGES.get(stage)
    if entry is None:
        raise Http404("Unknown stage")
    return entry


def _process_for(stage: dict, variant_key):
    """Catalog process behind the requested variant, or ``None`` if not seeded."""
    variant = pick_variant(stage, variant_key)
    return variant, Process.objects.filter(name=variant['process_name']).first()


def _worklist(request, process_id, machine_id=None) -> WorkList:
    markers = request.session.setdefault(SESSION_MARKERS_KEY, {})
    profile = getattr(request, 'profile', None)
    return WorkList(
        process_id,
        machine_id,
        employee_code=profile.employee_code if profile else None,
        markers=markers,
        machine_refs=machine_aliases(machine_id) if machine_id else None,
    )


def _save_markers(request, worklist: WorkList) -> None:
    request.session[SESSION_MARKERS_KEY] = worklist.markers
    request.session.modified = True


def _request_data(request) -> dict:
    if request.content_type == 'application/json':
        try:
            body = json.loads(request.body or b"{}")
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
    return request.POST.dict()


# ------------------------------
# Pages
# ------------------------------

@page_required()
def stage_view(request, stage: str):
    """List page for one production stage.

    Query params: ``variant`` (lamination matte/shine), ``machine`` (printing),
    ``tab`` (all/pending/completed) and ``q`` (job id or customer search).
    """
    entry = _stage_or_404(stage)
    variant, process = _process_for(entry, request.GET.get('variant'))
    machine_id = (request.GET.get('machine') or '').strip() if entry['machine_scoped'] else ''
    tab = request.GET.get('tab') or 'all'
    term = (request.GET.get('q') or '').strip()

    rows, machines = [], []
    if process is not None:
        worklist = _worklist(request, process.pk, machine_id)
        worklist.refresh()
        rows = worklist.visible(tab, term)
        _save_markers(request, worklist)
        if entry['machine_scoped']:
            all_rows = worklist.rows if not machine_id else list_work_items(process.pk)
            machines = machine_counts(all_rows, Machine.objects.order_by('name'))
    else:
        logger.warning("Process %r missing from the catalog", variant['process_name'])

    api_kwargs = {'stage': entry['slug']}
    return render(request, 'production_line/stage.html', {
        'stage': entry,
        'variant': variant,
        'process': process,
        'rows': rows,
        'machines': machines,
        'current_machine': machine_id,
        'tab': tab,
        'status_tabs': STATUS_TABS,
        'search_query': term,
        'cursor': latest_cursor(),
        'in_flight_ms': int(getattr(settings, 'OPERATIVEX_IN_FLIGHT_SECONDS', 3) * 1000),
        'items_url': reverse('production_line:items_api', kwargs=api_kwargs),
        'complete_url': reverse('production_line:complete_api', kwargs=api_kwargs),
        'changes_url': reverse('production_line:changes_api', kwargs=api_kwargs),
    })


# ------------------------------
# JSON APIs
# ------------------------------

@require_GET
@page_required()
def items_api(request, stage: str):
    entry = _stage_or_404(stage)
    _variant, process = _process_for(entry, request.GET.get('variant'))
    if process is None:
        return JsonResponse({"rows": [], "cursor": latest_cursor()})
    machine_id = (request.GET.get('machine') or '').strip() if entry['machine_scoped'] else ''
    worklist = _worklist(request, process.pk, machine_id)
    worklist.refresh()
    rows = worklist.visible(request.GET.get('tab') or 'all', request.GET.get('q') or '')
    _save_markers(request, worklist)
    return JsonResponse({"rows": rows, "cursor": latest_cursor()})


@require_POST
@page_required()
def complete_api(request, stage: str):
    """Complete one work item of this stage for the signed-in worker."""
    entry = _stage_or_404(stage)
    data = _request_data(request)
    _variant, process = _process_for(entry, data.get('variant'))
    if process is None:
        return JsonResponse({"error": "Process is not configured"}, status=404)
    job_id, sub_job_id = data.get('job_id'), data.get('sub_job_id')
    if not job_id or sub_job_id in (None, ''):
        return JsonResponse({"error": "job_id and sub_job_id are required"}, status=400)
    machine_id = (data.get('machine_id') or '') if entry['machine_scoped'] else ''

    worklist = _worklist(request, process.pk, machine_id)
    worklist.refresh()
    try:
        updated = worklist.complete(job_id, sub_job_id, machine_id or None)
    except WorkItemError as exc:
        return JsonResponse({"error": str(exc)}, status=exc.status)
    except DatabaseError as exc:
        logger.exception("Completing %s-%s failed", job_id, sub_job_id)
        return JsonResponse({"error": str(exc)}, status=500)
    finally:
        _save_markers(request, worklist)
    return JsonResponse({"updated": updated, "rows": worklist.visible()})


@require_GET
@page_required()
def changes_api(request, stage: str):
    """Change feed for this stage's process since the ``since`` cursor.

    Pages poll this endpoint and re-list whenever it returns changes.
    """
    entry = _stage_or_404(stage)
    _variant, process = _process_for(entry, request.GET.get('variant'))
    try:
        since = int(request.GET.get('since') or 0)
    except ValueError:
        return JsonResponse({"error": "since must be an integer"}, status=400)
    if process is None:
        return JsonResponse({"changes": [], "cursor": since})
    changes = changes_since(since, process_id=process.pk)
    worklist = _worklist(request, process.pk)
    for payload in changes:
        worklist.handle_change(payload, refresh=False)
    _save_markers(request, worklist)
    cursor = changes[-1]['id'] if changes else since
    return JsonResponse({"changes": changes, "cursor": cursor})
