# PATH: /OperativeX/users/views.py
import json
import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth import logout
from django.contrib.auth.views import LoginView
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_http_methods

from OperativeX.navigation import is_admin, page_required
from .forms import LoginAuthenticationForm, WorkerForm
from .models import Profile, ROLE_VOCABULARY
from .services import WorkerError, create_worker, delete_worker, update_worker

logger = logging.getLogger(__name__)


class RememberLoginView(LoginView):
    template_name = 'registration/login.html'
    authentication_form = LoginAuthenticationForm
    redirect_authenticated_user = True

    def form_valid(self, form):
        response = super().form_valid(form)
        remember = self.request.POST.get('remember')
        if remember:
            max_age = getattr(settings, 'REMEMBER_ME_SESSION_AGE', 60 * 60 * 24 * 14)
            self.request.session.set_expiry(max_age)
        else:
            self.request.session.set_expiry(0)
        return response


@require_http_methods(["GET", "POST"])  # Allow GET for mobile/PWA environments
def logout_view(request):
    """Log the user out and redirect to the login page."""
    logout(request)
    return redirect('login')


def _worker_rows():
    return Profile.objects.exclude(role='admin').order_by('-created_at')


@page_required('admin_panel')
def admin_dashboard_view(request):
    """List worker profiles and handle the create/edit/delete forms.

    The page posts back to itself with an ``action`` of ``create``,
    ``update`` or ``delete``; validation errors re-render the page with
    the failing form bound so the messages appear inline.
    """
    create_form = WorkerForm(prefix='new', initial={'roles': ['printing']})
    edit_form = None
    editing = None

    if request.method == 'POST':
        action = request.POST.get('action')
        if action == 'create':
            create_form = WorkerForm(request.POST, prefix='new', is_create=True)
            if create_form.is_valid():
                try:
                    create_worker(**create_form.cleaned_data)
                except WorkerError as exc:
                    create_form.add_error('employee_code', str(exc))
                else:
                    messages.success(request, "Worker added successfully!")
                    return redirect('users:admin_dashboard')
        elif action == 'update':
            editing = Profile.objects.filter(pk=request.POST.get('id') or 0).exclude(role='admin').first()
            edit_form = WorkerForm(request.POST, prefix='edit', is_create=False)
            if editing is not None and edit_form.is_valid():
                try:
                    update_worker(editing.pk, **edit_form.cleaned_data)
                except WorkerError as exc:
                    edit_form.add_error(None, str(exc))
                else:
                    messages.success(request, "Worker updated successfully!")
                    return redirect('users:admin_dashboard')
        elif action == 'delete':
            try:
                delete_worker(int(request.POST.get('id') or 0))
            except (WorkerError, ValueError) as exc:
                messages.error(request, f"Failed to delete worker: {exc}")
            else:
                messages.success(request, "Worker deleted successfully!")
            return redirect('users:admin_dashboard')
    elif request.GET.get('edit'):
        editing = Profile.objects.filter(pk=request.GET.get('edit')).exclude(role='admin').first()
        if editing is not None:
            edit_form = WorkerForm(prefix='edit', is_create=False, initial={
                'full_name': editing.full_name,
                'employee_code': editing.employee_code,
                'roles': editing.roles,
            })

    return render(request, 'users/admin_dashboard.html', {
        'workers': _worker_rows(),
        'create_form': create_form,
        'edit_form': edit_form,
        'editing': editing,
        'available_roles': ROLE_VOCABULARY,
    })


def _profile_payload(profile):
    return {
        'id': profile.pk,
        'full_name': profile.full_name,
        'employee_code': profile.employee_code,
        'role': profile.role,
        'roles': profile.roles,
        'created_at': profile.created_at,
    }


@require_http_methods(["POST", "PUT", "DELETE"])
def workers_api(request):
    """Admin worker CRUD as JSON.

    POST creates ``{full_name, employee_code, roles, password}``, PUT updates
    the same fields plus ``id`` (password optional) and DELETE removes
    ``{id}``.  Every non-2xx response carries ``{"error": ...}``.
    """
    if not request.user.is_authenticated:
        return JsonResponse({"error": "Authentication required"}, status=401)
    if not is_admin(getattr(request, 'profile', None)):
        return JsonResponse({"error": "Admin access required"}, status=403)
    try:
        body = json.loads(request.body or b"{}")
    except ValueError:
        return JsonResponse({"error": "Invalid JSON body"}, status=400)
    if not isinstance(body, dict):
        return JsonResponse({"error": "Invalid JSON body"}, status=400)

    if request.method == 'DELETE':
        try:
            delete_worker(int(body.get('id') or 0))
        except (TypeError, ValueError):
            return JsonResponse({"error": "Worker id is required"}, status=400)
        except WorkerError as exc:
            return JsonResponse({"error": str(exc)}, status=exc.status)
        return JsonResponse({"message": "Worker deleted successfully"})

    data = {
        'full_name': body.get('full_name') or '',
        'employee_code': body.get('employee_code') or '',
        'roles': body.get('roles') or [],
        'password': body.get('password') or '',
    }
    form = WorkerForm(data, is_create=request.method == 'POST')
    if not form.is_valid():
        return JsonResponse({"error": form.first_error()}, status=400)

    try:
        if request.method == 'POST':
            profile = create_worker(**form.cleaned_data)
            return JsonResponse({"message": "Worker added successfully", "worker": _profile_payload(profile)}, status=201)
        try:
            profile_id = int(body.get('id'))
        except (TypeError, ValueError):
            return JsonResponse({"error": "Worker id is required"}, status=400)
        profile = update_worker(profile_id, **form.cleaned_data)
    except WorkerError as exc:
        return JsonResponse({"error": str(exc)}, status=exc.status)
    return JsonResponse({"message": "Worker updated successfully", "worker": _profile_payload(profile)})
