# PATH: /OperativeX/OperativeX/navigation.py
"""Role based navigation.

A single page table drives both the navigation bar and the per-page guard.
Each entry names the url to reverse, the capability role a worker needs to
open the page (``None`` means every signed-in identity), whether the page is
reserved for administrators, and where it is placed in the admin menu.

Administrators (primary role ``admin``, or a legacy ``admin`` tag inside the
role list) see every ``main`` page in the bar and the ``additional`` pages in
the overflow panel.  Workers see Home followed by one page per capability
role they hold, capped at ``MAX_WORKER_PAGES`` entries.
"""

from __future__ import annotations

from functools import wraps

from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect
from django.urls import reverse

MAX_WORKER_PAGES = 7

MAIN = 'main'
ADDITIONAL = 'additional'


def _stage(key, name, placement):
    return {
        'key': key,
        'name': name,
        'url_name': 'production_line:stage',
        'url_kwargs': {'stage': key},
        'role': key,
        'admin_only': False,
        'placement': placement,
    }


PAGES = [
    {'key': 'home', 'name': 'Home', 'url_name': 'home', 'url_kwargs': {},
     'role': None, 'admin_only': False, 'placement': MAIN},
    {'key': 'job_form', 'name': 'Job Form', 'url_name': 'jobs:job_form', 'url_kwargs': {},
     'role': None, 'admin_only': True, 'placement': MAIN},
    _stage('prepress', 'Pre-Press', MAIN),
    _stage('printing', 'Printing', MAIN),
    _stage('pasting', 'Pasting', MAIN),
    _stage('sorting', 'Sorting', MAIN),
    {'key': 'reports', 'name': 'Reports', 'url_name': 'reports:reports', 'url_kwargs': {},
     'role': None, 'admin_only': True, 'placement': MAIN},
    {'key': 'job_status', 'name': 'Job Status', 'url_name': 'reports:job_status', 'url_kwargs': {},
     'role': None, 'admin_only': True, 'placement': MAIN},
    {'key': 'machineinfo', 'name': 'MachineInfo', 'url_name': 'machines:machine_list', 'url_kwargs': {},
     'role': 'machineinfo', 'admin_only': False, 'placement': MAIN},
    {'key': 'admin_panel', 'name': 'Admin Panel', 'url_name': 'users:admin_dashboard', 'url_kwargs': {},
     'role': None, 'admin_only': True, 'placement': MAIN},
    _stage('plates', 'Plates', ADDITIONAL),
    _stage('card_cutting', 'Card Cutting', ADDITIONAL),
    _stage('varnish', 'Varnish', ADDITIONAL),
    _stage('lamination', 'Lamination', ADDITIONAL),
    _stage('joint', 'Joint', ADDITIONAL),
    _stage('die_cutting', 'Die Cutting', ADDITIONAL),
    _stage('foil', 'Foil', ADDITIONAL),
    _stage('screen_printing', 'Screen Printing', ADDITIONAL),
    _stage('embose', 'Embose', ADDITIONAL),
    _stage('double_tape', 'Double Tape', ADDITIONAL),
]

PAGES_BY_KEY = {page['key']: page for page in PAGES}

# First page granted by each capability role.
ROLE_TO_PAGE = {}
for _page in PAGES:
    if _page['role'] and _page['role'] not in ROLE_TO_PAGE:
        ROLE_TO_PAGE[_page['role']] = _page


def is_admin(profile) -> bool:
    if profile is None:
        return False
    return profile.role == 'admin' or 'admin' in (profile.roles or [])


def can_access(profile, key: str | None) -> bool:
    """Return True when ``profile`` may open the page registered under ``key``."""
    page = PAGES_BY_KEY.get(key or '')
    if page is None or profile is None:
        return False
    if is_admin(profile):
        return True
    if page['admin_only']:
        return False
    if page['role'] is None:
        return True
    return page['role'] in (profile.roles or [])


def _nav_item(page) -> dict:
    return {
        'key': page['key'],
        'name': page['name'],
        'url': reverse(page['url_name'], kwargs=page['url_kwargs'] or None),
    }


def worker_pages(profile) -> list[dict]:
    """Home plus one entry per capability role, in the order the roles are stored.

    Roles without a page degrade to a title-cased label with no link.
    """
    items = [_nav_item(PAGES_BY_KEY['home'])]
    seen = {'home'}
    for role in (profile.roles or []) if profile is not None else []:
        page = ROLE_TO_PAGE.get(role)
        if page is None:
            label = str(role).replace('_', ' ').title()
            if label not in seen:
                seen.add(label)
                items.append({'key': role, 'name': label, 'url': None})
            continue
        if page['key'] in seen:
            continue
        seen.add(page['key'])
        items.append(_nav_item(page))
    return items


def nav_pages(profile) -> dict:
    """Compute ``{'main': [...], 'additional': [...]}`` for the navigation bar."""
    if is_admin(profile):
        return {
            'main': [_nav_item(p) for p in PAGES if p['placement'] == MAIN],
            'additional': [_nav_item(p) for p in PAGES if p['placement'] == ADDITIONAL],
        }
    return {'main': worker_pages(profile)[:MAX_WORKER_PAGES], 'additional': []}


def first_allowed_url(profile) -> str:
    """URL of the first role page the identity may open, falling back to Home."""
    for item in worker_pages(profile)[1:]:
        if item['url']:
            return item['url']
    return reverse('home')


def page_required(key: str | None = None):
    """Guard a view with the page table entry ``key``.

    When ``key`` is omitted the page is taken from the ``stage`` url argument,
    which is how the production stage pages are registered.  Anonymous users
    are sent to the login page; signed-in identities without access are sent
    to the first page they are entitled to.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            page_key = key or kwargs.get('stage')
            profile = getattr(request, 'profile', None)
            if can_access(profile, page_key):
                return view_func(request, *args, **kwargs)
            return redirect(first_allowed_url(profile))
        return login_required(_wrapped)
    return decorator
