# PATH: /OperativeX/production_line/status_styles.py
"""Shared styling helpers for work item status badges."""

from __future__ import annotations

STATUS_BADGE_CLASS_MAP = {
    'pending': 'bg-amber-200 text-amber-800',
    'completed': 'bg-green-200 text-green-800',
    'updating': 'bg-blue-200 text-blue-800',
}

DEFAULT_STATUS_BADGE_CLASSES = 'bg-gray-200 text-gray-800'


def get_status_badge_classes(status: str | None) -> str:
    if not status:
        return DEFAULT_STATUS_BADGE_CLASSES
    return STATUS_BADGE_CLASS_MAP.get(status, DEFAULT_STATUS_BADGE_CLASSES)
