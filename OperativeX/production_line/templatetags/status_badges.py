from django import template

from production_line.status_styles import get_status_badge_classes

register = template.Library()


@register.filter(name='status_classes')
def status_classes(status):
    """Return background/text classes for a work item status."""
    return get_status_badge_classes(status)


@register.filter(name='completion_percent')
def completion_percent(ratio):
    try:
        return int(round(float(ratio or 0) * 100))
    except (TypeError, ValueError):
        return 0
