# PATH: /OperativeX/production_line/stages.py
"""Declarative table of production stages.

Every stage page is driven by one entry: the capability role that opens it,
the catalog process name(s) it lists and whether its list can be narrowed to
one machine.  Stages with more than one process (lamination) show one tab
per variant.
"""

from django.db import models


class StageChoices(models.TextChoices):
    PREPRESS = 'prepress', 'Pre-Press'
    PLATES = 'plates', 'Plates'
    PRINTING = 'printing', 'Printing'
    CARD_CUTTING = 'card_cutting', 'Card Cutting'
    VARNISH = 'varnish', 'Varnish'
    LAMINATION = 'lamination', 'Lamination'
    JOINT = 'joint', 'Joint'
    DIE_CUTTING = 'die_cutting', 'Die Cutting'
    FOIL = 'foil', 'Foil'
    PASTING = 'pasting', 'Pasting'
    SCREEN_PRINTING = 'screen_printing', 'Screen Printing'
    EMBOSE = 'embose', 'Embose'
    DOUBLE_TAPE = 'double_tape', 'Double Tape'
    SORTING = 'sorting', 'Sorting'


# stage -> [(variant key, variant label, catalog process name)]
STAGE_PROCESSES = {
    StageChoices.PREPRESS:        [('default', 'Pre-Press', 'Pre_Press')],
    StageChoices.PLATES:          [('default', 'Plates', 'Plates')],
    StageChoices.PRINTING:        [('default', 'Printing', 'Printing')],
    StageChoices.CARD_CUTTING:    [('default', 'Card Cutting', 'Card_Cutting')],
    StageChoices.VARNISH:         [('default', 'Varnish', 'Varnish: Shine')],
    StageChoices.LAMINATION:      [('matte', 'Matte Lamination', 'Lamination: Matte'),
                                   ('shine', 'Shine Lamination', 'Lamination: Shine')],
    StageChoices.JOINT:           [('default', 'Joint', 'Joint')],
    StageChoices.DIE_CUTTING:     [('default', 'Die Cutting', 'Die_Cutting')],
    StageChoices.FOIL:            [('default', 'Foil', 'Foil')],
    StageChoices.PASTING:         [('default', 'Pasting', 'Pasting')],
    StageChoices.SCREEN_PRINTING: [('default', 'Screen Printing', 'Screen_Printing')],
    StageChoices.EMBOSE:          [('default', 'Embose', 'Embose')],
    StageChoices.DOUBLE_TAPE:     [('default', 'Double Tape', 'Double_Tape')],
    StageChoices.SORTING:         [('default', 'Sorting', 'Sorting')],
}

# Stages whose list has one tab per machine.
MACHINE_SCOPED_STAGES = {StageChoices.PRINTING}

STATUS_TABS = [
    ('all', 'All'),
    ('pending', 'Pending'),
    ('completed', 'Completed'),
]


def get_stage(slug: str):
    """Return the stage entry for ``slug`` or ``None`` when it is not a stage."""
    try:
        stage = StageChoices(slug)
    except ValueError:
        return None
    return {
        'slug': stage.value,
        'title': stage.label,
        'role': stage.value,
        'variants': [
            {'key': key, 'label': label, 'process_name': process_name}
            for key, label, process_name in STAGE_PROCESSES[stage]
        ],
        'machine_scoped': stage in MACHINE_SCOPED_STAGES,
    }


def pick_variant(stage: dict, key: str | None) -> dict:
    """The requested variant of a stage, defaulting to its first one."""
    for variant in stage['variants']:
        if variant['key'] == key:
            return variant
    return stage['variants'][0]


STAGES = {slug: get_stage(slug) for slug in StageChoices.values}
