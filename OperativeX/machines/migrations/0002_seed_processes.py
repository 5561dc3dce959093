from django.db import migrations

PROCESS_NAMES = [
    'Pre_Press',
    'Plates',
    'Printing',
    'Card_Cutting',
    'Varnish: Shine',
    'Lamination: Matte',
    'Lamination: Shine',
    'Joint',
    'Die_Cutting',
    'Foil',
    'Pasting',
    'Screen_Printing',
    'Embose',
    'Double_Tape',
    'Sorting',
]


def seed_processes(apps, schema_editor):
    Process = apps.get_model('machines', 'Process')
    for name in PROCESS_NAMES:
        Process.objects.get_or_create(name=name)


class Migration(migrations.Migration):

    dependencies = [
        ('machines', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_processes, migrations.RunPython.noop),
    ]
