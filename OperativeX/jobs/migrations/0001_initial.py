import django.core.serializers.json
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('machines', '0001_initial'),
        ('users', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='JobCard',
            fields=[
                ('job_code', models.BigAutoField(primary_key=True, serialize=False)),
                ('job_id', models.CharField(max_length=50, unique=True)),
                ('customer_name', models.CharField(max_length=200)),
                ('start_date', models.DateField(blank=True, null=True)),
                ('required_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='job_cards', to='users.profile')),
            ],
            options={
                'db_table': 'job_cards',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='JobProcessChange',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('event', models.CharField(choices=[('INSERT', 'Insert'), ('UPDATE', 'Update'), ('DELETE', 'Delete')], max_length=10)),
                ('process_id', models.BigIntegerField(blank=True, db_index=True, null=True)),
                ('new', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('old', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'job_process_changes',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='SubJobCard',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sub_job_id', models.CharField(max_length=50)),
                ('description', models.TextField(blank=True)),
                ('color', models.CharField(blank=True, max_length=100)),
                ('card_size', models.CharField(blank=True, max_length=100)),
                ('card_quantity', models.PositiveIntegerField(blank=True, null=True)),
                ('item_quantity', models.PositiveIntegerField(blank=True, null=True)),
                ('job', models.ForeignKey(db_column='job_id', on_delete=django.db.models.deletion.CASCADE, related_name='sub_jobs', to='jobs.jobcard', to_field='job_id')),
            ],
            options={
                'db_table': 'sub_job_cards',
            },
        ),
        migrations.CreateModel(
            name='JobProcess',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sub_job_id', models.CharField(max_length=50)),
                ('machine_id', models.CharField(blank=True, max_length=100, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('completed', 'Completed')], default='pending', max_length=20)),
                ('employee_code', models.CharField(blank=True, max_length=50, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('job', models.ForeignKey(db_column='job_id', on_delete=django.db.models.deletion.CASCADE, related_name='processes', to='jobs.jobcard', to_field='job_id')),
                ('process', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='job_processes', to='machines.process')),
                ('sub_job_card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='processes', to='jobs.subjobcard')),
            ],
            options={
                'db_table': 'job_processes',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.AddConstraint(
            model_name='subjobcard',
            constraint=models.UniqueConstraint(fields=('job', 'sub_job_id'), name='unique_sub_job_per_job'),
        ),
        migrations.AddIndex(
            model_name='jobprocess',
            index=models.Index(fields=['process', 'status'], name='job_process_stage_idx'),
        ),
    ]
