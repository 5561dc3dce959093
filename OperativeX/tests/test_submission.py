from unittest import mock

import pytest
from django.db import DatabaseError

from jobs.models import JobCard, JobProcess, JobProcessChange, SubJobCard
from machines.models import Process
from jobs.services import (
    ProfileNotFound,
    SubmissionError,
    resolve_machine,
    selected_process_names,
    split_machine_refs,
    submit_job,
)

DEFAULTS = {'Printing': 1, 'Sorting': 9}


class TestResolveMachine:
    def test_explicit_pairing_wins(self):
        pairings = [{'process': 'Printing', 'machine': 'M4'}]
        assert resolve_machine('Printing', pairings, ['M1'], DEFAULTS) == 'M4'

    def test_first_flat_id_when_no_pairing(self):
        pairings = [{'process': 'Printing', 'machine': 'M4'}]
        assert resolve_machine('Sorting', pairings, ['M2', 'M3'], DEFAULTS) == 'M2'

    def test_default_table(self):
        assert resolve_machine('Sorting', [], [], DEFAULTS) == '9'

    def test_nothing_resolves(self):
        assert resolve_machine('Foil', [], [], DEFAULTS) is None
        assert resolve_machine('Foil', None, None, None) is None

    def test_blank_entries_are_skipped(self):
        pairings = [{'process': 'Printing', 'machine': ''}]
        assert resolve_machine('Printing', pairings, ['', None, 'M5'], DEFAULTS) == 'M5'


def test_split_machine_refs():
    pairings, flat = split_machine_refs(['M1', {'process': 'Printing', 'machine': 'M2'}, 3])
    assert pairings == [{'process': 'Printing', 'machine': 'M2'}]
    assert flat == ['M1', 3]


def test_selected_process_names_keeps_true_flags():
    assert selected_process_names({'Printing': True, 'Foil': False, 'Sorting': True}) == ['Printing', 'Sorting']
    assert selected_process_names(None) == []


@pytest.mark.django_db
class TestSubmitJob:
    def test_j100_scenario(self, submitted_job, printing, sorting):
        assert submitted_job.job_id == 'J100'
        assert submitted_job.sub_jobs_count == 1
        assert submitted_job.processes_count == 2
        assert submitted_job.employee_code == 'ADM1'

        job = JobCard.objects.get(job_id='J100')
        assert job.job_code == submitted_job.job_code
        assert job.customer_name == 'Acme'
        assert str(job.required_date) == '2024-01-10'
        assert SubJobCard.objects.filter(job=job).count() == 1

        rows = {row.process_id: row for row in JobProcess.objects.filter(job=job)}
        assert set(rows) == {printing.pk, sorting.pk}
        assert rows[printing.pk].machine_id == 'M1'
        # No pairing for Sorting, so the first flat machine id applies.
        assert rows[sorting.pk].machine_id == 'M1'
        assert {row.status for row in rows.values()} == {'pending'}
        assert all(row.employee_code is None for row in rows.values())

    def test_row_counts_match_selection(self, admin_profile):
        result = submit_job({
            'user_uid': admin_profile.user_id,
            'job_id': 'J200',
            'customer_name': 'Beta Foods',
            'sub_jobs': [
                {'sub_job_id': '1', 'processes': {'Printing': True, 'Pasting': True, 'Sorting': True}},
                {'sub_job_id': '2', 'processes': {'Printing': True, 'Foil': False}},
                {'sub_job_id': '3', 'processes': {}},
            ],
        })
        assert result.sub_jobs_count == 3
        assert result.processes_count == 4
        assert JobCard.objects.filter(job_id='J200').count() == 1
        assert SubJobCard.objects.filter(job_id='J200').count() == 3
        assert JobProcess.objects.filter(job_id='J200').count() == 4

    def test_default_table_used_without_machine_ids(self, admin_profile, sorting):
        submit_job({
            'user_uid': admin_profile.user_id,
            'job_id': 'J201',
            'customer_name': 'Beta Foods',
            'sub_jobs': [{'sub_job_id': '1', 'processes': {'Sorting': True}}],
        }, default_table={'Sorting': 7})
        assert JobProcess.objects.get(job_id='J201').machine_id == '7'

    def test_no_sub_jobs(self, admin_profile):
        result = submit_job({'user_uid': admin_profile.user_id, 'job_id': 'J300', 'customer_name': 'Gamma'})
        assert (result.sub_jobs_count, result.processes_count) == (0, 0)
        assert JobCard.objects.filter(job_id='J300').exists()

    def test_created_by_is_the_user_account(self, django_user_model, make_profile):
        django_user_model.objects.create_user(username='spare', password='secret123')
        profile = make_profile('ADM7', role='admin')
        result = submit_job({'user_uid': profile.user_id, 'job_id': 'J302', 'customer_name': 'Gamma'})
        assert result.created_by == profile.user_id
        assert result.created_by != profile.pk
        assert JobCard.objects.get(job_id='J302').created_by == profile

    def test_unknown_process_is_skipped(self, admin_profile):
        result = submit_job({
            'user_uid': admin_profile.user_id,
            'job_id': 'J301',
            'customer_name': 'Gamma',
            'sub_jobs': [{'sub_job_id': '1', 'processes': {'Printing': True, 'Gilding': True}}],
        })
        assert result.processes_count == 1

    def test_missing_user_uid(self):
        with pytest.raises(SubmissionError) as excinfo:
            submit_job({'job_id': 'J400', 'customer_name': 'Delta'})
        assert excinfo.value.status == 400
        assert str(excinfo.value) == "User UID is required"

    def test_user_without_profile(self, django_user_model):
        user = django_user_model.objects.create_user(username='ghost', password='secret123')
        with pytest.raises(ProfileNotFound) as excinfo:
            submit_job({'user_uid': user.pk, 'job_id': 'J401', 'customer_name': 'Delta'})
        assert excinfo.value.status == 400
        assert str(excinfo.value) == "User profile not found"

    def test_duplicate_job_id(self, submitted_job, admin_profile):
        with pytest.raises(SubmissionError) as excinfo:
            submit_job({'user_uid': admin_profile.user_id, 'job_id': 'J100', 'customer_name': 'Acme'})
        assert excinfo.value.status == 500
        assert str(excinfo.value).startswith("Job card creation failed:")

    def test_duplicate_sub_job_rolls_back_job_card(self, admin_profile):
        with pytest.raises(SubmissionError) as excinfo:
            submit_job({
                'user_uid': admin_profile.user_id,
                'job_id': 'J500',
                'customer_name': 'Echo',
                'sub_jobs': [{'sub_job_id': '1'}, {'sub_job_id': '1'}],
            })
        assert str(excinfo.value).startswith("Sub job cards creation failed:")
        assert not JobCard.objects.filter(job_id='J500').exists()

    def test_process_insert_failure_leaves_nothing(self, admin_profile):
        with mock.patch.object(JobProcess.objects, 'bulk_create', side_effect=DatabaseError("boom")):
            with pytest.raises(SubmissionError) as excinfo:
                submit_job({
                    'user_uid': admin_profile.user_id,
                    'job_id': 'J600',
                    'customer_name': 'Foxtrot',
                    'sub_jobs': [{'sub_job_id': '1', 'processes': {'Printing': True}},
                                 {'sub_job_id': '2', 'processes': {'Sorting': True}}],
                })
        assert str(excinfo.value) == "Job processes creation failed: boom"
        assert not JobCard.objects.filter(job_id='J600').exists()
        assert not SubJobCard.objects.filter(job_id='J600').exists()
        assert not JobProcess.objects.filter(job_id='J600').exists()

    def test_catalog_lookup_failure_skips_only_that_sub_job(self, admin_profile):
        real_filter = Process.objects.filter
        lookups = []

        def flaky_filter(*args, **kwargs):
            lookups.append(kwargs)
            if len(lookups) == 1:
                raise DatabaseError("catalog unavailable")
            return real_filter(*args, **kwargs)

        with mock.patch.object(Process.objects, 'filter', side_effect=flaky_filter):
            result = submit_job({
                'user_uid': admin_profile.user_id,
                'job_id': 'J650',
                'customer_name': 'Hotel',
                'sub_jobs': [{'sub_job_id': '1', 'processes': {'Printing': True, 'Sorting': True}},
                             {'sub_job_id': '2', 'processes': {'Sorting': True}}],
            }, default_table=DEFAULTS)
        assert len(lookups) == 2
        assert (result.sub_jobs_count, result.processes_count) == (2, 1)
        assert JobCard.objects.filter(job_id='J650').exists()
        assert set(SubJobCard.objects.filter(job_id='J650').values_list('sub_job_id', flat=True)) == {'1', '2'}
        assert list(JobProcess.objects.filter(job_id='J650').values_list('sub_job_id', flat=True)) == ['2']

    def test_inserts_are_published(self, submitted_job):
        events = list(JobProcessChange.objects.filter(event='INSERT'))
        assert len(events) == 2
        assert {e.new['job_id'] for e in events} == {'J100'}


@pytest.mark.django_db
class TestSubmitJobApi:
    url = '/api/submit-job'

    def test_requires_session(self, client):
        response = client.post(self.url, data='{}', content_type='application/json')
        assert response.status_code == 401
        assert 'error' in response.json()

    def test_created(self, admin_client, admin_profile):
        body = {
            'user_uid': admin_profile.user_id,
            'job_id': 'J700',
            'customer_name': 'Golf',
            'start_date': '2024-02-01',
            'required_date': '2024-02-05',
            'sub_jobs': [{'sub_job_id': '1', 'processes': {'Printing': True}, 'machine_id': []}],
        }
        response = admin_client.post(self.url, data=body, content_type='application/json')
        assert response.status_code == 201
        data = response.json()
        assert data['message'] == "Job card created successfully with machine IDs"
        assert data['job_id'] == 'J700'
        assert data['sub_jobs_count'] == 1
        assert data['processes_count'] == 1
        assert data['created_by'] == admin_profile.user_id
        assert data['employee_code'] == 'ADM1'

    def test_created_without_sub_jobs(self, admin_client, admin_profile):
        body = {'user_uid': admin_profile.user_id, 'job_id': 'J701', 'customer_name': 'Golf'}
        response = admin_client.post(self.url, data=body, content_type='application/json')
        assert response.status_code == 201
        assert response.json()['message'] == "Job card created successfully (no sub jobs)"

    def test_missing_uid_is_400(self, admin_client):
        response = admin_client.post(self.url, data={'job_id': 'J702'}, content_type='application/json')
        assert response.status_code == 400
        assert response.json() == {'error': "User UID is required"}

    def test_invalid_json(self, admin_client):
        response = admin_client.post(self.url, data='not json', content_type='application/json')
        assert response.status_code == 400


@pytest.mark.django_db
def test_printing_jobs_groups_by_machine(admin_client, submitted_job, machine):
    response = admin_client.get('/api/printing-jobs')
    assert response.status_code == 200
    machines = response.json()['machines']
    assert len(machines) == 1
    assert machines[0]['id'] == 'M1'
    assert machines[0]['name'] == 'M1'
    assert {job['jobId'] for job in machines[0]['jobs']} == {'J100'}
    assert {job['status'] for job in machines[0]['jobs']} == {'pending'}


@pytest.mark.django_db
def test_printing_jobs_unknown_machine(admin_client, admin_profile):
    submit_job({
        'user_uid': admin_profile.user_id,
        'job_id': 'J800',
        'customer_name': 'Hotel',
        'sub_jobs': [{'sub_job_id': '1', 'processes': {'Printing': True}, 'machine_id': ['Z9']}],
    })
    machines = admin_client.get('/api/printing-jobs').json()['machines']
    assert machines == [{
        'id': 'Z9',
        'name': 'Unknown Machine',
        'jobs': [{'id': mock.ANY, 'jobId': 'J800', 'subJobId': '1', 'status': 'pending'}],
    }]
