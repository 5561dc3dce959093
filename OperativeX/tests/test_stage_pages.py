import pytest

from jobs.models import JobProcess
from jobs.services import submit_job
from machines.models import Machine

pytestmark = pytest.mark.django_db


class TestStagePage:
    def test_lists_printing_rows_with_machine_tabs(self, worker_client, submitted_job, machine):
        response = worker_client.get('/production_line/printing/')
        assert response.status_code == 200
        assert [r['job_id'] for r in response.context['rows']] == ['J100']
        assert response.context['machines'] == [{'id': machine.ref, 'name': 'M1', 'count': 1}]
        assert b'Acme' in response.content

    def test_machine_scope(self, worker_client, submitted_job):
        response = worker_client.get('/production_line/printing/', {'machine': 'M9'})
        assert response.context['rows'] == []

    def test_machine_tab_lists_rows_stored_by_name(self, worker_client, submitted_job, machine):
        response = worker_client.get('/production_line/printing/', {'machine': machine.ref})
        assert [r['job_id'] for r in response.context['rows']] == ['J100']
        assert response.context['current_machine'] == machine.ref

    def test_search_and_tab(self, worker_client, admin_profile, submitted_job):
        submit_job({'user_uid': admin_profile.user_id, 'job_id': 'K1', 'customer_name': 'Beta',
                    'sub_jobs': [{'sub_job_id': '1', 'processes': {'Sorting': True}}]})
        response = worker_client.get('/production_line/sorting/', {'q': 'beta'})
        assert [r['job_id'] for r in response.context['rows']] == ['K1']
        response = worker_client.get('/production_line/sorting/', {'tab': 'completed'})
        assert response.context['rows'] == []

    def test_lamination_variants(self, admin_client, admin_profile):
        submit_job({'user_uid': admin_profile.user_id, 'job_id': 'L1', 'customer_name': 'Gloss Co',
                    'sub_jobs': [{'sub_job_id': '1', 'processes': {'Lamination: Shine': True}}]})
        matte = admin_client.get('/production_line/lamination/')
        shine = admin_client.get('/production_line/lamination/', {'variant': 'shine'})
        assert matte.context['variant']['process_name'] == 'Lamination: Matte'
        assert matte.context['rows'] == []
        assert [r['job_id'] for r in shine.context['rows']] == ['L1']

    def test_unknown_stage(self, admin_client):
        assert admin_client.get('/production_line/welding/').status_code == 302


class TestCompleteApi:
    url = '/production_line/printing/api/complete/'

    def test_complete_marks_in_flight(self, worker_client, submitted_job, printing):
        response = worker_client.post(self.url, {'job_id': 'J100', 'sub_job_id': '1'},
                                      content_type='application/json')
        assert response.status_code == 200
        data = response.json()
        assert data['updated'] == 1
        assert data['rows'][0]['status'] == 'completed'
        assert data['rows'][0]['in_flight'] is True

        row = JobProcess.objects.get(job_id='J100', process=printing)
        assert (row.status, row.employee_code) == ('completed', 'E007')

        page = worker_client.get('/production_line/printing/')
        assert page.context['rows'][0]['in_flight'] is True
        assert b'Updating...' in page.content
        assert page.context['in_flight_ms'] == 3000
        assert b'data-in-flight-ms="3000"' in page.content
        assert b'data-in-flight>' in page.content

    def test_settled_page_has_no_in_flight_rows(self, worker_client, submitted_job):
        page = worker_client.get('/production_line/printing/')
        assert b'data-in-flight>' not in page.content

    def test_complete_from_machine_tab(self, worker_client, submitted_job, printing, machine):
        response = worker_client.post(self.url, {'job_id': 'J100', 'sub_job_id': '1', 'machine_id': machine.ref})
        assert response.status_code == 200
        assert response.json()['updated'] == 1
        assert JobProcess.objects.get(job_id='J100', process=printing).status == 'completed'

    def test_change_feed_clears_marker(self, worker_client, submitted_job):
        cursor = worker_client.get('/production_line/printing/').context['cursor']
        worker_client.post(self.url, {'job_id': 'J100', 'sub_job_id': '1'})
        feed = worker_client.get('/production_line/printing/api/changes/', {'since': cursor}).json()
        assert [c['event'] for c in feed['changes']] == ['UPDATE']
        items = worker_client.get('/production_line/printing/api/items/').json()
        assert items['rows'][0]['in_flight'] is False

    def test_missing_fields(self, worker_client, submitted_job):
        response = worker_client.post(self.url, {'job_id': 'J100'})
        assert response.status_code == 400

    def test_unknown_item(self, worker_client, submitted_job):
        response = worker_client.post(self.url, {'job_id': 'NOPE', 'sub_job_id': '1'})
        assert response.status_code == 404
        assert response.json() == {'error': "Work item not found."}

    def test_worker_without_role(self, client, make_profile, submitted_job):
        paster = make_profile('E500', roles=['pasting'])
        client.force_login(paster.user)
        response = client.post(self.url, {'job_id': 'J100', 'sub_job_id': '1'})
        assert response.status_code == 302
        assert JobProcess.objects.filter(job_id='J100', status='completed').count() == 0


class TestJobFormPage:
    url = '/jobs/new/'

    def _post(self, client, **overrides):
        data = {
            'job_id': 'J910',
            'customer_name': 'Kilo Sweets',
            'start_date': '2024-03-01',
            'required_date': '2024-03-05',
            'sub_jobs-TOTAL_FORMS': '1',
            'sub_jobs-INITIAL_FORMS': '0',
            'sub_jobs-MIN_NUM_FORMS': '0',
            'sub_jobs-MAX_NUM_FORMS': '1000',
            'sub_jobs-0-sub_job_id': '1',
            'sub_jobs-0-color': 'CMYK',
            'sub_jobs-0-processes': ['Printing', 'Pasting'],
        }
        data.update(overrides)
        return client.post(self.url, data)

    def test_submit(self, admin_client, machine, printing):
        response = self._post(admin_client, **{'sub_jobs-0-machines': [str(machine.pk)]})
        assert response.status_code == 302
        assert JobProcess.objects.filter(job_id='J910').count() == 2
        assert set(JobProcess.objects.filter(job_id='J910').values_list('machine_id', flat=True)) == {machine.ref}

    def test_first_machine_applies_to_every_process(self, admin_client, machine, printing):
        press = Machine.objects.create(name='A-press', size='35x50', capacity=3000, available_days=5)
        response = self._post(admin_client, **{'sub_jobs-0-machines': [str(machine.pk), str(press.pk)]})
        assert response.status_code == 302
        pasting = JobProcess.objects.get(job_id='J910', process__name='Pasting')
        assert pasting.machine_id == press.ref
        assert JobProcess.objects.get(job_id='J910', process=printing).machine_id == press.ref

    def test_required_date_before_start(self, admin_client):
        response = self._post(admin_client, required_date='2024-02-01')
        assert response.status_code == 200
        assert response.context['form'].errors['required_date'] == [
            "Required date cannot be before the start date."
        ]
        assert not JobProcess.objects.filter(job_id='J910').exists()

    def test_needs_a_sub_job(self, admin_client):
        response = self._post(admin_client, **{
            'sub_jobs-0-sub_job_id': '', 'sub_jobs-0-color': '', 'sub_jobs-0-processes': [],
        })
        assert response.status_code == 200
        assert "Add at least one sub job." in str(response.context["formset"].non_form_errors())

    def test_worker_is_turned_away(self, worker_client):
        assert worker_client.get(self.url).status_code == 302
