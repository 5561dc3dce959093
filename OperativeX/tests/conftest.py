import pytest
from django.contrib.auth import get_user_model

from machines.models import Machine, Process
from users.models import Profile


@pytest.fixture
def make_profile(db):
    """Create a user plus profile; ``role='admin'`` gives an administrator."""
    User = get_user_model()

    def _make(code, *, role='worker', roles=None, full_name='', password='secret123'):
        user = User.objects.create_user(username=code, password=password, full_name=full_name)
        return Profile.objects.create(
            user=user,
            full_name=full_name or code,
            employee_code=code,
            role=role,
            roles=list(roles) if roles is not None else ['printing'],
        )
    return _make


@pytest.fixture
def admin_profile(make_profile):
    return make_profile('ADM1', role='admin', roles=[], full_name='Plant Admin')


@pytest.fixture
def worker_profile(make_profile):
    return make_profile('E007', roles=['printing', 'sorting'], full_name='Bilal Khan')


@pytest.fixture
def admin_client(client, admin_profile):
    client.force_login(admin_profile.user)
    return client


@pytest.fixture
def worker_client(client, worker_profile):
    client.force_login(worker_profile.user)
    return client


@pytest.fixture
def printing(db):
    return Process.objects.get(name='Printing')


@pytest.fixture
def sorting(db):
    return Process.objects.get(name='Sorting')


@pytest.fixture
def machine(db):
    return Machine.objects.create(name='M1', size='28x40', capacity=5000, available_days=6)


@pytest.fixture
def submitted_job(admin_profile, machine):
    """J100 with one sub-job selecting Printing and Sorting on machine M1."""
    from jobs.services import submit_job

    return submit_job({
        'user_uid': admin_profile.user_id,
        'job_id': 'J100',
        'customer_name': 'Acme',
        'start_date': '2024-01-01',
        'required_date': '2024-01-10',
        'sub_jobs': [{
            'sub_job_id': '1',
            'processes': {'Printing': True, 'Sorting': True},
            'machine_id': ['M1'],
        }],
    })
