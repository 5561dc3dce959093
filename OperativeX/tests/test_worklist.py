import pytest

from production_line.services import EmployeeCodeMissing, WorkItemError
from production_line.worklist import WorkList


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_rows():
    return [
        {'id': 1, 'job_id': 'J1', 'sub_job_id': '1', 'machine_id': 'M1', 'status': 'pending',
         'employee_code': None, 'customer_name': 'Acme'},
        {'id': 2, 'job_id': 'J2', 'sub_job_id': '1', 'machine_id': 'M2', 'status': 'pending',
         'employee_code': None, 'customer_name': 'Beta'},
    ]


class FakeStore:
    def __init__(self):
        self.rows = make_rows()
        self.fail = False
        self.calls = []

    def fetch(self, process_id, machine_id=None):
        return [dict(r) for r in self.rows if machine_id is None or r['machine_id'] == machine_id]

    def complete(self, process_id, job_id, sub_job_id, employee_code, machine_id=None):
        self.calls.append((process_id, job_id, sub_job_id, employee_code, machine_id))
        if self.fail:
            raise WorkItemError("write failed")
        count = 0
        for row in self.rows:
            if row['job_id'] == job_id and row['sub_job_id'] == sub_job_id:
                row.update(status='completed', employee_code=employee_code)
                count += 1
        return count


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def clock():
    return FakeClock()


def make_worklist(store, clock, **kwargs):
    kwargs.setdefault('employee_code', 'E007')
    wl = WorkList(7, fetch=store.fetch, complete=store.complete, clock=clock, in_flight_seconds=3, **kwargs)
    wl.refresh()
    return wl


def test_complete_marks_row_and_sets_marker(store, clock):
    wl = make_worklist(store, clock)
    assert wl.complete('J1', '1') == 1
    assert store.calls == [(7, 'J1', '1', 'E007', None)]
    row = next(r for r in wl.rows if r['job_id'] == 'J1')
    assert row['status'] == 'completed'
    assert wl.is_in_flight('J1', '1')


def test_marker_expires(store, clock):
    wl = make_worklist(store, clock)
    wl.complete('J1', '1')
    clock.now += 2.9
    assert wl.is_in_flight('J1', '1')
    clock.now += 0.2
    assert not wl.is_in_flight('J1', '1')
    assert wl.markers == {}


def test_failed_write_reverts_by_refetch(store, clock):
    wl = make_worklist(store, clock)
    store.fail = True
    with pytest.raises(WorkItemError):
        wl.complete('J1', '1')
    row = next(r for r in wl.rows if r['job_id'] == 'J1')
    assert row['status'] == 'pending'
    assert not wl.is_in_flight('J1', '1')


def test_optimistic_update_happens_before_write(store, clock):
    wl = make_worklist(store, clock)
    seen = []

    def complete(process_id, job_id, sub_job_id, employee_code, machine_id=None):
        seen.append(next(r['status'] for r in wl.rows if r['job_id'] == job_id))
        return store.complete(process_id, job_id, sub_job_id, employee_code, machine_id=machine_id)

    wl._complete = complete
    wl.complete('J2', '1')
    assert seen == ['completed']


def test_employee_code_resolved_lazily(store, clock):
    lookups = []

    def resolve():
        lookups.append(1)
        return 'E099'

    wl = make_worklist(store, clock, employee_code=None, resolve_employee_code=resolve)
    assert lookups == []
    wl.complete('J1', '1')
    wl.complete('J2', '1')
    assert lookups == [1]
    assert store.calls[0][3] == 'E099'


def test_missing_employee_code(store, clock):
    wl = make_worklist(store, clock, employee_code=None, resolve_employee_code=lambda: None)
    with pytest.raises(EmployeeCodeMissing):
        wl.complete('J1', '1')
    assert store.calls == []


def test_stale_refresh_is_dropped(store, clock):
    wl = make_worklist(store, clock)
    old = wl.begin_refresh()
    new = wl.begin_refresh()
    assert wl.apply_refresh(new, [{'job_id': 'fresh'}])
    assert not wl.apply_refresh(old, [{'job_id': 'stale'}])
    assert wl.rows == [{'job_id': 'fresh'}]


def test_change_notification_clears_marker(store, clock):
    wl = make_worklist(store, clock)
    wl.complete('J1', '1')
    store.rows[1]['status'] = 'completed'
    wl.handle_change({'event': 'UPDATE', 'new': {'job_id': 'J1', 'sub_job_id': '1', 'machine_id': 'M1'}})
    assert not wl.is_in_flight('J1', '1')
    assert [r['status'] for r in wl.rows] == ['completed', 'completed']


def test_machine_scoped_marker_matches_any_machine_row(store, clock):
    wl = make_worklist(store, clock, machine_id='M1')
    assert [r['job_id'] for r in wl.rows] == ['J1']
    wl.complete('J1', '1')
    assert store.calls[0][4] == 'M1'
    assert wl.is_in_flight('J1', '1', 'M1')


def test_visible_filters_and_flags(store, clock):
    wl = make_worklist(store, clock)
    wl.complete('J1', '1')
    pending = wl.visible('pending')
    assert [r['job_id'] for r in pending] == ['J2']
    assert pending[0]['in_flight'] is False
    completed = wl.visible('completed', 'acme')
    assert [r['job_id'] for r in completed] == ['J1']
    assert completed[0]['in_flight'] is True


def test_scope_by_machine_id_covers_rows_stored_by_name(store, clock):
    seen = []

    def fetch(process_id, machine_id=None):
        return [dict(r) for r in store.rows if r['machine_id'] == 'M1']

    def complete(process_id, job_id, sub_job_id, employee_code, machine_id=None):
        seen.append(next(r['status'] for r in wl.rows if r['job_id'] == job_id))
        return store.complete(process_id, job_id, sub_job_id, employee_code, machine_id=machine_id)

    wl = WorkList(7, '4', employee_code='E007', fetch=fetch, complete=complete, clock=clock,
                  in_flight_seconds=3, machine_refs={'4', 'M1'})
    wl.refresh()
    wl.complete('J1', '1')
    assert seen == ['completed']
    assert store.calls[0][4] == '4'
    assert wl.is_in_flight('J1', '1', 'M1')
    wl.handle_change({'event': 'UPDATE', 'new': {'job_id': 'J1', 'sub_job_id': '1', 'machine_id': 'M1'}},
                     refresh=False)
    assert not wl.is_in_flight('J1', '1', 'M1')
