import pytest
from django.utils import timezone

from jobs.models import JobProcess
from machines.models import Machine
from production_line.services import (
    EmployeeCodeMissing,
    WorkItemNotFound,
    complete_record,
    complete_work_item,
    filter_by_status,
    list_work_items,
    machine_counts,
    search_work_items,
    undo_work_item,
)

pytestmark = pytest.mark.django_db


def test_list_work_items_attaches_customer(submitted_job, printing):
    rows = list_work_items(printing.pk)
    assert len(rows) == 1
    assert rows[0]['job_id'] == 'J100'
    assert rows[0]['customer_name'] == 'Acme'
    assert rows[0]['status'] == 'pending'


def test_list_work_items_machine_scope(submitted_job, printing):
    assert len(list_work_items(printing.pk, 'M1')) == 1
    assert list_work_items(printing.pk, 'M2') == []


def test_machine_scope_by_id_finds_rows_stored_by_name(submitted_job, printing, machine):
    rows = list_work_items(printing.pk, machine.ref)
    assert [row['job_id'] for row in rows] == ['J100']
    assert rows[0]['machine_id'] == 'M1'


def test_complete_by_machine_id_matches_row_stored_by_name(submitted_job, printing, machine):
    assert complete_work_item(printing.pk, 'J100', '1', 'E007', machine_id=machine.ref) == 1
    assert JobProcess.objects.get(job_id='J100', process=printing).status == 'completed'


def test_complete_e007(submitted_job, printing, sorting):
    before = timezone.now()
    updated = complete_work_item(printing.pk, 'J100', '1', 'E007')
    assert updated == 1

    done = JobProcess.objects.get(job_id='J100', process=printing)
    assert done.status == 'completed'
    assert done.employee_code == 'E007'
    assert done.updated_at >= before

    untouched = JobProcess.objects.get(job_id='J100', process=sorting)
    assert untouched.status == 'pending'
    assert untouched.employee_code is None


def test_complete_again_overwrites_completer(submitted_job, printing):
    complete_work_item(printing.pk, 'J100', '1', 'E007')
    first = JobProcess.objects.get(job_id='J100', process=printing).updated_at
    complete_work_item(printing.pk, 'J100', '1', 'E010')
    row = JobProcess.objects.get(job_id='J100', process=printing)
    assert row.status == 'completed'
    assert row.employee_code == 'E010'
    assert row.updated_at >= first


def test_complete_requires_employee_code(submitted_job, printing):
    with pytest.raises(EmployeeCodeMissing) as excinfo:
        complete_work_item(printing.pk, 'J100', '1', '')
    assert "Could not identify your employee code" in str(excinfo.value)


def test_complete_unknown_item(printing):
    with pytest.raises(WorkItemNotFound):
        complete_work_item(printing.pk, 'NOPE', '1', 'E007')


def test_undo_then_complete(submitted_job, printing):
    record = JobProcess.objects.get(job_id='J100', process=printing)
    complete_record(record.pk, 'E007')
    undo_work_item(record.pk)
    record.refresh_from_db()
    assert record.status == 'pending'
    assert record.employee_code is None

    complete_record(record.pk, 'E011')
    record.refresh_from_db()
    assert record.status == 'completed'
    assert record.employee_code == 'E011'


def test_undo_missing_record():
    with pytest.raises(WorkItemNotFound):
        undo_work_item(999999)


def test_search_is_case_insensitive_on_job_or_customer():
    rows = [
        {'job_id': 'J100', 'customer_name': 'Acme Packaging'},
        {'job_id': 'K200', 'customer_name': 'Beta'},
    ]
    assert [r['job_id'] for r in search_work_items(rows, 'acme')] == ['J100']
    assert [r['job_id'] for r in search_work_items(rows, 'k2')] == ['K200']
    assert search_work_items(rows, '') == rows
    assert search_work_items(rows, '   ') == rows


def test_filter_by_status():
    rows = [{'status': 'pending'}, {'status': 'completed'}]
    assert filter_by_status(rows, 'pending') == [{'status': 'pending'}]
    assert filter_by_status(rows, 'completed') == [{'status': 'completed'}]
    assert filter_by_status(rows, 'all') == rows
    assert filter_by_status(rows, 'bogus') == rows


def test_machine_counts_by_id_and_name():
    m1 = Machine.objects.create(name='Heidelberg')
    m2 = Machine.objects.create(name='Komori')
    rows = [
        {'machine_id': m1.ref},
        {'machine_id': 'Heidelberg'},
        {'machine_id': m2.ref},
        {'machine_id': None},
    ]
    counts = machine_counts(rows, Machine.objects.order_by('name'))
    assert counts == [
        {'id': m1.ref, 'name': 'Heidelberg', 'count': 2},
        {'id': m2.ref, 'name': 'Komori', 'count': 1},
    ]
