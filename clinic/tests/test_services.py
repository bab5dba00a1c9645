import datetime
from decimal import Decimal

import pytest
from django.db.models import ProtectedError

from clinic.exceptions import IdentifierConflict, PatientHasRecords
from clinic.models import Appointment, LabTest, Patient, Transaction
from clinic.services import appointments as appointment_service
from clinic.services import dashboard as dashboard_service
from clinic.services import doctors as doctor_service
from clinic.services import identifiers
from clinic.services import lab_tests as lab_service
from clinic.services import patients as patient_service
from clinic.services import transactions as txn_service
from clinic.services.identifiers import create_with_identifiers

pytestmark = pytest.mark.django_db

PATIENT = {'first_name': 'Grace', 'last_name': 'Hopper', 'phone': '555-0199', 'gender': 'Female'}


def register(**extra):
    return patient_service.create_patient(**{**PATIENT, **extra})


def test_mr_numbers_are_sequential_for_the_year():
    year = identifiers.current_year()
    numbers = [register().mr_number for _ in range(3)]
    assert numbers == [f'MR{year}-00000{i}' for i in (1, 2, 3)]
    assert patient_service.generate_mr_number() == f'MR{year}-000004'


def test_supplied_mr_number_is_kept():
    assert register(mr_number='MR2019-000123').mr_number == 'MR2019-000123'


def test_numbering_restarts_each_year():
    create_with_identifiers(Patient, {'mr_number': 'MR'}, dict(PATIENT), year=2023)
    create_with_identifiers(Patient, {'mr_number': 'MR'}, dict(PATIENT), year=2023)
    p = create_with_identifiers(Patient, {'mr_number': 'MR'}, dict(PATIENT), year=2024)
    assert p.mr_number == 'MR2024-000001'
    assert identifiers.next_identifier(Patient, 'mr_number', 'MR', year=2023) == 'MR2023-000003'


def test_malformed_stored_number_restarts_at_one():
    year = identifiers.current_year()
    register(mr_number=f'MR{year}-legacy')
    assert register().mr_number == f'MR{year}-000001'


def test_deactivated_records_keep_their_numbers():
    first = register()
    patient_service.patients.deactivate(first.pk)
    second = register()
    assert second.mr_number != first.mr_number
    assert identifiers.parse_sequence(second.mr_number) == 2


def test_generated_collision_is_retried(monkeypatch, caplog):
    taken = register()
    real = identifiers.next_identifier
    calls = []

    def stale_then_real(model, field, prefix, year=None):
        calls.append(field)
        return taken.mr_number if len(calls) == 1 else real(model, field, prefix, year)

    monkeypatch.setattr(identifiers, 'next_identifier', stale_then_real)
    p = register()
    assert len(calls) == 2
    assert identifiers.parse_sequence(p.mr_number) == identifiers.parse_sequence(taken.mr_number) + 1
    assert 'retrying' in caplog.text


def test_exhausted_retries_raise_conflict(monkeypatch):
    taken = register()
    monkeypatch.setattr(identifiers, 'next_identifier', lambda *a, **kw: taken.mr_number)
    with pytest.raises(IdentifierConflict):
        create_with_identifiers(Patient, {'mr_number': 'MR'}, dict(PATIENT), attempts=2)
    assert Patient.objects.count() == 1


def test_supplied_duplicate_raises_conflict():
    taken = register()
    with pytest.raises(IdentifierConflict) as exc:
        register(mr_number=taken.mr_number)
    assert taken.mr_number in str(exc.value.detail)


def test_update_cannot_change_mr_number():
    p = register()
    original = p.mr_number
    patient_service.update_patient(p, mr_number='MR1999-000001', city='Arlington')
    p.refresh_from_db()
    assert p.mr_number == original
    assert p.city == 'Arlington'


def test_patient_with_records_cannot_be_deleted(today):
    p = register()
    appointment_service.create_appointment(patient=p, appointment_date=today, appointment_time=datetime.time(9))
    with pytest.raises(PatientHasRecords):
        patient_service.delete_patient(p.pk)
    with pytest.raises(ProtectedError):
        p.delete()
    assert Patient.objects.filter(pk=p.pk).exists()


def test_patient_without_records_is_deleted():
    p = register()
    patient_service.delete_patient(p.pk)
    assert not Patient.objects.filter(pk=p.pk).exists()


def test_transaction_numbers_and_total(patient):
    year = identifiers.current_year()
    txn_service.create_transaction(patient=patient, amount=Decimal('50.00'), invoice_number=f'INV{year}-000007')
    txn = txn_service.create_transaction(patient=patient, amount=Decimal('120.00'), discount=Decimal('20.00'))
    assert txn.transaction_number == f'TXN{year}-000002'
    assert txn.invoice_number == f'INV{year}-000008'
    assert txn.total_amount == Decimal('100.00')

    txn = txn_service.update_transaction(txn, discount=None, transaction_number='TXN1999-000001')
    txn.refresh_from_db()
    assert txn.total_amount == Decimal('120.00')
    assert txn.transaction_number == f'TXN{year}-000002'


def test_each_record_kind_has_its_own_series(patient, category, today):
    year = identifiers.current_year()
    a = appointment_service.create_appointment(patient=patient, appointment_date=today,
                                               appointment_time=datetime.time(10))
    t = lab_service.create_lab_test(patient=patient, category=category, test_name='CBC', test_date=today)
    assert a.appointment_number == f'APT{year}-000001'
    assert t.test_number == f'LAB{year}-000001'
    assert appointment_service.generate_appointment_number() == f'APT{year}-000002'


def test_record_notification(patient, today):
    a = appointment_service.create_appointment(patient=patient, appointment_date=today,
                                               appointment_time=datetime.time(11))
    a = appointment_service.record_notification(a.pk, 'SMS')
    assert a.sms_notification_sent and not a.whatsapp_notification_sent
    assert a.notification_sent_at is not None

    a = appointment_service.record_notification(a.pk, 'carrier-pigeon')
    assert not a.whatsapp_notification_sent

    assert appointment_service.record_notification(999999, 'sms') is None


def test_doctor_revenue_counts_paid_transactions(patient, doctor, today):
    a = appointment_service.create_appointment(patient=patient, doctor=doctor, appointment_date=today,
                                               appointment_time=datetime.time(12))
    txn_service.create_transaction(patient=patient, appointment=a, amount=Decimal('80'), status=Transaction.STATUS_PAID)
    txn_service.create_transaction(patient=patient, appointment=a, amount=Decimal('30'))
    assert doctor_service.doctor_total_revenue(doctor.id) == Decimal('80')
    assert doctor_service.doctor_appointment_count(doctor.id) == 1


def test_schedule_end_must_follow_start(doctor):
    from rest_framework.exceptions import ValidationError
    with pytest.raises(ValidationError):
        doctor_service.add_schedule(doctor, day_of_week=1, start_time=datetime.time(17), end_time=datetime.time(9))


def test_dashboard_summary(patient, category, today):
    appointment_service.create_appointment(patient=patient, appointment_date=today, appointment_time=datetime.time(8))
    lab_service.create_lab_test(patient=patient, category=category, test_name='CBC', test_date=today,
                                status=LabTest.STATUS_COMPLETED)
    txn_service.create_transaction(patient=patient, amount=Decimal('40'), discount=Decimal('5'),
                                   status=Transaction.STATUS_PAID)

    summary = dashboard_service.cached_summary()
    assert summary['totalPatients'] == 1
    assert summary['totalAppointments'] == 1
    assert summary['totalLabReports'] == 1
    assert summary['totalRevenue'] == Decimal('35')

    register()
    assert dashboard_service.cached_summary()['totalPatients'] == 1
    dashboard_service.invalidate_summary()
    assert dashboard_service.cached_summary()['totalPatients'] == 2

    rows = dashboard_service.daily_appointments(today)
    assert rows[0]['doctorName'] == 'Not Assigned'
    assert rows[0]['appointmentNumber'].startswith('APT')
    assert Appointment.objects.count() == 1


def test_ensure_default_users_is_idempotent():
    from django.core.management import call_command
    from django.core.management.base import CommandError
    from clinic.models import User

    with pytest.raises(CommandError):
        call_command('ensure_default_users', password='short')
    call_command('ensure_default_users', password='Str0ng-Passw0rd')
    call_command('ensure_default_users', password='Str0ng-Passw0rd')
    assert sorted(User.objects.values_list('role', flat=True)) == sorted(
        ['admin', 'doctor', 'nurse', 'lab_staff', 'receptionist'])
    assert User.objects.get(username='admin').check_password('Str0ng-Passw0rd')


def test_refresh_dashboard_rebuilds_cache(patient):
    from django.core.cache import cache
    from django.core.management import call_command

    cache.set(dashboard_service.SUMMARY_CACHE_KEY, {'totalPatients': 99}, 60)
    call_command('refresh_dashboard')
    assert cache.get(dashboard_service.SUMMARY_CACHE_KEY)['totalPatients'] == 1


def test_mysql_connections_read_committed_rows(monkeypatch):
    from medical import settings as project_settings

    monkeypatch.setenv('MYSQL_NAME', 'medical')
    monkeypatch.setenv('MYSQL_USER', 'clinic')
    assert project_settings._database()['OPTIONS']['isolation_level'] == 'read committed'

    monkeypatch.delenv('MYSQL_NAME')
    monkeypatch.delenv('DB_NAME', raising=False)
    monkeypatch.setenv('DATABASE_URL', 'mysql://clinic:secret@db:3306/medical')
    assert project_settings._database()['OPTIONS']['isolation_level'] == 'read committed'


def test_save_with_identifiers_numbers_an_unsaved_record(patient):
    year = identifiers.current_year()
    txn = Transaction(patient=patient, amount=Decimal('10'),
                      transaction_date=datetime.datetime(2024, 5, 1, 9, 30, tzinfo=datetime.timezone.utc))
    identifiers.save_with_identifiers(txn, txn_service.NUMBER_FIELDS)
    assert txn.pk is not None
    assert (txn.transaction_number, txn.invoice_number) == (f'TXN{year}-000001', f'INV{year}-000001')


def test_lab_report_upload_path_keeps_extension(today):
    from clinic.models import _report_upload

    path = _report_upload(None, 'scan results.PDF')
    assert path.startswith(f"lab-reports/{today.strftime('%Y/%m')}/")
    assert path.endswith('.PDF')
    assert ' ' not in path
