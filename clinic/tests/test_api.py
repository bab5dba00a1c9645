"""
Integration tests for the medical management API.

These exercise authentication, role based access, record numbering over
HTTP and the error envelope, using Django REST Framework's APIClient.
"""
import datetime
from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework.test import APIClient, APITestCase
from rest_framework import status

from clinic.models import Appointment, AuditEvent, Doctor, LabTestCategory, Patient, Transaction, User
from clinic.services.identifiers import current_year

PATIENT = {'firstName': 'Ada', 'lastName': 'Lovelace', 'phone': '555-0100', 'gender': 'Female'}


class PatientAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(username='admin1', password='P@ssw0rd1', role='admin')
        self.receptionist = User.objects.create_user(username='desk1', password='P@ssw0rd1', role='receptionist')
        self.nurse = User.objects.create_user(username='nurse1', password='P@ssw0rd1', role='nurse')

    def authenticate(self, user: User) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def test_anonymous_is_rejected(self):
        response = APIClient().get('/api/patients')
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_register_issues_mr_number(self):
        client = self.authenticate(self.receptionist)
        first = client.post('/api/patients', PATIENT, format='json')
        second = client.post('/api/patients', {**PATIENT, 'firstName': 'Charles'}, format='json')
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        year = current_year()
        self.assertEqual(first.data['mrNumber'], f'MR{year}-000001')
        self.assertEqual(second.data['mrNumber'], f'MR{year}-000002')
        self.assertTrue(AuditEvent.objects.filter(action='patient_create').exists())

        preview = client.get('/api/patients/next-number')
        self.assertEqual(preview.data['mrNumber'], f'MR{year}-000003')

    def test_duplicate_mr_number_is_conflict(self):
        client = self.authenticate(self.receptionist)
        client.post('/api/patients', {**PATIENT, 'mrNumber': 'MR2024-000010'}, format='json')
        response = client.post('/api/patients', {**PATIENT, 'mrNumber': 'MR2024-000010'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data['ok'])
        self.assertEqual(response.data['error']['code'], 'identifier_conflict')
        self.assertEqual(Patient.objects.count(), 1)

    def test_validation_error_envelope(self):
        client = self.authenticate(self.receptionist)
        response = client.post('/api/patients', {'firstName': 'Ada'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['ok'])
        self.assertIn('phone', response.data['error']['message'])

    def test_mr_number_cannot_be_edited(self):
        client = self.authenticate(self.receptionist)
        created = client.post('/api/patients', PATIENT, format='json').data
        response = client.patch(f"/api/patients/{created['id']}", {'mrNumber': 'MR1999-000001', 'city': 'London'},
                                format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['mrNumber'], created['mrNumber'])
        self.assertEqual(response.data['city'], 'London')

    def test_lookup_by_mr_number(self):
        client = self.authenticate(self.nurse)
        Patient.objects.create(mr_number='MR2024-000005', first_name='Ada', last_name='L', phone='1', gender='Female')
        self.assertEqual(client.get('/api/patients/by-mr/MR2024-000005').data['firstName'], 'Ada')
        self.assertEqual(client.get('/api/patients/by-mr/MR2024-999999').status_code, status.HTTP_404_NOT_FOUND)

    def test_only_admin_deletes_patients(self):
        patient = Patient.objects.create(mr_number='MR2024-000001', first_name='A', last_name='B', phone='1',
                                         gender='Male')
        response = self.authenticate(self.receptionist).delete(f'/api/patients/{patient.id}')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.authenticate(self.admin).delete(f'/api/patients/{patient.id}')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_delete_with_records_is_conflict(self):
        patient = Patient.objects.create(mr_number='MR2024-000001', first_name='A', last_name='B', phone='1',
                                         gender='Male')
        Appointment.objects.create(appointment_number='APT2024-000001', patient=patient,
                                   appointment_date=datetime.date(2024, 3, 1), appointment_time=datetime.time(9))
        response = self.authenticate(self.admin).delete(f'/api/patients/{patient.id}')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['code'], 'patient_has_records')


pytestmark = pytest.mark.django_db


def test_login_returns_jwt_and_legacy_token():
    client = APIClient()
    User.objects.create_user(username='u_jwt', password='P@ssw0rd1', role='doctor')
    r = client.post(reverse('login_view'), {'username': 'u_jwt', 'password': 'P@ssw0rd1', 'role': 'admin'},
                    format='json')
    assert r.status_code == 200
    assert r.data['jwt_access'] and r.data['jwt_refresh'] and r.data['token']
    assert r.data['role'] == 'doctor'

    client.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
    assert client.get('/api/patients').status_code == 200
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['jwt_access']}")
    assert client.get('/api/doctors').status_code == 200


def test_bad_login_is_rejected():
    User.objects.create_user(username='u1', password='P@ssw0rd1', role='nurse')
    r = APIClient().post(reverse('login_view'), {'username': 'u1', 'password': 'wrong'}, format='json')
    assert r.status_code == 400
    assert AuditEvent.objects.filter(action='login', detail__result='fail').exists()


def test_doctor_writes_are_admin_only(client_for):
    payload = {'firstName': 'Gregory', 'lastName': 'House', 'specialization': 'Diagnostics'}
    assert client_for('doctor').post('/api/doctors', payload, format='json').status_code == 403
    r = client_for('admin').post('/api/doctors', payload, format='json')
    assert r.status_code == 201
    assert Doctor.objects.filter(last_name='House').exists()


def test_doctor_list_refreshes_after_write(client_for, doctor):
    admin = client_for('admin')
    assert len(admin.get('/api/doctors').data['data']) == 1
    admin.post('/api/doctors', {'firstName': 'James', 'lastName': 'Wilson'}, format='json')
    assert len(admin.get('/api/doctors').data['data']) == 2


def test_doctor_schedule(client_for, doctor):
    admin = client_for('admin')
    r = admin.post(f'/api/doctors/{doctor.id}/schedules',
                   {'dayOfWeek': 0, 'startTime': '09:00', 'endTime': '13:00'}, format='json')
    assert r.status_code == 201
    assert r.data['day'] == 'Monday'
    bad = admin.post(f'/api/doctors/{doctor.id}/schedules',
                     {'dayOfWeek': 1, 'startTime': '13:00', 'endTime': '09:00'}, format='json')
    assert bad.status_code == 400


def test_appointment_booking_and_notify(client_for, patient, doctor):
    desk = client_for('receptionist')
    r = desk.post('/api/appointments', {
        'patientId': patient.id, 'doctorId': doctor.id,
        'appointmentDate': '2024-05-02', 'appointmentTime': '10:30',
    }, format='json')
    assert r.status_code == 201
    assert r.data['appointmentNumber'] == f'APT{current_year()}-000001'

    n = desk.post(f"/api/appointments/{r.data['id']}/notify", {'type': 'whatsapp'}, format='json')
    assert n.status_code == 200
    assert n.data['whatsAppNotificationSent'] is True
    assert desk.post('/api/appointments/999999/notify', {'type': 'sms'}, format='json').status_code == 404

    listed = desk.get('/api/appointments', {'date': '2024-05-02'})
    assert [a['id'] for a in listed.data['data']] == [r.data['id']]
    assert desk.get('/api/appointments', {'date': 'May 2nd'}).status_code == 400


def test_procedures_are_doctor_or_admin(client_for, patient, doctor):
    payload = {'patientId': patient.id, 'doctorId': doctor.id, 'procedureName': 'Suture',
               'procedureDate': '2024-05-02'}
    assert client_for('nurse').post('/api/procedures', payload, format='json').status_code == 403
    r = client_for('doctor').post('/api/procedures', payload, format='json')
    assert r.status_code == 201
    assert r.data['procedureNumber'].startswith(f'PROC{current_year()}-')

    rx = client_for('admin').post('/api/prescriptions', {
        'patientId': patient.id, 'procedureId': r.data['id'], 'prescriptionDate': '2024-05-02',
        'medications': 'Amoxicillin 500mg',
    }, format='json')
    assert rx.status_code == 201
    detail = client_for('nurse').get(f"/api/procedures/{r.data['id']}")
    assert detail.data['prescriptions'][0]['medications'] == 'Amoxicillin 500mg'


def test_lab_tests_are_staff_only(client_for, patient, category):
    payload = {'patientId': patient.id, 'categoryId': category.id, 'testName': 'CBC', 'testDate': '2024-05-02'}
    assert client_for('receptionist').post('/api/lab-tests', payload, format='json').status_code == 403
    r = client_for('lab_staff').post('/api/lab-tests', payload, format='json')
    assert r.status_code == 201
    assert r.data['testNumber'] == f'LAB{current_year()}-000001'
    assert r.data['categoryName'] == category.name


def test_transactions(client_for, patient):
    desk = client_for('receptionist')
    r = desk.post('/api/transactions', {'patientId': patient.id, 'amount': '150.00', 'discount': '25.00',
                                        'status': 'Paid'}, format='json')
    assert r.status_code == 201
    year = current_year()
    assert r.data['transactionNumber'] == f'TXN{year}-000001'
    assert r.data['invoiceNumber'] == f'INV{year}-000001'
    assert Decimal(str(r.data['totalAmount'])) == Decimal('125.00')

    too_much = desk.patch(f"/api/transactions/{r.data['id']}", {'discount': '500.00'}, format='json')
    assert too_much.status_code == 400

    assert desk.delete(f"/api/transactions/{r.data['id']}").status_code == 403
    assert client_for('admin').delete(f"/api/transactions/{r.data['id']}").status_code == 204
    assert not Transaction.objects.exists()


def test_dashboard(client_for, patient):
    client = client_for('nurse')
    summary = client.get('/api/dashboard')
    assert summary.status_code == 200
    assert summary.data['data']['totalPatients'] == 1

    client_for('receptionist').post('/api/patients', PATIENT, format='json')
    assert client.get('/api/dashboard').data['data']['totalPatients'] == 2

    monthly = client.get('/api/dashboard/monthly', {'month': 13})
    assert monthly.status_code == 400
    daily = client.get('/api/dashboard/daily', {'date': '2024-05-02'})
    assert daily.data['data'] == []


def test_staff_directories(client_for):
    admin = client_for('admin')
    assert admin.post('/api/nurses', {'firstName': 'Florence', 'lastName': 'N', 'department': 'ICU'},
                      format='json').status_code == 201
    assert client_for('nurse').post('/api/lab-categories', {'name': 'X'}, format='json').status_code == 403
    admin.post('/api/lab-categories', {'name': 'Serology'}, format='json')
    assert LabTestCategory.objects.filter(name='Serology').exists()
    assert client_for('doctor').get('/api/nurses', {'department': 'ICU'}).data['data'][0]['firstName'] == 'Florence'


def test_healthz(db):
    r = APIClient().get('/healthz')
    assert r.status_code == 200
    assert r.json()['db'] is True


def test_refresh_and_logout():
    client = APIClient()
    User.objects.create_user(username='u_out', password='P@ssw0rd1', role='receptionist')
    login = client.post(reverse('login_view'), {'username': 'u_out', 'password': 'P@ssw0rd1'}, format='json').data

    refreshed = client.post(reverse('jwt_refresh_view'), {'refresh': login['jwt_refresh']}, format='json')
    assert refreshed.status_code == 200
    assert refreshed.data['jwt_access']
    assert client.post(reverse('jwt_refresh_view'), {'refresh': 'garbage'}, format='json').status_code == 401

    client.credentials(HTTP_AUTHORIZATION=f"Token {login['token']}")
    out = client.post(reverse('jwt_logout_view'), {}, format='json')
    assert out.status_code == 200
    assert out.data['blacklisted'] >= 1
    assert client.get('/api/patients').status_code == 401


def test_clinical_updates_are_audited(client_for, patient, doctor, category):
    desk, physician, lab = client_for('receptionist'), client_for('doctor'), client_for('lab_staff')
    apt = desk.post('/api/appointments', {'patientId': patient.id, 'appointmentDate': '2024-05-02',
                                          'appointmentTime': '09:00'}, format='json').data
    proc = physician.post('/api/procedures', {'patientId': patient.id, 'doctorId': doctor.id,
                                              'procedureName': 'Suture', 'procedureDate': '2024-05-02'},
                          format='json').data
    test = lab.post('/api/lab-tests', {'patientId': patient.id, 'categoryId': category.id, 'testName': 'CBC',
                                       'testDate': '2024-05-02'}, format='json').data

    assert desk.patch(f"/api/appointments/{apt['id']}", {'status': 'Confirmed'}, format='json').status_code == 200
    assert physician.patch(f"/api/procedures/{proc['id']}", {'status': 'Completed'},
                           format='json').status_code == 200
    assert lab.patch(f"/api/lab-tests/{test['id']}", {'status': 'Completed'}, format='json').status_code == 200

    actions = set(AuditEvent.objects.values_list('action', flat=True))
    assert {'appointment_update', 'procedure_update', 'lab_test_update'} <= actions
