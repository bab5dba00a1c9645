"""
Patient registration and record views.

Any authenticated role may read patients.  Registration and edits are
front desk work (receptionists and clinical staff); hard deletes are
restricted to administrators and refused while the patient still has
appointments, procedures, lab tests or transactions.
"""
from __future__ import annotations

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Patient
from ..permissions import ADMIN_ROLES, FrontDeskWrite
from ..serializers.patient import PatientSerializer, PatientListQuerySerializer
from ..services import patients as patient_service
from ..services.audit import log_action
from ..services.dashboard import invalidate_summary
from .common import deleted, iso, paginated, require_roles


def _serialize(p: Patient) -> dict:
    return {
        'id': p.id,
        'mrNumber': p.mr_number,
        'firstName': p.first_name,
        'lastName': p.last_name,
        'fullName': p.full_name,
        'email': p.email,
        'phone': p.phone,
        'alternatePhone': p.alternate_phone,
        'dateOfBirth': iso(p.date_of_birth),
        'age': p.age,
        'gender': p.gender,
        'address': p.address,
        'city': p.city,
        'state': p.state,
        'zipCode': p.zip_code,
        'bloodGroup': p.blood_group,
        'emergencyContactName': p.emergency_contact_name,
        'emergencyContactPhone': p.emergency_contact_phone,
        'medicalHistory': p.medical_history,
        'allergies': p.allergies,
        'isActive': p.is_active,
        'createdAt': iso(p.created_at),
        'updatedAt': iso(p.updated_at),
    }


def _serialize_detail(p: Patient) -> dict:
    data = _serialize(p)
    data.update({
        'appointments': [{
            'id': a.id, 'appointmentNumber': a.appointment_number, 'date': iso(a.appointment_date),
            'status': a.status, 'doctorName': a.doctor.full_name if a.doctor else None,
        } for a in p.appointments.all()],
        'procedures': [{
            'id': x.id, 'procedureNumber': x.procedure_number, 'name': x.procedure_name,
            'date': iso(x.procedure_date), 'status': x.status,
        } for x in p.procedures.all()],
        'labTests': [{
            'id': t.id, 'testNumber': t.test_number, 'name': t.test_name, 'category': t.category.name,
            'status': t.status,
        } for t in p.lab_tests.all()],
        'prescriptions': [{
            'id': r.id, 'prescriptionNumber': r.prescription_number, 'date': iso(r.prescription_date),
            'medications': r.medications,
        } for r in p.prescriptions.all()],
        'transactions': [{
            'id': t.id, 'transactionNumber': t.transaction_number, 'invoiceNumber': t.invoice_number,
            'totalAmount': t.total_amount, 'status': t.status,
        } for t in p.transactions.all()],
    })
    return data


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, FrontDeskWrite])
def patients(request):
    if request.method == 'GET':
        q = PatientListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = patient_service.list_patients(q.validated_data.get('q') or None,
                                           active_only=q.validated_data.get('activeOnly', False))
        return paginated(request, qs, _serialize)

    data = PatientSerializer(data=request.data)
    data.is_valid(raise_exception=True)
    with transaction.atomic():
        patient = patient_service.create_patient(**data.validated_data)
        log_action(user=request.user, action='patient_create', obj=patient, detail={'mrNumber': patient.mr_number})
    invalidate_summary()
    return Response(_serialize(patient), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, FrontDeskWrite])
def patient_detail(request, pk: int):
    if request.method == 'GET':
        return Response(_serialize_detail(patient_service.get_patient(pk)))

    if request.method == 'DELETE':
        require_roles(request.user, ADMIN_ROLES, 'delete patients')
        patient_service.delete_patient(pk)
        log_action(user=request.user, action='patient_delete', object_type='patient', object_id=pk)
        return deleted()

    patient = patient_service.patients.get_or_404(pk)
    data = PatientSerializer(data=request.data, partial=True)
    data.is_valid(raise_exception=True)
    patient = patient_service.update_patient(patient, **data.validated_data)
    log_action(user=request.user, action='patient_update', obj=patient)
    return Response(_serialize(patient))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def patient_by_mr_number(request, mr_number: str):
    patient = patient_service.get_patient_by_mr_number(mr_number)
    if not patient:
        raise NotFound('patient not found')
    return Response(_serialize(patient))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def next_mr_number(request):
    """Preview of the number the next registration would receive (not reserved)."""
    return Response({'ok': True, 'mrNumber': patient_service.generate_mr_number()})
