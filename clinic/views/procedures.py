"""
Procedures and the prescriptions written during them.

Doctors and administrators record procedures; everyone authenticated may
read them.
"""
from __future__ import annotations

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Prescription, Procedure
from ..permissions import DoctorOrAdminWrite
from ..serializers.clinical import PrescriptionSerializer, ProcedureSerializer
from ..services import procedures as procedure_service
from ..services.audit import log_action
from ..services.dashboard import invalidate_summary
from .common import deleted, int_param, iso, paginated


def _serialize(p: Procedure) -> dict:
    return {
        'id': p.id,
        'procedureNumber': p.procedure_number,
        'patientId': p.patient_id,
        'patientName': p.patient.full_name,
        'doctorId': p.doctor_id,
        'doctorName': p.doctor.full_name if p.doctor else None,
        'nurseId': p.nurse_id,
        'procedureType': p.procedure_type,
        'procedureName': p.procedure_name,
        'procedureDate': iso(p.procedure_date),
        'procedureTime': p.procedure_time.strftime('%H:%M') if p.procedure_time else None,
        'treatmentNotes': p.treatment_notes,
        'status': p.status,
        'cost': p.cost,
        'invoiceGenerated': p.invoice_generated,
        'isActive': p.is_active,
    }


def _serialize_prescription(r: Prescription) -> dict:
    return {
        'id': r.id,
        'prescriptionNumber': r.prescription_number,
        'patientId': r.patient_id,
        'procedureId': r.procedure_id,
        'doctorId': r.doctor_id,
        'prescriptionDate': iso(r.prescription_date),
        'medications': r.medications,
        'instructions': r.instructions,
        'notes': r.notes,
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, DoctorOrAdminWrite])
def procedures(request):
    if request.method == 'GET':
        patient_id = int_param(request, 'patientId')
        doctor_id = int_param(request, 'doctorId')
        if patient_id:
            qs = procedure_service.procedures_by_patient(patient_id).select_related('patient')
        elif doctor_id:
            qs = procedure_service.procedures_by_doctor(doctor_id).select_related('doctor')
        else:
            qs = procedure_service.list_procedures()
        return paginated(request, qs, _serialize)

    data = ProcedureSerializer(data=request.data)
    data.is_valid(raise_exception=True)
    with transaction.atomic():
        procedure = procedure_service.create_procedure(**data.validated_data)
        log_action(user=request.user, action='procedure_create', obj=procedure,
                   detail={'procedureNumber': procedure.procedure_number})
    invalidate_summary()
    return Response(_serialize(procedure), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, DoctorOrAdminWrite])
def procedure_detail(request, pk: int):
    procedure = procedure_service.get_procedure(pk)
    if request.method == 'GET':
        data = _serialize(procedure)
        data['prescriptions'] = [_serialize_prescription(r) for r in procedure.prescriptions.all()]
        data['labTests'] = [{'id': t.id, 'testNumber': t.test_number, 'status': t.status}
                            for t in procedure.lab_tests.all()]
        return Response(data)
    if request.method == 'DELETE':
        procedure_service.delete_procedure(pk)
        log_action(user=request.user, action='procedure_delete', object_type='procedure', object_id=pk)
        return deleted()
    data = ProcedureSerializer(data=request.data, partial=True)
    data.is_valid(raise_exception=True)
    procedure = procedure_service.update_procedure(procedure, **data.validated_data)
    log_action(user=request.user, action='procedure_update', obj=procedure)
    invalidate_summary()
    return Response(_serialize(procedure))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, DoctorOrAdminWrite])
def prescriptions(request):
    if request.method == 'GET':
        qs = procedure_service.list_prescriptions(int_param(request, 'patientId'), int_param(request, 'procedureId'))
        return paginated(request, qs, _serialize_prescription)
    data = PrescriptionSerializer(data=request.data)
    data.is_valid(raise_exception=True)
    prescription = procedure_service.create_prescription(**data.validated_data)
    log_action(user=request.user, action='prescription_create', obj=prescription)
    return Response(_serialize_prescription(prescription), status=status.HTTP_201_CREATED)
