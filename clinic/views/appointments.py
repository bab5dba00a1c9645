"""
Appointment booking views.

Booking and rescheduling are front desk work.  ``appointmentNumber`` is
issued on create when left blank and cannot be changed afterwards.
"""
from __future__ import annotations

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.fields import DateField

from ..models import Appointment
from ..permissions import ADMIN_ROLES, FrontDeskWrite
from ..serializers.clinical import AppointmentSerializer, NotifySerializer
from ..services import appointments as appointment_service
from ..services.audit import log_action
from ..services.dashboard import invalidate_summary
from .common import deleted, int_param, iso, paginated, require_roles


def _serialize(a: Appointment) -> dict:
    return {
        'id': a.id,
        'appointmentNumber': a.appointment_number,
        'patientId': a.patient_id,
        'patientName': a.patient.full_name,
        'mrNumber': a.patient.mr_number,
        'doctorId': a.doctor_id,
        'doctorName': a.doctor.full_name if a.doctor else None,
        'nurseId': a.nurse_id,
        'nurseName': a.nurse.full_name if a.nurse else None,
        'appointmentDate': iso(a.appointment_date),
        'appointmentTime': a.appointment_time.strftime('%H:%M'),
        'appointmentType': a.appointment_type,
        'status': a.status,
        'reason': a.reason,
        'notes': a.notes,
        'smsNotificationSent': a.sms_notification_sent,
        'whatsAppNotificationSent': a.whatsapp_notification_sent,
        'notificationSentAt': iso(a.notification_sent_at),
        'isActive': a.is_active,
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, FrontDeskWrite])
def appointments(request):
    """List appointments, optionally by ``date``, ``patientId`` or ``doctorId``; or book one."""
    if request.method == 'GET':
        day = request.query_params.get('date')
        patient_id = int_param(request, 'patientId')
        doctor_id = int_param(request, 'doctorId')
        if day:
            try:
                day = DateField().to_internal_value(day)
            except ValidationError:
                raise ValidationError({'date': 'expected YYYY-MM-DD'})
            qs = appointment_service.appointments_by_date(day).select_related('nurse')
        elif patient_id:
            qs = appointment_service.appointments_by_patient(patient_id).select_related('patient', 'nurse')
        elif doctor_id:
            qs = appointment_service.appointments_by_doctor(doctor_id).select_related('doctor', 'nurse')
        else:
            qs = appointment_service.list_appointments()
        return paginated(request, qs, _serialize)

    data = AppointmentSerializer(data=request.data)
    data.is_valid(raise_exception=True)
    with transaction.atomic():
        appointment = appointment_service.create_appointment(**data.validated_data)
        log_action(user=request.user, action='appointment_create', obj=appointment,
                   detail={'appointmentNumber': appointment.appointment_number})
    invalidate_summary()
    return Response(_serialize(appointment), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, FrontDeskWrite])
def appointment_detail(request, pk: int):
    appointment = appointment_service.get_appointment(pk)
    if request.method == 'GET':
        return Response(_serialize(appointment))
    if request.method == 'DELETE':
        require_roles(request.user, ADMIN_ROLES, 'delete appointments')
        appointment_service.delete_appointment(pk)
        log_action(user=request.user, action='appointment_delete', object_type='appointment', object_id=pk)
        return deleted()
    data = AppointmentSerializer(data=request.data, partial=True)
    data.is_valid(raise_exception=True)
    appointment = appointment_service.update_appointment(appointment, **data.validated_data)
    log_action(user=request.user, action='appointment_update', obj=appointment)
    invalidate_summary()
    return Response(_serialize(appointment))


@api_view(['POST'])
@permission_classes([IsAuthenticated, FrontDeskWrite])
def appointment_notify(request, pk: int):
    """Record that an SMS/WhatsApp notice was requested.  No message is sent."""
    data = NotifySerializer(data=request.data)
    data.is_valid(raise_exception=True)
    appointment = appointment_service.record_notification(pk, data.validated_data['type'])
    if appointment is None:
        raise NotFound('appointment not found')
    return Response(_serialize(appointment))
