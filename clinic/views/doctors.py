"""
Doctor directory, schedules and per-doctor statistics.

Writes are administrator only; every authenticated role may read.  The
doctor list is cached for five minutes per filter combination.
"""
from __future__ import annotations

from django.core.cache import cache
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Doctor, DoctorSchedule
from ..permissions import AdminWrite
from ..serializers.staff import DoctorSerializer, DoctorScheduleSerializer
from ..services import doctors as doctor_service
from ..services.audit import log_action
from .common import deleted, iso

DOCTORS_CACHE_VERSION_KEY = 'doctors:version'


def _serialize(d: Doctor) -> dict:
    return {
        'id': d.id,
        'firstName': d.first_name,
        'lastName': d.last_name,
        'fullName': d.full_name,
        'specialization': d.specialization,
        'email': d.email,
        'phone': d.phone,
        'address': d.address,
        'qualification': d.qualification,
        'licenseNumber': d.license_number,
        'dateOfBirth': iso(d.date_of_birth),
        'gender': d.gender,
        'consultationFee': d.consultation_fee,
        'status': d.status,
        'isActive': d.is_active,
    }


def _serialize_schedule(s: DoctorSchedule) -> dict:
    return {
        'id': s.id,
        'doctorId': s.doctor_id,
        'dayOfWeek': s.day_of_week,
        'day': s.get_day_of_week_display(),
        'startTime': s.start_time.strftime('%H:%M'),
        'endTime': s.end_time.strftime('%H:%M'),
        'isAvailable': s.is_available,
    }


def _cache_version() -> int:
    return cache.get_or_set(DOCTORS_CACHE_VERSION_KEY, 1, None)


def _bump_cache() -> None:
    try:
        cache.incr(DOCTORS_CACHE_VERSION_KEY)
    except ValueError:
        cache.set(DOCTORS_CACHE_VERSION_KEY, 1, None)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, AdminWrite])
def doctors(request):
    """List doctors (``q``, ``specialization`` filters) or add one."""
    if request.method == 'GET':
        q = (request.query_params.get('q') or '').strip() or None
        specialization = (request.query_params.get('specialization') or '').strip() or None
        cache_key = f"doctors:v={_cache_version()}:q={q or ''}:specialization={specialization or ''}"
        cached = cache.get(cache_key)
        if cached:
            return Response(cached)
        if specialization and not q:
            qs = doctor_service.doctors_by_specialization(specialization).order_by('last_name', 'first_name', 'id')
        else:
            qs = doctor_service.list_doctors(q=q, specialization=specialization)
        payload = {'ok': True, 'data': [_serialize(d) for d in qs]}
        cache.set(cache_key, payload, 300)
        return Response(payload)

    data = DoctorSerializer(data=request.data)
    data.is_valid(raise_exception=True)
    doctor = doctor_service.create_doctor(**data.validated_data)
    log_action(user=request.user, action='doctor_create', obj=doctor)
    _bump_cache()
    return Response(_serialize(doctor), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, AdminWrite])
def doctor_detail(request, pk: int):
    doctor = doctor_service.get_doctor(pk)
    if request.method == 'GET':
        return Response(_serialize(doctor))
    if request.method == 'DELETE':
        doctor_service.delete_doctor(pk)
        log_action(user=request.user, action='doctor_delete', object_type='doctor', object_id=pk)
        _bump_cache()
        return deleted()
    data = DoctorSerializer(data=request.data, partial=True)
    data.is_valid(raise_exception=True)
    doctor = doctor_service.update_doctor(doctor, **data.validated_data)
    _bump_cache()
    return Response(_serialize(doctor))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def doctor_stats(request, pk: int):
    doctor = doctor_service.get_doctor(pk)
    return Response({
        'ok': True,
        'doctorId': doctor.id,
        'appointmentCount': doctor_service.doctor_appointment_count(doctor.id),
        'totalRevenue': doctor_service.doctor_total_revenue(doctor.id),
    })


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, AdminWrite])
def doctor_schedules(request, pk: int):
    doctor = doctor_service.get_doctor(pk)
    if request.method == 'GET':
        return Response({'ok': True, 'data': [_serialize_schedule(s) for s in doctor_service.list_schedules(doctor.id)]})
    data = DoctorScheduleSerializer(data=request.data)
    data.is_valid(raise_exception=True)
    schedule = doctor_service.add_schedule(doctor, **data.validated_data)
    return Response(_serialize_schedule(schedule), status=status.HTTP_201_CREATED)
