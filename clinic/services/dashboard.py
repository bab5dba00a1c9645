from decimal import Decimal
from typing import Optional
from django.conf import settings
from django.core.cache import cache
from django.db.models import Sum
from django.utils import timezone

from clinic.models import Appointment, LabTest, Patient, Procedure, Transaction

SUMMARY_CACHE_KEY = 'dashboard:summary'


def total_appointments() -> int:
    return Appointment.objects.filter(is_active=True).count()


def total_patients() -> int:
    return Patient.objects.filter(is_active=True).count()


def total_procedures() -> int:
    return Procedure.objects.filter(is_active=True).count()


def total_lab_reports() -> int:
    return LabTest.objects.filter(is_active=True, status=LabTest.STATUS_COMPLETED).count()


def _paid():
    return Transaction.objects.filter(status=Transaction.STATUS_PAID, is_active=True)


def total_revenue() -> Decimal:
    return _paid().aggregate(s=Sum('total_amount'))['s'] or Decimal('0')


def monthly_revenue(month: int, year: int) -> Decimal:
    qs = _paid().filter(transaction_date__month=month, transaction_date__year=year)
    return qs.aggregate(s=Sum('total_amount'))['s'] or Decimal('0')


def daily_appointments(date) -> list[dict]:
    qs = (Appointment.objects.select_related('patient', 'doctor')
          .filter(appointment_date=date, is_active=True)
          .order_by('appointment_time', 'id'))
    return [{
        'id': a.id,
        'appointmentNumber': a.appointment_number,
        'patientName': a.patient.full_name,
        'doctorName': a.doctor.full_name if a.doctor else 'Not Assigned',
        'appointmentTime': a.appointment_time.strftime('%H:%M'),
        'status': a.status,
        'appointmentType': a.appointment_type,
    } for a in qs]


def monthly_statistics(month: int, year: int) -> dict:
    return {
        'appointments': Appointment.objects.filter(
            appointment_date__month=month, appointment_date__year=year, is_active=True).count(),
        'patients': Patient.objects.filter(
            created_at__month=month, created_at__year=year, is_active=True).count(),
        'procedures': Procedure.objects.filter(
            procedure_date__month=month, procedure_date__year=year, is_active=True).count(),
        'labTests': LabTest.objects.filter(
            test_date__month=month, test_date__year=year, is_active=True).count(),
    }


def build_summary(today=None) -> dict:
    today = today or timezone.localdate()
    return {
        'totalAppointments': total_appointments(),
        'totalPatients': total_patients(),
        'totalProcedures': total_procedures(),
        'totalLabReports': total_lab_reports(),
        'totalRevenue': total_revenue(),
        'monthlyRevenue': monthly_revenue(today.month, today.year),
        'month': today.month,
        'year': today.year,
        'generatedAt': timezone.now().isoformat(),
    }


def cached_summary(refresh: bool=False) -> dict:
    payload: Optional[dict] = None if refresh else cache.get(SUMMARY_CACHE_KEY)
    if payload is None:
        payload = build_summary()
        cache.set(SUMMARY_CACHE_KEY, payload, getattr(settings, 'DASHBOARD_CACHE_SECONDS', 300))
    return payload


def invalidate_summary() -> None:
    cache.delete(SUMMARY_CACHE_KEY)
