from decimal import Decimal
from typing import Optional
from django.db.models import Q, Sum
from rest_framework.exceptions import ValidationError

from clinic.models import Appointment, Doctor, DoctorSchedule, Transaction
from clinic.services.repository import Repository

doctors = Repository(Doctor)
schedules = Repository(DoctorSchedule)


def list_doctors(q: Optional[str]=None, specialization: Optional[str]=None):
    qs = doctors.get_all()
    if specialization:
        qs = qs.filter(specialization=specialization)
    if q:
        qs = qs.filter(Q(first_name__icontains=q) | Q(last_name__icontains=q) | Q(specialization__icontains=q))
    return qs.order_by('last_name', 'first_name', 'id')


def get_doctor(pk) -> Doctor:
    return doctors.get_or_404(pk)


def create_doctor(**values) -> Doctor:
    return doctors.add(**values)


def update_doctor(doctor: Doctor, **values) -> Doctor:
    return doctors.update(doctor, **values)


def delete_doctor(pk) -> bool:
    return doctors.delete(pk)


def doctors_by_specialization(specialization: str):
    return doctors.find(specialization=specialization, is_active=True)


def doctor_total_revenue(doctor_id) -> Decimal:
    """Paid totals billed against the doctor's appointments plus their procedures."""
    paid = Transaction.objects.filter(status=Transaction.STATUS_PAID)
    via_appointments = paid.filter(appointment__doctor_id=doctor_id).aggregate(s=Sum('total_amount'))['s']
    via_procedures = paid.filter(procedure__doctor_id=doctor_id).aggregate(s=Sum('total_amount'))['s']
    return (via_appointments or Decimal('0')) + (via_procedures or Decimal('0'))


def doctor_appointment_count(doctor_id) -> int:
    return Appointment.objects.filter(doctor_id=doctor_id, is_active=True).count()


def list_schedules(doctor_id):
    return schedules.find(doctor_id=doctor_id, is_active=True).order_by('day_of_week', 'start_time')


def add_schedule(doctor: Doctor, *, day_of_week: int, start_time, end_time, is_available: bool=True) -> DoctorSchedule:
    if end_time <= start_time:
        raise ValidationError({'endTime': 'end time must be after start time'})
    return schedules.add(doctor=doctor, day_of_week=day_of_week, start_time=start_time,
                         end_time=end_time, is_available=is_available)
