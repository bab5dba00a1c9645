import logging
from typing import Optional
from django.utils import timezone

from clinic.models import Appointment
from clinic.services.identifiers import APPOINTMENT_PREFIX, create_with_identifiers, next_identifier
from clinic.services.repository import Repository

logger = logging.getLogger(__name__)

appointments = Repository(Appointment)

NOTIFICATION_FLAGS = {
    'sms': 'sms_notification_sent',
    'whatsapp': 'whatsapp_notification_sent',
}


def _with_people():
    return appointments.get_all().select_related('patient', 'doctor', 'nurse')


def list_appointments():
    return _with_people().order_by('-appointment_date', '-appointment_time', '-id')


def get_appointment(pk) -> Appointment:
    return appointments.get_or_404(pk, _with_people())


def generate_appointment_number() -> str:
    return next_identifier(Appointment, 'appointment_number', APPOINTMENT_PREFIX)


def create_appointment(**values) -> Appointment:
    return create_with_identifiers(Appointment, {'appointment_number': APPOINTMENT_PREFIX}, values)


def update_appointment(appointment: Appointment, **values) -> Appointment:
    values.pop('appointment_number', None)
    return appointments.update(appointment, **values)


def delete_appointment(pk) -> bool:
    return appointments.delete(pk)


def appointments_by_date(date):
    return (appointments.get_all().select_related('patient', 'doctor')
            .filter(appointment_date=date, is_active=True)
            .order_by('appointment_time', 'id'))


def appointments_by_patient(patient_id):
    return (appointments.get_all().select_related('doctor')
            .filter(patient_id=patient_id, is_active=True)
            .order_by('-appointment_date', '-appointment_time'))


def appointments_by_doctor(doctor_id):
    return (appointments.get_all().select_related('patient')
            .filter(doctor_id=doctor_id, is_active=True)
            .order_by('-appointment_date', '-appointment_time'))


def record_notification(appointment_id, kind: str) -> Optional[Appointment]:
    """Mark that a notice of ``kind`` was requested.  Nothing is delivered."""
    appointment = appointments.get_by_id(appointment_id)
    if appointment is None:
        return None
    flag = NOTIFICATION_FLAGS.get((kind or '').lower())
    values = {'notification_sent_at': timezone.now()}
    if flag:
        values[flag] = True
    else:
        logger.info('appointment %s: unknown notification kind %r', appointment.appointment_number, kind)
    return appointments.update(appointment, **values)
