from typing import Optional

from clinic.models import Prescription, Procedure
from clinic.services.identifiers import PROCEDURE_PREFIX, create_with_identifiers, next_identifier
from clinic.services.repository import Repository

procedures = Repository(Procedure)
prescriptions = Repository(Prescription)


def list_procedures():
    return (procedures.get_all().select_related('patient', 'doctor', 'nurse')
            .order_by('-procedure_date', '-id'))


def get_procedure(pk) -> Procedure:
    qs = (procedures.get_all().select_related('patient', 'doctor', 'nurse')
          .prefetch_related('prescriptions', 'lab_tests'))
    return procedures.get_or_404(pk, qs)


def generate_procedure_number() -> str:
    return next_identifier(Procedure, 'procedure_number', PROCEDURE_PREFIX)


def create_procedure(**values) -> Procedure:
    return create_with_identifiers(Procedure, {'procedure_number': PROCEDURE_PREFIX}, values)


def update_procedure(procedure: Procedure, **values) -> Procedure:
    values.pop('procedure_number', None)
    return procedures.update(procedure, **values)


def delete_procedure(pk) -> bool:
    return procedures.delete(pk)


def procedures_by_patient(patient_id):
    return (procedures.get_all().select_related('doctor')
            .filter(patient_id=patient_id, is_active=True).order_by('-procedure_date'))


def procedures_by_doctor(doctor_id):
    return (procedures.get_all().select_related('patient')
            .filter(doctor_id=doctor_id, is_active=True).order_by('-procedure_date'))


def list_prescriptions(patient_id: Optional[int]=None, procedure_id: Optional[int]=None):
    qs = prescriptions.get_all().select_related('patient', 'doctor', 'procedure')
    if patient_id:
        qs = qs.filter(patient_id=patient_id)
    if procedure_id:
        qs = qs.filter(procedure_id=procedure_id)
    return qs.order_by('-prescription_date', '-id')


def create_prescription(**values) -> Prescription:
    return prescriptions.add(**values)
