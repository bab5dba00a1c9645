from typing import Optional
from django.db import transaction
from django.db.models import Q

from clinic.exceptions import PatientHasRecords
from clinic.models import Patient
from clinic.services.identifiers import PATIENT_PREFIX, create_with_identifiers, next_identifier
from clinic.services.repository import Repository

patients = Repository(Patient)

# Dependents that block a hard delete, mirrored by on_delete=PROTECT
RESTRICTING_RELATIONS = ('appointments', 'procedures', 'lab_tests', 'transactions')


def list_patients(q: Optional[str]=None, active_only: bool=False):
    qs = patients.get_all()
    if active_only:
        qs = qs.filter(is_active=True)
    if q:
        qs = qs.filter(Q(first_name__icontains=q) | Q(last_name__icontains=q) | Q(mr_number__icontains=q) | Q(phone__icontains=q))
    return qs.order_by('-created_at', '-id')


def get_patient(pk) -> Patient:
    qs = patients.get_all().prefetch_related(
        'appointments__doctor', 'procedures__doctor', 'lab_tests__category', 'prescriptions', 'transactions',
    )
    return patients.get_or_404(pk, qs)


def get_patient_by_mr_number(mr_number: str) -> Optional[Patient]:
    return patients.first_or_default(mr_number=mr_number)


def generate_mr_number() -> str:
    return next_identifier(Patient, 'mr_number', PATIENT_PREFIX)


def create_patient(**values) -> Patient:
    return create_with_identifiers(Patient, {'mr_number': PATIENT_PREFIX}, values)


def update_patient(patient: Patient, **values) -> Patient:
    # The MR number is fixed at registration
    values.pop('mr_number', None)
    return patients.update(patient, **values)


def dependent_counts(patient: Patient) -> dict:
    return {rel: getattr(patient, rel).count() for rel in RESTRICTING_RELATIONS}


@transaction.atomic
def delete_patient(pk) -> None:
    patient = patients.get_or_404(pk, patients.get_all().select_for_update())
    counts = {k: v for k, v in dependent_counts(patient).items() if v}
    if counts:
        raise PatientHasRecords(f"patient {patient.mr_number} still has records: "
                                + ', '.join(f'{k}={v}' for k, v in counts.items()))
    patient.delete()
