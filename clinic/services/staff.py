"""Nurses, lab staff and lab test categories: plain repository access."""
from clinic.models import LabStaff, LabTestCategory, Nurse
from clinic.services.repository import Repository

nurses = Repository(Nurse)
lab_staff = Repository(LabStaff)
lab_categories = Repository(LabTestCategory)


def list_nurses(department=None):
    qs = nurses.get_all()
    if department:
        qs = qs.filter(department=department)
    return qs.order_by('last_name', 'first_name', 'id')


def list_lab_staff(department=None):
    qs = lab_staff.get_all()
    if department:
        qs = qs.filter(department=department)
    return qs.order_by('last_name', 'first_name', 'id')


def list_lab_categories():
    return lab_categories.get_all().order_by('name')
