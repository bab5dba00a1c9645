"""
Database models for the medical management backend.

The clinical records (patients, appointments, procedures, lab tests and
transactions) each carry a human readable, year scoped number such as
``MR2024-000001``.  Those columns are unique: the constraint is what
catches two requests that computed the same next number at the same time
(see :mod:`clinic.services.identifiers`).
"""
from __future__ import annotations

import datetime
import os
import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user model carrying the caller's role claim."""
    ROLE_ADMIN = 'admin'
    ROLE_DOCTOR = 'doctor'
    ROLE_NURSE = 'nurse'
    ROLE_LAB_STAFF = 'lab_staff'
    ROLE_RECEPTIONIST = 'receptionist'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Admin'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_NURSE, 'Nurse'),
        (ROLE_LAB_STAFF, 'Lab staff'),
        (ROLE_RECEPTIONIST, 'Receptionist'),
    ]
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_RECEPTIONIST)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class BaseEntity(models.Model):
    """Common bookkeeping columns shared by every clinical record."""
    # Soft delete flag; deactivated rows keep their numbers
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class PersonMixin(models.Model):
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)

    class Meta:
        abstract = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Doctor(PersonMixin, BaseEntity):
    specialization = models.CharField(max_length=120, blank=True, db_index=True)
    address = models.CharField(max_length=255, blank=True)
    qualification = models.CharField(max_length=255, blank=True)
    license_number = models.CharField(max_length=64, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=16, blank=True)
    consultation_fee = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    status = models.CharField(max_length=20, default='Active')

    def __str__(self) -> str:
        return f"Dr. {self.full_name}"


class DoctorSchedule(BaseEntity):
    """Weekly availability slot; ``day_of_week`` follows ``date.weekday()``."""
    DAY_CHOICES = [
        (0, 'Monday'),
        (1, 'Tuesday'),
        (2, 'Wednesday'),
        (3, 'Thursday'),
        (4, 'Friday'),
        (5, 'Saturday'),
        (6, 'Sunday'),
    ]
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='schedules')
    day_of_week = models.PositiveSmallIntegerField(choices=DAY_CHOICES)
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_available = models.BooleanField(default=True)

    class Meta:
        indexes = [models.Index(fields=['doctor', 'day_of_week'], name='clinic_sched_doctor_day_idx')]

    def __str__(self) -> str:
        return f"{self.doctor_id}@{self.get_day_of_week_display()} {self.start_time:%H:%M}-{self.end_time:%H:%M}"


class Nurse(PersonMixin, BaseEntity):
    license_number = models.CharField(max_length=64, blank=True)
    department = models.CharField(max_length=120, blank=True)
    status = models.CharField(max_length=20, default='Active')

    def __str__(self) -> str:
        return self.full_name


class LabStaff(PersonMixin, BaseEntity):
    department = models.CharField(max_length=120, blank=True)
    status = models.CharField(max_length=20, default='Active')

    class Meta:
        verbose_name_plural = 'lab staff'

    def __str__(self) -> str:
        return self.full_name


class LabTestCategory(BaseEntity):
    name = models.CharField(max_length=120, unique=True)
    description = models.TextField(blank=True)

    class Meta:
        verbose_name_plural = 'lab test categories'

    def __str__(self) -> str:
        return self.name


class Patient(BaseEntity):
    """A registered patient identified by a medical-record (MR) number."""
    mr_number = models.CharField(max_length=32, unique=True)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32)
    alternate_phone = models.CharField(max_length=32, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    age = models.PositiveIntegerField(null=True, blank=True)
    gender = models.CharField(max_length=16)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    zip_code = models.CharField(max_length=20, blank=True)
    blood_group = models.CharField(max_length=8, blank=True)
    emergency_contact_name = models.CharField(max_length=200, blank=True)
    emergency_contact_phone = models.CharField(max_length=32, blank=True)
    medical_history = models.TextField(blank=True)
    allergies = models.TextField(blank=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return f"{self.full_name} ({self.mr_number})"


class Appointment(BaseEntity):
    STATUS_SCHEDULED = 'Scheduled'
    STATUS_CHOICES = [
        ('Scheduled', 'Scheduled'),
        ('Confirmed', 'Confirmed'),
        ('Completed', 'Completed'),
        ('Cancelled', 'Cancelled'),
        ('NoShow', 'No show'),
    ]
    appointment_number = models.CharField(max_length=32, unique=True)
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='appointments')
    doctor = models.ForeignKey(Doctor, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointments')
    nurse = models.ForeignKey(Nurse, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointments')
    appointment_date = models.DateField(db_index=True)
    appointment_time = models.TimeField()
    appointment_type = models.CharField(max_length=64, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_SCHEDULED)
    reason = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    # Delivery is not implemented; these only record that a notice was requested
    sms_notification_sent = models.BooleanField(default=False)
    whatsapp_notification_sent = models.BooleanField(default=False)
    notification_sent_at = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return self.appointment_number


class Procedure(BaseEntity):
    procedure_number = models.CharField(max_length=32, unique=True)
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='procedures')
    doctor = models.ForeignKey(Doctor, null=True, blank=True, on_delete=models.SET_NULL, related_name='procedures')
    nurse = models.ForeignKey(Nurse, null=True, blank=True, on_delete=models.SET_NULL, related_name='procedures')
    procedure_type = models.CharField(max_length=64, blank=True)
    procedure_name = models.CharField(max_length=255)
    procedure_date = models.DateField(db_index=True)
    procedure_time = models.TimeField(null=True, blank=True)
    treatment_notes = models.TextField(blank=True)
    status = models.CharField(max_length=20, default='Scheduled')
    cost = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    invoice_generated = models.BooleanField(default=False)

    def __str__(self) -> str:
        return f"{self.procedure_number} {self.procedure_name}"


def _report_upload(instance, filename: str) -> str:
    ext = os.path.splitext(filename)[1]
    return f"lab-reports/{datetime.date.today().strftime('%Y/%m')}/{uuid.uuid4().hex}{ext}"


class LabTest(BaseEntity):
    STATUS_BOOKED = 'Booked'
    STATUS_COMPLETED = 'Completed'
    STATUS_CHOICES = [
        ('Booked', 'Booked'),
        ('SampleCollected', 'Sample collected'),
        ('InProgress', 'In progress'),
        ('Completed', 'Completed'),
        ('Cancelled', 'Cancelled'),
    ]
    test_number = models.CharField(max_length=32, unique=True)
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='lab_tests')
    procedure = models.ForeignKey(Procedure, null=True, blank=True, on_delete=models.SET_NULL, related_name='lab_tests')
    category = models.ForeignKey(LabTestCategory, on_delete=models.PROTECT, related_name='lab_tests')
    assigned_to = models.ForeignKey(LabStaff, null=True, blank=True, on_delete=models.SET_NULL, related_name='lab_tests')
    test_name = models.CharField(max_length=255)
    test_date = models.DateField(db_index=True)
    sample_collection_date = models.DateTimeField(null=True, blank=True)
    report_date = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_BOOKED)
    report_file = models.FileField(upload_to=_report_upload, max_length=512, blank=True)
    report_text = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    cost = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    invoice_generated = models.BooleanField(default=False)

    def __str__(self) -> str:
        return f"{self.test_number} {self.test_name}"


class Prescription(BaseEntity):
    prescription_number = models.CharField(max_length=32, blank=True)
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='prescriptions')
    procedure = models.ForeignKey(Procedure, null=True, blank=True, on_delete=models.SET_NULL, related_name='prescriptions')
    doctor = models.ForeignKey(Doctor, null=True, blank=True, on_delete=models.SET_NULL, related_name='prescriptions')
    prescription_date = models.DateField()
    medications = models.TextField()
    instructions = models.TextField(blank=True)
    notes = models.TextField(blank=True)

    def __str__(self) -> str:
        return f"Rx {self.prescription_number or self.pk} for {self.patient_id}"


class Transaction(BaseEntity):
    """A billing record.  Carries both a transaction and an invoice number."""
    STATUS_PENDING = 'Pending'
    STATUS_PAID = 'Paid'
    STATUS_CHOICES = [
        ('Pending', 'Pending'),
        ('Paid', 'Paid'),
        ('Cancelled', 'Cancelled'),
        ('Refunded', 'Refunded'),
    ]
    transaction_number = models.CharField(max_length=32, unique=True)
    invoice_number = models.CharField(max_length=32, unique=True)
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='transactions')
    appointment = models.ForeignKey(Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='transactions')
    procedure = models.ForeignKey(Procedure, null=True, blank=True, on_delete=models.SET_NULL, related_name='transactions')
    lab_test = models.ForeignKey(LabTest, null=True, blank=True, on_delete=models.SET_NULL, related_name='transactions')
    transaction_type = models.CharField(max_length=64, blank=True)
    payment_mode = models.CharField(max_length=32, blank=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    discount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    transaction_date = models.DateTimeField(db_index=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    notes = models.TextField(blank=True)
    payment_confirmation_sent = models.BooleanField(default=False)

    def __str__(self) -> str:
        return f"{self.transaction_number} / {self.invoice_number}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='clinic_audit_action_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='clinic_audit_object_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
