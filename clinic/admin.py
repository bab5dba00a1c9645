"""
Django admin registrations for the clinic models.

Record numbers are shown read-only and never edited by hand.  Records added
here are issued their numbers on save, the same way the API issues them.
"""

from django.contrib import admin

from .models import (
    AuditEvent,
    Appointment,
    Doctor,
    DoctorSchedule,
    LabStaff,
    LabTest,
    LabTestCategory,
    Nurse,
    Patient,
    Prescription,
    Procedure,
    Transaction,
    User,
)
from .services.identifiers import (
    APPOINTMENT_PREFIX,
    LAB_TEST_PREFIX,
    PATIENT_PREFIX,
    PROCEDURE_PREFIX,
    save_with_identifiers,
)
from .services.transactions import NUMBER_FIELDS as TRANSACTION_NUMBER_FIELDS, compute_total


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'is_staff', 'is_superuser', 'is_active')
    list_filter = ('role',)
    search_fields = ('username', 'first_name', 'last_name')


class NumberedAdmin(admin.ModelAdmin):
    # number column -> prefix, issued when a record is added
    number_fields: dict = {}

    def save_model(self, request, obj, form, change):
        if change:
            super().save_model(request, obj, form, change)
        else:
            save_with_identifiers(obj, self.number_fields)


@admin.register(Patient)
class PatientAdmin(NumberedAdmin):
    list_display = ('mr_number', 'first_name', 'last_name', 'phone', 'gender', 'is_active')
    list_filter = ('is_active', 'gender')
    search_fields = ('mr_number', 'first_name', 'last_name', 'phone')
    readonly_fields = ('mr_number',)
    number_fields = {'mr_number': PATIENT_PREFIX}


class DoctorScheduleInline(admin.TabularInline):
    model = DoctorSchedule
    extra = 0


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('id', 'first_name', 'last_name', 'specialization', 'status', 'is_active')
    list_filter = ('specialization', 'is_active')
    search_fields = ('first_name', 'last_name', 'license_number')
    inlines = [DoctorScheduleInline]


@admin.register(Nurse)
class NurseAdmin(admin.ModelAdmin):
    list_display = ('id', 'first_name', 'last_name', 'department', 'status')
    search_fields = ('first_name', 'last_name')


@admin.register(LabStaff)
class LabStaffAdmin(admin.ModelAdmin):
    list_display = ('id', 'first_name', 'last_name', 'department', 'status')
    search_fields = ('first_name', 'last_name')


@admin.register(LabTestCategory)
class LabTestCategoryAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'is_active')
    search_fields = ('name',)


@admin.register(Appointment)
class AppointmentAdmin(NumberedAdmin):
    list_display = ('appointment_number', 'patient', 'doctor', 'appointment_date', 'appointment_time', 'status')
    list_filter = ('status', 'appointment_date')
    search_fields = ('appointment_number', 'patient__mr_number', 'patient__last_name')
    readonly_fields = ('appointment_number',)
    number_fields = {'appointment_number': APPOINTMENT_PREFIX}


@admin.register(Procedure)
class ProcedureAdmin(NumberedAdmin):
    list_display = ('procedure_number', 'patient', 'doctor', 'procedure_name', 'procedure_date', 'status')
    list_filter = ('status',)
    search_fields = ('procedure_number', 'procedure_name', 'patient__mr_number')
    readonly_fields = ('procedure_number',)
    number_fields = {'procedure_number': PROCEDURE_PREFIX}


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'procedure', 'doctor', 'prescription_date')
    search_fields = ('patient__mr_number', 'medications')


@admin.register(LabTest)
class LabTestAdmin(NumberedAdmin):
    list_display = ('test_number', 'patient', 'category', 'test_name', 'test_date', 'status')
    list_filter = ('status', 'category')
    search_fields = ('test_number', 'test_name', 'patient__mr_number')
    readonly_fields = ('test_number',)
    number_fields = {'test_number': LAB_TEST_PREFIX}


@admin.register(Transaction)
class TransactionAdmin(NumberedAdmin):
    list_display = ('transaction_number', 'invoice_number', 'patient', 'amount', 'discount', 'total_amount', 'status')
    list_filter = ('status', 'payment_mode')
    search_fields = ('transaction_number', 'invoice_number', 'patient__mr_number')
    readonly_fields = ('transaction_number', 'invoice_number', 'total_amount')
    number_fields = TRANSACTION_NUMBER_FIELDS

    def save_model(self, request, obj, form, change):
        obj.total_amount = compute_total(obj.amount, obj.discount)
        super().save_model(request, obj, form, change)


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
    search_fields = ('object_id', 'user__username')
