"""Input serializers for appointments, procedures, prescriptions, lab tests and transactions.

Related records are referenced by id (``patientId``, ``doctorId`` ...) and
resolved to model instances during validation.  Record numbers may be
supplied on create; blank numbers are issued by the services.
"""
from rest_framework import serializers

from clinic.models import (
    Appointment, Doctor, LabStaff, LabTest, LabTestCategory, Nurse, Patient, Procedure, Transaction,
)
from clinic.serializers.patient import clean_text


def _ref(model, source, required=False):
    return serializers.PrimaryKeyRelatedField(
        queryset=model.objects.all(), source=source, required=required, allow_null=not required,
    )


class AppointmentSerializer(serializers.Serializer):
    appointmentNumber = serializers.CharField(source='appointment_number', required=False, allow_blank=True, max_length=32)
    patientId = _ref(Patient, 'patient', required=True)
    doctorId = _ref(Doctor, 'doctor')
    nurseId = _ref(Nurse, 'nurse')
    appointmentDate = serializers.DateField(source='appointment_date')
    appointmentTime = serializers.TimeField(source='appointment_time')
    appointmentType = serializers.CharField(source='appointment_type', required=False, allow_blank=True, max_length=64)
    status = serializers.ChoiceField(choices=Appointment.STATUS_CHOICES, required=False)
    reason = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    isActive = serializers.BooleanField(source='is_active', required=False)

    def validate_reason(self, v):
        return clean_text(v)

    def validate_notes(self, v):
        return clean_text(v)


class NotifySerializer(serializers.Serializer):
    type = serializers.CharField(max_length=16)


class ProcedureSerializer(serializers.Serializer):
    procedureNumber = serializers.CharField(source='procedure_number', required=False, allow_blank=True, max_length=32)
    patientId = _ref(Patient, 'patient', required=True)
    doctorId = _ref(Doctor, 'doctor')
    nurseId = _ref(Nurse, 'nurse')
    procedureType = serializers.CharField(source='procedure_type', required=False, allow_blank=True, max_length=64)
    procedureName = serializers.CharField(source='procedure_name', max_length=255)
    procedureDate = serializers.DateField(source='procedure_date')
    procedureTime = serializers.TimeField(source='procedure_time', required=False, allow_null=True)
    treatmentNotes = serializers.CharField(source='treatment_notes', required=False, allow_blank=True)
    status = serializers.CharField(required=False, max_length=20)
    cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    invoiceGenerated = serializers.BooleanField(source='invoice_generated', required=False)
    isActive = serializers.BooleanField(source='is_active', required=False)

    def validate_treatmentNotes(self, v):
        return clean_text(v)


class PrescriptionSerializer(serializers.Serializer):
    prescriptionNumber = serializers.CharField(source='prescription_number', required=False, allow_blank=True, max_length=32)
    patientId = _ref(Patient, 'patient', required=True)
    procedureId = _ref(Procedure, 'procedure')
    doctorId = _ref(Doctor, 'doctor')
    prescriptionDate = serializers.DateField(source='prescription_date')
    medications = serializers.CharField()
    instructions = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate_medications(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('medications are required')
        return v

    def validate(self, attrs):
        procedure = attrs.get('procedure')
        if procedure and procedure.patient_id != attrs['patient'].id:
            raise serializers.ValidationError({'procedureId': 'procedure belongs to another patient'})
        return attrs


class LabTestSerializer(serializers.Serializer):
    testNumber = serializers.CharField(source='test_number', required=False, allow_blank=True, max_length=32)
    patientId = _ref(Patient, 'patient', required=True)
    procedureId = _ref(Procedure, 'procedure')
    categoryId = _ref(LabTestCategory, 'category', required=True)
    assignedToId = _ref(LabStaff, 'assigned_to')
    testName = serializers.CharField(source='test_name', max_length=255)
    testDate = serializers.DateField(source='test_date')
    sampleCollectionDate = serializers.DateTimeField(source='sample_collection_date', required=False, allow_null=True)
    reportDate = serializers.DateTimeField(source='report_date', required=False, allow_null=True)
    status = serializers.ChoiceField(choices=LabTest.STATUS_CHOICES, required=False)
    reportFile = serializers.FileField(source='report_file', required=False, allow_null=True)
    reportText = serializers.CharField(source='report_text', required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    invoiceGenerated = serializers.BooleanField(source='invoice_generated', required=False)
    isActive = serializers.BooleanField(source='is_active', required=False)

    def validate_reportFile(self, f):
        from django.conf import settings
        if not f:
            return f
        if (f.size or 0) > settings.UPLOAD_MAX_MB * 1024 * 1024:
            raise serializers.ValidationError('file too large')
        ctype = getattr(f, 'content_type', '') or ''
        if not any(ctype.startswith(prefix) for prefix in settings.ALLOWED_UPLOAD_TYPES):
            raise serializers.ValidationError('unsupported file type')
        return f


class TransactionSerializer(serializers.Serializer):
    transactionNumber = serializers.CharField(source='transaction_number', required=False, allow_blank=True, max_length=32)
    invoiceNumber = serializers.CharField(source='invoice_number', required=False, allow_blank=True, max_length=32)
    patientId = _ref(Patient, 'patient', required=True)
    appointmentId = _ref(Appointment, 'appointment')
    procedureId = _ref(Procedure, 'procedure')
    labTestId = _ref(LabTest, 'lab_test')
    transactionType = serializers.CharField(source='transaction_type', required=False, allow_blank=True, max_length=64)
    paymentMode = serializers.CharField(source='payment_mode', required=False, allow_blank=True, max_length=32)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)
    transactionDate = serializers.DateTimeField(source='transaction_date', required=False)
    status = serializers.ChoiceField(choices=Transaction.STATUS_CHOICES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    paymentConfirmationSent = serializers.BooleanField(source='payment_confirmation_sent', required=False)
    isActive = serializers.BooleanField(source='is_active', required=False)

    def validate(self, attrs):
        amount = attrs.get('amount', getattr(self.instance, 'amount', None))
        discount = attrs.get('discount', getattr(self.instance, 'discount', None))
        if amount is not None and discount is not None and discount > amount:
            raise serializers.ValidationError({'discount': 'discount cannot exceed amount'})
        return attrs
