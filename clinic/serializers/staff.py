from rest_framework import serializers

from clinic.models import DoctorSchedule


class PersonSerializer(serializers.Serializer):
    firstName = serializers.CharField(source='first_name', max_length=100)
    lastName = serializers.CharField(source='last_name', max_length=100)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    status = serializers.CharField(required=False, max_length=20)
    isActive = serializers.BooleanField(source='is_active', required=False)


class DoctorSerializer(PersonSerializer):
    specialization = serializers.CharField(required=False, allow_blank=True, max_length=120)
    address = serializers.CharField(required=False, allow_blank=True, max_length=255)
    qualification = serializers.CharField(required=False, allow_blank=True, max_length=255)
    licenseNumber = serializers.CharField(source='license_number', required=False, allow_blank=True, max_length=64)
    dateOfBirth = serializers.DateField(source='date_of_birth', required=False, allow_null=True)
    gender = serializers.CharField(required=False, allow_blank=True, max_length=16)
    consultationFee = serializers.DecimalField(source='consultation_fee', max_digits=12, decimal_places=2,
                                               min_value=0, required=False)


class NurseSerializer(PersonSerializer):
    licenseNumber = serializers.CharField(source='license_number', required=False, allow_blank=True, max_length=64)
    department = serializers.CharField(required=False, allow_blank=True, max_length=120)


class LabStaffSerializer(PersonSerializer):
    department = serializers.CharField(required=False, allow_blank=True, max_length=120)


class LabTestCategorySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    description = serializers.CharField(required=False, allow_blank=True)


class DoctorScheduleSerializer(serializers.Serializer):
    dayOfWeek = serializers.ChoiceField(source='day_of_week', choices=DoctorSchedule.DAY_CHOICES)
    startTime = serializers.TimeField(source='start_time')
    endTime = serializers.TimeField(source='end_time')
    isAvailable = serializers.BooleanField(source='is_available', required=False, default=True)
