import bleach
from rest_framework import serializers

GENDER_CHOICES = ['Male', 'Female', 'Other']
BLOOD_GROUPS = ['', 'A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-']


def clean_text(v):
    return bleach.clean((v or '').strip(), strip=True)


class PatientSerializer(serializers.Serializer):
    """Input for registering or editing a patient.

    ``mrNumber`` is optional on create; when left blank the next number for
    the current year is issued.  It is ignored on update.
    """
    mrNumber = serializers.CharField(source='mr_number', required=False, allow_blank=True, max_length=32)
    firstName = serializers.CharField(source='first_name', max_length=100)
    lastName = serializers.CharField(source='last_name', max_length=100)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32)
    alternatePhone = serializers.CharField(source='alternate_phone', required=False, allow_blank=True, max_length=32)
    dateOfBirth = serializers.DateField(source='date_of_birth', required=False, allow_null=True)
    age = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=150)
    gender = serializers.ChoiceField(choices=GENDER_CHOICES)
    address = serializers.CharField(required=False, allow_blank=True, max_length=255)
    city = serializers.CharField(required=False, allow_blank=True, max_length=100)
    state = serializers.CharField(required=False, allow_blank=True, max_length=100)
    zipCode = serializers.CharField(source='zip_code', required=False, allow_blank=True, max_length=20)
    bloodGroup = serializers.ChoiceField(source='blood_group', choices=BLOOD_GROUPS, required=False, allow_blank=True)
    emergencyContactName = serializers.CharField(source='emergency_contact_name', required=False, allow_blank=True, max_length=200)
    emergencyContactPhone = serializers.CharField(source='emergency_contact_phone', required=False, allow_blank=True, max_length=32)
    medicalHistory = serializers.CharField(source='medical_history', required=False, allow_blank=True)
    allergies = serializers.CharField(required=False, allow_blank=True)
    isActive = serializers.BooleanField(source='is_active', required=False)

    def validate_firstName(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('first name is required')
        return v

    def validate_lastName(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('last name is required')
        return v

    def validate_phone(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('phone number is required')
        return v

    def validate_medicalHistory(self, v):
        return clean_text(v)

    def validate_allergies(self, v):
        return clean_text(v)

    def validate_address(self, v):
        return clean_text(v)


class PatientListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True)
    activeOnly = serializers.BooleanField(required=False, default=False)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=200)
