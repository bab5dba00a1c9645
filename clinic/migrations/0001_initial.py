import clinic.models
import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


def _base_fields():
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('is_active', models.BooleanField(db_index=True, default=True)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
    ]


def _person_fields():
    return [
        ('first_name', models.CharField(max_length=100)),
        ('last_name', models.CharField(max_length=100)),
        ('email', models.EmailField(blank=True, max_length=254)),
        ('phone', models.CharField(blank=True, max_length=32)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('role', models.CharField(choices=[('admin', 'Admin'), ('doctor', 'Doctor'), ('nurse', 'Nurse'), ('lab_staff', 'Lab staff'), ('receptionist', 'Receptionist')], default='receptionist', max_length=16)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'user',
                'verbose_name_plural': 'users',
                'abstract': False,
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Doctor',
            fields=_base_fields() + _person_fields() + [
                ('specialization', models.CharField(blank=True, db_index=True, max_length=120)),
                ('address', models.CharField(blank=True, max_length=255)),
                ('qualification', models.CharField(blank=True, max_length=255)),
                ('license_number', models.CharField(blank=True, max_length=64)),
                ('date_of_birth', models.DateField(blank=True, null=True)),
                ('gender', models.CharField(blank=True, max_length=16)),
                ('consultation_fee', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('status', models.CharField(default='Active', max_length=20)),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='Nurse',
            fields=_base_fields() + _person_fields() + [
                ('license_number', models.CharField(blank=True, max_length=64)),
                ('department', models.CharField(blank=True, max_length=120)),
                ('status', models.CharField(default='Active', max_length=20)),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='LabStaff',
            fields=_base_fields() + _person_fields() + [
                ('department', models.CharField(blank=True, max_length=120)),
                ('status', models.CharField(default='Active', max_length=20)),
            ],
            options={'verbose_name_plural': 'lab staff'},
        ),
        migrations.CreateModel(
            name='LabTestCategory',
            fields=_base_fields() + [
                ('name', models.CharField(max_length=120, unique=True)),
                ('description', models.TextField(blank=True)),
            ],
            options={'verbose_name_plural': 'lab test categories'},
        ),
        migrations.CreateModel(
            name='Patient',
            fields=_base_fields() + [
                ('mr_number', models.CharField(max_length=32, unique=True)),
                ('first_name', models.CharField(max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('phone', models.CharField(max_length=32)),
                ('alternate_phone', models.CharField(blank=True, max_length=32)),
                ('date_of_birth', models.DateField(blank=True, null=True)),
                ('age', models.PositiveIntegerField(blank=True, null=True)),
                ('gender', models.CharField(max_length=16)),
                ('address', models.CharField(blank=True, max_length=255)),
                ('city', models.CharField(blank=True, max_length=100)),
                ('state', models.CharField(blank=True, max_length=100)),
                ('zip_code', models.CharField(blank=True, max_length=20)),
                ('blood_group', models.CharField(blank=True, max_length=8)),
                ('emergency_contact_name', models.CharField(blank=True, max_length=200)),
                ('emergency_contact_phone', models.CharField(blank=True, max_length=32)),
                ('medical_history', models.TextField(blank=True)),
                ('allergies', models.TextField(blank=True)),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='DoctorSchedule',
            fields=_base_fields() + [
                ('day_of_week', models.PositiveSmallIntegerField(choices=[(0, 'Monday'), (1, 'Tuesday'), (2, 'Wednesday'), (3, 'Thursday'), (4, 'Friday'), (5, 'Saturday'), (6, 'Sunday')])),
                ('start_time', models.TimeField()),
                ('end_time', models.TimeField()),
                ('is_available', models.BooleanField(default=True)),
                ('doctor', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='schedules', to='clinic.doctor')),
            ],
            options={
                'indexes': [models.Index(fields=['doctor', 'day_of_week'], name='clinic_sched_doctor_day_idx')],
            },
        ),
        migrations.CreateModel(
            name='Appointment',
            fields=_base_fields() + [
                ('appointment_number', models.CharField(max_length=32, unique=True)),
                ('appointment_date', models.DateField(db_index=True)),
                ('appointment_time', models.TimeField()),
                ('appointment_type', models.CharField(blank=True, max_length=64)),
                ('status', models.CharField(choices=[('Scheduled', 'Scheduled'), ('Confirmed', 'Confirmed'), ('Completed', 'Completed'), ('Cancelled', 'Cancelled'), ('NoShow', 'No show')], default='Scheduled', max_length=16)),
                ('reason', models.TextField(blank=True)),
                ('notes', models.TextField(blank=True)),
                ('sms_notification_sent', models.BooleanField(default=False)),
                ('whatsapp_notification_sent', models.BooleanField(default=False)),
                ('notification_sent_at', models.DateTimeField(blank=True, null=True)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='appointments', to='clinic.patient')),
                ('doctor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='appointments', to='clinic.doctor')),
                ('nurse', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='appointments', to='clinic.nurse')),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='Procedure',
            fields=_base_fields() + [
                ('procedure_number', models.CharField(max_length=32, unique=True)),
                ('procedure_type', models.CharField(blank=True, max_length=64)),
                ('procedure_name', models.CharField(max_length=255)),
                ('procedure_date', models.DateField(db_index=True)),
                ('procedure_time', models.TimeField(blank=True, null=True)),
                ('treatment_notes', models.TextField(blank=True)),
                ('status', models.CharField(default='Scheduled', max_length=20)),
                ('cost', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('invoice_generated', models.BooleanField(default=False)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='procedures', to='clinic.patient')),
                ('doctor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='procedures', to='clinic.doctor')),
                ('nurse', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='procedures', to='clinic.nurse')),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='LabTest',
            fields=_base_fields() + [
                ('test_number', models.CharField(max_length=32, unique=True)),
                ('test_name', models.CharField(max_length=255)),
                ('test_date', models.DateField(db_index=True)),
                ('sample_collection_date', models.DateTimeField(blank=True, null=True)),
                ('report_date', models.DateTimeField(blank=True, null=True)),
                ('status', models.CharField(choices=[('Booked', 'Booked'), ('SampleCollected', 'Sample collected'), ('InProgress', 'In progress'), ('Completed', 'Completed'), ('Cancelled', 'Cancelled')], default='Booked', max_length=20)),
                ('report_file', models.FileField(blank=True, max_length=512, upload_to=clinic.models._report_upload)),
                ('report_text', models.TextField(blank=True)),
                ('notes', models.TextField(blank=True)),
                ('cost', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('invoice_generated', models.BooleanField(default=False)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='lab_tests', to='clinic.patient')),
                ('procedure', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='lab_tests', to='clinic.procedure')),
                ('category', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='lab_tests', to='clinic.labtestcategory')),
                ('assigned_to', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='lab_tests', to='clinic.labstaff')),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='Prescription',
            fields=_base_fields() + [
                ('prescription_number', models.CharField(blank=True, max_length=32)),
                ('prescription_date', models.DateField()),
                ('medications', models.TextField()),
                ('instructions', models.TextField(blank=True)),
                ('notes', models.TextField(blank=True)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='prescriptions', to='clinic.patient')),
                ('procedure', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='prescriptions', to='clinic.procedure')),
                ('doctor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='prescriptions', to='clinic.doctor')),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='Transaction',
            fields=_base_fields() + [
                ('transaction_number', models.CharField(max_length=32, unique=True)),
                ('invoice_number', models.CharField(max_length=32, unique=True)),
                ('transaction_type', models.CharField(blank=True, max_length=64)),
                ('payment_mode', models.CharField(blank=True, max_length=32)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('discount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('total_amount', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('transaction_date', models.DateTimeField(db_index=True)),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('Paid', 'Paid'), ('Cancelled', 'Cancelled'), ('Refunded', 'Refunded')], db_index=True, default='Pending', max_length=16)),
                ('notes', models.TextField(blank=True)),
                ('payment_confirmation_sent', models.BooleanField(default=False)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='clinic.patient')),
                ('appointment', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='transactions', to='clinic.appointment')),
                ('procedure', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='transactions', to='clinic.procedure')),
                ('lab_test', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='transactions', to='clinic.labtest')),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='AuditEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(max_length=64)),
                ('object_type', models.CharField(blank=True, max_length=64, null=True)),
                ('object_id', models.IntegerField(blank=True, null=True)),
                ('detail', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['action', 'created_at'], name='clinic_audit_action_idx'),
                    models.Index(fields=['object_type', 'object_id', 'created_at'], name='clinic_audit_object_idx'),
                ],
            },
        ),
    ]
