"""
URL mappings for the medical management API.

Trailing slashes are omitted throughout (``APPEND_SLASH`` is off).  Record
numbers are looked up by value under ``by-mr/``; everything else is keyed
by primary key.
"""
from django.urls import path, include

from .auth_views import login_view, jwt_refresh_view, jwt_logout_view
from .views import appointments, dashboard, doctors, health, lab_tests, patients, procedures, staff, transactions

urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),

    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout_view'),

    path('api/patients', patients.patients, name='patients'),
    path('api/patients/next-number', patients.next_mr_number, name='next_mr_number'),
    path('api/patients/by-mr/<str:mr_number>', patients.patient_by_mr_number, name='patient_by_mr_number'),
    path('api/patients/<int:pk>', patients.patient_detail, name='patient_detail'),

    path('api/doctors', doctors.doctors, name='doctors'),
    path('api/doctors/<int:pk>', doctors.doctor_detail, name='doctor_detail'),
    path('api/doctors/<int:pk>/stats', doctors.doctor_stats, name='doctor_stats'),
    path('api/doctors/<int:pk>/schedules', doctors.doctor_schedules, name='doctor_schedules'),

    path('api/nurses', staff.nurses, name='nurses'),
    path('api/lab-staff', staff.lab_staff, name='lab_staff'),
    path('api/lab-categories', staff.lab_categories, name='lab_categories'),

    path('api/appointments', appointments.appointments, name='appointments'),
    path('api/appointments/<int:pk>', appointments.appointment_detail, name='appointment_detail'),
    path('api/appointments/<int:pk>/notify', appointments.appointment_notify, name='appointment_notify'),

    path('api/procedures', procedures.procedures, name='procedures'),
    path('api/procedures/<int:pk>', procedures.procedure_detail, name='procedure_detail'),
    path('api/prescriptions', procedures.prescriptions, name='prescriptions'),

    path('api/lab-tests', lab_tests.lab_tests, name='lab_tests'),
    path('api/lab-tests/<int:pk>', lab_tests.lab_test_detail, name='lab_test_detail'),

    path('api/transactions', transactions.transactions, name='transactions'),
    path('api/transactions/<int:pk>', transactions.transaction_detail, name='transaction_detail'),

    path('api/dashboard', dashboard.dashboard_summary, name='dashboard_summary'),
    path('api/dashboard/daily', dashboard.daily_appointments, name='dashboard_daily'),
    path('api/dashboard/monthly', dashboard.monthly_statistics, name='dashboard_monthly'),
]
