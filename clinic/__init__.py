"""Clinic application for the medical management backend.

This package contains the models, services, serializers, views and route
registrations for patients, staff, appointments, procedures, lab tests,
prescriptions and billing transactions.
"""
