import datetime
import itertools

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from clinic.models import Doctor, LabTestCategory, Patient, User


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttle counters and the dashboard summary live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    seq = itertools.count(1)

    def make(role, username=None):
        username = username or f'{role}_{next(seq)}'
        return User.objects.create_user(username=username, password='P@ssw0rd1', role=role)
    return make


@pytest.fixture
def client_for(make_user):
    def build(role):
        client = APIClient()
        client.force_authenticate(user=make_user(role))
        return client
    return build


@pytest.fixture
def patient(db):
    return Patient.objects.create(mr_number='MR2024-000001', first_name='Ada', last_name='Lovelace',
                                  phone='555-0100', gender='Female')


@pytest.fixture
def doctor(db):
    return Doctor.objects.create(first_name='Gregory', last_name='House', specialization='Diagnostics')


@pytest.fixture
def category(db):
    return LabTestCategory.objects.create(name='Haematology')


@pytest.fixture
def today():
    return datetime.date.today()
