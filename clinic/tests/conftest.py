import itertools

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from clinic.auth_views import issue_tokens
from clinic.models import Doctor, Patient, Role, User
from clinic.roles import role_for_user

_seq = itertools.count(1)


@pytest.fixture(autouse=True)
def _isolate(settings):
    # no outbound FHIR traffic unless a test opts in
    settings.FHIR_SYNC_ENABLE = False
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def roles(db):
    return {
        'admin': Role.objects.create(name='Administrador'),
        'physician': Role.objects.create(name='Médico'),
        'patient': Role.objects.create(name='Paciente'),
    }


@pytest.fixture
def make_user(roles):
    def _make(username=None, password='secret123', role='patient', is_active=True):
        n = next(_seq)
        username = username or f"user{n}"
        role_row = roles.get(role) if isinstance(role, str) else role
        return User.objects.create_user(
            username=username, email=f"{username.replace('.', '_')}.{n}@hospital.test",
            password=password, role=role_row, is_active=is_active,
        )
    return _make


@pytest.fixture
def make_patient(make_user):
    def _make(**kw):
        user = make_user(role='patient', **kw)
        return Patient.objects.create(user=user, identification_number=f"ID-{user.pk}", gender='female')
    return _make


@pytest.fixture
def make_doctor(make_user):
    def _make(specialty='Cardiología', **kw):
        user = make_user(role='physician', **kw)
        return Doctor.objects.create(user=user, specialty=specialty)
    return _make


def bearer(user, role=None) -> str:
    refresh = issue_tokens(user, role or role_for_user(user))
    return f"Bearer {refresh.access_token}"


@pytest.fixture
def client_for():
    def _client(user, role=None):
        c = APIClient()
        c.credentials(HTTP_AUTHORIZATION=bearer(user, role))
        return c
    return _client


@pytest.fixture
def admin_client(make_user, client_for):
    return client_for(make_user(role='admin'))


@pytest.fixture
def physician_client(make_user, client_for):
    return client_for(make_user(role='physician'))
