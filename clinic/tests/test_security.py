from datetime import timedelta

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from clinic.auth_views import issue_tokens
from clinic.models import AuditEvent, Role

pytestmark = pytest.mark.django_db


def login(client, username, password):
    return client.post('/api/auth/login', {'username': username, 'password': password}, format='json')


# ---------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------
def test_login_physician_token_carries_canonical_role(make_user):
    make_user(username='dr.jones', password='x', role='physician')
    r = login(APIClient(), 'dr.jones', 'x')
    assert r.status_code == 200
    assert r.data['success'] is True
    assert r.data['user']['role'] == 'physician'
    assert r.data['user']['name'] == 'dr.jones'
    claims = AccessToken(r.data['token'])
    assert claims['role'] == 'physician'
    assert claims['username'] == 'dr.jones'
    assert claims['email'].endswith('@hospital.test')
    assert r.data['refresh']


def test_login_wrong_password(make_user):
    make_user(username='dr.jones', password='x', role='physician')
    r = login(APIClient(), 'dr.jones', 'wrong')
    assert r.status_code == 401
    assert r.data == {'success': False, 'error': 'Credenciales inválidas'}


def test_login_unknown_user_is_indistinguishable(roles):
    r = login(APIClient(), 'nobody', 'x')
    assert r.status_code == 401
    assert r.data['error'] == 'Credenciales inválidas'


def test_login_inactive_account(make_user):
    make_user(username='old', password='secret123', role='patient', is_active=False)
    r = login(APIClient(), 'old', 'secret123')
    assert r.status_code == 401
    assert r.data['error'] == 'Cuenta desactivada'


def test_login_role_without_translation(make_user):
    janitor = Role.objects.create(name='Conserje')
    make_user(username='jan', password='secret123', role=janitor)
    r = login(APIClient(), 'jan', 'secret123')
    assert r.status_code == 403
    assert r.data['error'] == 'Rol de usuario no válido'


def test_login_missing_fields():
    r = APIClient().post('/api/auth/login', {'username': 'a'}, format='json')
    assert r.status_code == 400
    assert r.data['success'] is False


def test_login_attempts_are_audited(make_user):
    make_user(username='dr.jones', password='x', role='physician')
    login(APIClient(), 'dr.jones', 'x')
    login(APIClient(), 'dr.jones', 'bad')
    results = list(AuditEvent.objects.filter(action='login').values_list('detail__result', flat=True))
    assert sorted(results) == ['fail', 'ok']


def test_refresh_and_logout_blacklists(make_user):
    make_user(username='p1', password='secret123', role='patient')
    client = APIClient()
    r = login(client, 'p1', 'secret123')
    refresh = r.data['refresh']

    r2 = client.post('/api/auth/refresh', {'refresh': refresh}, format='json')
    assert r2.status_code == 200
    assert AccessToken(r2.data['token'])['role'] == 'patient'

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['token']}")
    r3 = client.post('/api/auth/logout', {'refresh': refresh}, format='json')
    assert r3.status_code == 200
    assert r3.data['blacklisted'] == 1

    r4 = APIClient().post('/api/auth/refresh', {'refresh': refresh}, format='json')
    assert r4.status_code == 401


def test_refresh_rejects_garbage():
    r = APIClient().post('/api/auth/refresh', {'refresh': 'not-a-token'}, format='json')
    assert r.status_code == 401


def test_status_is_public():
    r = APIClient().get('/api/auth/status')
    assert r.status_code == 200
    assert r.data['status'] == 'ok'


# ---------------------------------------------------------------------
# Bearer authenticator
# ---------------------------------------------------------------------
def test_missing_token_is_401():
    r = APIClient().get('/api/conditions')
    assert r.status_code == 401
    assert r.data == {'success': False, 'error': 'Token no proporcionado'}


def test_malformed_token_is_401():
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION='Bearer abc.def.ghi')
    r = c.get('/api/conditions')
    assert r.status_code == 401


def test_expired_token_is_401_not_403(make_user):
    user = make_user(role='admin')
    token = issue_tokens(user, 'admin').access_token
    token.set_exp(lifetime=timedelta(seconds=-5))
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    r = c.get('/api/conditions')
    assert r.status_code == 401


def test_token_for_deleted_user_is_401(make_user):
    user = make_user(role='physician')
    token = issue_tokens(user, 'physician').access_token
    user.delete()
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    r = c.get('/api/conditions')
    assert r.status_code == 401


def test_token_for_deactivated_user_is_401(make_user):
    user = make_user(role='physician')
    token = issue_tokens(user, 'physician').access_token
    user.is_active = False
    user.save(update_fields=['is_active'])
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    assert c.get('/api/conditions').status_code == 401


def test_untranslatable_role_claim_is_403(make_user):
    user = make_user(role='physician')
    token = issue_tokens(user, 'janitor').access_token
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    r = c.get('/api/conditions')
    assert r.status_code == 403
    assert r.data['error'] == 'Rol de usuario no válido'


def test_role_claim_is_normalized(make_user, client_for):
    user = make_user(role='physician')
    r = client_for(user, role='Médico').get('/api/conditions')
    assert r.status_code == 200


def test_patient_cannot_use_staff_routes(make_patient, client_for):
    p = make_patient()
    r = client_for(p.user).get('/api/doctors')
    assert r.status_code == 403


# ---------------------------------------------------------------------
# Patient record ownership
# ---------------------------------------------------------------------
def test_patient_reads_own_history(make_patient, client_for):
    p = make_patient()
    r = client_for(p.user).get(f'/api/medical-history/patient/{p.id}')
    assert r.status_code == 200
    assert r.data['patient_id'] == p.id


def test_patient_cannot_read_other_history(make_patient, client_for):
    me, other = make_patient(), make_patient()
    r = client_for(me.user).get(f'/api/medical-history/patient/{other.id}')
    assert r.status_code == 403
    assert r.data['error'] == 'No tienes acceso a los datos de otro paciente'


def test_patient_body_reference_is_checked(make_patient, client_for):
    me, other = make_patient(), make_patient()
    r = client_for(me.user).post('/api/patient-medications', {'patient_id': other.id, 'medication_id': 1, 'doctor_id': 1},
                                 format='json')
    assert r.status_code == 403
    assert r.data['error'] == 'No tienes acceso a los datos de otro paciente'


def test_patient_query_param_reference_is_checked(make_patient, client_for):
    me, other = make_patient(), make_patient()
    r = client_for(me.user).get('/api/patient-medications', {'patient_id': other.id})
    assert r.status_code == 403


def test_patient_without_reference_passes(make_patient, client_for):
    me = make_patient()
    r = client_for(me.user).get('/api/patients-with-conditions')
    assert r.status_code == 200
    assert r.data == []


def test_patient_by_user_only_own(make_patient, client_for):
    me, other = make_patient(), make_patient()
    c = client_for(me.user)
    assert c.get(f'/api/patients/by-user/{me.user_id}').status_code == 200
    assert c.get(f'/api/patients/by-user/{other.user_id}').status_code == 403


def test_physician_can_read_any_history(make_patient, make_user, client_for):
    p = make_patient()
    r = client_for(make_user(role='physician')).get(f'/api/medical-history/patient/{p.id}')
    assert r.status_code == 200


def test_admin_routes_reject_physicians(physician_client):
    assert physician_client.get('/api/users').status_code == 403
    assert physician_client.get('/api/admin/dashboard').status_code == 403
