import pytest
import requests

from clinic.models import Doctor, Patient
from clinic.services import fhir

pytestmark = pytest.mark.django_db


class FakeResponse:
    def __init__(self, status=200, payload=None):
        self.status_code = status
        self._payload = payload or {}
        self.content = b'{}' if payload is not None else b''

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


@pytest.fixture
def fhir_calls(settings, monkeypatch):
    settings.FHIR_SYNC_ENABLE = True
    settings.FHIR_BASE_URL = 'https://fhir.test/baseR4/'
    calls = []
    responses = []

    def fake_request(method, url, json=None, headers=None, timeout=None):
        calls.append((method, url, json))
        if responses:
            r = responses.pop(0)
            if isinstance(r, Exception):
                raise r
            return r
        return FakeResponse(200, {'id': 'srv-1'})

    monkeypatch.setattr(fhir.requests, 'request', fake_request)
    return calls, responses


def test_practitioner_resource_shape(make_doctor):
    d = make_doctor(username='dr.house', specialty='Nefrología')
    res = fhir.practitioner_resource(d)
    assert res['resourceType'] == 'Practitioner'
    assert res['identifier'][0]['value'] == f"medico-{d.id}"
    assert res['qualification'][0]['code']['text'] == 'Nefrología'
    assert res['name'][0]['given'] == ['dr.house']
    assert 'id' not in res


def test_patient_resource_maps_spanish_gender(make_patient):
    p = make_patient()
    p.gender = 'Masculino'
    res = fhir.patient_resource(p)
    assert res['gender'] == 'male'
    assert res['identifier'][0]['value'] == p.identification_number


def _blank_leaves(node, path='$'):
    if isinstance(node, dict):
        return [leaf for k, v in node.items() for leaf in _blank_leaves(v, f"{path}.{k}")]
    if isinstance(node, list):
        return [leaf for i, v in enumerate(node) for leaf in _blank_leaves(v, f"{path}[{i}]")]
    return [path] if node == '' else []


def test_patient_resource_omits_blank_contact_fields(make_patient):
    p = make_patient()
    p.user.email = ''
    res = fhir.patient_resource(p)
    assert _blank_leaves(res) == []
    assert 'telecom' not in res
    assert 'address' not in res


def test_patient_resource_keeps_filled_contact_fields(make_patient):
    p = make_patient()
    p.phone, p.address = '555-0101', 'Calle 1'
    res = fhir.patient_resource(p)
    assert res['telecom'][0] == {'system': 'phone', 'value': '555-0101'}
    assert res['telecom'][1]['system'] == 'email'
    assert res['address'] == [{'text': 'Calle 1'}]


def test_doctor_create_posts_practitioner_and_stores_id(make_user, admin_client, fhir_calls):
    calls, _ = fhir_calls
    u = make_user(role='physician')
    r = admin_client.post('/api/doctors', {'user_id': u.id, 'specialty': 'Pediatría'}, format='json')
    assert r.status_code == 201
    assert calls[0][0] == 'POST'
    assert calls[0][1] == 'https://fhir.test/baseR4/Practitioner'
    assert Doctor.objects.get(id=r.data['id']).fhir_id == 'srv-1'
    assert r.data['fhir_id'] == 'srv-1'


def test_doctor_update_puts_existing_resource(make_doctor, admin_client, fhir_calls):
    calls, _ = fhir_calls
    d = make_doctor()
    Doctor.objects.filter(id=d.id).update(fhir_id='abc')
    r = admin_client.put(f'/api/doctors/{d.id}', {'specialty': 'Oncología'}, format='json')
    assert r.status_code == 200
    assert calls[0][:2] == ('PUT', 'https://fhir.test/baseR4/Practitioner/abc')
    assert calls[0][2]['qualification'][0]['code']['text'] == 'Oncología'


def test_doctor_delete_succeeds_when_fhir_fails(make_doctor, admin_client, fhir_calls):
    calls, responses = fhir_calls
    d = make_doctor()
    Doctor.objects.filter(id=d.id).update(fhir_id='abc')
    responses.append(requests.ConnectionError('fhir down'))
    r = admin_client.delete(f'/api/doctors/{d.id}')
    assert r.status_code == 204
    assert not Doctor.objects.filter(id=d.id).exists()
    assert calls[0][:2] == ('DELETE', 'https://fhir.test/baseR4/Practitioner/abc')


def test_patient_create_survives_fhir_server_error(make_user, physician_client, fhir_calls):
    _, responses = fhir_calls
    responses.append(FakeResponse(500))
    u = make_user(role='patient')
    r = physician_client.post('/api/patients', {'user_id': u.id, 'identification_number': '42'}, format='json')
    assert r.status_code == 201
    assert Patient.objects.get(id=r.data['id']).fhir_id is None


def test_patient_update_puts_existing_resource(make_patient, physician_client, fhir_calls):
    calls, _ = fhir_calls
    p = make_patient()
    Patient.objects.filter(id=p.id).update(fhir_id='abc')
    r = physician_client.put(f'/api/patients/{p.id}', {'phone': '555-0101'}, format='json')
    assert r.status_code == 200
    assert calls[0][:2] == ('PUT', 'https://fhir.test/baseR4/Patient/abc')
    assert calls[0][2]['telecom'][0]['value'] == '555-0101'


def test_patient_delete_succeeds_when_fhir_fails(make_patient, physician_client, fhir_calls):
    calls, responses = fhir_calls
    p = make_patient()
    Patient.objects.filter(id=p.id).update(fhir_id='abc')
    responses.append(requests.ConnectionError('fhir down'))
    r = physician_client.delete(f'/api/patients/{p.id}')
    assert r.status_code == 204
    assert not Patient.objects.filter(id=p.id).exists()
    assert calls[0][:2] == ('DELETE', 'https://fhir.test/baseR4/Patient/abc')


def test_sync_disabled_makes_no_calls(make_doctor, settings, monkeypatch):
    settings.FHIR_SYNC_ENABLE = False

    def boom(*a, **kw):
        raise AssertionError('no HTTP expected')

    monkeypatch.setattr(fhir.requests, 'request', boom)
    assert fhir.sync_doctor(make_doctor()) is None
    assert fhir.unsync_doctor('abc') is False
