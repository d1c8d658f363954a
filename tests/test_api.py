"""Tests for the Flask REST API."""

import pytest

import api
from api import app


@pytest.fixture
def client():
    app.config.update(TESTING=True, REGISTRY_BASE_URL=None, REGISTRY_DIR=None)
    with app.test_client() as client:
        yield client


def _parent(pid, species="Ball Python", **genetics):
    return {'id': pid, 'name': f"Snake {pid}", 'species': species, 'genetics': genetics}


def test_index(client):
    data = client.get('/').get_json()
    assert data['name'] == 'Morph Engine API'
    assert '/predict' in data['endpoints']


def test_species_list(client):
    data = client.get('/species').get_json()
    assert {s['id'] for s in data['species']} == {'python-regius', 'pantherophis-guttatus'}


def test_registry_lookup(client):
    data = client.get('/registry?species=Corn%20Snake').get_json()
    assert data['registry']['species']['id'] == 'pantherophis-guttatus'
    assert data['is_fallback'] is False


def test_registry_lookup_falls_back(client):
    data = client.get('/registry?species=Boa').get_json()
    assert data['is_fallback'] is True
    assert data['warnings']


def test_registry_requires_species(client):
    assert client.get('/registry').status_code == 400


def test_predict(client):
    response = client.post('/predict', json={
        'parent_a': _parent('1', mojave='het'),
        'parent_b': _parent('2', lesser='het'),
    })
    assert response.status_code == 200
    data = response.get_json()
    assert data['success'] is True
    morphs = {p['morph']: p['probability'] for p in data['predictions']}
    assert morphs['BEL (Lesser Mojave)'] == 25.0
    assert sum(morphs.values()) == pytest.approx(100.0, abs=0.01)
    assert 'chart' not in data


def test_predict_with_chart(client):
    response = client.post('/predict', json={
        'parent_a': _parent('1', pastel='het'),
        'parent_b': _parent('2', pastel='het'),
        'chart': True,
    })
    assert response.get_json()['chart'].startswith('data:image/png;base64,')


def test_predict_species_mismatch(client):
    response = client.post('/predict', json={
        'parent_a': _parent('1'),
        'parent_b': _parent('2', species='Corn Snake'),
    })
    assert response.status_code == 409
    assert response.get_json()['species'] == ['Ball Python', 'Corn Snake']


def test_predict_exclusivity_violation(client):
    response = client.post('/predict', json={
        'parent_a': _parent('1', yellowbelly='het', gravel='het'),
        'parent_b': _parent('2'),
    })
    assert response.status_code == 422
    violation = response.get_json()['violations'][0]
    assert violation == {
        'parent_id': '1',
        'parent_name': 'Snake 1',
        'group': 'Yellow Belly complex',
        'genes': ['Yellow Belly', 'Gravel'],
    }


def test_predict_rejects_bad_input(client):
    assert client.post('/predict', json={}).status_code == 400
    response = client.post('/predict', json={
        'parent_a': _parent('1', pastel='sorta'),
        'parent_b': _parent('2'),
    })
    assert response.status_code == 400
    assert 'sorta' in response.get_json()['error']


def test_validate(client):
    data = client.post('/validate', json={
        'parent_a': _parent('1', mojave='het', phantom='het'),
        'parent_b': _parent('2'),
    }).get_json()
    assert data['success'] is False
    assert data['validation']['violations'][0]['genes'] == ['Mojave', 'Phantom']


def test_validate_species_mismatch_skips_registry(client, monkeypatch):
    def no_loader():
        raise AssertionError("registry must not be resolved")

    monkeypatch.setattr(api, '_loader', no_loader)
    response = client.post('/validate', json={
        'parent_a': _parent('1'),
        'parent_b': _parent('2', species='Corn Snake'),
    })
    assert response.status_code == 409
    assert response.get_json()['species'] == ['Ball Python', 'Corn Snake']


@pytest.mark.parametrize("route", ['/predict', '/validate'])
def test_non_object_body_is_rejected(client, route):
    response = client.post(route, json=[_parent('1'), _parent('2')])
    assert response.status_code == 400


@pytest.mark.parametrize("field", ['hide_common', 'chart'])
def test_predict_rejects_non_boolean_flags(client, field):
    response = client.post('/predict', json={
        'parent_a': _parent('1', pastel='super'),
        'parent_b': _parent('2'),
        field: "false",
    })
    assert response.status_code == 400
    assert field in response.get_json()['error']


def test_predict_hide_common_false(client):
    data = client.post('/predict', json={
        'parent_a': _parent('1', pastel='super'),
        'parent_b': _parent('2', clown='het'),
        'hide_common': False,
    }).get_json()
    assert data['common_traits'] == ['Pastel']
    assert {r['morph'] for r in data['table']['rows']} == {'Pastel', 'Pastel het Clown'}
