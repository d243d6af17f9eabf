import pytest
from fastapi.testclient import TestClient

from entail.adapters.engine.scripted import ScriptedTransport, format_response
from entail.api.deps import get_classifier
from entail.api.errors import status_for
from entail.domain.errors import (
    ChannelBroken,
    ChannelBusy,
    ClassifierUnavailable,
    EntailError,
    MalformedResponse,
)
from entail.main import app

pytestmark = pytest.mark.unit


@pytest.fixture()
def client(make_classifier, transport):
    """
    Install a classifier over the scripted transport before startup so the
    lifespan does not try to spawn a real engine.
    """
    clf = make_classifier(transport)
    app.state.classifier = clf
    app.dependency_overrides[get_classifier] = lambda: clf
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
        app.state.classifier = None


def test_healthcheck(client):
    r = client.get('/')
    assert r.status_code == 200
    assert r.json() == {'status': 'ok', 'classifier': 'open'}


def test_best_premise_endpoint(client, transport):
    transport.queue(format_response(1.0, 1, [-4.0, 4.0]))
    r = client.post(
        '/entailment/best',
        json={
            'premises': ['cats have tails', 'cats have tails'],
            'hypothesis': 'cats have tails',
        },
    )
    assert r.status_code == 200
    body = r.json()
    assert body['index'] == 1
    assert body['premise'] == 'cats have tails'
    assert 0.0 < body['probability'] < 1.0


def test_classify_endpoint_short_circuit(client, transport):
    transport.queue(format_response(0.0, 0, [0.0]))
    r = client.post(
        '/entailment/classify',
        json={'premise': 'dogs bark', 'hypothesis': 'cats meow'},
    )
    assert r.status_code == 200
    assert r.json() == {'verdict': 'false', 'probability': 0.0}


def test_malformed_engine_response_maps_to_502(client, transport):
    transport.queue('not json at all', format_response(1.0, 0, [0.0]))
    r = client.post(
        '/entailment/classify', json={'premise': 'p', 'hypothesis': 'h'}
    )
    assert r.status_code == 502
    body = r.json()
    assert body['error'] == 'MalformedResponse'
    assert body['retryable'] is False

    # only that query failed
    r = client.post(
        '/entailment/classify', json={'premise': 'p', 'hypothesis': 'h'}
    )
    assert r.status_code == 200


def test_lost_engine_stream_maps_to_503_afterwards(client):
    r = client.post(
        '/entailment/classify', json={'premise': 'p', 'hypothesis': 'h'}
    )
    assert r.status_code == 502

    r = client.post(
        '/entailment/classify', json={'premise': 'p', 'hypothesis': 'h'}
    )
    assert r.status_code == 503
    assert r.json()['error'] == 'ClassifierUnavailable'


def test_relevance_mismatch_maps_to_422(client):
    r = client.post(
        '/entailment/best',
        json={'premises': ['a', 'b'], 'hypothesis': 'h', 'relevance_scores': [1.0]},
    )
    assert r.status_code == 422


def test_empty_premises_rejected_by_schema(client):
    r = client.post('/entailment/best', json={'premises': [], 'hypothesis': 'h'})
    assert r.status_code == 422


@pytest.mark.parametrize(
    'exc,status',
    [
        (MalformedResponse('x'), 502),
        (ChannelBusy('busy'), 409),
        (ChannelBroken('gone'), 503),
        (ClassifierUnavailable('fatal'), 503),
        (EntailError('other'), 500),
    ],
)
def test_status_for(exc, status):
    assert status_for(exc) == status


@pytest.mark.asyncio
async def test_lifespan_owns_and_closes_classifier(monkeypatch, make_classifier):
    import entail.main as main_mod

    transport = ScriptedTransport()
    built = []

    def fake_from_settings(cfg):
        clf = make_classifier(transport)
        built.append(clf)
        return clf

    monkeypatch.setattr(main_mod, 'classifier_from_settings', fake_from_settings)
    app.state.classifier = None

    async with main_mod.lifespan(app):
        assert app.state.classifier is built[0]
        assert not transport.closed

    assert transport.closed
    assert app.state.classifier is None
