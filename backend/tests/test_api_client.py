"""
Pruebas del cliente HTTP del backend con una sesión falsa.
"""

import pytest
import requests

from emotune.client.api import EmotionApiClient
from emotune.core.errors import CatalogError, TransportError
from emotune.core.music.catalog import get_catalog


class FakeResponse:
    def __init__(self, payload=None, status_code=200, invalid_json=False):
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self.invalid_json:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def request(self, method, url, json=None, timeout=None):
        self.requests.append((method, url, json, timeout))
        if self.error:
            raise self.error
        return self.response


def test_remote_configured_reads_health():
    session = FakeSession(FakeResponse({'status': 'healthy', 'googleCloudVision': {'configured': True}}))
    client = EmotionApiClient('http://backend:5000/', timeout=2.5, session=session)

    assert client.remote_configured()
    assert session.requests == [('GET', 'http://backend:5000/health', None, 2.5)]


def test_remote_not_configured_when_flag_missing():
    session = FakeSession(FakeResponse({'status': 'healthy'}))
    assert not EmotionApiClient('http://backend', session=session).remote_configured()


def test_network_failure_becomes_transport_error():
    session = FakeSession(error=requests.ConnectionError("connection refused"))
    with pytest.raises(TransportError):
        EmotionApiClient('http://backend', session=session).health()


def test_invalid_json_becomes_transport_error():
    session = FakeSession(FakeResponse(invalid_json=True))
    with pytest.raises(TransportError):
        EmotionApiClient('http://backend', session=session).detect_emotion(image_data='abc')


def test_detect_emotion_sends_payload():
    session = FakeSession(FakeResponse({'emotion': 'happy', 'confidence': 0.8, 'success': True}))
    data = EmotionApiClient('http://backend', session=session).detect_emotion(image_data='abc')

    assert data['emotion'] == 'happy'
    assert session.requests[0][2] == {'imageData': 'abc'}


def test_detect_emotion_unsuccessful_response():
    session = FakeSession(FakeResponse({'success': False, 'message': 'Imagen inválida'}, 400))
    with pytest.raises(TransportError):
        EmotionApiClient('http://backend', session=session).detect_emotion(image_data='abc')


def test_fetch_tracks_parses_songs():
    songs = [track.to_dict() for track in get_catalog().tracks_for('happy')[:2]]
    session = FakeSession(FakeResponse({'songs': songs, 'emotion': 'happy', 'success': True}))

    tracks = EmotionApiClient('http://backend', session=session).fetch_tracks('happy', limit=2)

    assert [track.id for track in tracks] == ['happy-1', 'happy-2']
    assert session.requests[0][2] == {'emotion': 'happy', 'limit': 2}


def test_fetch_tracks_failures_are_catalog_errors():
    broken = FakeSession(FakeResponse({'songs': [{'id': 'x'}], 'success': True}))
    with pytest.raises(CatalogError):
        EmotionApiClient('http://backend', session=broken).fetch_tracks('happy')

    down = FakeSession(error=requests.Timeout("timed out"))
    with pytest.raises(CatalogError):
        EmotionApiClient('http://backend', session=down).fetch_tracks('happy')
