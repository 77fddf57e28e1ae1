"""
Pruebas de la carga de configuración desde el entorno.
"""

import pytest

from emotune.config import Settings


def test_defaults_without_environment():
    settings = Settings.from_env({}, dotenv=False)

    assert settings.google_credentials is None
    assert not settings.cloud_vision_configured
    assert settings.api_base_url == 'http://127.0.0.1:5000'
    assert settings.poll_interval == 1.0
    assert settings.music_trigger_threshold == 0.6
    assert settings.request_timeout is None


def test_environment_overrides():
    settings = Settings.from_env({
        'GOOGLE_CLOUD_CREDENTIALS': '{"type": "service_account"}',
        'EMOTUNE_API_URL': 'http://10.0.0.2:8000/',
        'EMOTUNE_PORT': '8000',
        'EMOTUNE_DEBUG': 'true',
        'EMOTUNE_CAMERA_INDEX': '1',
        'EMOTUNE_POLL_INTERVAL': '2.5',
        'EMOTUNE_VOLUME': '0.3',
        'EMOTUNE_REQUEST_TIMEOUT': '10',
    }, dotenv=False)

    assert settings.cloud_vision_configured
    assert settings.api_base_url == 'http://10.0.0.2:8000'
    assert settings.port == 8000
    assert settings.debug is True
    assert settings.camera_index == 1
    assert settings.poll_interval == 2.5
    assert settings.default_volume == 0.3
    assert settings.request_timeout == 10.0


def test_blank_credentials_are_not_configured():
    settings = Settings.from_env({'GOOGLE_CLOUD_CREDENTIALS': '   '}, dotenv=False)
    assert not settings.cloud_vision_configured


def test_invalid_number_raises():
    with pytest.raises(ValueError):
        Settings.from_env({'EMOTUNE_PORT': 'cinco mil'}, dotenv=False)
