"""
Fixtures compartidas por las pruebas.

Las pruebas no tocan red, cámara ni audio reales: usan dobles que
registran las llamadas.
"""

import random

import pytest

from emotune.config import Settings
from emotune.core.emotion.providers import Provider
from emotune.core.emotion.schema import DetectionResult, Emotion, ProviderKind, now_ms
from emotune.core.errors import PlaybackError, TransportError
from emotune.core.music.catalog import get_catalog
from emotune.client.audio import AudioOutput


class FakeAudio(AudioOutput):
    """Salida de audio en memoria que registra las operaciones."""

    def __init__(self, fail_load=False, fail_play=False):
        self.fail_load = fail_load
        self.fail_play = fail_play
        self.loaded = []
        self.calls = []
        self.volume = None
        self.finished = False

    async def load(self, url):
        self.calls.append('load')
        if self.fail_load:
            raise PlaybackError(f"No se pudo decodificar {url}")
        self.loaded.append(url)
        self.finished = False

    async def play(self):
        self.calls.append('play')
        if self.fail_play:
            raise PlaybackError("Reproducción bloqueada")

    def pause(self):
        self.calls.append('pause')

    def set_volume(self, volume):
        self.volume = volume

    def stop(self):
        self.calls.append('stop')

    def is_finished(self):
        return self.finished


class StaticProvider(Provider):
    """Proveedor que devuelve siempre la misma emoción."""

    kind = ProviderKind.LOCAL_MODEL

    def __init__(self, emotion=Emotion.HAPPY, confidence=0.9):
        self.emotion = emotion
        self.confidence = confidence
        self.calls = 0

    def detect(self, frame=None):
        self.calls += 1
        return self._result(self.emotion, self.confidence)


class FailingProvider(Provider):
    """Proveedor remoto que siempre falla por transporte."""

    kind = ProviderKind.REMOTE

    def __init__(self):
        self.calls = 0

    def detect(self, frame=None):
        self.calls += 1
        raise TransportError("Servicio caído")


def make_result(emotion, confidence, timestamp=None, provider=None):
    return DetectionResult(
        emotion=emotion,
        confidence=confidence,
        timestamp=now_ms() if timestamp is None else timestamp,
        provider=provider,
    )


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def catalog():
    return get_catalog()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def fake_audio():
    return FakeAudio()
