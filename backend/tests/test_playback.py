"""
Pruebas del reproductor guiado por emociones y del puente detección-música.
"""

import asyncio
import random

import pytest

from emotune.client.bridge import EmotionMusicBridge
from emotune.client.playback import MusicPlayer, PlaybackState, TrackSource
from emotune.core.emotion.schema import Emotion
from emotune.core.errors import CatalogError, PlaybackError
from emotune.core.music.catalog import get_catalog

from conftest import FakeAudio, make_result


class BrokenCatalogClient:
    def __init__(self):
        self.calls = 0

    def fetch_tracks(self, emotion, limit=None, confidence=None):
        self.calls += 1
        raise CatalogError("backend caído")


def _player(audio, api_client=None):
    return MusicPlayer(TrackSource(get_catalog(), api_client=api_client), audio,
                       rng=random.Random(42))


def test_select_for_emotion_loads_and_plays():
    audio = FakeAudio()

    async def scenario():
        player = _player(audio)
        changed = await player.select_for_emotion(Emotion.HAPPY)
        return player, changed

    player, changed = asyncio.run(scenario())
    session = player.session

    assert changed
    assert session.current_track.emotion == Emotion.HAPPY
    assert session.current_track == session.active_playlist[session.position_index]
    assert session.is_playing
    assert player.state == PlaybackState.PLAYING
    assert audio.calls == ['load', 'play']


def test_same_emotion_is_a_no_op():
    audio = FakeAudio()

    async def scenario():
        player = _player(audio)
        await player.select_for_emotion(Emotion.HAPPY)
        track = player.session.current_track
        changed = await player.select_for_emotion('happy')
        return player, track, changed

    player, track, changed = asyncio.run(scenario())

    assert not changed
    assert player.session.current_track is track
    assert len(audio.loaded) == 1


def test_new_emotion_replaces_playlist():
    audio = FakeAudio()

    async def scenario():
        player = _player(audio)
        await player.select_for_emotion(Emotion.HAPPY)
        await player.select_for_emotion(Emotion.SAD)
        return player

    player = asyncio.run(scenario())
    assert player.session.current_track.emotion == Emotion.SAD
    assert all(track.emotion == Emotion.SAD for track in player.session.active_playlist)
    assert len(audio.loaded) == 2


def test_next_and_previous_wrap_around():
    audio = FakeAudio()

    async def scenario():
        player = _player(audio)
        await player.select_for_emotion(Emotion.HAPPY)
        size = len(player.session.active_playlist)
        start = player.session.position_index

        player.session.position_index = size - 1
        await player.next()
        after_next = player.session.position_index

        await player.previous()
        after_previous = player.session.position_index
        return player, start, after_next, after_previous, size

    player, _, after_next, after_previous, size = asyncio.run(scenario())

    assert after_next == 0
    assert after_previous == size - 1
    assert player.session.current_track == player.session.active_playlist[size - 1]
    assert player.session.is_playing


def test_next_while_paused_stays_paused():
    audio = FakeAudio()

    async def scenario():
        player = _player(audio)
        await player.select_for_emotion(Emotion.SAD)
        await player.play_pause()
        await player.next()
        return player

    player = asyncio.run(scenario())
    assert not player.session.is_playing
    assert player.state == PlaybackState.READY
    assert audio.calls.count('play') == 1


def test_play_pause_without_track_does_nothing():
    audio = FakeAudio()

    async def scenario():
        player = _player(audio)
        return player, await player.play_pause(), await player.next()

    player, toggled, advanced = asyncio.run(scenario())

    assert not toggled
    assert not advanced
    assert audio.calls == []
    assert player.state == PlaybackState.EMPTY


def test_play_pause_toggles():
    audio = FakeAudio()

    async def scenario():
        player = _player(audio)
        await player.select_for_emotion(Emotion.NEUTRAL)
        await player.play_pause()
        paused_state = player.state
        await player.play_pause()
        return player, paused_state

    player, paused_state = asyncio.run(scenario())

    assert paused_state == PlaybackState.PAUSED
    assert player.state == PlaybackState.PLAYING
    assert audio.calls == ['load', 'play', 'pause', 'play']


def test_load_failure_pauses_and_keeps_track():
    audio = FakeAudio(fail_load=True)

    async def scenario():
        player = _player(audio)
        with pytest.raises(PlaybackError):
            await player.select_for_emotion(Emotion.ANGRY)
        return player

    player = asyncio.run(scenario())
    session = player.session

    assert session.state == PlaybackState.PAUSED
    assert not session.is_playing
    assert not session.is_loading
    assert session.current_track.emotion == Emotion.ANGRY
    assert session.last_error


def test_play_failure_pauses():
    audio = FakeAudio(fail_play=True)

    async def scenario():
        player = _player(audio)
        with pytest.raises(PlaybackError):
            await player.select_for_emotion(Emotion.HAPPY)
        return player

    player = asyncio.run(scenario())
    assert player.state == PlaybackState.PAUSED
    assert player.session.current_track is not None


def test_volume_is_clamped():
    audio = FakeAudio()

    async def scenario():
        player = _player(audio)
        return player, player.set_volume(1.5), player.set_volume(-0.2), player.set_volume(0.35)

    player, high, low, mid = asyncio.run(scenario())

    assert (high, low, mid) == (1.0, 0.0, 0.35)
    assert audio.volume == 0.35
    assert player.session.volume == 0.35


def test_stop_returns_to_empty_and_keeps_volume():
    audio = FakeAudio()

    async def scenario():
        player = _player(audio)
        player.set_volume(0.4)
        await player.select_for_emotion(Emotion.HAPPY)
        await player.stop()
        return player

    player = asyncio.run(scenario())
    assert player.state == PlaybackState.EMPTY
    assert player.session.current_track is None
    assert player.session.volume == 0.4
    assert 'stop' in audio.calls


def test_track_end_advances():
    audio = FakeAudio()

    async def scenario():
        player = _player(audio)
        await player.select_for_emotion(Emotion.SURPRISED)
        before = player.session.position_index
        await player.on_track_ended()
        return player, before

    player, before = asyncio.run(scenario())
    size = len(player.session.active_playlist)
    assert player.session.position_index == (before + 1) % size
    assert player.session.is_playing


def test_track_source_falls_back_to_local_catalog():
    client = BrokenCatalogClient()
    tracks = TrackSource(get_catalog(), api_client=client).tracks_for(Emotion.FEARFUL)

    assert client.calls == 1
    assert list(tracks) == list(get_catalog().tracks_for(Emotion.FEARFUL))


# Puente

def test_bridge_ignores_low_confidence():
    audio = FakeAudio()

    async def scenario():
        player = _player(audio)
        bridge = EmotionMusicBridge(player, threshold=0.6)
        bridge.on_detection(make_result(Emotion.HAPPY, 0.6))
        bridge.on_detection(make_result(Emotion.SAD, 0.3))
        await bridge.drain()
        return player

    player = asyncio.run(scenario())
    assert player.state == PlaybackState.EMPTY
    assert audio.calls == []


def test_bridge_triggers_above_threshold():
    audio = FakeAudio()

    async def scenario():
        player = _player(audio)
        bridge = EmotionMusicBridge(player)
        bridge.on_detection(make_result(Emotion.ANGRY, 0.61))
        await bridge.drain()
        bridge.on_detection(make_result(Emotion.ANGRY, 0.95))
        await bridge.drain()
        return player

    player = asyncio.run(scenario())
    assert player.session.current_track.emotion == Emotion.ANGRY
    assert len(audio.loaded) == 1


def test_bridge_swallows_playback_errors():
    audio = FakeAudio(fail_load=True)

    async def scenario():
        player = _player(audio)
        bridge = EmotionMusicBridge(player)
        bridge.on_detection(make_result(Emotion.HAPPY, 0.9))
        await bridge.drain()
        return player

    player = asyncio.run(scenario())
    assert player.state == PlaybackState.PAUSED
    assert player.session.last_error
