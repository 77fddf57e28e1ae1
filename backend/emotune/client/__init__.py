"""
Cliente de sesión: detección periódica, puente emoción-música y reproductor.
"""

from .api import EmotionApiClient
from .orchestrator import DetectionOrchestrator, DetectionState, CancellationToken
from .playback import MusicPlayer, PlaybackSession, PlaybackState, TrackSource
from .bridge import EmotionMusicBridge, MUSIC_TRIGGER_THRESHOLD

__all__ = [
    'EmotionApiClient',
    'DetectionOrchestrator',
    'DetectionState',
    'CancellationToken',
    'MusicPlayer',
    'PlaybackSession',
    'PlaybackState',
    'TrackSource',
    'EmotionMusicBridge',
    'MUSIC_TRIGGER_THRESHOLD',
]
