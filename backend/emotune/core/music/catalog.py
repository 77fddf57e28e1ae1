"""
Catálogo estático de canciones por emoción.

El catálogo es un objeto inmutable construido una sola vez por proceso
(get_catalog). El backend lo expone en /music y el cliente lo usa como
espejo local cuando la consulta remota falla, por lo que ambos lados
comparten exactamente la misma tabla.
"""

import random
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..emotion.schema import Emotion, parse_emotion

BENSOUND_URL = "https://www.bensound.com/bensound-music/bensound-{slug}.mp3"


@dataclass(frozen=True)
class Track:
    """
    Entrada inmutable del catálogo.

    Attributes:
        id (str): Identificador único (p.ej. "happy-1")
        title (str): Título
        artist (str): Artista
        source_url (str): URL del audio
        emotion (Emotion): Emoción a la que pertenece
        genre (str): Género
        duration_seconds (int, optional): Duración aproximada
        description (str, optional): Descripción corta
    """
    id: str
    title: str
    artist: str
    source_url: str
    emotion: Emotion
    genre: str
    duration_seconds: Optional[int] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            'id': self.id,
            'title': self.title,
            'artist': self.artist,
            'sourceUrl': self.source_url,
            'emotion': self.emotion.value,
            'genre': self.genre,
            'durationSeconds': self.duration_seconds,
            'description': self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> 'Track':
        """
        Construye un Track desde su forma JSON.

        Raises:
            KeyError, ValueError: Si faltan campos o la emoción es desconocida
        """
        duration = data.get('durationSeconds')
        return cls(
            id=str(data['id']),
            title=str(data['title']),
            artist=str(data['artist']),
            source_url=str(data['sourceUrl']),
            emotion=parse_emotion(data['emotion']),
            genre=str(data['genre']),
            duration_seconds=int(duration) if duration is not None else None,
            description=data.get('description'),
        )


# (slug, título, género, duración, descripción) por emoción
_CATALOG_TABLE = {
    Emotion.HAPPY: [
        ("sunny", "Sunny", "Upbeat Pop", 180, "Bright and cheerful melody"),
        ("ukulele", "Ukulele", "Tropical", 165, "Tropical vibes with ukulele"),
        ("creativeminds", "Creative Minds", "Electronic", 200, "Energetic electronic beats"),
        ("happiness", "Happiness", "Feel Good", 175, "Pure joy and happiness"),
    ],
    Emotion.SAD: [
        ("slowmotion", "Slow Motion", "Melancholic", 190, "Gentle and emotional"),
        ("sadday", "Sad Day", "Emotional", 170, "Reflective and touching"),
        ("memories", "Memories", "Nostalgic", 185, "Nostalgic and bittersweet"),
        ("tenderness", "Tenderness", "Soft", 160, "Gentle and tender"),
    ],
    Emotion.ANGRY: [
        ("extremeaction", "Extreme Action", "Intense", 210, "High-energy and intense"),
        ("energy", "Energy", "High Energy", 195, "Powerful and energetic"),
        ("epic", "Epic", "Dramatic", 220, "Epic and dramatic"),
        ("actionable", "Actionable", "Powerful", 180, "Strong and actionable"),
    ],
    Emotion.SURPRISED: [
        ("funkyelement", "Funky Element", "Funky", 175, "Unexpected funky vibes"),
        ("jazzyfrenchy", "Jazzy Frenchy", "Jazz", 190, "Surprising jazz fusion"),
        ("thejazzpiano", "The Jazz Piano", "Piano Jazz", 200, "Unexpected piano melodies"),
        ("allthat", "All That", "Swing", 185, "Surprising swing rhythms"),
    ],
    Emotion.NEUTRAL: [
        ("betterdays", "Better Days", "Calm", 170, "Peaceful and balanced"),
        ("acousticbreeze", "Acoustic Breeze", "Acoustic", 165, "Gentle acoustic sounds"),
        ("littleidea", "Little Idea", "Ambient", 180, "Subtle ambient music"),
        ("countryside", "Countryside", "Folk", 175, "Natural and organic"),
    ],
    # fearful y disgusted reutilizan pistas tranquilas de neutral
    Emotion.FEARFUL: [
        ("betterdays", "Better Days", "Calm", 170, "Soothing and reassuring"),
        ("acousticbreeze", "Acoustic Breeze", "Soothing", 165, "Gentle and calming"),
        ("littleidea", "Little Idea", "Peaceful", 180, "Peaceful and safe"),
    ],
    Emotion.DISGUSTED: [
        ("betterdays", "Better Days", "Calm", 170, "Clean and fresh"),
        ("acousticbreeze", "Acoustic Breeze", "Clean", 165, "Pure and clean sounds"),
        ("littleidea", "Little Idea", "Fresh", 180, "Fresh and revitalizing"),
    ],
}

# Perfil musical por emoción (informativo, expuesto en GET /emotion)
EMOTION_MUSIC_PROFILE: Dict[str, Dict[str, str]] = {
    'happy': {'genre': 'Upbeat Pop', 'mood': 'energetic', 'tempo': 'fast',
              'description': 'Cheerful and uplifting music'},
    'sad': {'genre': 'Melancholic', 'mood': 'emotional', 'tempo': 'slow',
            'description': 'Gentle and comforting music'},
    'angry': {'genre': 'Intense', 'mood': 'powerful', 'tempo': 'fast',
              'description': 'Strong and energetic music'},
    'surprised': {'genre': 'Dynamic', 'mood': 'exciting', 'tempo': 'varied',
                  'description': 'Unexpected and engaging music'},
    'neutral': {'genre': 'Ambient', 'mood': 'calm', 'tempo': 'medium',
                'description': 'Peaceful and balanced music'},
    'fearful': {'genre': 'Soothing', 'mood': 'calming', 'tempo': 'slow',
                'description': 'Gentle and reassuring music'},
    'disgusted': {'genre': 'Clean', 'mood': 'fresh', 'tempo': 'medium',
                  'description': 'Clean and refreshing music'},
}


class SongCatalog:
    """
    Mapeo inmutable de Emotion a una lista ordenada de Track.

    Example:
        >>> catalog = get_catalog()
        >>> catalog.tracks_for(Emotion.HAPPY)[0].title
        'Sunny'
        >>> len(catalog.shuffled_sample(Emotion.SAD, limit=2))
        2
    """

    def __init__(self, tracks: Mapping[Emotion, Iterable[Track]]):
        self._tracks: Mapping[Emotion, Tuple[Track, ...]] = MappingProxyType({
            emotion: tuple(tracks.get(emotion, ())) for emotion in Emotion
        })

    def tracks_for(self, emotion) -> Tuple[Track, ...]:
        """
        Pistas de una emoción en orden de catálogo.

        Raises:
            ValueError: Si la emoción no es una de las conocidas
        """
        return self._tracks[parse_emotion(emotion)]

    def shuffled_sample(self, emotion, limit: Optional[int] = None,
                        rng: Optional[random.Random] = None) -> List[Track]:
        """
        Muestra aleatoria de pistas de una emoción, en orden aleatorio.

        Args:
            emotion: Emoción solicitada
            limit (int, optional): Máximo de pistas; None = todas
            rng (random.Random, optional): Generador aleatorio

        Returns:
            List[Track]: min(limit, disponibles) pistas
        """
        tracks = self.tracks_for(emotion)
        # Subconjunto aleatorio de todo el pool, no los primeros `limit` barajados
        count = len(tracks) if limit is None else max(0, min(limit, len(tracks)))
        return (rng or random).sample(list(tracks), count)

    def emotions(self) -> List[str]:
        return [emotion.value for emotion in self._tracks]

    def songs_per_emotion(self) -> Dict[str, int]:
        return {emotion.value: len(tracks) for emotion, tracks in self._tracks.items()}

    def total_songs(self) -> int:
        return sum(len(tracks) for tracks in self._tracks.values())


def build_default_catalog() -> SongCatalog:
    """Construye el catálogo a partir de la tabla estática."""
    tracks = {}
    for emotion, rows in _CATALOG_TABLE.items():
        tracks[emotion] = [
            Track(
                id=f"{emotion.value}-{position}",
                title=title,
                artist="Bensound",
                source_url=BENSOUND_URL.format(slug=slug),
                emotion=emotion,
                genre=genre,
                duration_seconds=duration,
                description=description,
            )
            for position, (slug, title, genre, duration, description) in enumerate(rows, start=1)
        ]
    return SongCatalog(tracks)


@lru_cache(maxsize=None)
def get_catalog() -> SongCatalog:
    """Instancia única del catálogo para todo el proceso."""
    return build_default_catalog()
