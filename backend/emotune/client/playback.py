"""
Máquina de estados de reproducción.

MusicPlayer es el único dueño de la salida de audio. Traduce emociones a
una lista de reproducción del catálogo, carga y reproduce pistas y expone
los comandos del usuario (play/pause, siguiente, anterior, volumen).

Estados:
    EMPTY -> LOADING -> READY <-> PLAYING / PAUSED -> EMPTY
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..core.emotion.schema import Emotion, parse_emotion
from ..core.errors import CatalogError, PlaybackError
from ..core.music.catalog import SongCatalog, Track
from .audio import AudioOutput

logger = logging.getLogger(__name__)


class PlaybackState(Enum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass
class PlaybackSession:
    """
    Estado de la sesión de reproducción (uno por cliente).

    Invariante: si active_playlist no está vacía, position_index es un
    índice válido y current_track == active_playlist[position_index].
    """
    current_track: Optional[Track] = None
    is_playing: bool = False
    volume: float = 0.7
    active_playlist: Tuple[Track, ...] = field(default_factory=tuple)
    position_index: int = 0
    is_loading: bool = False
    state: PlaybackState = PlaybackState.EMPTY
    last_error: Optional[str] = None


class TrackSource:
    """
    Origen de pistas: catálogo remoto con el local como respaldo.

    Attributes:
        catalog (SongCatalog): Catálogo local (espejo)
        api_client: EmotionApiClient o None para usar solo el local
        limit (int): Canciones pedidas al catálogo remoto
    """

    def __init__(self, catalog: SongCatalog, api_client=None, limit: int = 10):
        self.catalog = catalog
        self.api_client = api_client
        self.limit = limit

    def tracks_for(self, emotion: Emotion) -> List[Track]:
        if self.api_client is not None:
            try:
                tracks = self.api_client.fetch_tracks(emotion.value, limit=self.limit)
                logger.info(f"Obtenidas {len(tracks)} canciones remotas para {emotion.value}")
                return tracks
            except CatalogError as e:
                logger.warning(f"Catálogo remoto no disponible ({e}), usando catálogo local")
        return list(self.catalog.tracks_for(emotion))


class MusicPlayer:
    """
    Reproductor guiado por emociones.

    Los comandos se serializan con un asyncio.Lock: como cargar una pista
    suspende la corrutina, un comando no empieza hasta que termina el anterior.

    Attributes:
        source (TrackSource): Origen de pistas por emoción
        audio (AudioOutput): Salida de audio (propiedad exclusiva)
        session (PlaybackSession): Estado observable de la reproducción

    Example:
        >>> player = MusicPlayer(TrackSource(get_catalog()), PygameAudioOutput())
        >>> await player.select_for_emotion(Emotion.HAPPY)
        >>> await player.next()
        >>> await player.play_pause()
    """

    def __init__(self, source: TrackSource, audio: AudioOutput,
                 volume: float = 0.7, rng: Optional[random.Random] = None):
        self.source = source
        self.audio = audio
        self.rng = rng or random.Random()
        self.session = PlaybackSession(volume=self._clamp_volume(volume))
        self.audio.set_volume(self.session.volume)
        self._lock = asyncio.Lock()

    @property
    def state(self) -> PlaybackState:
        return self.session.state

    @staticmethod
    def _clamp_volume(volume: float) -> float:
        return max(0.0, min(1.0, float(volume)))

    async def select_for_emotion(self, emotion) -> bool:
        """
        Cambia la música a una pista aleatoria de la emoción dada.

        No hace nada si la pista cargada ya pertenece a esa emoción.

        Returns:
            bool: True si se cargó una pista nueva

        Raises:
            PlaybackError: Si la salida de audio no puede cargar o reproducir
        """
        emotion = parse_emotion(emotion)
        async with self._lock:
            current = self.session.current_track
            if current is not None and current.emotion == emotion:
                logger.debug(f"Ya suena una canción para la emoción: {emotion.value}")
                return False

            pool = await asyncio.to_thread(self.source.tracks_for, emotion)
            if not pool:
                logger.info(f"No hay canciones para la emoción: {emotion.value}")
                return False

            index = self.rng.randrange(len(pool))
            self.session.active_playlist = tuple(pool)
            self.session.position_index = index
            logger.info(f"Canción para {emotion.value}: {pool[index].title}")

            await self._load(pool[index], autoplay=True)
            return True

    async def play_pause(self) -> bool:
        """
        Alterna reproducción y pausa de la pista actual.

        Returns:
            bool: False si no hay pista cargada (no es un error)

        Raises:
            PlaybackError: Si la reproducción falla
        """
        async with self._lock:
            if self.session.current_track is None or self.session.state in (
                    PlaybackState.EMPTY, PlaybackState.LOADING):
                logger.info("No hay canción cargada")
                return False

            if self.session.is_playing:
                self.audio.pause()
                self.session.is_playing = False
                self.session.state = PlaybackState.PAUSED
                logger.info("Audio en pausa")
            else:
                await self._play()
            return True

    async def next(self) -> bool:
        """Avanza circularmente en la lista activa manteniendo la intención de reproducir."""
        return await self._step(1)

    async def previous(self) -> bool:
        """Retrocede circularmente en la lista activa manteniendo la intención de reproducir."""
        return await self._step(-1)

    async def _step(self, offset: int) -> bool:
        async with self._lock:
            playlist = self.session.active_playlist
            if not playlist:
                return False
            self.session.position_index = (self.session.position_index + offset) % len(playlist)
            await self._load(playlist[self.session.position_index], autoplay=self.session.is_playing)
            return True

    def set_volume(self, volume: float) -> float:
        """Aplica el volumen (acotado a [0, 1]) de inmediato."""
        self.session.volume = self._clamp_volume(volume)
        self.audio.set_volume(self.session.volume)
        return self.session.volume

    async def stop(self) -> None:
        """Descarga la pista y vuelve al estado EMPTY."""
        async with self._lock:
            self.audio.stop()
            self.session = PlaybackSession(volume=self.session.volume)
            logger.info("Reproducción detenida")

    async def on_track_ended(self) -> None:
        """Notificación de fin de pista: pasa a la siguiente."""
        logger.info("Canción terminada, reproduciendo la siguiente")
        await self.next()

    async def _load(self, track: Track, autoplay: bool) -> None:
        session = self.session
        session.current_track = track
        session.is_loading = True
        session.state = PlaybackState.LOADING
        session.last_error = None
        logger.info(f"Cargando canción: {track.title}")

        try:
            await self.audio.load(track.source_url)
        except PlaybackError as e:
            self._fail(e)
            raise

        session.is_loading = False
        session.state = PlaybackState.READY

        if autoplay:
            await self._play()
        else:
            session.is_playing = False

    async def _play(self) -> None:
        try:
            await self.audio.play()
        except PlaybackError as e:
            self._fail(e)
            raise
        self.session.is_playing = True
        self.session.state = PlaybackState.PLAYING
        logger.info("Audio reproduciéndose")

    def _fail(self, error: PlaybackError) -> None:
        # Se conserva current_track para que la interfaz muestre qué falló
        logger.error(f"Error de audio: {error}")
        self.session.is_loading = False
        self.session.is_playing = False
        self.session.state = PlaybackState.PAUSED
        self.session.last_error = str(error)
