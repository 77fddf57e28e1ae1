"""
Salida de audio.

AudioOutput define la capacidad de reproducción que consume el
reproductor (cargar, reproducir, pausar, volumen, fin de pista).
PygameAudioOutput la implementa con pygame.mixer, descargando antes
cada pista con requests a una caché temporal.
"""

import asyncio
import hashlib
import logging
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

import pygame
import requests

from ..core.errors import PlaybackError

logger = logging.getLogger(__name__)


class AudioOutput(ABC):
    """
    Interfaz de la salida de audio.

    load() y play() son corrutinas porque esperan a que el audio esté
    listo; ambas lanzan PlaybackError si la carga o la reproducción fallan.
    """

    @abstractmethod
    async def load(self, url: str) -> None:
        """Carga una pista y vuelve cuando está lista para reproducirse."""

    @abstractmethod
    async def play(self) -> None:
        """Inicia o reanuda la reproducción de la pista cargada."""

    @abstractmethod
    def pause(self) -> None:
        """Pausa la reproducción."""

    @abstractmethod
    def set_volume(self, volume: float) -> None:
        """Aplica el volumen en [0, 1]."""

    @abstractmethod
    def stop(self) -> None:
        """Detiene y descarga la pista actual."""

    @abstractmethod
    def is_finished(self) -> bool:
        """True si la pista terminó de reproducirse por sí sola."""


class PygameAudioOutput(AudioOutput):
    """
    Salida de audio basada en pygame.mixer.

    Attributes:
        cache_dir (Path): Directorio de las pistas descargadas
        timeout (float, optional): Timeout de descarga
    """

    def __init__(self, cache_dir: Optional[Path] = None, timeout: Optional[float] = 60,
                 volume: float = 0.7):
        self.cache_dir = Path(cache_dir or Path(tempfile.gettempdir()) / 'emotune-audio')
        self.timeout = timeout
        self._volume = volume
        self._downloaded: Dict[str, Path] = {}
        self._loaded = False
        self._started = False
        self._paused = False

    def _ensure_mixer(self) -> None:
        if not pygame.mixer.get_init():
            try:
                pygame.mixer.init()
            except pygame.error as e:
                raise PlaybackError(f"No se pudo inicializar el mezclador de audio: {e}")
            pygame.mixer.music.set_volume(self._volume)

    def _download(self, url: str) -> Path:
        if url in self._downloaded and self._downloaded[url].exists():
            return self._downloaded[url]

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        suffix = Path(url.split('?', 1)[0]).suffix or '.mp3'
        path = self.cache_dir / f"{hashlib.sha1(url.encode('utf-8')).hexdigest()}{suffix}"

        if not path.exists():
            logger.info(f"Descargando pista: {url}")
            # Solo una descarga completa llega a la ruta definitiva de la caché
            partial = path.with_suffix(path.suffix + '.part')
            try:
                with requests.get(url, stream=True, timeout=self.timeout) as response:
                    response.raise_for_status()
                    with open(partial, 'wb') as f:
                        for chunk in response.iter_content(chunk_size=64 * 1024):
                            f.write(chunk)
                partial.replace(path)
            finally:
                if partial.exists():
                    partial.unlink()

        self._downloaded[url] = path
        return path

    def _load_sync(self, url: str) -> None:
        self._ensure_mixer()
        try:
            path = self._download(url)
            pygame.mixer.music.load(str(path))
        except (requests.RequestException, OSError, pygame.error) as e:
            raise PlaybackError(f"No se pudo cargar la pista {url}: {e}")

    async def load(self, url: str) -> None:
        self._loaded = False
        self._started = False
        self._paused = False
        await asyncio.to_thread(self._load_sync, url)
        self._loaded = True

    async def play(self) -> None:
        if not self._loaded:
            raise PlaybackError("No hay pista cargada")
        try:
            if self._started and self._paused:
                pygame.mixer.music.unpause()
            else:
                pygame.mixer.music.play()
                self._started = True
        except pygame.error as e:
            raise PlaybackError(f"Error al reproducir: {e}")
        self._paused = False

    def pause(self) -> None:
        if self._started:
            pygame.mixer.music.pause()
            self._paused = True

    def set_volume(self, volume: float) -> None:
        self._volume = volume
        if pygame.mixer.get_init():
            pygame.mixer.music.set_volume(volume)

    def stop(self) -> None:
        if pygame.mixer.get_init():
            pygame.mixer.music.stop()
            pygame.mixer.music.unload()
        self._loaded = False
        self._started = False
        self._paused = False

    def is_finished(self) -> bool:
        if not self._started or self._paused or not pygame.mixer.get_init():
            return False
        return not pygame.mixer.music.get_busy()
