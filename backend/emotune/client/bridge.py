"""
Puente entre la detección emocional y el reproductor.

Solo las detecciones con confianza estrictamente mayor que el umbral
cambian la música; el resto se ignoran en silencio.
"""

import asyncio
import logging
from typing import Set

from ..core.emotion.schema import DetectionResult
from ..core.errors import PlaybackError
from .playback import MusicPlayer

logger = logging.getLogger(__name__)

MUSIC_TRIGGER_THRESHOLD = 0.6


class EmotionMusicBridge:
    """
    Suscriptor del orquestador que dispara cambios de música.

    La carga de la pista se lanza como tarea independiente para que el
    bucle de detección no espere a la descarga del audio.

    Attributes:
        player (MusicPlayer): Reproductor a controlar
        threshold (float): Confianza mínima (exclusiva) para actuar
    """

    def __init__(self, player: MusicPlayer, threshold: float = MUSIC_TRIGGER_THRESHOLD):
        self.player = player
        self.threshold = threshold
        self._pending: Set[asyncio.Task] = set()

    def should_trigger(self, result: DetectionResult) -> bool:
        return result.confidence > self.threshold

    def on_detection(self, result: DetectionResult) -> None:
        if not self.should_trigger(result):
            return

        logger.info(
            f"Emoción {result.emotion.value} con confianza "
            f"{round(result.confidence * 100)}%, actualizando música"
        )
        task = asyncio.get_running_loop().create_task(self._select(result))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _select(self, result: DetectionResult) -> None:
        try:
            await self.player.select_for_emotion(result.emotion)
        except PlaybackError as e:
            logger.error(f"No se pudo cambiar la música: {e}")

    async def drain(self) -> None:
        """Espera a que terminen los cambios de música en curso."""
        if self._pending:
            await asyncio.gather(*list(self._pending))
