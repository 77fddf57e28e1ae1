"""
Historial de detecciones y suavizado de confianza.

El historial es un buffer circular de capacidad fija (10 por defecto)
ordenado por timestamp. El suavizado es una función pura sobre el
historial: si la emoción nueva coincide con alguna de las 3 últimas
entradas, la confianza se promedia con la media de esas coincidencias.
"""

from collections import deque
from dataclasses import replace
from typing import Deque, Iterator, List, Optional

from .schema import DetectionResult

HISTORY_CAPACITY = 10
SMOOTHING_WINDOW = 3


class EmotionHistory:
    """
    Buffer FIFO de DetectionResult con capacidad fija.

    Las entradas más antiguas se descartan al superar la capacidad. Una
    entrada con timestamp anterior a la más reciente se re-sella con el
    timestamp más reciente para mantener el orden no decreciente.

    Example:
        >>> history = EmotionHistory()
        >>> history.append(result)
        >>> history.recent(3)
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        self.capacity = max(1, capacity)
        self._entries: Deque[DetectionResult] = deque(maxlen=self.capacity)

    def append(self, result: DetectionResult) -> DetectionResult:
        """Añade un resultado y devuelve la entrada efectivamente guardada."""
        last = self.latest()
        if last is not None and result.timestamp < last.timestamp:
            result = replace(result, timestamp=last.timestamp)
        self._entries.append(result)
        return result

    def recent(self, count: int) -> List[DetectionResult]:
        """Últimas `count` entradas, de la más antigua a la más reciente."""
        if count <= 0:
            return []
        return list(self._entries)[-count:]

    def latest(self) -> Optional[DetectionResult]:
        return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def to_list(self) -> List[DetectionResult]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[DetectionResult]:
        return iter(list(self._entries))


def smooth(history, new_result: DetectionResult) -> DetectionResult:
    """
    Aplica suavizado de confianza a una detección nueva.

    Busca entradas con la misma emoción entre las 3 más recientes del
    historial. Si hay al menos una, la confianza resultante es la media
    entre la confianza nueva y la media de esas coincidencias. Si no hay
    ninguna, el resultado se devuelve sin cambios.

    Args:
        history: EmotionHistory o secuencia de DetectionResult en orden temporal
        new_result (DetectionResult): Detección recién producida

    Returns:
        DetectionResult: Detección con la confianza suavizada

    Example:
        >>> # historial: [happy 0.8, sad 0.7, happy 0.6]
        >>> smooth(history, DetectionResult(Emotion.HAPPY, 0.9, ts)).confidence
        0.8  # (0.9 + (0.8 + 0.6) / 2) / 2
    """
    entries = list(history)[-SMOOTHING_WINDOW:]
    matches = [entry for entry in entries if entry.emotion == new_result.emotion]

    if not matches:
        return new_result

    mean_recent = sum(entry.confidence for entry in matches) / len(matches)
    return replace(new_result, confidence=(new_result.confidence + mean_recent) / 2)
