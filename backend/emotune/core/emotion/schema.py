"""
Módulo de esquema emocional.

Define el conjunto cerrado de emociones del sistema, el resultado de una
detección y las funciones para normalizar etiquetas provenientes de los
distintos proveedores (Google Cloud Vision, DeepFace) al conjunto estándar.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class Emotion(str, Enum):
    """Conjunto cerrado de emociones usado como clave en todo el sistema."""
    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    SURPRISED = "surprised"
    NEUTRAL = "neutral"
    FEARFUL = "fearful"
    DISGUSTED = "disgusted"


class ProviderKind(str, Enum):
    """Tipo de proveedor que produjo una detección."""
    CLOUD_VISION = "cloud-vision"
    REMOTE = "remote"
    LOCAL_MODEL = "local-model"
    HEURISTIC = "heuristic"


# Etiquetas de proveedores externos -> emoción estándar
LABEL_TO_EMOTION: Dict[str, Emotion] = {
    # Google Cloud Vision
    "joy": Emotion.HAPPY,
    "sorrow": Emotion.SAD,
    "anger": Emotion.ANGRY,
    "surprise": Emotion.SURPRISED,
    # DeepFace
    "fear": Emotion.FEARFUL,
    "disgust": Emotion.DISGUSTED,
    # Sinónimos
    "happiness": Emotion.HAPPY,
    "sadness": Emotion.SAD,
    "scared": Emotion.FEARFUL,
}


@dataclass(frozen=True)
class DetectionResult:
    """
    Resultado de un ciclo de detección.

    Attributes:
        emotion (Emotion): Emoción detectada
        confidence (float): Confianza en [0, 1]
        timestamp (int): Instante de la detección en milisegundos epoch
        provider (ProviderKind, optional): Proveedor que la produjo
    """
    emotion: Emotion
    confidence: float
    timestamp: int
    provider: Optional[ProviderKind] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            'emotion': self.emotion.value,
            'confidence': self.confidence,
            'timestamp': self.timestamp,
            'provider': self.provider.value if self.provider else None,
        }


def now_ms() -> int:
    """Instante actual en milisegundos epoch."""
    return int(time.time() * 1000)


def normalize_emotion(label: Optional[str]) -> Emotion:
    """
    Normaliza una etiqueta de emoción al conjunto estándar.

    Si la etiqueta no se reconoce devuelve neutral.

    Examples:
        >>> normalize_emotion("joy")
        <Emotion.HAPPY: 'happy'>
        >>> normalize_emotion("unknown")
        <Emotion.NEUTRAL: 'neutral'>
    """
    if not label:
        return Emotion.NEUTRAL

    label_lower = str(label).lower().strip()

    if label_lower in LABEL_TO_EMOTION:
        return LABEL_TO_EMOTION[label_lower]

    try:
        return Emotion(label_lower)
    except ValueError:
        return Emotion.NEUTRAL


def parse_emotion(value) -> Emotion:
    """
    Convierte un valor en Emotion de forma estricta.

    Raises:
        ValueError: Si el valor no es una de las 7 emociones conocidas
    """
    if isinstance(value, Emotion):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Emoción inválida: {value!r}")
    return Emotion(value.strip().lower())


def is_valid_emotion(value) -> bool:
    """Indica si el valor pertenece al conjunto estándar."""
    try:
        parse_emotion(value)
        return True
    except ValueError:
        return False


def get_all_emotions() -> List[str]:
    """Lista de valores de emoción en orden de declaración."""
    return [emotion.value for emotion in Emotion]
