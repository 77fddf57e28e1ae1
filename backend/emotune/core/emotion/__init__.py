"""
Módulo de reconocimiento emocional.

Contiene el esquema de emociones, el scorer de verosimilitudes, los
proveedores de detección y el historial con suavizado de confianza.
"""

from .schema import (
    Emotion,
    ProviderKind,
    DetectionResult,
    normalize_emotion,
    parse_emotion,
    is_valid_emotion,
    get_all_emotions,
)
from .likelihood import score, LIKELIHOOD_SCORES
from .history import EmotionHistory, smooth
from .providers import (
    Provider,
    CloudVisionProvider,
    ServiceProvider,
    LocalModelProvider,
    HeuristicProvider,
    pick_emotion,
    select_provider,
)
from .deepface_detector import DeepFaceEmotionDetector, load_local_model

__all__ = [
    'Emotion',
    'ProviderKind',
    'DetectionResult',
    'normalize_emotion',
    'parse_emotion',
    'is_valid_emotion',
    'get_all_emotions',
    'score',
    'LIKELIHOOD_SCORES',
    'EmotionHistory',
    'smooth',
    'Provider',
    'CloudVisionProvider',
    'ServiceProvider',
    'LocalModelProvider',
    'HeuristicProvider',
    'pick_emotion',
    'select_provider',
    'DeepFaceEmotionDetector',
    'load_local_model',
]
