"""
Core - Componentes compartidos por el backend y el cliente.

Este paquete contiene:
- camera: Captura de video desde webcam
- emotion: Esquema emocional, scorer, proveedores de detección e historial
- music: Catálogo estático de canciones por emoción
- errors: Taxonomía de errores del sistema
"""

from . import camera
from . import emotion
from . import music
from . import errors

from .camera import WebcamCapture
from .emotion import Emotion, DetectionResult, EmotionHistory, smooth, select_provider
from .music import Track, SongCatalog, get_catalog

__all__ = [
    'camera',
    'emotion',
    'music',
    'errors',
    'WebcamCapture',
    'Emotion',
    'DetectionResult',
    'EmotionHistory',
    'smooth',
    'select_provider',
    'Track',
    'SongCatalog',
    'get_catalog',
]
