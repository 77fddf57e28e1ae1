"""
Proveedores de detección emocional.

Cada proveedor recibe un frame (BGR de OpenCV, bytes JPEG ya codificados o
None) y produce un DetectionResult o lanza ProviderError. Hay una clase por
tipo de proveedor (ProviderKind) y cada una guarda solo el estado que
necesita:

- CloudVisionProvider: cliente de Google Cloud Vision (o nada si no hay
  credenciales)
- ServiceProvider: cliente HTTP hacia el endpoint /emotion del backend
- LocalModelProvider: detector DeepFace en proceso
- HeuristicProvider: heurística aleatoria sesgada por la hora del día,
  nunca falla
"""

import base64
import json
import logging
import random
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

import cv2
import numpy as np
from google.cloud import vision
from google.oauth2 import service_account

from ..errors import ConfigurationError, ProviderError, TransportError
from .likelihood import score
from .schema import DetectionResult, Emotion, ProviderKind, normalize_emotion, now_ms, parse_emotion

logger = logging.getLogger(__name__)

# Umbral por debajo del cual (inclusive) la emoción dominante se considera neutral
LOW_CONFIDENCE_GUARD = 0.3

JPEG_QUALITY = 80


class Provider(ABC):
    """
    Interfaz base de los proveedores de detección.

    Todos los proveedores implementan detect(), que devuelve un
    DetectionResult o lanza ProviderError.
    """

    kind: ProviderKind

    @abstractmethod
    def detect(self, frame=None) -> DetectionResult:
        """
        Detecta la emoción presente en un frame.

        Args:
            frame: np.ndarray BGR, bytes de imagen codificada o None

        Raises:
            ConfigurationError: Si el proveedor no está configurado
            TransportError: Si falla la comunicación o el parseo
        """

    def _result(self, emotion: Emotion, confidence: float) -> DetectionResult:
        return DetectionResult(
            emotion=emotion,
            confidence=float(min(1.0, max(0.0, confidence))),
            timestamp=now_ms(),
            provider=self.kind,
        )


def encode_frame(frame) -> bytes:
    """
    Serializa un frame a bytes JPEG.

    Raises:
        TransportError: Si no hay frame o no se puede codificar
    """
    if frame is None:
        raise TransportError("No hay frame disponible para enviar")
    if isinstance(frame, (bytes, bytearray)):
        if not frame:
            raise TransportError("Imagen vacía")
        return bytes(frame)
    if not isinstance(frame, np.ndarray) or frame.size == 0:
        raise TransportError("Formato de frame no soportado")

    ok, buffer = cv2.imencode('.jpg', frame, [int(cv2.IMWRITE_JPEG_QUALITY), JPEG_QUALITY])
    if not ok:
        raise TransportError("No se pudo codificar el frame a JPEG")
    return buffer.tobytes()


def encode_data_url(frame) -> str:
    """Codifica un frame como data URL base64 (image/jpeg)."""
    encoded = base64.b64encode(encode_frame(frame)).decode('ascii')
    return f"data:image/jpeg;base64,{encoded}"


def decode_data_url(image_data: str) -> bytes:
    """
    Decodifica una imagen base64, con o sin prefijo data URL.

    Raises:
        ValueError: Si el contenido no es base64 válido
    """
    if ',' in image_data and image_data.startswith('data:'):
        image_data = image_data.split(',', 1)[1]
    return base64.b64decode(image_data, validate=True)


def pick_emotion(scores: Dict[str, float]) -> Tuple[Emotion, float]:
    """
    Elige la emoción dominante a partir de puntuaciones por etiqueta.

    Toma la etiqueta con mayor puntuación (la primera en caso de empate).
    Si esa puntuación es <= 0.3 la emoción devuelta es neutral, conservando
    la puntuación como confianza.

    Examples:
        >>> pick_emotion({'joy': 0.35, 'sorrow': 0.1})
        (<Emotion.HAPPY: 'happy'>, 0.35)
        >>> pick_emotion({'joy': 0.05, 'sorrow': 0.05})
        (<Emotion.NEUTRAL: 'neutral'>, 0.05)
    """
    dominant_label = 'neutral'
    confidence = 0.0
    for label, value in scores.items():
        if value > confidence:
            dominant_label, confidence = label, value

    if confidence <= LOW_CONFIDENCE_GUARD:
        return Emotion.NEUTRAL, confidence
    return normalize_emotion(dominant_label), confidence


class CloudVisionProvider(Provider):
    """
    Detección mediante Google Cloud Vision (face detection).

    Google devuelve verosimilitudes cualitativas para joy, sorrow, anger y
    surprise; se convierten con el scorer y se elige la dominante.

    Attributes:
        client: ImageAnnotatorClient o None si no hay credenciales
    """

    kind = ProviderKind.CLOUD_VISION

    def __init__(self, client=None):
        self.client = client

    @classmethod
    def from_credentials(cls, credentials_json: Optional[str]) -> 'CloudVisionProvider':
        """
        Construye el proveedor a partir del JSON de la cuenta de servicio.

        Sin credenciales devuelve un proveedor no configurado (detect() lanza
        ConfigurationError).

        Raises:
            ConfigurationError: Si las credenciales no son un JSON válido
        """
        if not credentials_json:
            return cls(client=None)
        try:
            info = json.loads(credentials_json)
            credentials = service_account.Credentials.from_service_account_info(info)
        except (ValueError, KeyError) as e:
            raise ConfigurationError(f"Credenciales de Google Cloud inválidas: {e}")
        return cls(client=vision.ImageAnnotatorClient(credentials=credentials))

    @property
    def configured(self) -> bool:
        return self.client is not None

    def detect(self, frame=None) -> DetectionResult:
        if self.client is None:
            raise ConfigurationError("Credenciales de Google Cloud Vision no configuradas")

        image_bytes = encode_frame(frame)

        try:
            response = self.client.face_detection(image=vision.Image(content=image_bytes))
            if response.error.message:
                raise TransportError(f"Google Cloud Vision: {response.error.message}")
            faces = list(response.face_annotations)
        except ProviderError:
            raise
        except Exception as e:
            logger.warning(f"Fallo en Google Cloud Vision: {e}")
            raise TransportError(f"Fallo en Google Cloud Vision: {e}")

        if not faces:
            return self._result(Emotion.NEUTRAL, 1.0)

        face = faces[0]
        scores = {
            'joy': score(face.joy_likelihood),
            'sorrow': score(face.sorrow_likelihood),
            'anger': score(face.anger_likelihood),
            'surprise': score(face.surprise_likelihood),
        }
        emotion, confidence = pick_emotion(scores)
        return self._result(emotion, confidence)


class ServiceProvider(Provider):
    """
    Detección delegada al endpoint /emotion del backend.

    Attributes:
        api_client: EmotionApiClient del lado cliente
    """

    kind = ProviderKind.REMOTE

    def __init__(self, api_client):
        self.api_client = api_client

    def detect(self, frame=None) -> DetectionResult:
        data = self.api_client.detect_emotion(image_data=encode_data_url(frame))
        try:
            return DetectionResult(
                emotion=parse_emotion(data['emotion']),
                confidence=float(data['confidence']),
                timestamp=int(data.get('timestamp') or now_ms()),
                provider=self.kind,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Respuesta de detección inválida: {e}")


class LocalModelProvider(Provider):
    """
    Detección con un modelo en proceso (DeepFace).

    Attributes:
        detector: Objeto con predict(frame) -> {'emotion', 'probabilities', 'face_detected'}
    """

    kind = ProviderKind.LOCAL_MODEL

    NO_FACE_CONFIDENCE = 0.3
    WEAK_EMOTION_CONFIDENCE = 0.4

    def __init__(self, detector):
        self.detector = detector

    def detect(self, frame=None) -> DetectionResult:
        if frame is None:
            raise TransportError("No hay frame disponible para el modelo local")

        try:
            prediction = self.detector.predict(frame)
        except Exception as e:
            raise TransportError(f"Fallo del modelo local: {e}")

        if not prediction.get('face_detected'):
            return self._result(Emotion.NEUTRAL, self.NO_FACE_CONFIDENCE)

        # DeepFace devuelve porcentajes [0, 100]
        probabilities = prediction.get('probabilities') or {}
        scores = {label: float(value) / 100.0 for label, value in probabilities.items()}
        if not scores:
            return self._result(Emotion.NEUTRAL, self.WEAK_EMOTION_CONFIDENCE)

        label = max(scores, key=scores.get)
        if scores[label] <= LOW_CONFIDENCE_GUARD:
            return self._result(Emotion.NEUTRAL, self.WEAK_EMOTION_CONFIDENCE)
        return self._result(normalize_emotion(label), scores[label])


class HeuristicProvider(Provider):
    """
    Heurística local sin llamadas externas. Nunca falla.

    El 70% de las veces restringe las emociones candidatas según la franja
    horaria local; el 30% restante elige entre el conjunto completo (sin
    fearful ni disgusted). La confianza parte de un valor base por emoción
    más una perturbación aleatoria en [0, 0.25).
    """

    kind = ProviderKind.HEURISTIC

    FULL_SET = (
        Emotion.HAPPY, Emotion.SAD, Emotion.ANGRY, Emotion.SURPRISED, Emotion.NEUTRAL,
    )
    BASE_CONFIDENCE = {
        Emotion.NEUTRAL: 0.8,
        Emotion.HAPPY: 0.75,
        Emotion.SAD: 0.7,
        Emotion.ANGRY: 0.65,
        Emotion.SURPRISED: 0.6,
    }
    DEFAULT_BASE_CONFIDENCE = 0.6
    PERTURBATION = 0.25
    TIME_BIAS_PROBABILITY = 0.7

    def __init__(self, rng: Optional[random.Random] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.rng = rng or random.Random()
        self.clock = clock

    @staticmethod
    def candidates_for_hour(hour: int) -> Tuple[Emotion, ...]:
        """Emociones candidatas para una hora local (0-23)."""
        if 6 <= hour < 12:
            return (Emotion.HAPPY, Emotion.NEUTRAL, Emotion.SURPRISED)
        if 12 <= hour < 18:
            return (Emotion.HAPPY, Emotion.NEUTRAL, Emotion.ANGRY)
        if 18 <= hour < 22:
            return (Emotion.HAPPY, Emotion.SAD, Emotion.NEUTRAL)
        return (Emotion.SAD, Emotion.NEUTRAL, Emotion.FEARFUL)

    def detect(self, frame=None) -> DetectionResult:
        if self.rng.random() < self.TIME_BIAS_PROBABILITY:
            candidates = self.candidates_for_hour(self.clock().hour)
        else:
            candidates = self.FULL_SET

        emotion = self.rng.choice(candidates)
        base = self.BASE_CONFIDENCE.get(emotion, self.DEFAULT_BASE_CONFIDENCE)
        confidence = base + self.rng.random() * self.PERTURBATION
        return self._result(emotion, confidence)


def select_provider(settings=None, api_client=None, model_loader=None) -> Provider:
    """
    Sondea la configuración y elige el proveedor de la sesión.

    Orden de preferencia:
    1. Remoto: el backend informa (vía /health) que Cloud Vision está
       configurado, o hay credenciales en proceso si no se usa backend
    2. Modelo local: model_loader() devuelve un detector
    3. Heurística local

    Args:
        settings: Settings con las credenciales (uso en proceso)
        api_client: EmotionApiClient para sondear el backend
        model_loader: Callable que carga el modelo local o lanza excepción

    Returns:
        Provider: Proveedor seleccionado (nunca None)
    """
    if api_client is not None:
        try:
            if api_client.remote_configured():
                logger.info("Proveedor remoto configurado, usando detección en la nube")
                return ServiceProvider(api_client)
            logger.info("Proveedor remoto no configurado en el backend")
        except ProviderError as e:
            logger.warning(f"No se pudo sondear el backend: {e}")
    elif settings is not None and settings.cloud_vision_configured:
        try:
            provider = CloudVisionProvider.from_credentials(settings.google_credentials)
            logger.info("Credenciales de Cloud Vision presentes, usando detección en la nube")
            return provider
        except ConfigurationError as e:
            logger.warning(str(e))

    if model_loader is not None:
        try:
            detector = model_loader()
            logger.info("Modelo local de emociones cargado")
            return LocalModelProvider(detector)
        except Exception as e:
            logger.info(f"Modelo local no disponible ({e}), usando heurística")

    logger.info("Usando heurística local de detección")
    return HeuristicProvider()
