"""
Adaptador de DeepFace para el proveedor de modelo local.

Proporciona el detector en proceso que respalda a LocalModelProvider. La
librería DeepFace (y TensorFlow) se importa al cargar el modelo, de modo
que el resto del sistema funciona sin ella.
"""

import logging
from typing import Dict

import numpy as np

from .schema import normalize_emotion

logger = logging.getLogger(__name__)

# Confianza mínima de detección facial para considerar que hay un rostro real
MIN_FACE_CONFIDENCE = 0.9


class DeepFaceEmotionDetector:
    """
    Envuelve DeepFace.analyze() y reduce su salida a emoción, probabilidades
    y presencia de rostro.

    DeepFace devuelve probabilidades en [0, 100] para angry, disgust, fear,
    happy, sad, surprise y neutral.

    Attributes:
        deepface: Módulo DeepFace (o cualquier objeto con analyze())
        enforce_detection (bool): Se pasa tal cual a analyze()
    """

    def __init__(self, deepface, enforce_detection: bool = False):
        self.deepface = deepface
        self.enforce_detection = enforce_detection

    def predict(self, frame: np.ndarray) -> Dict[str, object]:
        """
        Analiza un frame BGR y devuelve la emoción dominante.

        Args:
            frame (np.ndarray): Imagen BGR tal como la entrega OpenCV

        Returns:
            Dict con las claves:
                - 'emotion' (str): Emoción dominante normalizada
                - 'probabilities' (dict): Probabilidades por emoción [0, 100]
                - 'face_detected' (bool): True si se detectó un rostro

        Raises:
            Exception: Errores de DeepFace distintos de "no hay rostro"
        """
        try:
            result = self.deepface.analyze(
                img_path=frame,
                actions=['emotion'],
                enforce_detection=self.enforce_detection,
                silent=True
            )
        except ValueError:
            # DeepFace lanza ValueError cuando no encuentra rostro
            return self._no_face()

        # Con varios rostros DeepFace devuelve una lista; se toma el primero
        if isinstance(result, list):
            if not result:
                return self._no_face()
            result = result[0]

        if result.get('face_confidence', 0.0) < MIN_FACE_CONFIDENCE:
            return self._no_face()

        return {
            'emotion': normalize_emotion(result['dominant_emotion']).value,
            'probabilities': dict(result['emotion']),
            'face_detected': True
        }

    @staticmethod
    def _no_face() -> Dict[str, object]:
        return {
            'emotion': 'neutral',
            'probabilities': {},
            'face_detected': False
        }


def load_local_model() -> DeepFaceEmotionDetector:
    """
    Carga DeepFace y su modelo de emociones.

    La primera carga descarga los pesos si no están en caché y puede tardar.

    Raises:
        Exception: Si DeepFace no está instalado o el modelo no se puede cargar
    """
    from deepface import DeepFace

    logger.info("Cargando modelo de emociones de DeepFace...")
    DeepFace.build_model(model_name="Emotion", task="facial_attribute")
    logger.info("[OK] Modelo de emociones de DeepFace cargado")
    return DeepFaceEmotionDetector(DeepFace)
