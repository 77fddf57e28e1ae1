"""
Blueprint para endpoints relacionados con detección emocional.

Recibe una imagen capturada en el cliente (JSON base64 o multipart) o una
etiqueta directa (pruebas / bypass) y devuelve la emoción detectada. La
detección usa Google Cloud Vision; si no está configurado o falla se
recurre a la heurística local.
"""

import threading

import cv2
import numpy as np
from flask import Blueprint, current_app, jsonify, request

from ..core.emotion.providers import CloudVisionProvider, HeuristicProvider, decode_data_url
from ..core.emotion.schema import DetectionResult, get_all_emotions, now_ms, parse_emotion
from ..core.errors import ConfigurationError, ProviderError
from ..core.music.catalog import EMOTION_MUSIC_PROFILE

emotion_bp = Blueprint('emotion', __name__)

# Lock global para thread-safety en lazy initialization
_provider_lock = threading.Lock()

DEFAULT_BYPASS_CONFIDENCE = 0.8


def _get_or_create_provider():
    """
    Obtiene el proveedor de Cloud Vision o lo crea (lazy initialization).

    Con credenciales ausentes o inválidas se crea un proveedor no
    configurado, cuyo detect() lanza ConfigurationError.
    """
    provider = current_app.config.get('CLOUD_VISION_PROVIDER')
    if provider is not None:
        return provider

    with _provider_lock:
        provider = current_app.config.get('CLOUD_VISION_PROVIDER')
        if provider is not None:
            return provider

        settings = current_app.config['SETTINGS']
        try:
            provider = CloudVisionProvider.from_credentials(settings.google_credentials)
        except ConfigurationError as e:
            current_app.logger.error(f"[LAZY INIT] {e}")
            provider = CloudVisionProvider(client=None)

        current_app.logger.info(
            f"[LAZY INIT] Proveedor Cloud Vision creado (configurado: {provider.configured})"
        )
        current_app.config['CLOUD_VISION_PROVIDER'] = provider
        return provider


def get_fallback_provider():
    """Heurística local usada cuando el proveedor remoto falla."""
    provider = current_app.config.get('FALLBACK_PROVIDER')
    if provider is None:
        provider = HeuristicProvider()
        current_app.config['FALLBACK_PROVIDER'] = provider
    return provider


def _bad_request(error: str, message: str):
    return jsonify({'success': False, 'error': error, 'message': message}), 400


def _read_image_bytes(body):
    """
    Extrae los bytes de imagen de la petición (multipart o JSON).

    Returns:
        bytes o None si la petición no trae imagen

    Raises:
        ValueError: Si la imagen está vacía o no es base64 válido
    """
    if 'image' in request.files:
        file_bytes = request.files['image'].read()
        if not file_bytes:
            raise ValueError('El archivo enviado no contiene datos')
        return file_bytes

    image_data = body.get('imageData')
    if not image_data:
        return None
    if not isinstance(image_data, str):
        raise ValueError('imageData debe ser una cadena base64')
    image_bytes = decode_data_url(image_data)
    if not image_bytes:
        raise ValueError('imageData no contiene datos')
    return image_bytes


@emotion_bp.route('/emotion', methods=['POST'])
def detect_emotion():
    """
    Detecta la emoción desde una imagen enviada o una etiqueta directa.

    Request (JSON):
        {"imageData": "data:image/jpeg;base64,...", "emotion": "happy", "confidence": 0.9}
        Al menos uno de imageData / emotion es obligatorio.

    Request (multipart):
        Campo "image" con el archivo jpeg/png

    Returns:
        JSON {emotion, confidence, timestamp, success, message, provider}

    Error cases:
        - 400: Falta imagen y etiqueta, etiqueta desconocida o imagen inválida
        - 500: Error interno del servidor
    """
    try:
        body = request.get_json(silent=True) or {}
        if not isinstance(body, dict):
            return _bad_request('Petición inválida', 'El cuerpo JSON debe ser un objeto')

        label = body.get('emotion')

        try:
            image_bytes = None if label else _read_image_bytes(body)
        except ValueError as e:
            return _bad_request('Imagen inválida', str(e))

        if not label and image_bytes is None:
            return _bad_request(
                'Petición inválida',
                'Debes enviar "emotion" o "imageData" (o el archivo "image")'
            )

        if label:
            try:
                emotion = parse_emotion(label)
            except ValueError:
                return _bad_request(
                    'Emoción no válida',
                    f'Emociones soportadas: {", ".join(get_all_emotions())}'
                )
            confidence = body.get('confidence', DEFAULT_BYPASS_CONFIDENCE)
            if isinstance(confidence, bool) or not isinstance(confidence, (int, float)) \
                    or not 0 <= confidence <= 1:
                return _bad_request('Confianza inválida', 'confidence debe ser un número en [0, 1]')
            result = DetectionResult(emotion=emotion, confidence=float(confidence), timestamp=now_ms())
            provider_name = 'direct'
        else:
            frame = cv2.imdecode(np.frombuffer(image_bytes, np.uint8), cv2.IMREAD_COLOR)
            if frame is None:
                return _bad_request(
                    'Formato de imagen inválido',
                    'No se pudo decodificar la imagen. Usa formato JPEG o PNG'
                )

            try:
                result = _get_or_create_provider().detect(image_bytes)
            except ProviderError as e:
                current_app.logger.info(f"Cloud Vision no disponible ({e}), usando heurística")
                result = get_fallback_provider().detect(frame)
            provider_name = result.provider.value

        return jsonify({
            'emotion': result.emotion.value,
            'confidence': round(result.confidence, 2),
            'timestamp': result.timestamp,
            'success': True,
            'message': f'Emoción detectada: {result.emotion.value} '
                       f'con {round(result.confidence * 100)}% de confianza',
            'provider': provider_name,
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error en /emotion: {str(e)}", exc_info=True)

        # En producción, no exponer detalles internos
        error_message = str(e) if current_app.debug else 'Error interno del servidor'
        return jsonify({
            'success': False,
            'error': 'Error al detectar emoción',
            'message': error_message
        }), 500


@emotion_bp.route('/emotion', methods=['GET'])
def emotion_info():
    """Información de la API de detección emocional."""
    settings = current_app.config['SETTINGS']
    return jsonify({
        'message': 'API de detección emocional con Google Cloud Vision',
        'endpoints': {
            'POST': '/emotion - Detecta la emoción desde imageData o etiqueta directa',
            'GET': '/emotion - Información de la API'
        },
        'supportedEmotions': get_all_emotions(),
        'emotionMapping': EMOTION_MUSIC_PROFILE,
        'googleCloudVision': {
            'configured': settings.cloud_vision_configured
        },
        'fallback': {
            'enabled': True,
            'description': 'Heurística local cuando Google Cloud Vision no está disponible'
        }
    }), 200
