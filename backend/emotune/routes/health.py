"""
Blueprint para endpoints de salud y monitoreo de la API.

GET /health informa del estado de configuración de los proveedores y de
las funcionalidades activas; el orquestador del cliente lo usa como sondeo
de arranque. POST /health ejecuta pruebas rápidas de cada servicio.
"""

import time

from flask import Blueprint, current_app, jsonify, request

from .. import __version__
from ..core.emotion.schema import Emotion
from .emotion import get_fallback_provider

health_bp = Blueprint('health', __name__)

CLOUD_VISION_FEATURES = [
    'Detección emocional en tiempo real',
    'Análisis facial en la nube',
    'Puntuación de confianza por verosimilitud',
]

AVAILABLE_TESTS = ['emotion-detection', 'music-recommendation', 'camera-access']


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Endpoint de verificación de estado del servicio.

    Example:
        GET /health

        Response:
        {
            "status": "healthy",
            "services": {"api": "up", "emotionDetection": "heuristic", ...},
            "googleCloudVision": {"configured": false, ...},
            ...
        }
    """
    start = time.perf_counter()
    settings = current_app.config['SETTINGS']
    configured = settings.cloud_vision_configured

    response = {
        'status': 'healthy',
        'timestamp': int(time.time() * 1000),
        'version': __version__,
        'services': {
            'api': 'up',
            'emotionDetection': 'cloud-vision' if configured else 'heuristic',
            'musicRecommendation': 'up',
            # La cámara vive en el cliente, el servidor no tiene acceso
            'camera': 'unavailable',
        },
        'performance': {
            'uptime': round(time.time() - current_app.config['STARTED_AT'], 3),
        },
        'features': {
            'realTimeDetection': True,
            'musicPlayback': True,
            'cameraAccess': True,
            'emotionHistory': True,
        },
        'googleCloudVision': {
            'configured': configured,
            'features': CLOUD_VISION_FEATURES,
        },
    }
    response['responseTime'] = f"{(time.perf_counter() - start) * 1000:.1f}ms"
    return jsonify(response), 200


@health_bp.route('/health', methods=['POST'])
def health_self_test():
    """
    Ejecuta una prueba rápida de un servicio.

    JSON Body:
        test (str): 'emotion-detection', 'music-recommendation' o 'camera-access'

    Error cases:
        - 400: Tipo de prueba desconocido
    """
    body = request.get_json(silent=True) or {}
    test = body.get('test') if isinstance(body, dict) else None

    if test == 'emotion-detection':
        result = get_fallback_provider().detect(None)
        return jsonify({
            'test': test,
            'status': 'passed',
            'result': result.to_dict(),
        }), 200

    if test == 'music-recommendation':
        tracks = current_app.config['CATALOG'].tracks_for(Emotion.HAPPY)
        return jsonify({
            'test': test,
            'status': 'passed' if tracks else 'failed',
            'result': {
                'emotion': Emotion.HAPPY.value,
                'songsFound': len(tracks),
                'sampleSong': tracks[0].to_dict() if tracks else None,
            },
        }), 200

    if test == 'camera-access':
        return jsonify({
            'test': test,
            'status': 'skipped',
            'result': {'reason': 'La cámara se gestiona en el cliente'},
        }), 200

    return jsonify({
        'error': 'Tipo de prueba no válido',
        'availableTests': AVAILABLE_TESTS,
    }), 400
