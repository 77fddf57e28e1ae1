"""
Blueprint para endpoints relacionados con recomendación musical.

Devuelve canciones del catálogo estático para una emoción dada.
"""

from flask import Blueprint, current_app, jsonify, request

from ..core.emotion.schema import get_all_emotions, parse_emotion

music_bp = Blueprint('music', __name__)


def _bad_request(error: str, message: str):
    return jsonify({'success': False, 'error': error, 'message': message}), 400


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@music_bp.route('/music', methods=['POST'])
def recommend_music():
    """
    Recomienda canciones para una emoción.

    JSON Body:
        emotion (str): Obligatoria, una de las 7 emociones conocidas
        confidence (float): Opcional, en [0, 1]
        limit (int): Opcional, número máximo de canciones (>= 1)

    Returns:
        JSON {songs, emotion, totalSongs, success, message}

    Example:
        POST /music
        Body: {"emotion": "happy", "limit": 2}

    Error cases:
        - 400: Falta la emoción, emoción desconocida o parámetros inválidos
        - 500: Error interno del servidor
    """
    try:
        body = request.get_json(silent=True) or {}
        if not isinstance(body, dict):
            return _bad_request('Petición inválida', 'El cuerpo JSON debe ser un objeto')

        if not body.get('emotion'):
            return _bad_request('Falta la emoción', 'El campo "emotion" es obligatorio')

        try:
            emotion = parse_emotion(body['emotion'])
        except ValueError:
            return _bad_request(
                'Emoción no válida',
                f'Emociones soportadas: {", ".join(get_all_emotions())}'
            )

        limit = body.get('limit')
        if limit is not None and (not isinstance(limit, int) or isinstance(limit, bool) or limit < 1):
            return _bad_request('limit inválido', 'limit debe ser un entero mayor o igual que 1')

        confidence = body.get('confidence')
        if confidence is not None and (not _is_number(confidence) or not 0 <= confidence <= 1):
            return _bad_request('Confianza inválida', 'confidence debe ser un número en [0, 1]')

        catalog = current_app.config['CATALOG']
        songs = catalog.shuffled_sample(emotion, limit)

        return jsonify({
            'songs': [track.to_dict() for track in songs],
            'emotion': emotion.value,
            'totalSongs': len(catalog.tracks_for(emotion)),
            'success': True,
            'message': f'Encontradas {len(songs)} canciones para la emoción {emotion.value}'
        }), 200

    except Exception as e:
        current_app.logger.error(f"Error en /music: {str(e)}", exc_info=True)

        error_message = str(e) if current_app.debug else 'Error interno del servidor'
        return jsonify({
            'success': False,
            'error': 'Error al recomendar música',
            'message': error_message
        }), 500


@music_bp.route('/music', methods=['GET'])
def music_info():
    """Información de la API de recomendación musical."""
    catalog = current_app.config['CATALOG']
    return jsonify({
        'message': 'API de recomendación musical',
        'endpoints': {
            'POST': '/music - Canciones recomendadas para una emoción',
            'GET': '/music - Información de la API'
        },
        'supportedEmotions': catalog.emotions(),
        'totalSongs': catalog.total_songs(),
        'songsPerEmotion': catalog.songs_per_emotion()
    }), 200
