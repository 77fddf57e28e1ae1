"""
Aplicación principal del backend - emotune.

Este módulo implementa la API REST Flask consumida por el cliente:
- Detección de emociones desde una imagen enviada (Google Cloud Vision
  con heurística local como respaldo)
- Recomendación de canciones por emoción
- Estado de salud y configuración de proveedores

IMPORTANTE: El cliente de Google Cloud Vision NO se crea al arrancar.
Solo se inicializa la primera vez que llega una imagen a /emotion.
"""

import logging
import time

from flask import Flask
from flask_cors import CORS

from . import __version__
from .config import get_settings
from .core.music.catalog import get_catalog
from .routes import health_bp, emotion_bp, music_bp

# Configurar logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(config=None):
    """
    Factory function para crear y configurar la aplicación Flask.

    Args:
        config (dict, optional): Diccionario de configuración custom. Claves
            relevantes: SETTINGS (Settings), CATALOG (SongCatalog),
            CLOUD_VISION_PROVIDER y FALLBACK_PROVIDER (proveedores ya creados).

    Returns:
        Flask: Aplicación Flask configurada y lista para usar

    Example:
        >>> app = create_app()
        >>> app.run(port=5000)
    """
    app = Flask(__name__)

    settings = (config or {}).get('SETTINGS') or get_settings()

    # Configuración por defecto
    app.config['SETTINGS'] = settings
    app.config['DEBUG'] = settings.debug
    app.config['HOST'] = settings.host
    app.config['PORT'] = settings.port
    app.config['CATALOG'] = get_catalog()
    app.config['STARTED_AT'] = time.time()

    # Lazy initialization: los proveedores se crean en la primera petición
    app.config['CLOUD_VISION_PROVIDER'] = None
    app.config['FALLBACK_PROVIDER'] = None

    # Aplicar configuración custom si se proporciona
    if config:
        app.config.update(config)

    # Habilitar CORS para permitir requests desde el cliente
    CORS(app)

    app.register_blueprint(health_bp)
    app.register_blueprint(emotion_bp)
    app.register_blueprint(music_bp)

    logger.info(
        "Sistema iniciado (Cloud Vision configurado: %s)",
        settings.cloud_vision_configured
    )

    return app


def main():
    """
    Ejecuta el servidor de desarrollo.

    Para producción, usar un servidor WSGI como Gunicorn.
    """
    app = create_app()

    logger.info("=" * 70)
    logger.info(f"Backend emotune v{__version__}")
    logger.info("Endpoints disponibles:")
    logger.info("  GET  /health   - Estado del servicio y de los proveedores")
    logger.info("  POST /health   - Pruebas rápidas de servicios")
    logger.info("  POST /emotion  - Detectar emoción desde imagen o etiqueta")
    logger.info("  POST /music    - Canciones recomendadas para una emoción")
    logger.info("=" * 70)

    app.run(
        host=app.config['HOST'],
        port=app.config['PORT'],
        debug=app.config['DEBUG']
    )


if __name__ == "__main__":
    main()
