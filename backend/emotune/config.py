"""
Configuración del sistema.

Settings es inmutable y se construye una sola vez por proceso a partir del
entorno (y de un fichero .env si existe). El único contrato de entorno
obligatorio es la presencia o ausencia de GOOGLE_CLOUD_CREDENTIALS; el
resto son ajustes opcionales con valores por defecto.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional

from dotenv import load_dotenv


def _as_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _as_float(value: Optional[str], default: Optional[float]) -> Optional[float]:
    if value is None or value.strip() == '':
        return default
    return float(value)


@dataclass(frozen=True)
class Settings:
    """
    Configuración inmutable del backend y del cliente.

    Attributes:
        google_credentials (str, optional): JSON de la cuenta de servicio de Google Cloud
        api_base_url (str): URL base del backend usada por el cliente
        host (str): Host del servidor Flask
        port (int): Puerto del servidor Flask
        debug (bool): Modo debug de Flask
        camera_index (int): Índice de la webcam del cliente
        poll_interval (float): Periodo de detección en segundos
        initial_poll_delay (float): Retardo de la primera detección tras habilitar
        history_size (int): Capacidad del historial emocional
        music_trigger_threshold (float): Confianza mínima (exclusiva) para cambiar la música
        default_volume (float): Volumen inicial en [0, 1]
        music_limit (int): Número de canciones pedidas al catálogo remoto
        request_timeout (float, optional): Timeout HTTP; None = sin timeout
    """
    google_credentials: Optional[str] = None
    api_base_url: str = "http://127.0.0.1:5000"
    host: str = "0.0.0.0"
    port: int = 5000
    debug: bool = False
    camera_index: int = 0
    poll_interval: float = 1.0
    initial_poll_delay: float = 0.5
    history_size: int = 10
    music_trigger_threshold: float = 0.6
    default_volume: float = 0.7
    music_limit: int = 10
    request_timeout: Optional[float] = None

    @property
    def cloud_vision_configured(self) -> bool:
        return bool(self.google_credentials and self.google_credentials.strip())

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 dotenv: bool = True) -> 'Settings':
        """
        Construye Settings desde variables de entorno.

        Args:
            environ: Mapeo de variables (default: os.environ)
            dotenv (bool): Si es True carga antes el fichero .env

        Raises:
            ValueError: Si una variable numérica tiene un valor inválido
        """
        if dotenv:
            load_dotenv()
        env = os.environ if environ is None else environ

        return cls(
            google_credentials=env.get('GOOGLE_CLOUD_CREDENTIALS') or None,
            api_base_url=env.get('EMOTUNE_API_URL', cls.api_base_url).rstrip('/'),
            host=env.get('EMOTUNE_HOST', cls.host),
            port=int(env.get('EMOTUNE_PORT', cls.port)),
            debug=_as_bool(env.get('EMOTUNE_DEBUG'), cls.debug),
            camera_index=int(env.get('EMOTUNE_CAMERA_INDEX', cls.camera_index)),
            poll_interval=_as_float(env.get('EMOTUNE_POLL_INTERVAL'), cls.poll_interval),
            initial_poll_delay=_as_float(env.get('EMOTUNE_INITIAL_POLL_DELAY'), cls.initial_poll_delay),
            music_trigger_threshold=_as_float(env.get('EMOTUNE_MUSIC_THRESHOLD'), cls.music_trigger_threshold),
            default_volume=_as_float(env.get('EMOTUNE_VOLUME'), cls.default_volume),
            request_timeout=_as_float(env.get('EMOTUNE_REQUEST_TIMEOUT'), cls.request_timeout),
        )


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Instancia única de Settings para el proceso."""
    return Settings.from_env()
