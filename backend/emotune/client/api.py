"""
Cliente HTTP del backend.

Encapsula las tres interfaces del servidor (/health, /emotion, /music).
Todos los fallos de red, de estado HTTP o de parseo se convierten en
TransportError (o CatalogError para el catálogo).
"""

import logging
from typing import Dict, List, Optional

import requests

from ..core.errors import CatalogError, TransportError
from ..core.music.catalog import Track

logger = logging.getLogger(__name__)


class EmotionApiClient:
    """
    Cliente del backend emotune.

    Attributes:
        base_url (str): URL base del backend (sin barra final)
        timeout (float, optional): Timeout de requests; None = sin timeout
        session (requests.Session): Sesión HTTP reutilizada
    """

    def __init__(self, base_url: str, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, payload: Optional[dict] = None,
                 error_cls=TransportError) -> Dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise error_cls(f"{method} {path} falló: {e}")

        if not isinstance(data, dict):
            raise error_cls(f"{method} {path}: respuesta no es un objeto JSON")
        return data

    def health(self) -> Dict:
        """Consulta de estado del backend (GET /health)."""
        return self._request('GET', '/health')

    def remote_configured(self) -> bool:
        """Indica si el backend tiene el proveedor remoto configurado."""
        data = self.health()
        vision = data.get('googleCloudVision') or {}
        return bool(vision.get('configured'))

    def detect_emotion(self, image_data: Optional[str] = None,
                       emotion: Optional[str] = None,
                       confidence: Optional[float] = None) -> Dict:
        """
        Solicita una detección (POST /emotion).

        Raises:
            TransportError: Fallo de red/parseo o respuesta con success=false
        """
        payload = {}
        if image_data is not None:
            payload['imageData'] = image_data
        if emotion is not None:
            payload['emotion'] = emotion
        if confidence is not None:
            payload['confidence'] = confidence

        data = self._request('POST', '/emotion', payload)
        if not data.get('success'):
            raise TransportError(data.get('message') or 'Detección remota fallida')
        return data

    def fetch_tracks(self, emotion: str, limit: Optional[int] = None,
                     confidence: Optional[float] = None) -> List[Track]:
        """
        Solicita canciones para una emoción (POST /music).

        Raises:
            CatalogError: Fallo de red/parseo o respuesta con success=false
        """
        payload = {'emotion': emotion}
        if limit is not None:
            payload['limit'] = limit
        if confidence is not None:
            payload['confidence'] = confidence

        data = self._request('POST', '/music', payload, error_cls=CatalogError)
        if not data.get('success') or not isinstance(data.get('songs'), list):
            raise CatalogError(data.get('message') or 'Respuesta de catálogo inválida')

        try:
            return [Track.from_dict(song) for song in data['songs']]
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"Canción inválida en la respuesta: {e}")
