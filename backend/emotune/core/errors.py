"""
Taxonomía de errores del sistema.

Todos los errores propios derivan de EmotuneError. Los errores de proveedor
y de catálogo se recuperan en el borde del componente (fallback); solo los
errores de acceso a cámara y de reproducción llegan hasta la interfaz.
"""

from enum import Enum


class EmotuneError(Exception):
    """Error base del sistema."""


class ProviderErrorKind(Enum):
    """Causa de fallo de un proveedor de detección."""
    UNCONFIGURED = "unconfigured"
    TRANSPORT = "transport"


class ProviderError(EmotuneError):
    """
    Fallo de un proveedor de detección emocional.

    Attributes:
        kind (ProviderErrorKind): Causa del fallo
    """

    def __init__(self, kind: ProviderErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind


class ConfigurationError(ProviderError):
    """El proveedor remoto no tiene credenciales configuradas."""

    def __init__(self, message: str = "Proveedor remoto no configurado"):
        super().__init__(ProviderErrorKind.UNCONFIGURED, message)


class TransportError(ProviderError):
    """Fallo de red o de parseo hablando con un colaborador remoto."""

    def __init__(self, message: str = "Error de transporte"):
        super().__init__(ProviderErrorKind.TRANSPORT, message)


class CatalogError(TransportError):
    """Fallo al consultar el catálogo remoto de canciones."""


class MediaAccessError(EmotuneError):
    """Cámara no disponible (permiso denegado o hardware ausente)."""


class PlaybackError(EmotuneError):
    """Fallo de carga o decodificación de audio."""
