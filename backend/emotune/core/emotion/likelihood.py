"""
Conversión de etiquetas cualitativas de verosimilitud a puntuaciones.

Google Cloud Vision no devuelve probabilidades sino categorías
(VERY_UNLIKELY ... VERY_LIKELY). Este módulo las traduce a [0, 1].
"""

from typing import Dict

LIKELIHOOD_SCORES: Dict[str, float] = {
    'UNKNOWN': 0.0,
    'VERY_UNLIKELY': 0.1,
    'UNLIKELY': 0.3,
    'POSSIBLE': 0.5,
    'LIKELY': 0.7,
    'VERY_LIKELY': 0.9,
}


def score(label) -> float:
    """
    Convierte una etiqueta de verosimilitud en una puntuación numérica.

    Acepta cadenas o miembros del enum Likelihood del cliente de Google
    (se usa su nombre). Cualquier valor no reconocido devuelve 0.0.

    Examples:
        >>> score("LIKELY")
        0.7
        >>> score(None)
        0.0
    """
    if label is None:
        return 0.0
    name = getattr(label, 'name', label)
    if not isinstance(name, str):
        return 0.0
    return LIKELIHOOD_SCORES.get(name, 0.0)
