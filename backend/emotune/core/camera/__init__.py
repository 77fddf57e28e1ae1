"""
Módulo de captura de cámara.
"""

from .webcam import WebcamCapture

__all__ = ['WebcamCapture']
