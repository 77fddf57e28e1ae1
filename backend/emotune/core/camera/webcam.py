"""
Fuente de frames de la webcam (OpenCV).

El orquestador de detección llama a capture() desde un hilo de trabajo
mientras la sesión puede liberar la cámara desde el event loop, por eso el
acceso al dispositivo se protege con un lock.
"""

import logging
import threading
from typing import Optional, Tuple

import cv2
import numpy as np

from ..errors import MediaAccessError

logger = logging.getLogger(__name__)

CAMERA_REMEDIATION = (
    "Comprueba que la cámara esté conectada, que la aplicación tenga permiso "
    "para usarla y que ningún otro programa la tenga abierta."
)


class WebcamCapture:
    """
    Cámara local usada como fuente de frames BGR.

    Attributes:
        camera_index (int): Índice del dispositivo (EMOTUNE_CAMERA_INDEX)
        resolution (Tuple[int, int]): Resolución solicitada (ancho, alto)
        is_opened (bool): True entre start() y release()

    Example:
        >>> with WebcamCapture(0) as camera:
        ...     frame = camera.capture()
    """

    def __init__(self, camera_index: int = 0, width: int = 640, height: int = 480):
        self.camera_index = camera_index
        self.resolution = (width, height)
        self.is_opened = False
        self._device: Optional[cv2.VideoCapture] = None
        self._lock = threading.Lock()

    def start(self) -> None:
        """
        Abre el dispositivo.

        Raises:
            MediaAccessError: Si la cámara no existe, está ocupada o no hay permiso
        """
        with self._lock:
            if self.is_opened:
                return

            device = cv2.VideoCapture(self.camera_index)
            if not device.isOpened():
                device.release()
                raise MediaAccessError(
                    f"No se pudo abrir la cámara {self.camera_index}. {CAMERA_REMEDIATION}"
                )

            width, height = self.resolution
            device.set(cv2.CAP_PROP_FRAME_WIDTH, width)
            device.set(cv2.CAP_PROP_FRAME_HEIGHT, height)

            self._device = device
            self.is_opened = True
        logger.info(f"Cámara {self.camera_index} abierta ({width}x{height})")

    def read(self) -> Tuple[bool, Optional[np.ndarray]]:
        """
        Lee un frame.

        Returns:
            Tuple[bool, Optional[np.ndarray]]: (leído, frame o None)

        Raises:
            MediaAccessError: Si la cámara no está abierta
        """
        with self._lock:
            if self._device is None:
                raise MediaAccessError("La cámara no está abierta; llama a start() primero")
            ok, frame = self._device.read()

        if not ok:
            logger.warning("La cámara no devolvió frame")
            return False, None
        return True, frame

    def capture(self) -> Optional[np.ndarray]:
        """Frame actual, o None si la cámara está cerrada o no entregó imagen."""
        if not self.is_opened:
            return None
        return self.read()[1]

    def release(self) -> None:
        with self._lock:
            if self._device is None:
                return
            self._device.release()
            self._device = None
            self.is_opened = False
        logger.info("Cámara liberada")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
