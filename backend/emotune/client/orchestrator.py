"""
Orquestador de detección emocional.

Selecciona el proveedor una sola vez al arrancar, ejecuta el bucle de
sondeo periódico sobre el event loop de asyncio, aplica el fallback a la
heurística cuando el proveedor falla, suaviza la confianza, mantiene el
historial y notifica a los suscriptores.

Máquina de estados:
    UNINITIALIZED -> PROVIDER_SELECTED -> POLLING <-> IDLE -> STOPPED
"""

import asyncio
import inspect
import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Union

from ..core.emotion.history import HISTORY_CAPACITY, EmotionHistory, smooth
from ..core.emotion.providers import HeuristicProvider, Provider
from ..core.emotion.schema import DetectionResult
from ..core.errors import MediaAccessError, ProviderError

logger = logging.getLogger(__name__)

Subscriber = Callable[[DetectionResult], Union[None, Awaitable[None]]]


class DetectionState(Enum):
    UNINITIALIZED = "uninitialized"
    PROVIDER_SELECTED = "provider_selected"
    POLLING = "polling"
    IDLE = "idle"
    STOPPED = "stopped"


class CancellationToken:
    """Señal de cancelación de una ejecución del bucle de sondeo."""

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def sleep(self, delay: float) -> bool:
        """
        Espera `delay` segundos o hasta la cancelación.

        Returns:
            bool: True si el token fue cancelado durante la espera
        """
        if delay > 0:
            try:
                await asyncio.wait_for(self._event.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass
        return self.cancelled


class DetectionOrchestrator:
    """
    Orquestador del bucle de detección.

    Attributes:
        selector (Callable[[], Provider]): Sondeo de arranque; devuelve el proveedor
        frame_source (Callable, optional): Devuelve el frame actual o None
        fallback (Provider): Heurística usada cuando el proveedor falla
        poll_interval (float): Periodo del sondeo en segundos
        initial_delay (float): Retardo de la primera detección tras enable()
        history (EmotionHistory): Historial acotado de detecciones
        current (DetectionResult, optional): Última detección vigente
        detection_count (int): Número de detecciones registradas

    Example:
        >>> orchestrator = DetectionOrchestrator(selector, frame_source=camera.capture)
        >>> orchestrator.subscribe(bridge.on_detection)
        >>> await orchestrator.start()
        >>> orchestrator.enable()
        >>> ...
        >>> orchestrator.disable()
    """

    def __init__(
        self,
        selector: Callable[[], Provider],
        frame_source: Optional[Callable[[], object]] = None,
        fallback: Optional[Provider] = None,
        poll_interval: float = 1.0,
        initial_delay: float = 0.5,
        history_size: int = HISTORY_CAPACITY,
    ):
        self.selector = selector
        self.frame_source = frame_source
        self.fallback = fallback or HeuristicProvider()
        self.poll_interval = poll_interval
        self.initial_delay = initial_delay

        self.history = EmotionHistory(history_size)
        self.current: Optional[DetectionResult] = None
        self.detection_count = 0
        self.state = DetectionState.UNINITIALIZED

        self._provider: Optional[Provider] = None
        self._subscribers: List[Subscriber] = []
        self._token: Optional[CancellationToken] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def provider(self) -> Optional[Provider]:
        return self._provider

    @property
    def enabled(self) -> bool:
        return self._token is not None and not self._token.cancelled

    def subscribe(self, callback: Subscriber) -> None:
        """Registra un suscriptor (función o corrutina) de detecciones."""
        self._subscribers.append(callback)

    async def start(self) -> Provider:
        """
        Sondea la configuración y selecciona el proveedor de la sesión.

        La selección se hace una sola vez; llamadas posteriores devuelven
        el proveedor ya seleccionado.
        """
        if self._provider is None:
            # El sondeo puede hacer red o cargar un modelo
            self._provider = await asyncio.to_thread(self.selector)
            self.state = DetectionState.PROVIDER_SELECTED
            logger.info(f"Proveedor de detección seleccionado: {self._provider.kind.value}")
        return self._provider

    def enable(self) -> None:
        """
        Arranca el bucle de sondeo (cámara encendida).

        Raises:
            RuntimeError: Si no se ha llamado a start() o no hay event loop
        """
        if self._provider is None:
            raise RuntimeError("Llama a start() antes de habilitar la detección")
        if self.enabled:
            return

        self._token = CancellationToken()
        self.state = DetectionState.IDLE
        previous = self._task
        self._task = asyncio.get_running_loop().create_task(self._poll_loop(self._token, previous))
        logger.info("Bucle de detección iniciado")

    def disable(self) -> None:
        """Detiene el sondeo (cámara apagada) y limpia la detección actual."""
        if self._token is not None:
            self._token.cancel()
        self.current = None
        if self._provider is not None:
            self.state = DetectionState.STOPPED
        logger.info("Bucle de detección detenido")

    async def shutdown(self) -> None:
        """Deshabilita y espera a que termine la tarea de sondeo."""
        self.disable()
        if self._task is not None:
            await self._task
            self._task = None

    async def _poll_loop(self, token: CancellationToken,
                         previous: Optional[asyncio.Task] = None) -> None:
        loop = asyncio.get_running_loop()

        if previous is not None and not previous.done():
            # La llamada al proveedor del bucle anterior debe terminar antes del primer tick
            logger.debug("Esperando a que termine la detección en curso del bucle anterior")
            await asyncio.gather(previous, return_exceptions=True)

        started = loop.time()

        # Detección inicial adelantada
        if await token.sleep(self.initial_delay):
            return
        await self._tick(token)

        k = 1
        while not token.cancelled:
            deadline = started + k * self.poll_interval
            now = loop.time()
            if deadline < now:
                # El tick anterior se pasó de su ventana: se salta, no se encola
                missed = int((now - started) // self.poll_interval) + 1
                logger.debug(f"Saltando {missed - k} tick(s) de detección")
                k = missed
                continue
            if await token.sleep(deadline - now):
                return
            await self._tick(token)
            k += 1

    async def _tick(self, token: CancellationToken) -> Optional[DetectionResult]:
        """
        Ejecuta una detección completa.

        Returns:
            DetectionResult registrado, o None si se descartó por cancelación
        """
        if token.cancelled:
            return None

        self.state = DetectionState.POLLING
        frame = self._capture_frame()

        try:
            result = await asyncio.to_thread(self._provider.detect, frame)
        except ProviderError as e:
            logger.warning(f"Proveedor {self._provider.kind.value} falló ({e}), usando heurística")
            result = self.fallback.detect(frame)

        if token.cancelled:
            logger.debug("Detección descartada: el bucle se detuvo durante la llamada")
            return None

        recorded = await self.record(result)
        self.state = DetectionState.IDLE
        return recorded

    def _capture_frame(self):
        if self.frame_source is None:
            return None
        try:
            return self.frame_source()
        except MediaAccessError as e:
            # Sin frame el proveedor falla y el tick cae a la heurística
            logger.error(f"Cámara no disponible: {e}")
            return None

    async def record(self, result: DetectionResult) -> DetectionResult:
        """Suaviza, añade al historial, actualiza el estado y notifica."""
        smoothed = self.history.append(smooth(self.history, result))
        self.current = smoothed
        self.detection_count += 1

        logger.info(
            f"Emoción detectada: {smoothed.emotion.value} "
            f"({round(smoothed.confidence * 100)}% confianza) - Detección #{self.detection_count}"
        )

        for callback in list(self._subscribers):
            try:
                outcome = callback(smoothed)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                logger.error(f"Error en suscriptor de detección: {e}", exc_info=True)

        return smoothed

    def snapshot(self) -> dict:
        """Estado actual para paneles de estado."""
        return {
            'state': self.state.value,
            'provider': self._provider.kind.value if self._provider else None,
            'emotion': self.current.emotion.value if self.current else None,
            'confidence': self.current.confidence if self.current else 0.0,
            'detectionCount': self.detection_count,
            'history': [entry.to_dict() for entry in self.history],
        }
