"""
Sesión interactiva del cliente.

Conecta la webcam, el orquestador de detección, el puente y el
reproductor, y atiende los comandos del usuario por teclado:

    p  play/pause        n  siguiente       b  anterior
    +  subir volumen     -  bajar volumen   c  cámara on/off
    s  estado            q  salir

Uso:
    emotune-client
"""

import asyncio
import logging
from functools import partial

from ..config import Settings, get_settings
from ..core.camera.webcam import WebcamCapture
from ..core.emotion.deepface_detector import load_local_model
from ..core.emotion.providers import select_provider
from ..core.errors import MediaAccessError, PlaybackError
from ..core.music.catalog import get_catalog
from .api import EmotionApiClient
from .audio import PygameAudioOutput
from .bridge import EmotionMusicBridge
from .orchestrator import DetectionOrchestrator
from .playback import MusicPlayer, TrackSource

logger = logging.getLogger(__name__)

VOLUME_STEP = 0.1
TRACK_END_CHECK_INTERVAL = 0.5


async def watch_track_end(player: MusicPlayer, interval: float = TRACK_END_CHECK_INTERVAL) -> None:
    """Avisa al reproductor cuando la pista actual termina."""
    while True:
        await asyncio.sleep(interval)
        if player.session.is_playing and player.audio.is_finished():
            try:
                await player.on_track_ended()
            except PlaybackError as e:
                logger.error(f"No se pudo pasar a la siguiente canción: {e}")


async def stop_watcher(watcher: asyncio.Task) -> None:
    """Cancela el vigilante de fin de pista y espera a que termine."""
    watcher.cancel()
    await asyncio.gather(watcher, return_exceptions=True)


async def handle_command(command: str, orchestrator: DetectionOrchestrator,
                         player: MusicPlayer) -> bool:
    """
    Ejecuta un comando de teclado.

    Returns:
        bool: False si el usuario pidió salir
    """
    command = command.strip().lower()
    try:
        if command == 'q':
            return False
        elif command == 'p':
            if not await player.play_pause():
                print("No hay canción cargada")
        elif command == 'n':
            await player.next()
        elif command == 'b':
            await player.previous()
        elif command == '+':
            print(f"Volumen: {round(player.set_volume(player.session.volume + VOLUME_STEP) * 100)}%")
        elif command == '-':
            print(f"Volumen: {round(player.set_volume(player.session.volume - VOLUME_STEP) * 100)}%")
        elif command == 'c':
            if orchestrator.enabled:
                orchestrator.disable()
                print("Cámara apagada")
            else:
                orchestrator.enable()
                print("Cámara encendida")
        elif command == 's':
            status = orchestrator.snapshot()
            track = player.session.current_track
            print(f"Detección: {status['state']} ({status['provider']}) - "
                  f"{status['emotion']} {round(status['confidence'] * 100)}%")
            print(f"Música: {player.state.value} - {track.title if track else 'sin canción'}")
            if player.session.last_error:
                print(f"Último error: {player.session.last_error}")
        elif command:
            print("Comandos: p n b + - c s q")
    except PlaybackError as e:
        print(f"Error de audio: {e}")
    return True


async def run_session(settings: Settings) -> None:
    """Ejecuta una sesión completa hasta que el usuario sale."""
    camera = WebcamCapture(settings.camera_index)
    try:
        camera.start()
    except MediaAccessError as e:
        logger.error(str(e))
        print("Permite el acceso a la cámara (o cambia EMOTUNE_CAMERA_INDEX) y vuelve a intentarlo.")
        return

    api_client = EmotionApiClient(settings.api_base_url, timeout=settings.request_timeout)
    player = MusicPlayer(
        TrackSource(get_catalog(), api_client=api_client, limit=settings.music_limit),
        PygameAudioOutput(volume=settings.default_volume),
        volume=settings.default_volume,
    )
    bridge = EmotionMusicBridge(player, threshold=settings.music_trigger_threshold)
    orchestrator = DetectionOrchestrator(
        partial(select_provider, api_client=api_client, model_loader=load_local_model),
        frame_source=camera.capture,
        poll_interval=settings.poll_interval,
        initial_delay=settings.initial_poll_delay,
        history_size=settings.history_size,
    )
    orchestrator.subscribe(bridge.on_detection)

    watcher = asyncio.get_running_loop().create_task(watch_track_end(player))
    try:
        await orchestrator.start()
        orchestrator.enable()
        print("Sesión iniciada. Comandos: p n b + - c s q")

        while True:
            command = await asyncio.to_thread(input, "> ")
            if not await handle_command(command, orchestrator, player):
                break
    except (EOFError, KeyboardInterrupt):
        pass
    finally:
        await stop_watcher(watcher)
        await orchestrator.shutdown()
        await bridge.drain()
        await player.stop()
        camera.release()
        logger.info("Sesión finalizada")


def main():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    asyncio.run(run_session(get_settings()))


if __name__ == "__main__":
    main()
