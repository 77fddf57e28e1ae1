"""
Módulo musical: catálogo estático de canciones por emoción.
"""

from .catalog import Track, SongCatalog, build_default_catalog, get_catalog, EMOTION_MUSIC_PROFILE

__all__ = ['Track', 'SongCatalog', 'build_default_catalog', 'get_catalog', 'EMOTION_MUSIC_PROFILE']
