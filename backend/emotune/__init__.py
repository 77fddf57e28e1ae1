"""
emotune - Música adaptada al estado emocional detectado por webcam.

- Backend Flask (app, routes): detección emocional, catálogo musical y salud
- Cliente (client): orquestador de detección, reproducción y sesión
"""

__version__ = "2.0.0"
