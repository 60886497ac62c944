"""
Persistance SQLModel du catalogue.

Exports:
- init_db / get_engine / get_session : gestion de l'engine et des sessions
- VideoModel : table des vidéos
"""

from vidcat.infrastructure.persistence.database import get_engine, get_session, init_db
from vidcat.infrastructure.persistence.models import VideoModel

__all__ = ["get_engine", "get_session", "init_db", "VideoModel"]
