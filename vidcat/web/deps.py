"""
Dépendances partagées de l'application web.

Fournit les templates Jinja2, l'accès au Container DI de l'application
et l'ouverture d'un repository lié à une session fermée en fin de requête.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from ..config import Settings
from ..container import Container
from ..infrastructure.persistence.database import get_session
from ..infrastructure.persistence.repositories import SQLModelVideoRepository
from ..utils.duration import format_duration
from ..utils.helpers import resolve_thumbnail_url

_WEB_DIR = Path(__file__).parent

templates = Jinja2Templates(directory=_WEB_DIR / "templates")
templates.env.filters["duration"] = format_duration
templates.env.globals["thumbnail_url"] = resolve_thumbnail_url


def get_container(request: Request) -> Container:
    """Container DI attaché à l'application au démarrage."""
    return request.app.state.container


def get_settings(request: Request) -> Settings:
    """Paramètres de l'application."""
    return get_container(request).config()


@contextmanager
def video_repository() -> Iterator[SQLModelVideoRepository]:
    """
    Repository du catalogue sur une session fraîche.

    Utilisation :
        with video_repository() as repo:
            videos = repo.list_latest()
    """
    session = next(get_session())
    try:
        yield SQLModelVideoRepository(session)
    finally:
        session.close()
