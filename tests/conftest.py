"""
Fixtures pytest partagees pour les tests VidCat.

Ce module contient les fixtures communes utilisees dans les tests:
- Settings de test avec base SQLite temporaire
- Session et repository sur cette base
- Fabrique de videos
- Corps de reponse HTTP lent (serveur qui envoie goutte a goutte)
"""

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, Callable, Iterator
from unittest.mock import MagicMock

import pytest
from sqlmodel import Session

from vidcat.config import Settings
from vidcat.core.entities.video import Video
from vidcat.core.ports.repositories import IVideoRepository
from vidcat.infrastructure.persistence.database import get_session, init_db
from vidcat.infrastructure.persistence.repositories import SQLModelVideoRepository
from vidcat.utils.helpers import make_slug


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test isolees.

    Base SQLite dans tmp_path, mot de passe admin connu, stockage R2
    non configure (seule l'URL publique est definie pour les redirections).
    """
    return Settings(
        site_url="https://example.com/",
        site_name="VidCat",
        database_url=f"sqlite:///{tmp_path / 'vidcat.db'}",
        session_secret="test-secret",
        admin_password="secret",
        r2_public_url="https://cdn.example.com",
        log_file=tmp_path / "vidcat.log",
    )


@pytest.fixture
def session(test_settings: Settings) -> Iterator[Session]:
    """Session sur une base fraiche (tables creees)."""
    init_db(test_settings.database_url)
    session = next(get_session())
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repository(session: Session) -> SQLModelVideoRepository:
    """Repository SQLModel sur la base de test."""
    return SQLModelVideoRepository(session)


@pytest.fixture
def make_video() -> Callable[..., Video]:
    """
    Fabrique de videos : le slug est derive du titre sauf s'il est fourni.

    Usage:
        video = make_video("Mon titre", tags=["chat"])
    """

    def _make(title: str = "Une video", **overrides) -> Video:
        values = {
            "title": title,
            "slug": make_slug(title),
            "description": f"Description de {title}",
            "embed_url": "//player.example.net/embed/1",
            "thumbnail": "https://img.example.net/thumb.jpg",
            "duration": "1:02",
            "duration_sec": 62,
        }
        values.update(overrides)
        return Video(**values)

    return _make


@pytest.fixture
def mock_repository() -> MagicMock:
    """
    Mock de IVideoRepository.

    Par defaut le catalogue est vide ; configurer les valeurs de retour
    dans chaque test.
    """
    mock = MagicMock(spec=IVideoRepository)
    mock.get_by_slug.return_value = None
    mock.get_by_title.return_value = None
    mock.count.return_value = 0
    mock.list_latest.return_value = []
    mock.list_by_category.return_value = []
    mock.distinct_categories.return_value = []
    mock.distinct_tags.return_value = []
    mock.random_sample.return_value = []
    return mock


@pytest.fixture
def fixed_now() -> datetime:
    """Date de reference des documents generes."""
    return datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def slow_body() -> Callable[..., AsyncIterator[bytes]]:
    """Corps de reponse envoye par petits morceaux espaces dans le temps."""

    async def _body(chunks: int = 50, delay: float = 0.1) -> AsyncIterator[bytes]:
        for _ in range(chunks):
            await asyncio.sleep(delay)
            yield b"<p> "

    return _body
