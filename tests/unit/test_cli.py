"""
Tests de la CLI typer.
"""

from contextlib import contextmanager

import httpx
import pytest
import respx
from dependency_injector import providers
from typer.testing import CliRunner

from vidcat import main
from vidcat.main import __version__, app
from vidcat.web.deps import video_repository

runner = CliRunner()

PAGE_URL = "https://source.example.net/video/7"
PAGE = '<html><body><meta itemprop="name" content="Chat noir"></body></html>'


@pytest.fixture
def cli_container(test_settings):
    """Container de la CLI pointe sur la base de test."""
    main.container.config.override(providers.Object(test_settings))
    yield main.container
    main.container.shutdown_resources()
    main.container.config.reset_override()


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert f"VidCat v{__version__}" in result.stdout


def test_info_shows_storage_state():
    result = runner.invoke(app, ["info"])

    assert result.exit_code == 0
    assert "Stockage R2" in result.stdout


class TestScrape:
    """Tests de la commande scrape."""

    @respx.mock
    def test_inserts_video_and_closes_session(self, cli_container, monkeypatch):
        respx.get(PAGE_URL).mock(return_value=httpx.Response(200, text=PAGE))
        closed = []

        @contextmanager
        def tracked_repository():
            with video_repository() as repo:
                yield repo
            closed.append(True)

        monkeypatch.setattr(main, "video_repository", tracked_repository)

        result = runner.invoke(app, ["scrape", PAGE_URL])

        assert result.exit_code == 0
        assert "[201]" in result.stdout
        assert closed == [True]
        with video_repository() as repo:
            assert repo.get_by_slug("chat-noir") is not None

    @respx.mock
    def test_failure_exit_code(self, cli_container):
        respx.get(PAGE_URL).mock(return_value=httpx.Response(503))

        result = runner.invoke(app, ["scrape", PAGE_URL])

        assert result.exit_code == 1
        assert "[502]" in result.stdout
