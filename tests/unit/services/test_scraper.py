"""
Tests pour ScraperService - import des pages video distantes.

Utilise respx pour simuler les appels httpx et verifie :
- Chaque echec correspond a son statut (timeout, page anti-bot, doublon...)
- L'extraction des meta itemprop et des liens tag/categorie
- L'invalidation du cache de l'accueil et du flux RSS principal apres insertion
"""

import time
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx
from bs4 import BeautifulSoup
from sqlalchemy.exc import SQLAlchemyError

from vidcat.adapters.cache.response_cache import ResponseCache
from vidcat.core.entities.video import Video
from vidcat.core.ports.asset_storage import AssetUploadError, IAssetStorage
from vidcat.core.ports.repositories import SlugConflictError
from vidcat.services.scraper import (
    ScraperService,
    ScrapeStatus,
    extract_metadata,
    is_challenge_page,
)

PAGE_URL = "https://source.example.net/video/123"

VIDEO_PAGE = """
<html>
<head><title>Page title | Source</title></head>
<body>
  <meta itemprop="name" content="  Lions en liberté  ">
  <meta itemprop="description" content="Une famille de lions.">
  <meta itemprop="embedURL" content="//player.example.net/embed/123">
  <meta itemprop="thumbnailUrl" content="https://img.example.net/123.jpg">
  <meta itemprop="duration" content="PT1H2M5S">
  <meta itemprop="uploadDate" content="2024-03-01T10:00:00Z">
  <a href="/category/big-cats">Big Cats</a>
  <a href="/category/afrique">Afrique</a>
  <a href="/tag/lion">lion</a>
  <a href="/tag/lion">lion</a>
  <a href="/tag/savane"> savane </a>
  <a href="/about">A propos</a>
</body>
</html>
"""

CHALLENGE_PAGE = "<html><head><title>Just a moment...</title></head><body></body></html>"


@pytest.fixture
def cache() -> ResponseCache:
    cache = ResponseCache()
    cache.set("/", b"home", ttl=300)
    cache.set("/rss", b"rss", ttl=600)
    cache.set("/?page=2", b"page 2", ttl=300)
    return cache


@pytest.fixture
def scraper_repository(mock_repository: MagicMock) -> MagicMock:
    """Catalogue vide : add() renvoie la video avec un id."""

    def _add(video: Video) -> Video:
        video.id = 1
        return video

    mock_repository.add.side_effect = _add
    return mock_repository


@pytest.fixture
def scraper(scraper_repository, cache) -> ScraperService:
    return ScraperService(scraper_repository, cache, asset_storage=None, timeout=5.0)


class TestExtractMetadata:
    """Tests pour extract_metadata()."""

    def test_extracts_fields(self):
        metadata = extract_metadata(BeautifulSoup(VIDEO_PAGE, "html.parser"))

        assert metadata.title == "Lions en liberté"
        assert metadata.description == "Une famille de lions."
        assert metadata.embed_url == "//player.example.net/embed/123"
        assert metadata.thumbnail == "https://img.example.net/123.jpg"
        assert metadata.iso_duration == "PT1H2M5S"
        assert metadata.upload_date == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
        assert metadata.categories == ["Big Cats", "Afrique"]
        assert metadata.tags == ["lion", "savane"]

    def test_falls_back_to_page_title(self):
        html = "<html><head><title>Titre de page</title></head></html>"

        metadata = extract_metadata(BeautifulSoup(html, "html.parser"))

        assert metadata.title == "Titre de page"
        assert metadata.iso_duration == "PT0S"
        assert metadata.thumbnail is None
        assert metadata.upload_date is None

    def test_invalid_upload_date_ignored(self):
        html = '<meta itemprop="name" content="A"><meta itemprop="uploadDate" content="hier">'

        assert extract_metadata(BeautifulSoup(html, "html.parser")).upload_date is None

    def test_challenge_detection(self):
        assert is_challenge_page(BeautifulSoup(CHALLENGE_PAGE, "html.parser"))
        assert not is_challenge_page(BeautifulSoup(VIDEO_PAGE, "html.parser"))


class TestScrapeSuccess:
    """Tests pour un scrape() reussi."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_inserts_video(self, scraper, scraper_repository):
        respx.get(PAGE_URL).mock(return_value=httpx.Response(200, text=VIDEO_PAGE))

        result = await scraper.scrape(PAGE_URL)

        assert result.ok
        assert result.status is ScrapeStatus.SUCCESS
        assert result.status.http_status == 201
        assert result.message == "Ajoutee: Lions en liberté"

        video = scraper_repository.add.call_args.args[0]
        assert video.slug == "lions-en-liberte"
        assert video.duration_sec == 3725
        assert video.duration == "1:02:05"
        assert video.thumbnail == "https://img.example.net/123.jpg"
        assert video.categories == ["Big Cats", "Afrique"]
        assert video.tags == ["lion", "savane"]
        assert video.views == 0
        scraper_repository.get_by_title.assert_called_once_with("Lions en liberté")

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalidates_home_and_rss_only(self, scraper, cache):
        respx.get(PAGE_URL).mock(return_value=httpx.Response(200, text=VIDEO_PAGE))

        await scraper.scrape(PAGE_URL)

        assert cache.get("/") is None
        assert cache.get("/rss") is None
        assert cache.get("/?page=2") is not None

    @pytest.mark.asyncio
    @respx.mock
    async def test_upload_date_defaults_to_now(self, scraper, scraper_repository):
        html = '<meta itemprop="name" content="Sans date">'
        respx.get(PAGE_URL).mock(return_value=httpx.Response(200, text=html))

        result = await scraper.scrape(PAGE_URL)

        assert result.ok
        assert result.video.upload_date is not None
        assert result.video.duration == "00:00"

    @pytest.mark.asyncio
    @respx.mock
    async def test_thumbnail_uploaded_to_storage(self, scraper_repository, cache):
        storage = AsyncMock(spec=IAssetStorage)
        storage.upload_from_url.return_value = "https://cdn.example.com/uploads/2024/3/x.jpg"
        scraper = ScraperService(scraper_repository, cache, asset_storage=storage)
        respx.get(PAGE_URL).mock(return_value=httpx.Response(200, text=VIDEO_PAGE))

        result = await scraper.scrape(PAGE_URL)

        assert result.ok
        storage.upload_from_url.assert_awaited_once_with(
            "https://img.example.net/123.jpg", "lions-en-liberte"
        )
        assert result.video.thumbnail == "https://cdn.example.com/uploads/2024/3/x.jpg"


class TestScrapeFailures:
    """Tests des echecs de scrape() : rien n'est insere."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", [None, "", "   "])
    async def test_empty_url(self, scraper, scraper_repository, url):
        result = await scraper.scrape(url)

        assert result.status is ScrapeStatus.INVALID_URL
        assert result.status.http_status == 400
        scraper_repository.add.assert_not_called()

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout(self, scraper, scraper_repository, cache):
        respx.get(PAGE_URL).mock(side_effect=httpx.ConnectTimeout("timeout"))

        result = await scraper.scrape(PAGE_URL)

        assert result.status is ScrapeStatus.TIMEOUT
        assert result.status.http_status == 504
        scraper_repository.add.assert_not_called()
        assert cache.get("/") is not None

    @pytest.mark.asyncio
    @respx.mock
    async def test_slow_body_times_out(self, scraper_repository, cache, slow_body):
        scraper = ScraperService(scraper_repository, cache, timeout=0.3)
        respx.get(PAGE_URL).mock(return_value=httpx.Response(200, content=slow_body()))

        started = time.monotonic()
        result = await scraper.scrape(PAGE_URL)

        assert result.status is ScrapeStatus.TIMEOUT
        assert time.monotonic() - started < 2.0
        scraper_repository.add.assert_not_called()

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error(self, scraper, scraper_repository):
        respx.get(PAGE_URL).mock(return_value=httpx.Response(503))

        result = await scraper.scrape(PAGE_URL)

        assert result.status is ScrapeStatus.FETCH_ERROR
        assert result.status.http_status == 502
        scraper_repository.add.assert_not_called()

    @pytest.mark.asyncio
    @respx.mock
    async def test_challenge_page(self, scraper, scraper_repository):
        respx.get(PAGE_URL).mock(return_value=httpx.Response(200, text=CHALLENGE_PAGE))

        result = await scraper.scrape(PAGE_URL)

        assert result.status is ScrapeStatus.BLOCKED
        assert result.status.http_status == 502
        scraper_repository.add.assert_not_called()

    @pytest.mark.asyncio
    @respx.mock
    @pytest.mark.parametrize(
        "html",
        [
            "<html><body><p>rien</p></body></html>",
            '<meta itemprop="name" content="   ">',
            '<meta itemprop="name" content="!!!">',
        ],
    )
    async def test_missing_title(self, scraper, scraper_repository, html):
        respx.get(PAGE_URL).mock(return_value=httpx.Response(200, text=html))

        result = await scraper.scrape(PAGE_URL)

        assert result.status is ScrapeStatus.MISSING_TITLE
        assert result.status.http_status == 422
        scraper_repository.add.assert_not_called()

    @pytest.mark.asyncio
    @respx.mock
    async def test_duplicate_title(self, scraper, scraper_repository, cache, make_video):
        scraper_repository.get_by_title.return_value = make_video("Lions en liberté")
        respx.get(PAGE_URL).mock(return_value=httpx.Response(200, text=VIDEO_PAGE))

        result = await scraper.scrape(PAGE_URL)

        assert result.status is ScrapeStatus.DUPLICATE
        assert result.status.http_status == 409
        assert result.message.startswith("Doublon: ")
        scraper_repository.add.assert_not_called()
        assert cache.get("/") is not None

    @pytest.mark.asyncio
    @respx.mock
    async def test_slug_conflict(self, scraper, scraper_repository):
        scraper_repository.add.side_effect = SlugConflictError("lions-en-liberte")
        respx.get(PAGE_URL).mock(return_value=httpx.Response(200, text=VIDEO_PAGE))

        result = await scraper.scrape(PAGE_URL)

        assert result.status is ScrapeStatus.CONFLICT
        assert result.status.http_status == 409

    @pytest.mark.asyncio
    @respx.mock
    async def test_database_error(self, scraper, scraper_repository, cache):
        scraper_repository.add.side_effect = SQLAlchemyError("disk I/O error")
        respx.get(PAGE_URL).mock(return_value=httpx.Response(200, text=VIDEO_PAGE))

        result = await scraper.scrape(PAGE_URL)

        assert result.status is ScrapeStatus.DATABASE_ERROR
        assert result.status.http_status == 500
        assert "disk I/O error" in result.message
        assert cache.get("/") is not None

    @pytest.mark.asyncio
    @respx.mock
    async def test_storage_error(self, scraper_repository, cache):
        storage = AsyncMock(spec=IAssetStorage)
        storage.upload_from_url.side_effect = AssetUploadError(
            "https://img.example.net/123.jpg", "timeout"
        )
        scraper = ScraperService(scraper_repository, cache, asset_storage=storage)
        respx.get(PAGE_URL).mock(return_value=httpx.Response(200, text=VIDEO_PAGE))

        result = await scraper.scrape(PAGE_URL)

        assert result.status is ScrapeStatus.STORAGE_ERROR
        assert result.status.http_status == 500
        scraper_repository.add.assert_not_called()


class TestScrapeWithRepository:
    """scrape() sur le repository SQLite."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_second_scrape_is_duplicate(self, repository, cache):
        scraper = ScraperService(repository, cache)
        respx.get(PAGE_URL).mock(return_value=httpx.Response(200, text=VIDEO_PAGE))

        first = await scraper.scrape(PAGE_URL)
        second = await scraper.scrape(PAGE_URL)

        assert first.status is ScrapeStatus.SUCCESS
        assert second.status is ScrapeStatus.DUPLICATE
        assert repository.count() == 1
        assert repository.get_by_slug("lions-en-liberte").tags == ["lion", "savane"]
