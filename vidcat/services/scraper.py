"""
Service de scraping des pages video tierces.

Recupere une page HTML, extrait les meta-donnees schema.org (itemprop),
verifie l'absence de doublon par titre exact, publie la miniature sur le
stockage objet (si configure) puis insere la fiche dans le catalogue.

Chaque issue est rapportee par un ScrapeResult (message court + statut HTTP)
et non par une exception : le processus ne plante jamais sur une page distante.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

import httpx
from bs4 import BeautifulSoup
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from vidcat.adapters.cache.response_cache import ResponseCache
from vidcat.core.entities.video import Video
from vidcat.core.ports.asset_storage import AssetUploadError, IAssetStorage
from vidcat.core.ports.repositories import IVideoRepository, SlugConflictError
from vidcat.utils.constants import (
    CHALLENGE_PAGE_TITLE,
    DEFAULT_ISO_DURATION,
    HOME_CACHE_KEY,
    MAIN_RSS_CACHE_KEY,
    SCRAPER_HEADERS,
)
from vidcat.utils.duration import format_duration, parse_duration
from vidcat.utils.helpers import make_slug, unique_labels, utcnow


class ScrapeStatus(Enum):
    """Issue d'un scraping, avec le statut HTTP rapporte a l'appelant."""

    SUCCESS = ("success", 201)
    INVALID_URL = ("invalid_url", 400)
    TIMEOUT = ("timeout", 504)
    FETCH_ERROR = ("fetch_error", 502)
    BLOCKED = ("blocked", 502)
    MISSING_TITLE = ("missing_title", 422)
    DUPLICATE = ("duplicate", 409)
    CONFLICT = ("conflict", 409)
    STORAGE_ERROR = ("storage_error", 500)
    DATABASE_ERROR = ("database_error", 500)

    @property
    def http_status(self) -> int:
        return self.value[1]


@dataclass
class ScrapeResult:
    """
    Resultat d'un scraping.

    Attributs :
        status : Issue du scraping
        message : Message court affichable
        video : Fiche inseree (seulement en cas de succes)
    """

    status: ScrapeStatus
    message: str
    video: Optional[Video] = None

    @property
    def ok(self) -> bool:
        return self.status is ScrapeStatus.SUCCESS


@dataclass
class PageMetadata:
    """Champs extraits d'une page video."""

    title: str
    description: str
    embed_url: str
    thumbnail: Optional[str]
    iso_duration: str
    upload_date: Optional[datetime]
    tags: list[str]
    categories: list[str]


def _meta(soup: BeautifulSoup, itemprop: str) -> Optional[str]:
    tag = soup.select_one(f'meta[itemprop="{itemprop}"]')
    if tag is None:
        return None
    content = tag.get("content")
    return content.strip() if isinstance(content, str) else None


def _anchor_texts(soup: BeautifulSoup, href_fragment: str) -> list[str]:
    return unique_labels(
        anchor.get_text(strip=True)
        for anchor in soup.select(f'a[href*="{href_fragment}"]')
    )


def _parse_upload_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def is_challenge_page(soup: BeautifulSoup) -> bool:
    """Detecte une page de verification anti-bot."""
    title = soup.title.get_text() if soup.title else ""
    return CHALLENGE_PAGE_TITLE in title


def extract_metadata(soup: BeautifulSoup) -> PageMetadata:
    """
    Extrait les meta-donnees d'une page video.

    Le titre vient de meta[itemprop=name], a defaut de la balise <title>.
    Tags et categories sont les textes des liens /tag/ et /category/.
    """
    page_title = soup.title.get_text() if soup.title else ""
    title = (_meta(soup, "name") or page_title).strip()
    return PageMetadata(
        title=title,
        description=_meta(soup, "description") or "",
        embed_url=_meta(soup, "embedURL") or "",
        thumbnail=_meta(soup, "thumbnailUrl") or None,
        iso_duration=_meta(soup, "duration") or DEFAULT_ISO_DURATION,
        upload_date=_parse_upload_date(_meta(soup, "uploadDate")),
        tags=_anchor_texts(soup, "/tag/"),
        categories=_anchor_texts(soup, "/category/"),
    )


class ScraperService:
    """
    Orchestration du scraping d'une page vers le catalogue.

    Example:
        service = ScraperService(repository, cache, asset_storage=None)
        result = await service.scrape("https://example.com/video/123")
        print(result.status, result.message)
    """

    def __init__(
        self,
        repository: IVideoRepository,
        cache: ResponseCache,
        asset_storage: Optional[IAssetStorage] = None,
        timeout: float = 20.0,
    ) -> None:
        """
        Initialise le service.

        Args:
            repository: Catalogue video
            cache: Cache des reponses (invalide apres insertion)
            asset_storage: Stockage des miniatures (None : URL distante conservee)
            timeout: Timeout des appels sortants en secondes, applique a
                la requete entiere (corps de la reponse compris)
        """
        self._repository = repository
        self._cache = cache
        self._asset_storage = asset_storage
        self._timeout = timeout

    async def _fetch(self, url: str) -> str:
        async with httpx.AsyncClient(
            headers=SCRAPER_HEADERS, timeout=self._timeout, follow_redirects=True
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text

    async def scrape(self, url: Optional[str]) -> ScrapeResult:
        """
        Scrape `url` et insere la video dans le catalogue.

        Returns:
            ScrapeResult decrivant l'issue (jamais d'exception pour une
            erreur reseau, une page invalide ou un doublon)
        """
        url = (url or "").strip()
        if not url:
            return ScrapeResult(ScrapeStatus.INVALID_URL, "URL vide")

        try:
            html = await asyncio.wait_for(self._fetch(url), timeout=self._timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError):
            logger.warning("Timeout du scraping", url=url)
            return ScrapeResult(ScrapeStatus.TIMEOUT, f"Timeout: {url}")
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Echec du scraping", url=url, error=str(exc))
            return ScrapeResult(ScrapeStatus.FETCH_ERROR, f"Erreur: {exc}")

        soup = BeautifulSoup(html, "html.parser")
        if is_challenge_page(soup):
            logger.warning("Page anti-bot detectee", url=url)
            return ScrapeResult(ScrapeStatus.BLOCKED, "Bloque par une page anti-bot")

        metadata = extract_metadata(soup)
        slug = make_slug(metadata.title)
        if not metadata.title or not slug:
            return ScrapeResult(ScrapeStatus.MISSING_TITLE, "Titre manquant")

        # Titre exact : des variantes de casse ou d'espaces sont inserees
        if self._repository.get_by_title(metadata.title) is not None:
            return ScrapeResult(
                ScrapeStatus.DUPLICATE, f"Doublon: {metadata.title[:20]}..."
            )

        thumbnail = metadata.thumbnail or ""
        if thumbnail and self._asset_storage is not None:
            try:
                thumbnail = await self._asset_storage.upload_from_url(thumbnail, slug)
            except AssetUploadError as exc:
                logger.error("Miniature non stockee", url=url, error=str(exc))
                return ScrapeResult(ScrapeStatus.STORAGE_ERROR, f"Erreur: {exc}")

        duration_sec = parse_duration(metadata.iso_duration)
        video = Video(
            title=metadata.title,
            slug=slug,
            description=metadata.description,
            embed_url=metadata.embed_url,
            thumbnail=thumbnail,
            duration=format_duration(duration_sec),
            duration_sec=duration_sec,
            upload_date=metadata.upload_date or utcnow(),
            tags=metadata.tags,
            categories=metadata.categories,
        )

        try:
            saved = self._repository.add(video)
        except SlugConflictError as exc:
            return ScrapeResult(ScrapeStatus.CONFLICT, f"Conflit: {exc}")
        except SQLAlchemyError as exc:
            logger.error("Insertion impossible", slug=slug, error=str(exc))
            return ScrapeResult(ScrapeStatus.DATABASE_ERROR, f"Erreur: {exc}")

        self._cache.invalidate(HOME_CACHE_KEY, MAIN_RSS_CACHE_KEY)
        logger.info("Video ajoutee", slug=saved.slug, url=url)
        return ScrapeResult(
            ScrapeStatus.SUCCESS, f"Ajoutee: {saved.title[:40]}", video=saved
        )
