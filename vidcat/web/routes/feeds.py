"""
Routes des flux RSS et des sitemaps XML.

Seul le flux RSS principal est mis en cache : il est invalide par le
scraper a chaque nouvelle video. Les sitemaps sont generes a chaque appel.
"""

from typing import Callable

from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse
from loguru import logger

from ...services.feeds import FeedService, SitemapPageNotFoundError
from ..cache import cached_response
from ..deps import get_container, get_settings, video_repository

router = APIRouter()

XML_MEDIA_TYPE = "application/xml"


def _xml_response(request: Request, build: Callable[[FeedService], str]) -> Response:
    """Construit un document XML avec un FeedService sur une session fraiche."""
    with video_repository() as repo:
        service = get_container(request).feed_service(repository=repo)
        xml = build(service)
    return Response(content=xml, media_type=XML_MEDIA_TYPE)


@router.get("/rss")
async def main_rss(request: Request):
    """Flux RSS principal (50 dernieres videos)."""
    settings = get_settings(request)
    return cached_response(
        request,
        settings.cache_ttl_feed,
        lambda: _xml_response(request, lambda feeds: feeds.main_rss()),
    )


@router.get("/rss/category/{slug}")
async def category_rss(request: Request, slug: str):
    """Flux RSS d'une categorie (30 dernieres videos)."""
    return _xml_response(request, lambda feeds: feeds.category_rss(slug))


@router.get("/sitemap.xml")
async def sitemap_index(request: Request):
    """Index des sitemaps video."""
    return _xml_response(request, lambda feeds: feeds.sitemap_index())


@router.get("/sitemap-video.xml")
async def legacy_video_sitemap(request: Request):
    """Sitemap video mono-page (format Google Video)."""
    return _xml_response(request, lambda feeds: feeds.legacy_video_sitemap())


@router.get("/sitemap-video{page:int}.xml")
async def sitemap_page(request: Request, page: int):
    """Page `page` du sitemap video (404 au-dela de la derniere page)."""
    try:
        return _xml_response(request, lambda feeds: feeds.sitemap_page(page))
    except SitemapPageNotFoundError:
        logger.info("Page de sitemap hors limite", page=page)
        return PlainTextResponse("Page de sitemap introuvable", status_code=404)
