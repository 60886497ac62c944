"""
Routes des pages HTML : accueil, fiche video, recherche, tags et categories.

Toutes ces pages passent par la politique de cache (voir web/cache.py),
avec un TTL propre a chaque route.
"""

from typing import Optional

from fastapi import APIRouter, Request

from ...utils.constants import (
    DEFAULT_CATEGORY_LABEL,
    LISTING_PAGE_SIZE,
    RELATED_VIDEOS_COUNT,
)
from ...utils.helpers import (
    display_name_from_slug,
    resolve_player_url,
    resolve_thumbnail_url,
)
from ..cache import cached_response
from ..deps import get_settings, templates, video_repository
from .helpers import base_context, page_label, parse_page, render_not_found, total_pages

router = APIRouter()


@router.get("/")
async def home(request: Request, page: Optional[str] = None):
    """Page d'accueil : dernieres videos, paginees par 24."""
    settings = get_settings(request)

    def render():
        current = parse_page(page)
        with video_repository() as repo:
            total = repo.count()
            videos = repo.list_latest(
                offset=(current - 1) * LISTING_PAGE_SIZE, limit=LISTING_PAGE_SIZE
            )
        label = page_label(current)
        return templates.TemplateResponse(
            request,
            "index.html",
            base_context(
                request,
                settings,
                videos=videos,
                current_page=current,
                total_pages=total_pages(total),
                total_videos=total,
                current_title=f"{settings.site_name}{label} | Dernières vidéos",
                current_desc=f"Les dernières vidéos ajoutées sur {settings.site_name}.{label}",
            ),
        )

    return cached_response(request, settings.cache_ttl_home, render)


@router.get("/video/{slug}")
async def video_detail(request: Request, slug: str):
    """
    Fiche d'une video.

    Les vues sont incrementees a chaque requete, y compris quand la page
    est servie depuis le cache.
    """
    settings = get_settings(request)
    with video_repository() as repo:
        repo.increment_views(slug)

    def render():
        with video_repository() as repo:
            video = repo.get_by_slug(slug)
            if video is None:
                return render_not_found(request, settings)
            related = [
                other
                for other in repo.random_sample(RELATED_VIDEOS_COUNT + 1)
                if other.slug != video.slug
            ][:RELATED_VIDEOS_COUNT]

        categories = video.categories or [DEFAULT_CATEGORY_LABEL]
        meta_image = resolve_thumbnail_url(video.thumbnail, settings.site_url)
        seo_description = (
            f"{video.title} - durée {video.duration_sec or 0} secondes. "
            f"Vidéos {', '.join(categories)} sur {settings.site_name}."
        )
        return templates.TemplateResponse(
            request,
            "single.html",
            base_context(
                request,
                settings,
                video=video,
                related=related,
                categories=categories,
                embed_url_full=resolve_player_url(
                    video.embed_url, settings.player_proxy_url
                ),
                current_title=f"{video.title} | {settings.site_name}",
                current_desc=seo_description,
                current_image=meta_image,
                current_url=f"{settings.site_url}/video/{video.slug}",
                og_type="article",
            ),
        )

    return cached_response(request, settings.cache_ttl_video, render)


@router.get("/search")
async def search(request: Request, q: str = ""):
    """Recherche sur le titre et les tags (24 resultats, non indexee)."""
    settings = get_settings(request)

    def render():
        with video_repository() as repo:
            videos = repo.search(q, limit=LISTING_PAGE_SIZE)
            total = repo.count_search(q)
        return templates.TemplateResponse(
            request,
            "search.html",
            base_context(
                request,
                settings,
                videos=videos,
                total_videos=total,
                q=q,
                current_title=f"Recherche : {q} | {settings.site_name}",
                no_index=True,
            ),
        )

    return cached_response(request, settings.cache_ttl_search, render)


@router.get("/tag/{tag}")
async def tag_listing(request: Request, tag: str, page: Optional[str] = None):
    """Videos d'un tag ("mon-tag" recherche "mon tag")."""
    settings = get_settings(request)

    def render():
        current = parse_page(page)
        name = tag.replace("-", " ")
        with video_repository() as repo:
            total = repo.count_by_tag(name)
            videos = repo.list_by_tag(
                name, offset=(current - 1) * LISTING_PAGE_SIZE, limit=LISTING_PAGE_SIZE
            )
        display = display_name_from_slug(tag)
        description = f"Toutes les vidéos {display} sur {settings.site_name}."
        return templates.TemplateResponse(
            request,
            "listing.html",
            base_context(
                request,
                settings,
                videos=videos,
                heading=display,
                listing_path=f"/tag/{tag}",
                current_page=current,
                total_pages=total_pages(total),
                total_videos=total,
                current_title=f"{display}{page_label(current)} | {settings.site_name}",
                current_desc=description + page_label(current),
            ),
        )

    return cached_response(request, settings.cache_ttl_listing, render)


@router.get("/category/{slug}")
async def category_listing(request: Request, slug: str, page: Optional[str] = None):
    """Videos d'une categorie, avec lien vers son flux RSS."""
    settings = get_settings(request)

    def render():
        current = parse_page(page)
        name = slug.replace("-", " ")
        with video_repository() as repo:
            total = repo.count_by_category(name)
            videos = repo.list_by_category(
                name, offset=(current - 1) * LISTING_PAGE_SIZE, limit=LISTING_PAGE_SIZE
            )
        display = display_name_from_slug(slug)
        description = f"Toutes les vidéos de la catégorie {display} sur {settings.site_name}."
        return templates.TemplateResponse(
            request,
            "listing.html",
            base_context(
                request,
                settings,
                videos=videos,
                heading=display,
                listing_path=f"/category/{slug}",
                rss_category_slug=slug,
                current_page=current,
                total_pages=total_pages(total),
                total_videos=total,
                current_title=f"{display}{page_label(current)} | {settings.site_name}",
                current_desc=description + page_label(current),
            ),
        )

    return cached_response(request, settings.cache_ttl_listing, render)
