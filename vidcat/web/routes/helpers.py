"""
Fonctions utilitaires partagees par les routes de pages.
"""

import math
from typing import Any, Optional

from fastapi import Request

from ...config import Settings
from ...core.entities.video import Video
from ...utils.constants import DEFAULT_POSTER_PATH, LISTING_PAGE_SIZE
from ..deps import templates


def parse_page(raw: Optional[str]) -> int:
    """Numero de page depuis la query string (invalide ou < 1 -> 1)."""
    try:
        page = int(raw) if raw else 1
    except (ValueError, TypeError):
        return 1
    return page if page >= 1 else 1


def total_pages(total: int, per_page: int = LISTING_PAGE_SIZE) -> int:
    """Nombre de pages d'un listing."""
    return math.ceil(total / per_page)


def page_label(page: int) -> str:
    """Suffixe de titre pour les pages > 1."""
    return f" - Page {page}" if page > 1 else ""


def base_context(request: Request, settings: Settings, **overrides: Any) -> dict:
    """
    Contexte SEO commun a toutes les pages.

    Les valeurs par defaut (titre, description, image, robots) peuvent etre
    surchargees par chaque route.
    """
    site_url = settings.site_url
    context = {
        "site_url": site_url,
        "site_name": settings.site_name,
        "current_title": f"{settings.site_name} - Vidéos en streaming",
        "current_desc": f"Les dernières vidéos en streaming sur {settings.site_name}.",
        "current_image": f"{site_url}/{DEFAULT_POSTER_PATH}",
        "current_url": f"{site_url}{request.url.path}",
        "og_type": "website",
        "no_index": False,
    }
    context.update(overrides)
    return context


def render_not_found(
    request: Request, settings: Settings, videos: Optional[list[Video]] = None
):
    """Page 404 avec quelques suggestions."""
    return templates.TemplateResponse(
        request,
        "404.html",
        base_context(
            request,
            settings,
            videos=videos or [],
            current_title="Page introuvable",
            no_index=True,
        ),
        status_code=404,
    )
