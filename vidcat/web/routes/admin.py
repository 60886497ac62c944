"""
Routes de l'administration : connexion, tableau de bord et scraping.

Le scraping n'est accessible qu'a une session authentifiee. Son resultat
est renvoye en texte brut avec le statut HTTP correspondant a l'issue.
"""

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from loguru import logger

from ..auth import check_password, get_auth_context, login, logout
from ..deps import get_container, get_settings, templates, video_repository
from .helpers import base_context

router = APIRouter()


async def read_field(request: Request, name: str) -> Optional[str]:
    """Lit un champ depuis un corps JSON ou un formulaire."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            return None
        value = payload.get(name) if isinstance(payload, dict) else None
    else:
        form = await request.form()
        value = form.get(name)
    return value if isinstance(value, str) else None


def _login_page(request: Request, error: Optional[str] = None, status_code: int = 200):
    settings = get_settings(request)
    return templates.TemplateResponse(
        request,
        "login.html",
        base_context(
            request,
            settings,
            error=error,
            current_title=f"Connexion | {settings.site_name}",
            no_index=True,
        ),
        status_code=status_code,
    )


@router.get("/admin/login")
async def login_form(request: Request):
    """Formulaire de connexion."""
    if get_auth_context(request).authenticated:
        return RedirectResponse("/admin", status_code=303)
    return _login_page(request)


@router.post("/admin/login")
async def login_submit(request: Request):
    """Verifie le mot de passe et ouvre la session."""
    settings = get_settings(request)
    password = await read_field(request, "password")
    if not check_password(password, settings.admin_password):
        logger.warning("Echec de connexion a l'administration")
        return _login_page(request, error="Mot de passe incorrect", status_code=401)

    login(request)
    logger.info("Connexion a l'administration")
    return RedirectResponse("/admin", status_code=303)


@router.get("/admin/logout")
async def logout_view(request: Request):
    """Ferme la session."""
    logout(request)
    return RedirectResponse("/admin/login", status_code=303)


@router.get("/admin")
async def dashboard(request: Request):
    """Tableau de bord : formulaire de scraping et total du catalogue."""
    if not get_auth_context(request).authenticated:
        return RedirectResponse("/admin/login", status_code=303)

    settings = get_settings(request)
    with video_repository() as repo:
        total = repo.count()
    return templates.TemplateResponse(
        request,
        "admin/admin.html",
        base_context(
            request,
            settings,
            total_videos=total,
            current_title=f"Administration | {settings.site_name}",
            no_index=True,
        ),
    )


@router.post("/api/scrape")
async def scrape(request: Request):
    """
    Scrape une URL et l'ajoute au catalogue.

    Corps attendu : {"url": "..."} ou formulaire avec un champ url.
    """
    if not get_auth_context(request).authenticated:
        return PlainTextResponse("Non autorisé", status_code=401)

    url = await read_field(request, "url")
    with video_repository() as repo:
        service = get_container(request).scraper_service(repository=repo)
        result = await service.scrape(url)
    return PlainTextResponse(result.message, status_code=result.status.http_status)
