"""
Application FastAPI de VidCat.

Initialise l'application web avec le Container DI, configure la session
d'administration, les redirections des anciennes URLs, les gestionnaires
d'erreurs et monte les routes.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from ..config import Settings
from ..container import Container
from ..utils.constants import LEGACY_REDIRECTS, NOT_FOUND_SUGGESTIONS_COUNT
from .auth import SESSION_MAX_AGE
from .deps import get_settings, video_repository
from .routes.admin import router as admin_router
from .routes.feeds import router as feeds_router
from .routes.helpers import render_not_found
from .routes.pages import router as pages_router

_WEB_DIR = Path(__file__).parent


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise la base au démarrage et libère les ressources à l'arrêt."""
    container: Container = app.state.container
    container.database.init()
    logger.info("Démarrage du site", site_url=container.config().site_url)
    yield
    container.shutdown_resources()


def legacy_redirect_target(path: str, params: dict, settings: Settings) -> Optional[str]:
    """
    Cible d'une ancienne URL, ou None si le chemin n'est pas a rediriger.

    Couvre les anciens scripts .php et les miniatures /uploads/ servies
    desormais par le stockage objet.
    """
    if path.startswith("/uploads/") and settings.r2_public_url:
        return f"{settings.r2_public_url}{path[len('/uploads'):]}"

    if path in LEGACY_REDIRECTS:
        return LEGACY_REDIRECTS[path]

    if path == "/index.php":
        page = params.get("page")
        return f"/?page={page}" if page else "/"

    if path == "/rss-by-category.php":
        slug = params.get("slug") or params.get("category")
        if not slug:
            return "/rss"
        return f"/rss/category/{slug.strip().replace(' ', '-')}"

    return None


async def not_found_handler(request: Request, exc: StarletteHTTPException):
    """Page 404 avec suggestions ; les autres erreurs HTTP gardent le rendu par défaut."""
    if exc.status_code != 404:
        return await http_exception_handler(request, exc)

    try:
        with video_repository() as repo:
            videos = repo.random_sample(NOT_FOUND_SUGGESTIONS_COUNT)
    except SQLAlchemyError as db_exc:
        logger.warning("Suggestions 404 indisponibles", error=str(db_exc))
        videos = []
    return render_not_found(request, get_settings(request), videos=videos)


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Erreur de base de données : réponse 500 en texte brut."""
    logger.exception("Erreur de base de données", path=request.url.path)
    return PlainTextResponse(str(exc), status_code=500)


def create_app(container: Optional[Container] = None) -> FastAPI:
    """
    Construit l'application.

    Args:
        container: Container DI (un nouveau Container par défaut, les tests
            passent le leur avec une configuration surchargée)
    """
    container = container or Container()
    settings = container.config()

    app = FastAPI(title=settings.site_name, lifespan=lifespan)
    app.state.container = container

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        max_age=SESSION_MAX_AGE,
    )

    @app.middleware("http")
    async def redirect_legacy_urls(request: Request, call_next):
        target = legacy_redirect_target(
            request.url.path, dict(request.query_params), settings
        )
        if target is not None:
            return RedirectResponse(target, status_code=301)
        return await call_next(request)

    app.add_exception_handler(StarletteHTTPException, not_found_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    # Fichiers statiques
    static_dir = _WEB_DIR / "static"
    if static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    # Routes
    app.include_router(pages_router)
    app.include_router(feeds_router)
    app.include_router(admin_router)
    return app


app = create_app()
