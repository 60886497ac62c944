"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des dependances pour la CLI et le Web :
configuration, base de donnees, repository du catalogue, cache des reponses,
stockage des miniatures et services applicatifs.
"""

from typing import Optional

from dependency_injector import containers, providers

from .adapters.cache.response_cache import ResponseCache
from .adapters.storage.r2_storage import R2AssetStorage
from .config import Settings
from .infrastructure.persistence.database import get_session, init_db
from .infrastructure.persistence.repositories import SQLModelVideoRepository
from .services.feeds import FeedService
from .services.scraper import ScraperService


def build_asset_storage(settings: Settings) -> Optional[R2AssetStorage]:
    """Cree le stockage R2 si configure, sinon None (miniatures conservees telles quelles)."""
    if not settings.storage_enabled:
        return None
    return R2AssetStorage(
        endpoint=settings.r2_endpoint,
        access_key_id=settings.r2_access_key_id,
        secret_access_key=settings.r2_secret_access_key,
        bucket=settings.r2_bucket_name,
        public_url=settings.r2_public_url,
        timeout=settings.http_timeout,
    )


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.database.init()  # Initialise la DB une fois
        repo = container.video_repository()
        feeds = container.feed_service(repository=repo)

    Les services dependant d'une session recoivent en general le repository
    a l'appel, pour que la route controle la fermeture de la session.
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Database - Resource pour initialisation unique
    database = providers.Resource(init_db, database_url=config.provided.database_url)

    # Session factory - nouvelle session a chaque appel
    session = providers.Factory(lambda: next(get_session()))

    # Repository - Factory pour nouvelle instance avec session fraiche
    video_repository = providers.Factory(
        SQLModelVideoRepository,
        session=session,
    )

    # Cache des reponses - Singleton partage par toutes les requetes
    response_cache = providers.Singleton(
        ResponseCache, maxsize=config.provided.cache_max_entries
    )

    # Stockage des miniatures (None si R2 non configure)
    asset_storage = providers.Singleton(build_asset_storage, settings=config)

    # Services
    feed_service = providers.Factory(
        FeedService,
        repository=video_repository,
        site_url=config.provided.site_url,
        site_name=config.provided.site_name,
        player_proxy_url=config.provided.player_proxy_url,
    )

    scraper_service = providers.Factory(
        ScraperService,
        repository=video_repository,
        cache=response_cache,
        asset_storage=asset_storage,
        timeout=config.provided.http_timeout,
    )
