"""
Point d'entrée CLI de VidCat.

Initialise le container DI, configure le logging et fournit les commandes CLI.
"""

import asyncio
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .config import Settings
from .container import Container
from .logging_config import configure_logging
from .web.deps import video_repository

__version__ = "0.1.0"

app = typer.Typer(
    name="vidcat",
    help="Catalogue de vidéos en streaming",
)
container = Container()
console = Console()


def get_config() -> Settings:
    """Récupère les paramètres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration VidCat")

    table = Table(title="Configuration VidCat", show_header=False)
    table.add_row("Site", f"{config.site_name} ({config.site_url})")
    table.add_row("Base de données", config.database_url)
    table.add_row("Stockage R2", "activé" if config.storage_enabled else "désactivé")
    table.add_row("Proxy lecteur", config.player_proxy_url or "aucun")
    table.add_row("Administration", "activée" if config.admin_password else "désactivée")
    table.add_row("Niveau de log", config.log_level)
    console.print(table)


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"VidCat v{__version__}")


@app.command(name="init-db")
def init_database() -> None:
    """Crée les tables de la base de données."""
    container.database.init()
    typer.echo(f"Base initialisée : {get_config().database_url}")


@app.command()
def scrape(
    url: Annotated[str, typer.Argument(help="URL de la page vidéo à importer")],
) -> None:
    """Importe une page vidéo dans le catalogue."""
    container.database.init()
    with video_repository() as repository:
        service = container.scraper_service(repository=repository)
        result = asyncio.run(service.scrape(url))

    if not result.ok:
        console.print(f"[{result.status.http_status}] {result.message}", style="red", markup=False)
        raise typer.Exit(code=1)
    console.print(f"[{result.status.http_status}] {result.message}", style="green", markup=False)


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Adresse d'écoute")] = "0.0.0.0",
    port: Annotated[int, typer.Option(help="Port d'écoute")] = 3000,
    reload: Annotated[bool, typer.Option(help="Rechargement automatique")] = False,
) -> None:
    """Lance le serveur web VidCat."""
    import uvicorn

    typer.echo(f"Démarrage du serveur sur {host}:{port}")
    uvicorn.run("vidcat.web.app:app", host=host, port=port, reload=reload)


def main() -> None:
    """Point d'entrée de l'application."""
    # Charge la configuration et configure le logging
    settings = container.config()
    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )

    # Initialise la base de données (crée les tables si nécessaire)
    container.database.init()

    logger.info("Démarrage de VidCat", version=__version__)

    # Lance la CLI
    app()


if __name__ == "__main__":
    main()
