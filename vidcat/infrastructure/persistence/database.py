"""
Configuration de la base de donnees pour VidCat.

Ce module fournit :
- Engine SQLAlchemy (SQLite par defaut, configure pour les requetes concurrentes)
- Session factory avec context manager
- Fonction d'initialisation des tables

La base de donnees est configuree via VIDCAT_DATABASE_URL (defaut: sqlite:///vidcat.db).
"""

from collections.abc import Generator
from pathlib import Path
from typing import Optional

from loguru import logger
from sqlalchemy import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Engine global - initialise lors du premier appel a get_engine() ou par init_db()
_engine: Optional[Engine] = None


def create_db_engine(database_url: str) -> Engine:
    """
    Cree un engine pour l'URL donnee.

    Pour SQLite : cree le repertoire parent du fichier, autorise le partage
    de connexion entre threads et attend jusqu'a 30s un verrou d'ecriture
    (increments de vues concurrents).
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False, pool_pre_ping=True)

    connect_args = {"check_same_thread": False, "timeout": 30}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            echo=False,
            connect_args=connect_args,
            poolclass=StaticPool,
        )

    db_path = Path(database_url.replace("sqlite:///", "", 1))
    db_path.parent.mkdir(exist_ok=True, parents=True)
    return create_engine(database_url, echo=False, connect_args=connect_args)


def configure_engine(database_url: str) -> Engine:
    """Remplace l'engine global par un engine pointant sur `database_url`."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = create_db_engine(database_url)
    return _engine


def get_engine() -> Engine:
    """
    Retourne l'engine, en le creant si necessaire.

    Utilise la configuration de l'application pour l'URL de la BDD.
    """
    global _engine
    if _engine is None:
        from vidcat.config import Settings

        _engine = create_db_engine(Settings().database_url)
    return _engine


def get_session() -> Generator[Session, None, None]:
    """
    Generateur de session SQLModel.

    Utilisation avec next() :
        session = next(get_session())
        try:
            # operations
        finally:
            session.close()

    Yields:
        Session SQLModel connectee a l'engine courant
    """
    with Session(get_engine()) as session:
        yield session


def init_db(database_url: Optional[str] = None) -> None:
    """
    Initialise la base de donnees en creant toutes les tables.

    Si `database_url` est fourni, l'engine global est (re)configure dessus.
    Doit etre appelee une fois au demarrage de l'application.
    """
    # Import des modeles pour enregistrer leurs metadonnees
    from vidcat.infrastructure.persistence import models  # noqa: F401

    engine = configure_engine(database_url) if database_url else get_engine()
    SQLModel.metadata.create_all(engine)
    logger.debug("Base de donnees initialisee", url=str(engine.url))
