"""
Implementation SQLModel du repository Video.

Implemente l'interface IVideoRepository pour la persistance du catalogue
via SQLModel.

Les recherches (titre, tags, categories) utilisent le predicat
label_matches du domaine : sous-chaine insensible a la casse. Pour les
requetes ASCII, un ILIKE sur les colonnes texte/JSON reduit d'abord les
lignes candidates cote base.
"""

import json
from typing import Callable, Optional

from loguru import logger
from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from vidcat.core.entities.video import Video
from vidcat.core.ports.repositories import (
    IVideoRepository,
    SlugConflictError,
    label_matches,
)
from vidcat.infrastructure.persistence.models import VideoModel
from vidcat.utils.helpers import utcnow


def _escape_like(value: str) -> str:
    """Echappe les jokers LIKE (%, _) et le caractere d'echappement."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _can_prefilter(needle: str) -> bool:
    """
    Le prefiltre SQL n'est fiable que pour les requetes ASCII sans guillemet
    ni antislash (echappes differemment dans le JSON stocke).
    """
    return needle.isascii() and '"' not in needle and "\\" not in needle


class SQLModelVideoRepository(IVideoRepository):
    """
    Repository SQLModel pour les videos.

    Implemente IVideoRepository avec conversion bidirectionnelle
    entre l'entite Video (domaine) et VideoModel (persistance).
    """

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    def _to_entity(self, model: VideoModel) -> Video:
        """Convertit un modele DB en entite domaine."""
        return Video(
            id=model.id,
            title=model.title,
            slug=model.slug,
            description=model.description or "",
            embed_url=model.embed_url or "",
            thumbnail=model.thumbnail or "",
            duration=model.duration or "00:00",
            duration_sec=model.duration_sec or 0,
            views=model.views or 0,
            upload_date=model.upload_date,
            categories=json.loads(model.categories_json) if model.categories_json else [],
            tags=json.loads(model.tags_json) if model.tags_json else [],
            google_indexed=model.google_indexed,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Video) -> VideoModel:
        """Convertit une entite domaine en modele DB."""
        now = utcnow()
        return VideoModel(
            title=entity.title,
            slug=entity.slug,
            description=entity.description,
            embed_url=entity.embed_url,
            thumbnail=entity.thumbnail,
            duration=entity.duration,
            duration_sec=entity.duration_sec,
            views=entity.views,
            upload_date=entity.upload_date or now,
            categories_json=json.dumps(entity.categories, ensure_ascii=False),
            tags_json=json.dumps(entity.tags, ensure_ascii=False),
            google_indexed=entity.google_indexed,
            created_at=entity.created_at or now,
            updated_at=entity.updated_at or now,
        )

    def _latest_first(self):
        return select(VideoModel).order_by(
            VideoModel.created_at.desc(), VideoModel.id.desc()
        )

    def _matching(
        self,
        needle: str,
        columns: list,
        values_of: Callable[[VideoModel], list[str]],
    ) -> list[VideoModel]:
        """
        Lignes dont une des valeurs contient `needle`, plus recentes d'abord.

        Args :
            needle : Texte recherche
            columns : Colonnes utilisees pour le prefiltre SQL
            values_of : Extrait d'un modele les valeurs testees par le predicat
        """
        statement = self._latest_first()
        if needle and _can_prefilter(needle):
            pattern = f"%{_escape_like(needle)}%"
            statement = statement.where(
                or_(*(column.ilike(pattern, escape="\\") for column in columns))
            )
        models = self._session.exec(statement).all()
        return [model for model in models if label_matches(values_of(model), needle)]

    def _search_models(self, query: str) -> list[VideoModel]:
        return self._matching(
            query,
            [VideoModel.title, VideoModel.tags_json],
            lambda m: [m.title, *m.tags],
        )

    def _tag_models(self, tag: str) -> list[VideoModel]:
        return self._matching(tag, [VideoModel.tags_json], lambda m: m.tags)

    def _category_models(self, category: str) -> list[VideoModel]:
        return self._matching(
            category, [VideoModel.categories_json], lambda m: m.categories
        )

    def _page(self, models: list[VideoModel], offset: int, limit: int) -> list[Video]:
        return [self._to_entity(model) for model in models[offset : offset + limit]]

    def get_by_slug(self, slug: str) -> Optional[Video]:
        """Recupere une video par son slug."""
        statement = select(VideoModel).where(VideoModel.slug == slug)
        model = self._session.exec(statement).first()
        if model:
            return self._to_entity(model)
        return None

    def get_by_title(self, title: str) -> Optional[Video]:
        """Recupere une video par son titre exact."""
        statement = select(VideoModel).where(VideoModel.title == title)
        model = self._session.exec(statement).first()
        if model:
            return self._to_entity(model)
        return None

    def add(self, video: Video) -> Video:
        """Insere une nouvelle video (seul point d'ecriture du catalogue)."""
        model = self._to_model(video)
        self._session.add(model)
        try:
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            if self.get_by_slug(video.slug) is not None:
                logger.warning("Conflit de slug", slug=video.slug)
                raise SlugConflictError(video.slug) from exc
            raise
        self._session.refresh(model)
        return self._to_entity(model)

    def increment_views(self, slug: str) -> bool:
        """Incremente les vues en une seule requete UPDATE (pas de lecture prealable)."""
        statement = (
            update(VideoModel)
            .where(VideoModel.slug == slug)
            .values(views=VideoModel.views + 1)
        )
        result = self._session.execute(statement)
        self._session.commit()
        return result.rowcount > 0

    def count(self) -> int:
        """Nombre total de videos."""
        return self._session.exec(select(func.count()).select_from(VideoModel)).one()

    def list_latest(self, offset: int = 0, limit: int = 24) -> list[Video]:
        """Liste les videos les plus recentes."""
        statement = self._latest_first().offset(offset).limit(limit)
        return [self._to_entity(model) for model in self._session.exec(statement).all()]

    def search(self, query: str, offset: int = 0, limit: int = 24) -> list[Video]:
        """Recherche sur le titre ou les tags."""
        return self._page(self._search_models(query), offset, limit)

    def count_search(self, query: str) -> int:
        """Nombre de resultats de la recherche."""
        return len(self._search_models(query))

    def list_by_tag(self, tag: str, offset: int = 0, limit: int = 24) -> list[Video]:
        """Videos dont un tag contient `tag`."""
        return self._page(self._tag_models(tag), offset, limit)

    def count_by_tag(self, tag: str) -> int:
        """Nombre de videos portant le tag."""
        return len(self._tag_models(tag))

    def list_by_category(
        self, category: str, offset: int = 0, limit: int = 24
    ) -> list[Video]:
        """Videos dont une categorie contient `category`."""
        return self._page(self._category_models(category), offset, limit)

    def count_by_category(self, category: str) -> int:
        """Nombre de videos de la categorie."""
        return len(self._category_models(category))

    def _distinct(self, column) -> list[str]:
        """Valeurs distinctes d'une colonne JSON, dans l'ordre d'apparition."""
        statement = select(column).where(column.isnot(None)).order_by(VideoModel.id)
        seen: set[str] = set()
        values = []
        for raw in self._session.exec(statement).all():
            for value in json.loads(raw):
                if value and value not in seen:
                    seen.add(value)
                    values.append(value)
        return values

    def distinct_categories(self) -> list[str]:
        """Categories distinctes du catalogue."""
        return self._distinct(VideoModel.categories_json)

    def distinct_tags(self) -> list[str]:
        """Tags distincts du catalogue."""
        return self._distinct(VideoModel.tags_json)

    def random_sample(self, size: int) -> list[Video]:
        """Echantillon aleatoire de videos."""
        statement = select(VideoModel).order_by(func.random()).limit(size)
        return [self._to_entity(model) for model in self._session.exec(statement).all()]
