"""
Interface port pour le catalogue vidéo.

Le catalogue est le seul propriétaire de la persistance : les autres composants
lisent via ses requêtes et écrivent via l'unique opération d'insertion `add`.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from vidcat.core.entities.video import Video


class SlugConflictError(Exception):
    """
    Exception levée quand une insertion viole l'unicité du slug.

    Attributes:
        slug: Le slug déjà présent dans le catalogue
    """

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Slug deja utilise: {slug}")


def label_matches(values: Iterable[str], needle: str) -> bool:
    """
    Prédicat de correspondance des recherches, tags et catégories.

    Vrai si `needle` est une sous-chaîne (insensible à la casse)
    d'au moins une des valeurs.
    """
    lowered = needle.lower()
    return any(lowered in (value or "").lower() for value in values)


class IVideoRepository(ABC):
    """
    Interface de stockage des fiches vidéo.

    Les listes sont triées par date de création décroissante.
    """

    @abstractmethod
    def get_by_slug(self, slug: str) -> Optional[Video]:
        """Récupère une vidéo par son slug."""
        ...

    @abstractmethod
    def get_by_title(self, title: str) -> Optional[Video]:
        """Récupère une vidéo par son titre exact (sensible à la casse)."""
        ...

    @abstractmethod
    def add(self, video: Video) -> Video:
        """Insère une nouvelle vidéo. Lève SlugConflictError si le slug existe."""
        ...

    @abstractmethod
    def increment_views(self, slug: str) -> bool:
        """Incrémente atomiquement les vues. Retourne False si le slug est inconnu."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Nombre total de vidéos."""
        ...

    @abstractmethod
    def list_latest(self, offset: int = 0, limit: int = 24) -> list[Video]:
        """Liste les vidéos les plus récentes."""
        ...

    @abstractmethod
    def search(self, query: str, offset: int = 0, limit: int = 24) -> list[Video]:
        """Recherche sur le titre ou les tags."""
        ...

    @abstractmethod
    def count_search(self, query: str) -> int:
        """Nombre de résultats de `search`."""
        ...

    @abstractmethod
    def list_by_tag(self, tag: str, offset: int = 0, limit: int = 24) -> list[Video]:
        """Vidéos dont un tag contient `tag`."""
        ...

    @abstractmethod
    def count_by_tag(self, tag: str) -> int:
        """Nombre de vidéos de `list_by_tag`."""
        ...

    @abstractmethod
    def list_by_category(
        self, category: str, offset: int = 0, limit: int = 24
    ) -> list[Video]:
        """Vidéos dont une catégorie contient `category`."""
        ...

    @abstractmethod
    def count_by_category(self, category: str) -> int:
        """Nombre de vidéos de `list_by_category`."""
        ...

    @abstractmethod
    def distinct_categories(self) -> list[str]:
        """Valeurs distinctes (non vides) de catégories."""
        ...

    @abstractmethod
    def distinct_tags(self) -> list[str]:
        """Valeurs distinctes (non vides) de tags."""
        ...

    @abstractmethod
    def random_sample(self, size: int) -> list[Video]:
        """Échantillon aléatoire de vidéos."""
        ...
