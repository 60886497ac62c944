"""
Modeles SQLModel pour la base de donnees VidCat.

Ces modeles representent les tables de la base de donnees.
Ils sont distincts de l'entite de domaine (dataclass dans core/entities/)
selon l'architecture hexagonale.

Tables:
- videos: Fiches video scrapees

Les champs JSON (*_json) stockent les listes (categories, tags)
de maniere serialisee.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VideoModel(SQLModel, table=True):
    """
    Modele representant une video du catalogue.

    Le slug est unique : une insertion en doublon leve une IntegrityError.
    """

    __tablename__ = "videos"

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(index=True)
    slug: str = Field(unique=True, index=True)
    description: str = ""
    embed_url: str = ""
    thumbnail: str = ""
    duration: str = "00:00"  # Affichage "M:SS" / "H:MM:SS"
    duration_sec: int = Field(default=0, ge=0)
    views: int = Field(default=0, ge=0)
    upload_date: datetime | None = Field(default_factory=_utcnow)
    categories_json: str | None = None  # JSON: ["Comedie", "Animaux"]
    tags_json: str | None = None  # JSON: ["chat", "drole"]
    google_indexed: bool = Field(default=False)
    created_at: datetime | None = Field(default_factory=_utcnow, index=True)
    updated_at: datetime | None = Field(default_factory=_utcnow)

    @property
    def categories(self) -> list[str]:
        """Retourne les categories deserialisees."""
        if self.categories_json:
            return json.loads(self.categories_json)
        return []

    @categories.setter
    def categories(self, value: list[str]) -> None:
        """Serialise les categories en JSON."""
        self.categories_json = json.dumps(value, ensure_ascii=False)

    @property
    def tags(self) -> list[str]:
        """Retourne les tags deserialises."""
        if self.tags_json:
            return json.loads(self.tags_json)
        return []

    @tags.setter
    def tags(self, value: list[str]) -> None:
        """Serialise les tags en JSON."""
        self.tags_json = json.dumps(value, ensure_ascii=False)
