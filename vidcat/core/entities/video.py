"""
Entité vidéo du catalogue.

Une fiche vidéo est créée uniquement par le scraper, après vérification
qu'aucune fiche ne porte déjà le même titre. Seul son compteur de vues
évolue ensuite (incrément atomique à chaque consultation).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Video:
    """
    Représente une vidéo du catalogue.

    Attributs :
        id : Identifiant base de données
        title : Titre de la vidéo
        slug : Identifiant URL unique ([a-z0-9-]+)
        description : Description libre
        embed_url : URL de la source d'embed (souvent sans schéma, "//host/...")
        thumbnail : URL absolue ou chemin relatif au stockage ("" si absente)
        duration : Durée affichable ("M:SS" ou "H:MM:SS")
        duration_sec : Durée en secondes (>= 0)
        views : Nombre de vues
        upload_date : Date de publication
        categories : Catégories (libellés libres)
        tags : Tags (libellés libres)
        google_indexed : Statut de soumission à l'indexation
        created_at : Date de création de la fiche
        updated_at : Date de dernière modification
    """

    title: str
    slug: str
    id: Optional[int] = None
    description: str = ""
    embed_url: str = ""
    thumbnail: str = ""
    duration: str = "00:00"
    duration_sec: int = 0
    views: int = 0
    upload_date: Optional[datetime] = None
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    google_indexed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.duration_sec < 0:
            raise ValueError("duration_sec doit etre positif ou nul")
        if self.views < 0:
            raise ValueError("views doit etre positif ou nul")
