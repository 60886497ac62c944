"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Les ports sont les frontières de l'architecture hexagonale. Ils définissent
ce dont le domaine a besoin du monde extérieur sans spécifier
comment ces besoins sont satisfaits.

Port repository : Contrat de persistance du catalogue
- IVideoRepository : Stockage et requêtes des fiches vidéo
- SlugConflictError : Violation de l'unicité du slug

Port stockage : Contrat pour le stockage objet des miniatures
- IAssetStorage : Téléchargement d'une ressource distante et publication
- AssetUploadError : Échec du téléchargement ou de l'upload
"""

from vidcat.core.ports.asset_storage import AssetUploadError, IAssetStorage
from vidcat.core.ports.repositories import IVideoRepository, SlugConflictError

__all__ = [
    # Repository
    "IVideoRepository",
    "SlugConflictError",
    # Stockage
    "IAssetStorage",
    "AssetUploadError",
]
