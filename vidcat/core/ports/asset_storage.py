"""
Interface port pour le stockage objet des ressources distantes.

L'implémentation (R2 / S3) télécharge une ressource binaire depuis une URL,
la dépose dans le bucket et retourne son URL publique.
"""

from abc import ABC, abstractmethod


class AssetUploadError(Exception):
    """
    Exception levée quand le téléchargement ou l'upload d'une ressource échoue.

    Attributes:
        url: URL de la ressource source
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        super().__init__(f"Upload impossible pour {url}: {reason}")


class IAssetStorage(ABC):
    """
    Interface de stockage durable des miniatures.
    """

    @abstractmethod
    async def upload_from_url(self, url: str, name: str) -> str:
        """
        Télécharge `url` et la publie sous le nom `name`.

        Retourne l'URL publique de l'objet stocké.
        Lève AssetUploadError en cas d'échec (réseau, timeout, stockage).
        """
        ...
