"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe VIDCAT_,
et peut optionnellement être fournie via un fichier .env.

Le stockage objet (R2 / S3) est optionnel - sans lui, les miniatures scrapées
sont conservées telles quelles (URL distante).
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Trouver le fichier .env à la racine du projet (parent de vidcat/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe VIDCAT_.
    Exemple : VIDCAT_SITE_URL=https://example.com

    Les URLs sont normalisées (sans slash final).
    """

    model_config = SettingsConfigDict(
        env_prefix="VIDCAT_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Site
    site_url: str = Field(default="http://localhost:3000")
    site_name: str = Field(default="VidCat")

    # Base de données
    database_url: str = Field(default="sqlite:///vidcat.db")

    # Administration (login refusé si aucun mot de passe n'est défini)
    session_secret: str = Field(default="vidcat-secret-key")
    admin_password: Optional[str] = Field(default=None)

    # Stockage objet R2 / S3 (OPTIONNEL)
    r2_endpoint: Optional[str] = Field(default=None)
    r2_access_key_id: Optional[str] = Field(default=None)
    r2_secret_access_key: Optional[str] = Field(default=None)
    r2_bucket_name: Optional[str] = Field(default=None)
    r2_public_url: Optional[str] = Field(default=None)

    # Lecteur : proxy optionnel devant les URLs d'embed
    player_proxy_url: Optional[str] = Field(default=None)

    # Appels sortants (scraping, upload des miniatures)
    http_timeout: float = Field(default=20.0, gt=0)

    # Cache des réponses (TTL en secondes)
    cache_ttl_home: int = Field(default=300, ge=0)
    cache_ttl_video: int = Field(default=3600, ge=0)
    cache_ttl_search: int = Field(default=600, ge=0)
    cache_ttl_listing: int = Field(default=1800, ge=0)
    cache_ttl_feed: int = Field(default=600, ge=0)
    cache_max_entries: int = Field(default=1024, ge=1)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/vidcat.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("site_url", "r2_public_url", "player_proxy_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        """Retire le slash final des URLs de base."""
        if v is None:
            return v
        return v.rstrip("/")

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()

    @property
    def storage_enabled(self) -> bool:
        """Vérifie si le stockage objet est configuré."""
        return bool(self.r2_endpoint and self.r2_bucket_name and self.r2_public_url)
