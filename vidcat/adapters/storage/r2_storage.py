"""
Stockage des miniatures sur Cloudflare R2 (API compatible S3).

Telecharge la ressource avec httpx puis la depose dans le bucket via boto3.
L'upload boto3 (bloquant) est execute dans un thread via run_in_executor.

Usage:
    storage = R2AssetStorage(
        endpoint="https://<account>.r2.cloudflarestorage.com",
        access_key_id="...",
        secret_access_key="...",
        bucket="videos",
        public_url="https://cdn.example.com",
    )
    url = await storage.upload_from_url("https://host/thumb.jpg", "mon-slug")
"""

import asyncio
from datetime import datetime
from functools import partial
from pathlib import PurePosixPath
from typing import Any, Callable, Optional
from urllib.parse import urlparse

import boto3
import httpx
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from vidcat.core.ports.asset_storage import AssetUploadError, IAssetStorage
from vidcat.utils.constants import SCRAPER_HEADERS

DEFAULT_EXTENSION = ".jpg"
DEFAULT_CONTENT_TYPE = "image/jpeg"


def build_object_key(url: str, name: str, now: Optional[datetime] = None) -> str:
    """
    Cle de l'objet dans le bucket : uploads/{annee}/{mois}/{name}{ext}.

    L'extension est celle du chemin de l'URL source (".jpg" par defaut).
    """
    now = now or datetime.now()
    extension = PurePosixPath(urlparse(url).path).suffix or DEFAULT_EXTENSION
    return f"uploads/{now.year}/{now.month}/{name}{extension}"


class R2AssetStorage(IAssetStorage):
    """
    Implementation IAssetStorage pour R2 / S3.

    Attributes:
        timeout: Timeout (secondes) du telechargement complet et de l'upload
    """

    def __init__(
        self,
        endpoint: str,
        access_key_id: Optional[str],
        secret_access_key: Optional[str],
        bucket: str,
        public_url: str,
        timeout: float = 20.0,
        client_factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        """
        Initialise le stockage.

        Args:
            endpoint: URL de l'endpoint S3 (R2)
            access_key_id: Cle d'acces
            secret_access_key: Cle secrete
            bucket: Nom du bucket
            public_url: URL publique servant le bucket (sans slash final)
            timeout: Timeout des appels sortants en secondes
            client_factory: Fabrique du client S3 (boto3.client par defaut)
        """
        self._endpoint = endpoint
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self._bucket = bucket
        self._public_url = public_url.rstrip("/")
        self.timeout = timeout
        self._client_factory = client_factory or boto3.client
        self._s3: Any = None

    def _get_s3(self) -> Any:
        """Retourne le client S3, le cree si necessaire (lazy init)."""
        if self._s3 is None:
            self._s3 = self._client_factory(
                "s3",
                region_name="auto",
                endpoint_url=self._endpoint,
                aws_access_key_id=self._access_key_id,
                aws_secret_access_key=self._secret_access_key,
                config=Config(
                    connect_timeout=self.timeout,
                    read_timeout=self.timeout,
                    retries={"total_max_attempts": 1},
                ),
            )
        return self._s3

    async def _download(self, url: str) -> httpx.Response:
        async with httpx.AsyncClient(
            headers=SCRAPER_HEADERS, timeout=self.timeout, follow_redirects=True
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response

    async def upload_from_url(self, url: str, name: str) -> str:
        """
        Telecharge `url` et la depose dans le bucket.

        Returns:
            URL publique de l'objet

        Raises:
            AssetUploadError: Telechargement ou upload en echec (timeout compris)
        """
        try:
            response = await asyncio.wait_for(self._download(url), timeout=self.timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            raise AssetUploadError(url, "timeout du telechargement") from exc
        except httpx.HTTPError as exc:
            raise AssetUploadError(url, str(exc)) from exc

        key = build_object_key(url, name)
        content_type = response.headers.get("content-type", DEFAULT_CONTENT_TYPE)

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None,
                partial(
                    self._get_s3().put_object,
                    Bucket=self._bucket,
                    Key=key,
                    Body=response.content,
                    ContentType=content_type,
                ),
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Upload R2 en echec", url=url, key=key, error=str(exc))
            raise AssetUploadError(url, str(exc)) from exc

        public_url = f"{self._public_url}/{key}"
        logger.info("Miniature stockee", key=key, size=len(response.content))
        return public_url
