"""
Cache memoire des reponses HTTP avec TTL par entree.

Le cache vit le temps du processus (aucune persistance). Une instance unique
est creee au demarrage (singleton du container) et partagee par les routes.
Il est borne en nombre d'entrees : les entrees expirees sont purgees a
chaque ecriture, puis des entrees sont evincees pour rester sous la borne.

TTL utilises par les routes (voir Settings) :
- Accueil : 5 minutes
- Fiche video : 1 heure
- Recherche : 10 minutes
- Tags / categories : 30 minutes
- Flux RSS principal : 10 minutes
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from cachetools import TLRUCache
from loguru import logger

DEFAULT_MAX_ENTRIES = 1024


@dataclass(frozen=True)
class CacheEntry:
    """
    Reponse mise en cache.

    Attributes:
        key: Chemin de la requete (query string comprise)
        value: Corps de la reponse
        media_type: Content-Type de la reponse
        ttl: Duree de vie en secondes
    """

    key: str
    value: bytes
    media_type: Optional[str]
    ttl: int


def _entry_expiry(_key: str, entry: CacheEntry, now: float) -> float:
    return now + entry.ttl


class ResponseCache:
    """
    Cache cle -> reponse avec expiration, adosse a cachetools.TLRUCache.

    Toutes les lectures/ecritures passent par un verrou : une entree est
    toujours observee complete ou absente.

    Example:
        cache = ResponseCache()
        cache.set("/", b"<html>...</html>", ttl=300, media_type="text/html")
        entry = cache.get("/")
    """

    def __init__(
        self,
        maxsize: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialise un cache vide.

        Args:
            maxsize: Nombre maximal d'entrees conservees
            clock: Horloge en secondes (time.monotonic par defaut)
        """
        self._entries: TLRUCache = TLRUCache(
            maxsize=maxsize, ttu=_entry_expiry, timer=clock
        )
        self._lock = threading.Lock()

    @property
    def maxsize(self) -> int:
        return int(self._entries.maxsize)

    def get(self, key: str) -> Optional[CacheEntry]:
        """
        Recupere une entree.

        Returns:
            L'entree, ou None si absente ou expiree
        """
        with self._lock:
            return self._entries.get(key)

    def set(
        self, key: str, value: bytes, ttl: int, media_type: Optional[str] = None
    ) -> None:
        """
        Stocke une reponse avec un TTL en secondes.

        Un TTL nul ou negatif n'enregistre rien.
        """
        if ttl <= 0:
            return
        entry = CacheEntry(key, value, media_type, ttl)
        with self._lock:
            self._entries[key] = entry

    def invalidate(self, *keys: str) -> None:
        """Supprime immediatement les entrees donnees."""
        with self._lock:
            for key in keys:
                self._entries.pop(key, None)
        logger.debug("Cache invalide", keys=list(keys))

    def clear(self) -> None:
        """Supprime toutes les entrees du cache."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)
