"""
Politique de cache des pages.

Une route cacheable délègue son rendu à cached_response :
- requête authentifiée ou méthode non sûre : rendu frais, cache ignoré
- entrée valide : corps stocké renvoyé tel quel
- sinon : rendu frais, stocké (réponses 200 uniquement) sous le chemin
  complet de la requête, query string comprise
"""

from typing import Callable

from fastapi import Request, Response

from .auth import get_auth_context
from .deps import get_container

CACHEABLE_METHODS = frozenset({"GET", "HEAD"})


def cache_key(request: Request) -> str:
    """Chemin de la requête, query string comprise."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def cached_response(
    request: Request, ttl: int, render: Callable[[], Response]
) -> Response:
    """
    Applique la politique de cache autour de `render`.

    Args:
        request: Requête courante
        ttl: Durée de vie de l'entrée en secondes
        render: Produit la réponse fraîche
    """
    if get_auth_context(request).authenticated or request.method not in CACHEABLE_METHODS:
        return render()

    cache = get_container(request).response_cache()
    key = cache_key(request)
    entry = cache.get(key)
    if entry is not None:
        return Response(
            content=entry.value, media_type=entry.media_type, headers={"X-Cache": "HIT"}
        )

    response = render()
    if response.status_code == 200:
        cache.set(key, bytes(response.body), ttl, response.headers.get("content-type"))
    response.headers["X-Cache"] = "MISS"
    return response
