"""
Utilitaires et constantes pour VidCat.

Ce module contient les constantes et fonctions utilitaires partagees
(durees, slugs, echappement XML, resolution des miniatures).
"""

from vidcat.utils.duration import format_duration, parse_duration
from vidcat.utils.helpers import (
    cdata,
    escape_xml,
    make_slug,
    resolve_player_url,
    resolve_thumbnail_url,
)

__all__ = [
    "parse_duration",
    "format_duration",
    "make_slug",
    "escape_xml",
    "cdata",
    "resolve_thumbnail_url",
    "resolve_player_url",
]
