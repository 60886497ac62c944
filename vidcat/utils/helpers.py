"""
Fonctions utilitaires partagees dans le projet VidCat.

Ce module centralise les fonctions reutilisees par les pages, les flux et le scraper :
- make_slug : identifiant URL a partir d'un titre
- escape_xml / cdata : production de texte XML sur
- resolve_thumbnail_url : URL absolue d'une miniature (avec poster par defaut)
- resolve_player_url : URL du lecteur (proxy optionnel)
"""

import re
import unicodedata
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote
from xml.sax.saxutils import escape

from vidcat.utils.constants import DEFAULT_POSTER_PATH

_XML_QUOTE_ENTITIES = {"'": "&apos;", '"': "&quot;"}
_NON_SLUG_CHARS_RE = re.compile(r"[^a-z0-9\s_-]")
_SEPARATOR_RUN_RE = re.compile(r"[\s_-]+")
_ABSOLUTE_URL_RE = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.-]*:)?//")

_CDATA_END = "]]>"

# Lettres sans decomposition NFKD
_TRANSLITERATIONS = str.maketrans(
    {
        "ß": "ss", "ẞ": "SS", "ł": "l", "Ł": "L", "ø": "o", "Ø": "O",
        "đ": "d", "Đ": "D", "ð": "d", "Ð": "D", "þ": "th", "Þ": "TH",
        "æ": "ae", "Æ": "AE", "œ": "oe", "Œ": "OE", "ı": "i",
    }
)


def normalize_accents(text: str) -> str:
    """Supprime les diacritiques (é -> e, ç -> c) via la decomposition NFKD."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def make_slug(text: Optional[str]) -> str:
    """
    Normalise un texte libre en identifiant URL.

    Minuscules, diacritiques et ponctuation supprimes (ß, ł, ø... sont
    translitteres), suites d'espaces et de separateurs remplacees par un
    tiret unique, tirets de bord retires.
    Le resultat ne contient que [a-z0-9-] et peut etre vide.

    Les collisions ne sont pas detectees ici : l'unicite est garantie
    par la contrainte du catalogue.
    """
    if not text:
        return ""
    latin = normalize_accents(text.translate(_TRANSLITERATIONS))
    ascii_text = latin.encode("ascii", "ignore").decode("ascii")
    cleaned = _NON_SLUG_CHARS_RE.sub("", ascii_text.lower())
    return _SEPARATOR_RUN_RE.sub("-", cleaned).strip("-")


def display_name_from_slug(slug: str) -> str:
    """Libelle lisible d'un slug de tag ou categorie ("big-cats" -> "Big Cats")."""
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))


def escape_xml(text: Optional[str]) -> str:
    """Echappe & < > ' " pour une position texte ou attribut XML."""
    if not text:
        return ""
    return escape(text, _XML_QUOTE_ENTITIES)


def cdata(text: Optional[str]) -> str:
    """
    Enveloppe un texte dans une section CDATA, sans l'echapper.

    Une sequence "]]>" presente dans le texte est coupee entre deux
    sections pour que le document reste bien forme.
    """
    safe = (text or "").replace(_CDATA_END, "]]]]><![CDATA[>")
    return f"<![CDATA[{safe}]]>"


def truncate(text: Optional[str], limit: int) -> str:
    """Tronque un texte a `limit` caracteres (None -> chaine vide)."""
    return (text or "")[:limit]


def is_absolute_url(value: str) -> bool:
    """Vrai pour "http://...", "https://..." ou une URL sans schema "//host/..."."""
    return bool(_ABSOLUTE_URL_RE.match(value))


def resolve_thumbnail_url(thumbnail: Optional[str], site_url: str) -> str:
    """
    Resout l'URL publique d'une miniature.

    - URL absolue : utilisee telle quelle
    - chemin relatif (stockage) : resolu par rapport a l'URL du site
    - vide : poster par defaut du site
    """
    if not thumbnail:
        return f"{site_url}/{DEFAULT_POSTER_PATH}"
    if is_absolute_url(thumbnail):
        return thumbnail
    return f"{site_url}/{thumbnail.lstrip('/')}"


def resolve_player_url(embed_url: Optional[str], proxy_url: Optional[str] = None) -> str:
    """
    Construit l'URL du lecteur pour une source d'embed.

    Les URLs sans schema ("//host/embed/1") recoivent "https:".
    Avec un proxy, l'URL complete est passee encodee dans son parametre `url`.
    """
    if not embed_url:
        return ""
    full_url = f"https:{embed_url}" if embed_url.startswith("//") else embed_url
    if proxy_url:
        return f"{proxy_url}?url={quote(full_url, safe='')}"
    return full_url


def unique_labels(labels) -> list[str]:
    """Retire les libelles vides et les doublons exacts en gardant l'ordre."""
    seen: set[str] = set()
    result = []
    for label in labels:
        cleaned = (label or "").strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            result.append(cleaned)
    return result


def utcnow() -> datetime:
    """Date courante en UTC (timezone-aware)."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Rend une date timezone-aware ; une date naive est consideree en UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
