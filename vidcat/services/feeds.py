"""
Service de generation des flux RSS et des sitemaps XML.

Documents produits :
- main_rss : 50 dernieres videos (avec bloc media:content)
- category_rss : 30 dernieres videos d'une categorie
- legacy_video_sitemap : sitemap video Google mono-page (1000 videos max)
- sitemap_index : index pointant vers les pages /sitemap-video{n}.xml
- sitemap_page : page de 300 videos ; la page 1 liste aussi l'accueil,
  les categories et les tags distincts

Regle d'ecriture : les titres, descriptions et tags sont places en CDATA,
tout autre texte libre (URLs, noms) est echappe. Jamais les deux sur un champ.
"""

import math
from datetime import datetime
from email.utils import format_datetime
from typing import Callable, Optional

from loguru import logger

from vidcat.core.entities.video import Video
from vidcat.core.ports.repositories import IVideoRepository
from vidcat.utils.constants import (
    CATEGORY_RSS_DESCRIPTION_LENGTH,
    CATEGORY_RSS_LIMIT,
    LEGACY_SITEMAP_LIMIT,
    MAIN_RSS_LIMIT,
    RSS_DESCRIPTION_LENGTH,
    SITEMAP_DESCRIPTION_LENGTH,
    SITEMAP_MAX_VIDEO_TAGS,
    SITEMAP_PAGE_SIZE,
)
from vidcat.utils.duration import format_duration
from vidcat.utils.helpers import (
    as_utc,
    cdata,
    escape_xml,
    make_slug,
    resolve_player_url,
    resolve_thumbnail_url,
    truncate,
    utcnow,
)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
VIDEO_NS = "http://www.google.com/schemas/sitemap-video/1.1"
IMAGE_NS = "http://www.google.com/schemas/sitemap-image/1.1"
ATOM_NS = "http://www.w3.org/2005/Atom"
MEDIA_NS = "http://search.yahoo.com/mrss/"


class SitemapPageNotFoundError(Exception):
    """
    Exception levee quand une page de sitemap (> 1) ne contient aucune video.

    Attributes:
        page: Numero de page demande
    """

    def __init__(self, page: int) -> None:
        self.page = page
        super().__init__(f"Page de sitemap introuvable: {page}")


def sitemap_page_count(total_videos: int) -> int:
    """Nombre de pages du sitemap ; au moins 1, meme pour un catalogue vide."""
    return max(1, math.ceil(total_videos / SITEMAP_PAGE_SIZE))


def rfc2822(value: datetime) -> str:
    """Date au format RFC 2822 en GMT (pubDate, lastBuildDate)."""
    return format_datetime(as_utc(value), usegmt=True)


def iso8601(value: datetime) -> str:
    """Date-heure ISO 8601 en UTC."""
    return as_utc(value).isoformat(timespec="seconds")


class FeedService:
    """
    Generateur des documents XML du catalogue.

    Toutes les URLs de miniatures passent par resolve_thumbnail_url et
    tous les textes libres par escape_xml ou cdata.
    """

    def __init__(
        self,
        repository: IVideoRepository,
        site_url: str,
        site_name: str,
        player_proxy_url: Optional[str] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """
        Initialise le service.

        Args:
            repository: Catalogue video
            site_url: URL publique du site (sans slash final)
            site_name: Nom affiche du site
            player_proxy_url: Proxy optionnel devant les URLs d'embed
            clock: Horloge (dates "maintenant" des documents)
        """
        self._repository = repository
        self._site_url = site_url.rstrip("/")
        self._site_name = site_name
        self._player_proxy_url = player_proxy_url
        self._clock = clock

    def _video_url(self, video: Video) -> str:
        return f"{self._site_url}/video/{video.slug}"

    def _thumbnail(self, video: Video) -> str:
        return resolve_thumbnail_url(video.thumbnail, self._site_url)

    # ------------------------------------------------------------------
    # RSS
    # ------------------------------------------------------------------

    def main_rss(self) -> str:
        """Flux RSS des 50 dernieres videos."""
        videos = self._repository.list_latest(limit=MAIN_RSS_LIMIT)
        site = escape_xml(self._site_url)
        name = escape_xml(self._site_name)

        parts = [
            XML_DECLARATION,
            f'<rss version="2.0" xmlns:atom="{ATOM_NS}" xmlns:media="{MEDIA_NS}">',
            "<channel>",
            f"<title>{name} - Dernières vidéos</title>",
            f"<link>{site}</link>",
            f"<description>Les dernières vidéos publiées sur {name}</description>",
            "<language>fr-FR</language>",
            f"<lastBuildDate>{rfc2822(self._clock())}</lastBuildDate>",
            f'<atom:link href="{site}/rss" rel="self" type="application/rss+xml" />',
        ]
        for video in videos:
            parts.append(self._rss_item(video))
        parts.append("</channel>")
        parts.append("</rss>")

        logger.debug("Flux RSS genere", items=len(videos))
        return "\n".join(parts)

    def _rss_item(self, video: Video) -> str:
        link = escape_xml(self._video_url(video))
        raw_thumb = self._thumbnail(video)
        thumb = escape_xml(raw_thumb)
        description_html = (
            f'<img src="{raw_thumb}" width="320" height="180" style="object-fit:cover;" /><br/>'
            f"<p>{truncate(video.description, RSS_DESCRIPTION_LENGTH)}...</p>"
            f"<p><strong>Durée :</strong> {format_duration(video.duration_sec)}"
            f" | <strong>Vues :</strong> {video.views or 0}</p>"
        )
        return "\n".join(
            [
                "<item>",
                f"<title>{cdata(video.title)}</title>",
                f"<link>{link}</link>",
                f'<guid isPermaLink="true">{link}</guid>',
                f"<description>{cdata(description_html)}</description>",
                f'<media:content url="{thumb}" medium="image">',
                f'<media:title type="plain">{cdata(video.title)}</media:title>',
                "</media:content>",
                f"<pubDate>{rfc2822(video.created_at or self._clock())}</pubDate>",
                "</item>",
            ]
        )

    def category_rss(self, category_slug: str) -> str:
        """
        Flux RSS d'une categorie.

        Le nom de categorie est le slug avec les tirets remplaces par des
        espaces, compare sans tenir compte de la casse.
        """
        category_name = category_slug.replace("-", " ")
        videos = self._repository.list_by_category(
            category_name, limit=CATEGORY_RSS_LIMIT
        )
        site = escape_xml(self._site_url)
        name = escape_xml(self._site_name)
        safe_category = escape_xml(category_name)

        parts = [
            XML_DECLARATION,
            f'<rss version="2.0" xmlns:atom="{ATOM_NS}">',
            "<channel>",
            f"<title>{name} Catégorie : {safe_category}</title>",
            f"<link>{site}</link>",
            f"<description>Dernières vidéos de la catégorie {safe_category}</description>",
            "<language>fr-FR</language>",
            f'<atom:link href="{site}/rss/category/{escape_xml(category_slug)}"'
            ' rel="self" type="application/rss+xml" />',
        ]
        for video in videos:
            link = escape_xml(self._video_url(video))
            description_html = (
                f'<img src="{self._thumbnail(video)}" width="320" /><br/>'
                f"{truncate(video.description, CATEGORY_RSS_DESCRIPTION_LENGTH)}..."
            )
            parts.extend(
                [
                    "<item>",
                    f"<title>{cdata(video.title)}</title>",
                    f"<link>{link}</link>",
                    f"<guid>{link}</guid>",
                    f"<description>{cdata(description_html)}</description>",
                    f"<pubDate>{rfc2822(video.created_at or self._clock())}</pubDate>",
                    "</item>",
                ]
            )
        parts.append("</channel>")
        parts.append("</rss>")
        return "\n".join(parts)

    # ------------------------------------------------------------------
    # Sitemaps
    # ------------------------------------------------------------------

    def legacy_video_sitemap(self) -> str:
        """Sitemap video mono-page (format Google Video, 1000 videos max)."""
        videos = self._repository.list_latest(limit=LEGACY_SITEMAP_LIMIT)
        now = iso8601(self._clock())
        site = escape_xml(self._site_url)
        uploader = escape_xml(self._site_name)

        parts = [
            XML_DECLARATION,
            f'<urlset xmlns="{SITEMAP_NS}" xmlns:video="{VIDEO_NS}">',
            "<url>",
            f"<loc>{site}/</loc>",
            f"<lastmod>{now}</lastmod>",
            "<changefreq>daily</changefreq>",
            "<priority>1.0</priority>",
            "</url>",
        ]
        for video in videos:
            published = iso8601(video.created_at or self._clock())
            player = escape_xml(
                resolve_player_url(video.embed_url, self._player_proxy_url)
            )
            tags = "".join(
                f"<video:tag>{cdata(tag)}</video:tag>"
                for tag in video.tags[:SITEMAP_MAX_VIDEO_TAGS]
            )
            parts.extend(
                [
                    "<url>",
                    f"<loc>{escape_xml(self._video_url(video))}</loc>",
                    f"<lastmod>{published}</lastmod>",
                    "<changefreq>monthly</changefreq>",
                    "<priority>0.8</priority>",
                    "<video:video>",
                    f"<video:thumbnail_loc>{escape_xml(self._thumbnail(video))}</video:thumbnail_loc>",
                    f"<video:title>{cdata(video.title)}</video:title>",
                    "<video:description>"
                    f"{cdata(truncate(video.description, SITEMAP_DESCRIPTION_LENGTH))}"
                    "</video:description>",
                    f'<video:player_loc allow_embed="yes" autoplay="ap=1">{player}</video:player_loc>',
                    f"<video:duration>{round(video.duration_sec or 0)}</video:duration>",
                    f"<video:publication_date>{published}</video:publication_date>",
                    "<video:family_friendly>no</video:family_friendly>",
                    f'<video:uploader info="{site}">{uploader}</video:uploader>',
                    tags,
                    "</video:video>",
                    "</url>",
                ]
            )
        parts.append("</urlset>")
        return "\n".join(parts)

    def sitemap_index(self) -> str:
        """
        Index des sitemaps : une entree par page de 300 videos.

        Un catalogue vide produit quand meme l'entree de la page 1.
        """
        total_pages = sitemap_page_count(self._repository.count())
        now = iso8601(self._clock())
        site = escape_xml(self._site_url)

        parts = [XML_DECLARATION, f'<sitemapindex xmlns="{SITEMAP_NS}">']
        for page in range(1, total_pages + 1):
            parts.extend(
                [
                    "<sitemap>",
                    f"<loc>{site}/sitemap-video{page}.xml</loc>",
                    f"<lastmod>{now}</lastmod>",
                    "</sitemap>",
                ]
            )
        parts.append("</sitemapindex>")
        return "\n".join(parts)

    def sitemap_page(self, page: int) -> str:
        """
        Page `page` du sitemap video.

        Raises:
            SitemapPageNotFoundError: page > 1 sans aucune video
        """
        page = page if page >= 1 else 1
        skip = (page - 1) * SITEMAP_PAGE_SIZE
        videos = self._repository.list_latest(offset=skip, limit=SITEMAP_PAGE_SIZE)
        if not videos and page > 1:
            raise SitemapPageNotFoundError(page)

        parts = [
            XML_DECLARATION,
            f'<urlset xmlns="{SITEMAP_NS}" xmlns:image="{IMAGE_NS}">',
        ]
        if page == 1:
            parts.extend(self._first_page_urls())

        for video in videos:
            parts.extend(
                [
                    "<url>",
                    f"<loc>{escape_xml(self._video_url(video))}</loc>",
                    f"<lastmod>{self._lastmod(video)}</lastmod>",
                    "<changefreq>weekly</changefreq>",
                    "<priority>0.8</priority>",
                    "<image:image>",
                    f"<image:loc>{escape_xml(self._thumbnail(video))}</image:loc>",
                    f"<image:title>{cdata(video.title)}</image:title>",
                    "</image:image>",
                    "</url>",
                ]
            )
        parts.append("</urlset>")
        return "\n".join(parts)

    def _lastmod(self, video: Video) -> str:
        """Date de publication, sinon de creation, sinon aujourd'hui."""
        reference = video.upload_date or video.created_at or self._clock()
        return as_utc(reference).date().isoformat()

    def _first_page_urls(self) -> list[str]:
        """Accueil puis une URL par categorie distincte et par tag distinct."""
        today = self._clock().date().isoformat()
        parts = [
            "<url>",
            f"<loc>{escape_xml(self._site_url)}/</loc>",
            f"<lastmod>{today}</lastmod>",
            "<changefreq>daily</changefreq>",
            "<priority>1.0</priority>",
            "</url>",
        ]

        emitted: set[str] = set()
        for prefix, values in (
            ("category", self._repository.distinct_categories()),
            ("tag", self._repository.distinct_tags()),
        ):
            for value in values:
                slug = make_slug(value)
                if not slug:
                    continue
                loc = escape_xml(f"{self._site_url}/{prefix}/{slug}")
                # Deux libelles ne differant que par la casse donnent la meme URL
                if loc in emitted:
                    continue
                emitted.add(loc)
                parts.extend(
                    [
                        "<url>",
                        f"<loc>{loc}</loc>",
                        f"<lastmod>{today}</lastmod>",
                        "<changefreq>weekly</changefreq>",
                        "<priority>0.9</priority>",
                        "</url>",
                    ]
                )
        return parts
