"""
Constantes globales pour VidCat.

Ce module contient les limites de pagination des pages et des flux,
les chemins par defaut et les marqueurs utilises par le scraper.
"""

# Pages HTML
LISTING_PAGE_SIZE = 24
RELATED_VIDEOS_COUNT = 8
NOT_FOUND_SUGGESTIONS_COUNT = 4

# Flux RSS
MAIN_RSS_LIMIT = 50
CATEGORY_RSS_LIMIT = 30
RSS_DESCRIPTION_LENGTH = 300
CATEGORY_RSS_DESCRIPTION_LENGTH = 200

# Sitemaps
SITEMAP_PAGE_SIZE = 300
LEGACY_SITEMAP_LIMIT = 1000
SITEMAP_DESCRIPTION_LENGTH = 2000
SITEMAP_MAX_VIDEO_TAGS = 32

# Miniature par defaut (relative a l'URL du site)
DEFAULT_POSTER_PATH = "uploads/default-poster.jpg"

# Libelle de section quand une video n'a aucune categorie
DEFAULT_CATEGORY_LABEL = "Nouveautés"

# Cles du cache de reponses invalidees apres un ajout au catalogue
HOME_CACHE_KEY = "/"
MAIN_RSS_CACHE_KEY = "/rss"

# Scraping
CHALLENGE_PAGE_TITLE = "Just a moment..."
DEFAULT_ISO_DURATION = "PT0S"
SCRAPER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0.0.0 Safari/537.36",
    "Accept-Language": "en-US,en;q=0.9",
    "Sec-Ch-Ua": '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Platform": '"Windows"',
}

# Redirections permanentes des anciennes URLs PHP
LEGACY_REDIRECTS = {
    "/rss.php": "/rss",
    "/sitemap.php": "/sitemap.xml",
    "/rss-sitemap.php": "/sitemap-video.xml",
}
