"""
Routes de l'application web.

- pages : listing, fiche video, recherche, tags, categories
- feeds : flux RSS et sitemaps XML
- admin : connexion et scraping
"""
