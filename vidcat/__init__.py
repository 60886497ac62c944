"""
VidCat - Catalogue de vidéos en ligne.

Ce package scrape les métadonnées de pages vidéo tierces, stocke les fiches
en base, sert les pages de listing, de recherche, de catégories et de tags,
et publie les flux RSS et sitemaps XML destinés aux moteurs de recherche.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entités, ports)
- services/ : Couche application (scraping, flux et sitemaps)
- adapters/ : Implémentations concrètes (stockage objet, cache de réponses)
- infrastructure/ : Persistance SQLModel
- web/ : Application FastAPI (routes, templates, middlewares)
"""
