"""Stockage objet des ressources distantes."""

from vidcat.adapters.storage.r2_storage import R2AssetStorage

__all__ = ["R2AssetStorage"]
