"""
Implementations SQLModel des repositories.

Ce module contient l'implementation concrete de l'interface repository
definie dans vidcat/core/ports/repositories.py.

Le repository :
- Herite de l'interface ABC correspondante du domaine
- Recoit une session SQLModel via injection de dependances
- Convertit entre entite de domaine (dataclass) et modele DB (SQLModel)
"""

from vidcat.infrastructure.persistence.repositories.video_repository import (
    SQLModelVideoRepository,
)

__all__ = ["SQLModelVideoRepository"]
