"""
Couche infrastructure de VidCat.

Contient la persistance SQLModel du catalogue vidéo.
"""
