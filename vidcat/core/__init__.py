"""
Couche domaine (core).

Contient l'entité vidéo du catalogue et les ports (interfaces abstraites).
Cette couche n'a AUCUNE dépendance vers l'infrastructure (adapters, frameworks, BDD).

Sous-packages :
- entities/ : Entités métier (Video)
- ports/ : Interfaces abstraites définissant les contrats pour les adaptateurs
"""
