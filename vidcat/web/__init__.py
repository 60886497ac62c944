"""
Interface web FastAPI de VidCat.

- app : fabrique de l'application, middlewares et gestion des erreurs
- routes/ : pages HTML, flux XML, administration
"""
