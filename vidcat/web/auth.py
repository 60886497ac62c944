"""
Passerelle d'authentification de l'administration.

L'état de connexion est résolu à chaque requête en un AuthContext,
indépendamment du mécanisme de stockage (ici la session Starlette signée).
"""

import secrets
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

SESSION_AUTH_KEY = "is_logged_in"
SESSION_MAX_AGE = 3600  # 1 heure


@dataclass(frozen=True)
class AuthContext:
    """Contexte d'authentification d'une requête."""

    authenticated: bool = False


def get_auth_context(request: Request) -> AuthContext:
    """Résout le contexte d'authentification depuis la session."""
    if "session" not in request.scope:
        return AuthContext()
    return AuthContext(authenticated=bool(request.session.get(SESSION_AUTH_KEY)))


def check_password(candidate: Optional[str], expected: Optional[str]) -> bool:
    """
    Compare un mot de passe en temps constant.

    Sans mot de passe configuré, aucune connexion n'est acceptée.
    """
    if not expected or candidate is None:
        return False
    return secrets.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def login(request: Request) -> None:
    """Marque la session comme authentifiée."""
    request.session[SESSION_AUTH_KEY] = True


def logout(request: Request) -> None:
    """Vide la session."""
    request.session.clear()
