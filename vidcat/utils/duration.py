"""
Conversion des durees ISO-8601 (meta itemprop="duration") en secondes et affichage.

Le parsing ne leve jamais d'exception : toute entree invalide vaut 0 seconde.
"""

import re

_ISO_DURATION_RE = re.compile(r"P(?:(\d+)D)?T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


def parse_duration(value: object) -> int:
    """
    Convertit une duree "P[nD]T[nH][nM][nS]" en nombre entier de secondes.

    Les groupes absents comptent pour zero.

    Exemples :
        parse_duration("PT1M2S") -> 62
        parse_duration("P1DT0H0M0S") -> 86400
        parse_duration("") -> 0
    """
    if not value or not isinstance(value, str):
        return 0

    match = _ISO_DURATION_RE.search(value)
    if not match:
        return 0

    days, hours, minutes, seconds = (int(group or 0) for group in match.groups())
    return days * 86400 + hours * 3600 + minutes * 60 + seconds


def format_duration(seconds: int | None) -> str:
    """
    Formate une duree en secondes pour l'affichage.

    Retourne "H:MM:SS" a partir d'une heure, "M:SS" en dessous,
    et "00:00" pour une duree nulle ou absente.

    Les heures sont prises modulo 24 : une duree de plusieurs jours perd
    sa partie "jours" a l'affichage (format_duration n'est pas l'inverse
    exact de parse_duration).
    """
    if not seconds:
        return "00:00"

    total = int(seconds)
    hours = (total // 3600) % 24
    minutes = (total % 3600) // 60
    secs = total % 60

    if total >= 3600:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
