"""
Business entities representing core domain concepts.

Exports:
- Video: A catalog record scraped from a third-party page
"""

from vidcat.core.entities.video import Video

__all__ = ["Video"]
