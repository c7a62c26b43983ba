"""
Moodboard curator: iterative image curation driven by a free-text vibe.

Accepting or rejecting a candidate refines a hidden search query that
feeds the next candidates into a small fixed window.
"""

from .version import API_VERSION

__version__ = API_VERSION
