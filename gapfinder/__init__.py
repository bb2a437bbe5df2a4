"""
GapFinder - spaced-retrieval study scheduling.

Tracks retention of items grouped by concepts and decides what to review next.
"""

__version__ = "0.1.0"
