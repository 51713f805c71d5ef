"""Emoji word dictionary tooling: extraction, generation, merging, translation."""
from emoji_words.version import __version__

__all__ = ['__version__']
