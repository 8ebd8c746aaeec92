"""
Fiction Engine - A turn-based interactive-fiction runtime.

This package provides tools for:
- Loading worlds of rooms, objects and characters from JSON
- Playing them with a keyword parser or an LLM intent parser
- Declarative rules that change state as the player acts
"""

__version__ = "0.1.0"
