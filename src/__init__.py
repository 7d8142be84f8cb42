# src/__init__.py — v1
"""jekyllbuild — Jekyll site build orchestration with dependency caching."""

from jekyllbuild.version import __version__

__all__ = ["__version__"]
