# src/resolve/__init__.py — v1
