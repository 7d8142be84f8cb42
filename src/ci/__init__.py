# src/ci/__init__.py — v1
