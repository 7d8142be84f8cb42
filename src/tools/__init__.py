# src/tools/__init__.py — v1
