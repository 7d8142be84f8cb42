# src/output/__init__.py — v1
