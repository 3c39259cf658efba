# src/providers/youtube/__init__.py
