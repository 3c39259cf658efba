# src/providers/__init__.py
