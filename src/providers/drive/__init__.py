# src/providers/drive/__init__.py
