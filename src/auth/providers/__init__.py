# src/auth/providers/__init__.py
