# backend/ninja_missions/__init__.py
