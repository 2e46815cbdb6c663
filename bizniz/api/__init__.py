"""Biz-Niz Pro HTTP surface (FastAPI)."""
