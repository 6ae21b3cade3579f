"""Routers package — HTTP endpoint definitions.

Files:
  v1/      — Versioned API routes (/car-service/api/v1/*)
"""
