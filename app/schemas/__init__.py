"""Pydantic schemas package (request DTOs and response shapes).

Folder intent:
  common.py     — ApiModel base + HealthResponse (all schemas inherit ApiModel)
  vehicle.py    — vehicle create/update, sibling updates, uploads, dropdown options
  share.py      — share-token issue request and the public vehicle projection
  party.py      — customers and suppliers
  catalog.py    — makes and models
  order.py      — customer orders
  analytics.py  — analytics rollups
"""
